# linkup/security/vault.py
"""
At-rest encryption for wallet key material.

- Key: SHA-256 of ENCRYPTION_KEY, derived once per process
- Cipher: AES-256-GCM with a fresh random 96-bit nonce per call
- Envelope: {iv, cipherText, authTag}, each base64-encoded

Never log plaintext or ciphertext values.
"""
import base64
import binascii
import hashlib
import os
from functools import lru_cache
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import BaseModel, ConfigDict, Field

from linkup.core.config import settings
from linkup.core.errors import IntegrityError

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16


class EncryptedSecret(BaseModel):
    """Ciphertext envelope embedded in a wallet record."""
    model_config = ConfigDict(populate_by_name=True)

    iv: str
    cipher_text: str = Field(alias="cipherText")
    auth_tag: str = Field(alias="authTag")


@lru_cache()
def _vault_key() -> bytes:
    return hashlib.sha256(settings.ENCRYPTION_KEY.encode("utf-8")).digest()


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encrypt_secret(plain_text: str, key: Optional[bytes] = None) -> EncryptedSecret:
    """Encrypt a string and return its envelope."""
    cipher = AESGCM(key or _vault_key())
    nonce = os.urandom(NONCE_SIZE)
    # cryptography appends the tag to the ciphertext
    sealed = cipher.encrypt(nonce, plain_text.encode("utf-8"), None)
    return EncryptedSecret(
        iv=_b64(nonce),
        cipher_text=_b64(sealed[:-TAG_SIZE]),
        auth_tag=_b64(sealed[-TAG_SIZE:]),
    )


def decrypt_secret(payload: Union[EncryptedSecret, dict], key: Optional[bytes] = None) -> str:
    """
    Decrypt an envelope produced by encrypt_secret.

    Raises:
        IntegrityError: the tag does not verify, the key is wrong or the
            envelope is malformed. No partial plaintext is ever returned.
    """
    if isinstance(payload, dict):
        payload = EncryptedSecret.model_validate(payload)

    try:
        nonce = base64.b64decode(payload.iv, validate=True)
        body = base64.b64decode(payload.cipher_text, validate=True)
        tag = base64.b64decode(payload.auth_tag, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise IntegrityError("Encrypted secret is malformed") from exc

    if len(nonce) != NONCE_SIZE or len(tag) != TAG_SIZE:
        raise IntegrityError("Encrypted secret is malformed")

    try:
        plain = AESGCM(key or _vault_key()).decrypt(nonce, body + tag, None)
    except InvalidTag as exc:
        raise IntegrityError() from exc

    return plain.decode("utf-8")
