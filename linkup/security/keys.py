# linkup/security/keys.py
"""
Wallet key material derived from BIP-39 seed phrases.

Two signature schemes are supported, selected deployment-wide through
HEDERA_KEY_TYPE:

- ED25519: SLIP-10 hardened derivation along m/44'/3030'/0'/0'/0'
- ECDSA:   BIP-32 secp256k1 derivation along m/44'/3030'/0'/0/0

Keys are exchanged as raw hex: 32-byte private keys, 32-byte Ed25519
public keys and 33-byte compressed secp256k1 public keys. This matches the
representation the Hedera mirror node reports for account keys.
"""
import hashlib
import hmac
from dataclasses import dataclass
from typing import List, Tuple

from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from mnemonic import Mnemonic

KEY_TYPE_ED25519 = "ED25519"
KEY_TYPE_ECDSA = "ECDSA"

HARDENED = 0x80000000
HEDERA_COIN_TYPE = 3030
MNEMONIC_STRENGTH = 256  # 24 words

# Order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

_wordlist = Mnemonic("english")


@dataclass(frozen=True)
class DerivedKey:
    key_type: str
    private_key: str
    public_key: str


def generate_mnemonic() -> str:
    return _wordlist.generate(strength=MNEMONIC_STRENGTH)


def normalize_mnemonic(phrase: str) -> str:
    return " ".join(phrase.strip().lower().split())


def is_valid_mnemonic(phrase: str) -> bool:
    """Word list membership and checksum check."""
    try:
        return _wordlist.check(normalize_mnemonic(phrase))
    except (ValueError, LookupError):
        return False


def _hmac_sha512(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


def _ser32(index: int) -> bytes:
    return index.to_bytes(4, "big")


def _ed25519_path() -> List[int]:
    return [44 | HARDENED, HEDERA_COIN_TYPE | HARDENED, HARDENED, HARDENED, HARDENED]


def _ecdsa_path() -> List[int]:
    return [44 | HARDENED, HEDERA_COIN_TYPE | HARDENED, HARDENED, 0, 0]


def _derive_ed25519(seed: bytes, path: List[int]) -> bytes:
    digest = _hmac_sha512(b"ed25519 seed", seed)
    key, chain = digest[:32], digest[32:]
    for index in path:
        # SLIP-10 only defines hardened children for ed25519
        digest = _hmac_sha512(chain, b"\x00" + key + _ser32(index))
        key, chain = digest[:32], digest[32:]
    return key


def _compressed_point(secret: int) -> bytes:
    private = ec.derive_private_key(secret, ec.SECP256K1())
    return private.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)


def _ckd_secp256k1(secret: int, chain: bytes, index: int) -> Tuple[int, bytes]:
    if index & HARDENED:
        data = b"\x00" + secret.to_bytes(32, "big") + _ser32(index)
    else:
        data = _compressed_point(secret) + _ser32(index)
    digest = _hmac_sha512(chain, data)
    tweak = int.from_bytes(digest[:32], "big")
    child = (tweak + secret) % SECP256K1_N
    if tweak >= SECP256K1_N or child == 0:
        # Probability below 2**-127; BIP-32 says move on to the next index
        return _ckd_secp256k1(secret, chain, index + 1)
    return child, digest[32:]


def _derive_secp256k1(seed: bytes, path: List[int]) -> int:
    digest = _hmac_sha512(b"Bitcoin seed", seed)
    secret, chain = int.from_bytes(digest[:32], "big"), digest[32:]
    if secret == 0 or secret >= SECP256K1_N:
        raise ValueError("Seed produces an invalid master key")
    for index in path:
        secret, chain = _ckd_secp256k1(secret, chain, index)
    return secret


def private_key_from_mnemonic(phrase: str, key_type: str) -> DerivedKey:
    """
    Derive the account key pair for a seed phrase.

    Raises:
        ValueError: the phrase fails the BIP-39 checksum or key_type is unknown.
    """
    phrase = normalize_mnemonic(phrase)
    if not is_valid_mnemonic(phrase):
        raise ValueError("Invalid mnemonic")
    seed = Mnemonic.to_seed(phrase, passphrase="")

    if key_type == KEY_TYPE_ED25519:
        raw = _derive_ed25519(seed, _ed25519_path())
        public = ed25519.Ed25519PrivateKey.from_private_bytes(raw).public_key()
        public_raw = public.public_bytes(Encoding.Raw, PublicFormat.Raw)
        return DerivedKey(key_type=key_type, private_key=raw.hex(), public_key=public_raw.hex())

    if key_type == KEY_TYPE_ECDSA:
        secret = _derive_secp256k1(seed, _ecdsa_path())
        return DerivedKey(
            key_type=key_type,
            private_key=secret.to_bytes(32, "big").hex(),
            public_key=_compressed_point(secret).hex(),
        )

    raise ValueError(f"Unsupported key type: {key_type}")
