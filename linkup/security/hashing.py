# linkup/security/hashing.py
"""
Slow hashes for passwords, one-time codes and refresh tokens (bcrypt).

bcrypt only looks at the first 72 bytes of its input, so long secrets such
as JWT refresh tokens are reduced to a SHA-256 hex digest first.
"""
import hashlib

import bcrypt

from linkup.core.config import settings

BCRYPT_MAX_BYTES = 72


def _prepare(secret: str) -> bytes:
    raw = secret.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return hashlib.sha256(raw).hexdigest().encode("ascii")
    return raw


def hash_secret(secret: str, rounds: int) -> str:
    return bcrypt.hashpw(_prepare(secret), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_secret(secret: str, hashed: str) -> bool:
    """Constant-time comparison through bcrypt.checkpw. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_prepare(secret), hashed.encode("utf-8"))
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return hash_secret(password, settings.PASSWORD_HASH_ROUNDS)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return verify_secret(plain_password, hashed_password)


def hash_business_name(name: str) -> str:
    """Collision-resistant fingerprint of the normalized business name."""
    return hashlib.sha256(name.strip().lower().encode("utf-8")).hexdigest()
