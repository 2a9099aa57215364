# linkup/security/otp.py
"""
Numeric one-time codes delivered by email.

Key points:
- digits drawn independently with secrets.randbelow (no modulo bias)
- bcrypt hash stored, plaintext only returned to the caller for delivery
- fixed expiry window from settings
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from linkup.core.config import settings
from linkup.security.hashing import hash_secret, verify_secret


@dataclass(frozen=True)
class GeneratedOtp:
    code: str
    code_hash: str
    expires_at: datetime


def generate_numeric_code(length: int) -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def create_otp() -> GeneratedOtp:
    code = generate_numeric_code(settings.OTP_LENGTH)
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXP_MINUTES)
    return GeneratedOtp(
        code=code,
        code_hash=hash_secret(code, settings.OTP_HASH_ROUNDS),
        expires_at=expires_at,
    )


def verify_otp_code(code: str, code_hash: str) -> bool:
    if not code:
        return False
    return verify_secret(code.strip(), code_hash)
