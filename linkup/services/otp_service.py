# linkup/services/otp_service.py
"""
One-time code challenges tied to (email, purpose).

- issue: stores a bcrypt hash, returns the plaintext code once
- verify: newest challenge only; expired ones are kept until purge
- a matching code is consumed with a conditional DELETE, so two concurrent
  verifications of the same code cannot both succeed
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.db.types import utcnow
from linkup.models.otp_code import OtpCode
from linkup.security.otp import create_otp, verify_otp_code

logger = logging.getLogger(__name__)

PURPOSE_SIGNUP = "signup"
PURPOSE_LOGIN = "login"
PURPOSE_RESET = "password-reset"

OTP_PURPOSES = (PURPOSE_SIGNUP, PURPOSE_LOGIN, PURPOSE_RESET)

REASON_NOT_FOUND = "OTP not found"
REASON_EXPIRED = "OTP expired"
REASON_INVALID = "OTP invalid"


@dataclass(frozen=True)
class IssuedOtp:
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class OtpResult:
    valid: bool
    reason: Optional[str] = None


def _check_purpose(purpose: str) -> None:
    if purpose not in OTP_PURPOSES:
        raise ValueError(f"Unknown OTP purpose: {purpose}")


async def issue_otp(db: AsyncSession, seller_id: str, email: str, purpose: str) -> IssuedOtp:
    _check_purpose(purpose)
    otp = create_otp()
    db.add(OtpCode(
        seller_id=seller_id,
        email=email.lower(),
        purpose=purpose,
        code_hash=otp.code_hash,
        expires_at=otp.expires_at,
    ))
    await db.commit()
    return IssuedOtp(code=otp.code, expires_at=otp.expires_at)


async def verify_otp(db: AsyncSession, email: str, purpose: str, code: str) -> OtpResult:
    _check_purpose(purpose)
    result = await db.execute(
        select(OtpCode)
        .where(OtpCode.email == email.lower(), OtpCode.purpose == purpose)
        .order_by(OtpCode.created_at.desc(), OtpCode.id.desc())
        .limit(1)
    )
    record = result.scalars().first()

    if record is None:
        return OtpResult(valid=False, reason=REASON_NOT_FOUND)

    if record.expires_at <= utcnow():
        return OtpResult(valid=False, reason=REASON_EXPIRED)

    if not verify_otp_code(code, record.code_hash):
        return OtpResult(valid=False, reason=REASON_INVALID)

    consumed = await db.execute(delete(OtpCode).where(OtpCode.id == record.id))
    await db.commit()
    if consumed.rowcount != 1:
        # Someone else consumed it between our read and delete
        logger.warning("OTP for %s (%s) already consumed", email, purpose)
        return OtpResult(valid=False, reason=REASON_NOT_FOUND)

    return OtpResult(valid=True)


async def purge_expired(db: AsyncSession) -> int:
    """Remove expired challenges. Returns the number of rows deleted."""
    result = await db.execute(delete(OtpCode).where(OtpCode.expires_at <= utcnow()))
    await db.commit()
    return result.rowcount or 0
