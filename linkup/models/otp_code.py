# linkup/models/otp_code.py
from sqlalchemy import Column, Integer, String, ForeignKey, Index

from linkup.db.base import Base
from linkup.db.types import UTCDateTime, utcnow


class OtpCode(Base):
    """
    One issued one-time code. Only the bcrypt hash of the code is stored.

    Verification always reads the newest row for (email, purpose), so older
    rows for the same pair are unreachable once superseded.
    """
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    seller_id = Column(String(36), ForeignKey("sellers.id"), nullable=False)
    email = Column(String(255), nullable=False)
    purpose = Column(String(32), nullable=False)
    code_hash = Column(String(255), nullable=False)
    expires_at = Column(UTCDateTime, nullable=False, index=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_otp_codes_email_purpose", "email", "purpose"),
    )
