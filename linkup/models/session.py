# linkup/models/session.py
from sqlalchemy import Column, String, ForeignKey

from linkup.db.base import Base
from linkup.db.types import UTCDateTime, utcnow


class SellerSession(Base):
    """
    One outstanding refresh token.

    The primary key doubles as the refresh token's ``jti`` claim so the
    row can be found without scanning; the token itself is only stored as
    a bcrypt hash.
    """
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True)
    seller_id = Column(String(36), ForeignKey("sellers.id"), index=True, nullable=False)
    refresh_token_hash = Column(String(255), nullable=False)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False, index=True)
