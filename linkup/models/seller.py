# linkup/models/seller.py
import uuid

from sqlalchemy import Column, String, JSON

from linkup.db.base import Base
from linkup.db.types import UTCDateTime, utcnow


class Seller(Base):
    __tablename__ = "sellers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_name = Column(String(80), nullable=False)

    # sha256 of the trimmed, lowercased business name
    # Enforces uniqueness without indexing the name itself
    business_name_hash = Column(String(64), unique=True, nullable=False)

    # Always stored lowercase
    email = Column(String(255), unique=True, index=True, nullable=False)

    password_hash = Column(String(255), nullable=False)
    country = Column(String(60), nullable=False)

    # Embedded wallet record:
    # {accountId, publicKey, network, keyType, privateKey: {iv, cipherText, authTag},
    #  mnemonic?: {...}, seedRetrieved}
    # Replaced wholesale on import, never merged
    wallet = Column(JSON, nullable=True)

    # Null until the first successful signup OTP
    verified_at = Column(UTCDateTime, nullable=True)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None
