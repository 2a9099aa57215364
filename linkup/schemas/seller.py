# linkup/schemas/seller.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Seller profile returned to clients. Never carries the password hash or
# any wallet key material.
class SellerOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    business_name: str = Field(alias="businessName")
    email: str
    country: str
    wallet_account_id: Optional[str] = Field(default=None, alias="walletAccountId")
    wallet_network: Optional[str] = Field(default=None, alias="walletNetwork")
    verified_at: Optional[datetime] = Field(default=None, alias="verifiedAt")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
