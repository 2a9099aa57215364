# linkup/schemas/wallet.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from linkup.ledger.base import ACCOUNT_ID_PATTERN
from linkup.security.vault import EncryptedSecret


class WalletRecord(BaseModel):
    """
    Wallet embedded in a seller row.

    Key material is only ever held here in encrypted form. Stored with
    ``model_dump(by_alias=True)`` so the JSON column keeps camelCase keys.
    """
    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(alias="accountId")
    public_key: str = Field(alias="publicKey")
    network: str
    key_type: str = Field(alias="keyType")
    private_key: EncryptedSecret = Field(alias="privateKey")
    mnemonic: Optional[EncryptedSecret] = None
    seed_retrieved: bool = Field(default=False, alias="seedRetrieved")


class WalletImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mnemonic: str = Field(..., min_length=10)
    account_id: str = Field(..., min_length=5, pattern=ACCOUNT_ID_PATTERN, alias="accountId")


class WalletImportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    wallet_account_id: str = Field(alias="walletAccountId")
    wallet_network: Optional[str] = Field(alias="walletNetwork")
