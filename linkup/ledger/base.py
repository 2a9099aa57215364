# linkup/ledger/base.py
"""
Interface of the ledger collaborator.

Wallet custody only needs three things from the network: create an
account for a public key, read which key currently controls an account and
submit a contract call. Implementations raise UpstreamError for transport or
consensus failures and never retry.
"""
import abc
import re
from dataclasses import dataclass
from typing import Any, Optional

# shard.realm.num, ASCII digits only
ACCOUNT_ID_PATTERN = r"^[0-9]+\.[0-9]+\.[0-9]+$"


def is_account_id(value: str) -> bool:
    return re.fullmatch(ACCOUNT_ID_PATTERN, value) is not None


@dataclass(frozen=True)
class AccountInfo:
    account_id: str
    key_type: Optional[str]
    # Raw hex, same encoding as linkup.security.keys.DerivedKey.public_key
    public_key: Optional[str]


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_id: str
    status: str
    account_id: Optional[str] = None


class LedgerClient(abc.ABC):
    network: str

    @property
    @abc.abstractmethod
    def has_operator(self) -> bool:
        """True when a funding operator account is configured."""

    @abc.abstractmethod
    async def create_account(self, public_key: str, key_type: str, initial_balance_hbar: float) -> TransactionReceipt:
        ...

    @abc.abstractmethod
    async def get_account_info(self, account_id: str) -> AccountInfo:
        ...

    @abc.abstractmethod
    async def execute_contract(
        self,
        contract_id: str,
        function_name: str,
        signer_account_id: str,
        signer_private_key: str,
        gas: int,
        parameters: Any = None,
    ) -> TransactionReceipt:
        ...
