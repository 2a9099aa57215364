# linkup/ledger/hedera.py
"""
Hedera network access.

Transactions go through hiero-sdk-python, whose calls block, so they run in
Starlette's threadpool. The operator client is built on first use and kept
for the life of the process; clients built for a seller's own key live for
exactly one call.
"""
import logging
import threading
from typing import Any, Optional

from starlette.concurrency import run_in_threadpool

from linkup.core.errors import UpstreamError
from linkup.ledger.base import AccountInfo, LedgerClient, TransactionReceipt
from linkup.ledger.mirror import MirrorNodeClient
from linkup.security.keys import KEY_TYPE_ECDSA

logger = logging.getLogger(__name__)


def _parse_private_key(sdk, key: str, key_type: str):
    if key_type == KEY_TYPE_ECDSA:
        return sdk.PrivateKey.from_string_ecdsa(key)
    return sdk.PrivateKey.from_string_ed25519(key)


def _parse_public_key(sdk, key: str, key_type: str):
    raw = bytes.fromhex(key)
    if key_type == KEY_TYPE_ECDSA:
        return sdk.PublicKey.from_bytes_ecdsa(raw)
    return sdk.PublicKey.from_bytes_ed25519(raw)


class HederaLedgerClient(LedgerClient):
    def __init__(
        self,
        network: str,
        key_type: str,
        mirror: MirrorNodeClient,
        operator_id: Optional[str] = None,
        operator_key: Optional[str] = None,
    ):
        self.network = network
        self.key_type = key_type
        self.mirror = mirror
        self._operator_id = operator_id
        self._operator_key = operator_key
        self._operator_client = None
        self._lock = threading.Lock()

    @property
    def has_operator(self) -> bool:
        return bool(self._operator_id and self._operator_key)

    def _build_client(self, account_id: str, private_key: str):
        import hiero_sdk_python as sdk

        client = sdk.Client(sdk.Network(network=self.network))
        client.set_operator(sdk.AccountId.from_string(account_id), _parse_private_key(sdk, private_key, self.key_type))
        return client

    def _operator(self):
        if not self.has_operator:
            raise UpstreamError("Ledger operator not configured")
        with self._lock:
            if self._operator_client is None:
                try:
                    self._operator_client = self._build_client(self._operator_id, self._operator_key)
                except ValueError:
                    logger.error("Failed to parse Hedera operator key")
                    raise
        return self._operator_client

    def _create_account_sync(self, public_key: str, key_type: str, initial_balance_hbar: float) -> TransactionReceipt:
        import hiero_sdk_python as sdk

        client = self._operator()
        operator_key = _parse_private_key(sdk, self._operator_key, self.key_type)
        transaction = (
            sdk.AccountCreateTransaction()
            .set_key(_parse_public_key(sdk, public_key, key_type))
            .set_initial_balance(sdk.Hbar(initial_balance_hbar))
            .freeze_with(client)
            .sign(operator_key)
        )
        receipt = transaction.execute(client)
        status = sdk.ResponseCode(receipt.status).name
        if receipt.status != sdk.ResponseCode.SUCCESS:
            raise UpstreamError(f"Account creation failed with status {status}")
        return TransactionReceipt(
            transaction_id=str(getattr(receipt, "transaction_id", "")),
            status=status,
            account_id=str(receipt.account_id) if receipt.account_id else None,
        )

    def _execute_contract_sync(self, contract_id, function_name, signer_account_id, signer_private_key, gas, parameters):
        import hiero_sdk_python as sdk

        client = self._build_client(signer_account_id, signer_private_key)
        try:
            transaction = (
                sdk.ContractExecuteTransaction()
                .set_contract_id(sdk.ContractId.from_string(contract_id))
                .set_gas(gas)
                .set_function(function_name, parameters)
            )
            receipt = transaction.execute(client)
            status = sdk.ResponseCode(receipt.status).name
            if receipt.status != sdk.ResponseCode.SUCCESS:
                raise UpstreamError(f"Contract call failed with status {status}")
            return TransactionReceipt(
                transaction_id=str(getattr(receipt, "transaction_id", "")),
                status=status,
            )
        finally:
            client.close()

    async def create_account(self, public_key: str, key_type: str, initial_balance_hbar: float) -> TransactionReceipt:
        try:
            return await run_in_threadpool(self._create_account_sync, public_key, key_type, initial_balance_hbar)
        except UpstreamError:
            raise
        except Exception as exc:
            logger.exception("Hedera account creation failed")
            raise UpstreamError("Could not create ledger account") from exc

    async def get_account_info(self, account_id: str) -> AccountInfo:
        return await self.mirror.get_account_info(account_id)

    async def execute_contract(
        self,
        contract_id: str,
        function_name: str,
        signer_account_id: str,
        signer_private_key: str,
        gas: int,
        parameters: Any = None,
    ) -> TransactionReceipt:
        try:
            return await run_in_threadpool(
                self._execute_contract_sync,
                contract_id,
                function_name,
                signer_account_id,
                signer_private_key,
                gas,
                parameters,
            )
        except UpstreamError:
            raise
        except Exception as exc:
            logger.exception("Hedera contract call failed")
            raise UpstreamError("Ledger contract call failed") from exc
