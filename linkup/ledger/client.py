# linkup/ledger/client.py
from functools import lru_cache

from linkup.core.config import settings
from linkup.ledger.base import LedgerClient
from linkup.ledger.hedera import HederaLedgerClient
from linkup.ledger.mirror import MirrorNodeClient


@lru_cache()
def get_ledger_client() -> LedgerClient:
    """
    Process-wide ledger handle, built on first use and never mutated.

    Wired into routes as a FastAPI dependency so tests can override it.
    """
    return HederaLedgerClient(
        network=settings.HEDERA_NETWORK,
        key_type=settings.HEDERA_KEY_TYPE,
        mirror=MirrorNodeClient(settings.mirror_node_url, timeout=settings.HEDERA_REQUEST_TIMEOUT),
        operator_id=settings.HEDERA_OPERATOR_ID,
        operator_key=settings.HEDERA_OPERATOR_KEY,
    )
