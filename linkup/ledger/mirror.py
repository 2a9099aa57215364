# linkup/ledger/mirror.py
"""
Read-only account lookups through the Hedera mirror node REST API.

Every call opens its own httpx.AsyncClient and closes it on exit.
"""
import logging
from typing import Optional

import httpx

from linkup.core.errors import UpstreamError
from linkup.ledger.base import AccountInfo, is_account_id
from linkup.security.keys import KEY_TYPE_ECDSA, KEY_TYPE_ED25519

logger = logging.getLogger(__name__)

# DER SubjectPublicKeyInfo prefixes the mirror node sometimes returns
_DER_PREFIXES = {
    KEY_TYPE_ED25519: "302a300506032b6570032100",
    KEY_TYPE_ECDSA: "302d300706052b8104000a032200",
}

_MIRROR_KEY_TYPES = {
    "ED25519": KEY_TYPE_ED25519,
    "ECDSA_SECP256K1": KEY_TYPE_ECDSA,
}


def _strip_der(key_hex: str, key_type: Optional[str]) -> str:
    key_hex = key_hex.lower()
    prefix = _DER_PREFIXES.get(key_type or "")
    if prefix and key_hex.startswith(prefix):
        return key_hex[len(prefix):]
    return key_hex


class MirrorNodeClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def get_account_info(self, account_id: str) -> AccountInfo:
        # Never let a caller-supplied id add path segments to the URL
        if not is_account_id(account_id):
            raise UpstreamError("Invalid ledger account id")

        url = f"{self.base_url}/api/v1/accounts/{account_id}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Mirror node lookup failed for %s: %s", account_id, exc)
            raise UpstreamError("Could not query ledger account") from exc

        if not isinstance(data, dict):
            logger.error("Mirror node returned an unexpected body for %s", account_id)
            raise UpstreamError("Could not query ledger account")

        key = data.get("key") or {}
        if not isinstance(key, dict):
            key = {}
        key_type = _MIRROR_KEY_TYPES.get(key.get("_type"))
        raw_key = key.get("key")

        return AccountInfo(
            account_id=str(data.get("account", account_id)),
            key_type=key_type,
            public_key=_strip_der(raw_key, key_type) if isinstance(raw_key, str) else None,
        )
