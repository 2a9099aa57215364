"""
Shared fixtures.

Environment is configured before anything from linkup is imported: settings
are read once per process.
"""
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

_tmpdir = tempfile.mkdtemp(prefix="linkup-tests-")
os.environ.update({
    "ENVIRONMENT": "test",
    "DATABASE_URL": f"sqlite+aiosqlite:///{_tmpdir}/test.db",
    "JWT_ACCESS_SECRET": "test-access-secret-0123456789abcdefghij",
    "JWT_REFRESH_SECRET": "test-refresh-secret-0123456789abcdefghij",
    "ENCRYPTION_KEY": "test-encryption-key-0123456789abcdefghij",
    "PASSWORD_HASH_ROUNDS": "4",
    "OTP_HASH_ROUNDS": "4",
    "SESSION_HASH_ROUNDS": "4",
    "HEDERA_NETWORK": "testnet",
    "HEDERA_KEY_TYPE": "ECDSA",
    "HEDERA_OPERATOR_ID": "",
    "HEDERA_OPERATOR_KEY": "",
    "SMTP_HOST": "",
    "EMAIL_FROM": "",
    "CORS_ORIGINS": "",
})

import httpx  # noqa: E402
import pytest  # noqa: E402

from linkup.api import deps  # noqa: E402
from linkup.core.errors import UpstreamError  # noqa: E402
from linkup.db.base import AsyncSessionLocal  # noqa: E402
from linkup.db.init_db import init_models  # noqa: E402
from linkup.ledger.base import AccountInfo, LedgerClient, TransactionReceipt  # noqa: E402
from linkup.main import app  # noqa: E402
from linkup.services.email_service import EmailDispatcher, get_email_dispatcher  # noqa: E402


# --- Collaborator doubles ---

@dataclass
class SentOtp:
    email: str
    code: str
    purpose: str


class CapturingMailer(EmailDispatcher):
    """Records codes instead of sending them."""

    def __init__(self):
        self.outbox: List[SentOtp] = []

    async def send_otp(self, email: str, code: str, purpose: str) -> None:
        self.outbox.append(SentOtp(email=email, code=code, purpose=purpose))

    def last_code(self, email: str) -> str:
        for sent in reversed(self.outbox):
            if sent.email == email:
                return sent.code
        raise AssertionError(f"no OTP sent to {email}")


@dataclass
class FakeLedger(LedgerClient):
    network: str = "testnet"
    operator: bool = False
    accounts: Dict[str, AccountInfo] = field(default_factory=dict)
    contract_calls: List[Dict[str, Any]] = field(default_factory=list)
    fail_lookups: bool = False
    _next_account: int = 1000

    @property
    def has_operator(self) -> bool:
        return self.operator

    def register(self, account_id: str, public_key: str, key_type: Optional[str] = "ECDSA") -> None:
        self.accounts[account_id] = AccountInfo(account_id=account_id, key_type=key_type, public_key=public_key)

    async def create_account(self, public_key: str, key_type: str, initial_balance_hbar: float) -> TransactionReceipt:
        self._next_account += 1
        account_id = f"0.0.{self._next_account}"
        self.register(account_id, public_key, key_type)
        return TransactionReceipt(transaction_id=f"tx-{account_id}", status="SUCCESS", account_id=account_id)

    async def get_account_info(self, account_id: str) -> AccountInfo:
        if self.fail_lookups or account_id not in self.accounts:
            raise UpstreamError("Could not query ledger account")
        return self.accounts[account_id]

    async def execute_contract(self, contract_id, function_name, signer_account_id, signer_private_key, gas, parameters=None):
        self.contract_calls.append({
            "contract_id": contract_id,
            "function_name": function_name,
            "signer_account_id": signer_account_id,
            "signer_private_key": signer_private_key,
            "gas": gas,
        })
        return TransactionReceipt(transaction_id="tx-contract", status="SUCCESS")


# --- Fixtures ---

@pytest.fixture(autouse=True)
async def reset_database():
    await init_models(drop=True)
    yield


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def mailer():
    return CapturingMailer()


@pytest.fixture
async def client(ledger, mailer):
    app.dependency_overrides[deps.get_ledger] = lambda: ledger
    app.dependency_overrides[get_email_dispatcher] = lambda: mailer
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver/api/v1") as ac:
        yield ac
    app.dependency_overrides.clear()


SIGNUP_BODY = {
    "businessName": "Acme Co",
    "email": "a@acme.test",
    "password": "longenough1",
    "country": "Nigeria",
}


@pytest.fixture
def signup_body():
    return dict(SIGNUP_BODY)


@pytest.fixture
async def verified_seller(client, mailer, signup_body):
    """Signs up and verifies Acme Co; returns the verify response body."""
    resp = await client.post("/auth/signup", json=signup_body)
    assert resp.status_code == 201
    code = mailer.last_code(signup_body["email"])
    resp = await client.post("/auth/signup/verify", json={"email": signup_body["email"], "code": code})
    assert resp.status_code == 200
    return resp.json()
