import httpx

from linkup.api import deps
from linkup.ledger.hedera import HederaLedgerClient
from linkup.ledger.mirror import MirrorNodeClient
from linkup.main import app
from linkup.security import keys


def _auth(seller_response):
    return {"Authorization": f"Bearer {seller_response['tokens']['accessToken']}"}


async def test_import_wallet(client, ledger, verified_seller):
    phrase = keys.generate_mnemonic()
    ledger.register("0.0.5005", keys.private_key_from_mnemonic(phrase, "ECDSA").public_key)

    resp = await client.post(
        "/wallet/import",
        json={"mnemonic": phrase, "accountId": "0.0.5005"},
        headers=_auth(verified_seller),
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Wallet imported",
        "walletAccountId": "0.0.5005",
        "walletNetwork": "testnet",
    }

    me = await client.get("/auth/me", headers=_auth(verified_seller))
    assert me.json()["walletAccountId"] == "0.0.5005"


# Scenario C
async def test_import_with_foreign_mnemonic_keeps_custodial_wallet(client, ledger, verified_seller):
    custodial_account = verified_seller["seller"]["walletAccountId"]
    owner_key = keys.private_key_from_mnemonic(keys.generate_mnemonic(), "ECDSA").public_key
    ledger.register("0.0.6006", owner_key)

    resp = await client.post(
        "/wallet/import",
        json={"mnemonic": keys.generate_mnemonic(), "accountId": "0.0.6006"},
        headers=_auth(verified_seller),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Account ID does not match the provided mnemonic"

    me = await client.get("/auth/me", headers=_auth(verified_seller))
    assert me.json()["walletAccountId"] == custodial_account


async def test_import_malformed_mnemonic(client, verified_seller):
    resp = await client.post(
        "/wallet/import",
        json={"mnemonic": "these words are not a seed phrase", "accountId": "0.0.6006"},
        headers=_auth(verified_seller),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid mnemonic"


async def test_import_requires_authentication(client):
    resp = await client.post(
        "/wallet/import", json={"mnemonic": keys.generate_mnemonic(), "accountId": "0.0.6006"}
    )
    assert resp.status_code == 401


async def test_import_rejects_path_like_account_id(client, ledger, verified_seller):
    phrase = keys.generate_mnemonic()
    ledger.register("0.0.9", keys.private_key_from_mnemonic(phrase, "ECDSA").public_key)

    resp = await client.post(
        "/wallet/import",
        json={"mnemonic": phrase, "accountId": "0.0.1/../0.0.9"},
        headers=_auth(verified_seller),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"

    me = await client.get("/auth/me", headers=_auth(verified_seller))
    assert me.json()["walletAccountId"] == verified_seller["seller"]["walletAccountId"]


async def test_import_through_mirror_node(client, verified_seller):
    phrase = keys.generate_mnemonic()
    public_key = keys.private_key_from_mnemonic(phrase, "ECDSA").public_key
    requested = []

    def mirror_node(request):
        requested.append(request.url.path)
        return httpx.Response(200, json={
            "account": "0.0.9",
            "key": {"_type": "ECDSA_SECP256K1", "key": public_key},
        })

    ledger = HederaLedgerClient(
        network="testnet",
        key_type="ECDSA",
        mirror=MirrorNodeClient("https://mirror.test", transport=httpx.MockTransport(mirror_node)),
    )
    app.dependency_overrides[deps.get_ledger] = lambda: ledger

    resp = await client.post(
        "/wallet/import",
        json={"mnemonic": phrase, "accountId": "0.0.9"},
        headers=_auth(verified_seller),
    )
    assert resp.status_code == 200
    assert resp.json()["walletAccountId"] == "0.0.9"
    assert requested == ["/api/v1/accounts/0.0.9"]
