from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from linkup.models.seller import Seller


def _parse(ts: str) -> datetime:
    value = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


async def _login(client, mailer, email="a@acme.test", password="longenough1"):
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    resp = await client.post("/auth/login/otp/verify", json={"email": email, "code": mailer.last_code(email)})
    assert resp.status_code == 200
    return resp.json()


# --- Scenario A: signup and verification ---

async def test_signup_then_verify_reveals_seed_once(client, mailer, signup_body):
    resp = await client.post("/auth/signup", json=signup_body)
    assert resp.status_code == 201
    body = resp.json()
    assert "code" not in body
    expires_in = _parse(body["otpExpiresAt"]) - datetime.now(timezone.utc)
    assert timedelta(minutes=9) < expires_in <= timedelta(minutes=10)

    code = mailer.last_code("a@acme.test")
    resp = await client.post("/auth/signup/verify", json={"email": "a@acme.test", "code": _wrong(code)})
    assert resp.status_code == 400
    assert resp.json()["error"] == "OTP invalid"

    resp = await client.post("/auth/signup/verify", json={"email": "a@acme.test", "code": code})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Signup verified"
    assert len(body["walletSeedPhrase"].split()) == 24
    assert body["seller"]["email"] == "a@acme.test"
    assert body["seller"]["verifiedAt"] is not None
    assert body["seller"]["walletAccountId"].startswith("0.0.")
    assert set(body["tokens"]) == {"accessToken", "refreshToken", "accessExpiresAt", "refreshExpiresAt"}

    resp = await client.post("/auth/signup/verify", json={"email": "a@acme.test", "code": code})
    assert resp.status_code == 400
    assert resp.json()["error"] == "OTP not found"


async def test_seller_payload_hides_secrets(client, verified_seller):
    seller = verified_seller["seller"]
    assert "passwordHash" not in seller
    assert "password_hash" not in seller
    assert "wallet" not in seller
    assert "privateKey" not in str(verified_seller)


async def test_signup_verify_unknown_seller(client):
    resp = await client.post("/auth/signup/verify", json={"email": "ghost@acme.test", "code": "123456"})
    assert resp.status_code == 404


async def test_unverified_duplicate_signup_is_idempotent(client, db, mailer, signup_body):
    first = await client.post("/auth/signup", json=signup_body)
    second = await client.post("/auth/signup", json={**signup_body, "email": "A@ACME.test"})

    assert first.status_code == 201
    assert second.status_code == 202
    count = await db.scalar(select(func.count()).select_from(Seller))
    assert count == 1

    # The freshest code is the one that verifies
    resp = await client.post(
        "/auth/signup/verify", json={"email": "a@acme.test", "code": mailer.last_code("a@acme.test")}
    )
    assert resp.status_code == 200


async def test_verified_duplicate_email_conflicts(client, verified_seller, signup_body):
    resp = await client.post("/auth/signup", json={**signup_body, "businessName": "Other Co"})
    assert resp.status_code == 409


async def test_business_name_collision_conflicts(client, signup_body):
    await client.post("/auth/signup", json=signup_body)
    resp = await client.post(
        "/auth/signup", json={**signup_body, "email": "b@acme.test", "businessName": "  ACME co "}
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "Business name unavailable"


async def test_signup_validation(client, signup_body):
    for bad in (
        {**signup_body, "email": "not-an-email"},
        {**signup_body, "password": "short"},
        {**signup_body, "businessName": "ab"},
        {**signup_body, "country": "N"},
    ):
        resp = await client.post("/auth/signup", json=bad)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request"


# --- Scenario B: login, OTP, refresh rotation ---

async def test_login_requires_verified_account(client, mailer, signup_body):
    await client.post("/auth/signup", json=signup_body)

    resp = await client.post("/auth/login", json={"email": "a@acme.test", "password": "longenough1"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid credentials"

    code = mailer.last_code("a@acme.test")
    await client.post("/auth/signup/verify", json={"email": "a@acme.test", "code": code})

    resp = await client.post("/auth/login", json={"email": "a@acme.test", "password": "longenough1"})
    assert resp.status_code == 200
    assert "otpExpiresAt" in resp.json()
    assert "tokens" not in resp.json()

    resp = await client.post(
        "/auth/login/otp/verify", json={"email": "a@acme.test", "code": mailer.last_code("a@acme.test")}
    )
    assert resp.status_code == 200
    original = resp.json()["tokens"]

    resp = await client.post("/auth/refresh", json={"refreshToken": original["refreshToken"]})
    assert resp.status_code == 200
    rotated = resp.json()["tokens"]
    assert rotated["refreshToken"] != original["refreshToken"]

    resp = await client.post("/auth/refresh", json={"refreshToken": original["refreshToken"]})
    assert resp.status_code == 401


async def test_bad_password_and_unknown_email_look_the_same(client, verified_seller):
    wrong = await client.post("/auth/login", json={"email": "a@acme.test", "password": "wrong-password"})
    unknown = await client.post("/auth/login", json={"email": "nobody@acme.test", "password": "longenough1"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


async def test_signup_code_does_not_log_in(client, mailer, verified_seller):
    await client.post("/auth/login", json={"email": "a@acme.test", "password": "longenough1"})
    await client.post("/auth/password/request", json={"email": "a@acme.test"})
    reset_code = mailer.last_code("a@acme.test")

    resp = await client.post("/auth/login/otp/verify", json={"email": "a@acme.test", "code": reset_code})
    assert resp.status_code == 400


async def test_otp_only_login(client, mailer, verified_seller):
    resp = await client.post("/auth/login/otp/request", json={"email": "a@acme.test"})
    assert resp.status_code == 200

    resp = await client.post(
        "/auth/login/otp/verify", json={"email": "a@acme.test", "code": mailer.last_code("a@acme.test")}
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Login successful"


async def test_otp_login_unknown_or_unverified(client, signup_body):
    resp = await client.post("/auth/login/otp/request", json={"email": "ghost@acme.test"})
    assert resp.status_code == 404

    await client.post("/auth/signup", json=signup_body)
    resp = await client.post("/auth/login/otp/request", json={"email": "a@acme.test"})
    assert resp.status_code == 404
    resp = await client.post("/auth/login/otp/verify", json={"email": "a@acme.test", "code": "123456"})
    assert resp.status_code == 404


# --- Password reset ---

async def test_password_reset_flow(client, mailer, verified_seller):
    resp = await client.post("/auth/password/request", json={"email": "a@acme.test"})
    assert resp.status_code == 200

    code = mailer.last_code("a@acme.test")
    resp = await client.post(
        "/auth/password/reset",
        json={"email": "a@acme.test", "code": code, "newPassword": "brand-new-pass"},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Password updated"
    assert "accessToken" in resp.json()["tokens"]

    old = await client.post("/auth/login", json={"email": "a@acme.test", "password": "longenough1"})
    new = await client.post("/auth/login", json={"email": "a@acme.test", "password": "brand-new-pass"})
    assert old.status_code == 401
    assert new.status_code == 200


async def test_password_reset_errors(client, mailer, verified_seller):
    resp = await client.post("/auth/password/request", json={"email": "ghost@acme.test"})
    assert resp.status_code == 404

    await client.post("/auth/password/request", json={"email": "a@acme.test"})
    code = mailer.last_code("a@acme.test")
    resp = await client.post(
        "/auth/password/reset",
        json={"email": "a@acme.test", "code": _wrong(code), "newPassword": "brand-new-pass"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "OTP invalid"


# --- Logout and bearer auth ---

async def test_logout_always_succeeds(client, verified_seller):
    refresh_token = verified_seller["tokens"]["refreshToken"]

    for token in (refresh_token, refresh_token, "unknown-refresh-token"):
        resp = await client.post("/auth/logout", json={"refreshToken": token})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Logged out"}

    resp = await client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert resp.status_code == 401


async def test_me_requires_bearer_token(client, verified_seller):
    access = verified_seller["tokens"]["accessToken"]
    refresh = verified_seller["tokens"]["refreshToken"]

    resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert resp.status_code == 200
    assert resp.json()["businessName"] == "Acme Co"

    missing = await client.get("/auth/me")
    garbage = await client.get("/auth/me", headers={"Authorization": "Bearer nope"})
    wrong_kind = await client.get("/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    for resp in (missing, garbage, wrong_kind):
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
