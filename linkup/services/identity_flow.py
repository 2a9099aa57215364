# linkup/services/identity_flow.py
"""
Seller identity state machine: unverified -> verified.

Composes the identity store, OTP challenges, sessions and wallet custody.
Failures are raised as linkup.core.errors variants; the HTTP layer only maps
them to responses.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.core.errors import AuthError, ConflictError, NotFoundError
from linkup.ledger.base import LedgerClient
from linkup.models.seller import Seller
from linkup.schemas.auth import SignupRequest
from linkup.schemas.seller import SellerOut
from linkup.schemas.wallet import WalletRecord
from linkup.security.hashing import hash_business_name
from linkup.security.jwt import TokenPair
from linkup.services import otp_service, seller_service, session_service, wallet_service
from linkup.services.email_service import EmailDispatcher

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"

# Purpose label used in the email subject line
_MAIL_PURPOSES = {
    otp_service.PURPOSE_SIGNUP: "signup",
    otp_service.PURPOSE_LOGIN: "login",
    otp_service.PURPOSE_RESET: "password reset",
}


@dataclass(frozen=True)
class SignupOutcome:
    created: bool
    otp_expires_at: datetime


@dataclass(frozen=True)
class SessionOutcome:
    seller: SellerOut
    tokens: TokenPair
    wallet_seed_phrase: Optional[str] = None


class IdentityFlow:
    def __init__(self, db: AsyncSession, ledger: LedgerClient, mailer: EmailDispatcher):
        self.db = db
        self.ledger = ledger
        self.mailer = mailer

    async def _send_otp(self, seller: Seller, purpose: str) -> datetime:
        issued = await otp_service.issue_otp(self.db, seller.id, seller.email, purpose)
        await self.mailer.send_otp(seller.email, issued.code, _MAIL_PURPOSES[purpose])
        return issued.expires_at

    async def _verify_otp(self, email: str, purpose: str, code: str) -> None:
        result = await otp_service.verify_otp(self.db, email, purpose, code)
        if not result.valid:
            raise AuthError(result.reason, status_code=400)

    async def _require_seller(self, email: str, verified: bool = False) -> Seller:
        seller = await seller_service.find_seller_by_email(self.db, email)
        if seller is None or (verified and not seller.is_verified):
            raise NotFoundError()
        return seller

    async def _session(self, seller: Seller, user_agent: Optional[str]) -> TokenPair:
        return await session_service.start_session(self.db, seller.id, user_agent)

    # ---------------------------------------------------------------------
    # Signup
    # ---------------------------------------------------------------------

    async def signup(self, request: SignupRequest) -> SignupOutcome:
        email = request.email.lower()
        existing = await seller_service.find_seller_by_email(self.db, email)
        if existing is not None:
            if existing.is_verified:
                raise ConflictError("Account already exists")
            # Same person retrying before verifying: resend instead of duplicating
            logger.info("Signup retried for unverified seller %s", existing.id)
            expires_at = await self._send_otp(existing, otp_service.PURPOSE_SIGNUP)
            return SignupOutcome(created=False, otp_expires_at=expires_at)

        business_hash = hash_business_name(request.business_name)
        if await seller_service.find_seller_by_business_hash(self.db, business_hash):
            raise ConflictError("Business name unavailable")

        provisioned = await wallet_service.provision_wallet(self.ledger)
        try:
            seller = await seller_service.create_seller(
                self.db,
                business_name=request.business_name,
                email=email,
                password=request.password,
                country=request.country,
                wallet=provisioned.record,
            )
        except sa_exc.IntegrityError:
            # A concurrent signup inserted the same email or business name first
            await self.db.rollback()
            logger.warning(
                "Signup for %s lost an insert race; wallet %s left unassigned",
                email, provisioned.record.account_id,
            )
            return await self._after_lost_race(email)
        logger.info("Seller %s signed up", seller.id)

        expires_at = await self._send_otp(seller, otp_service.PURPOSE_SIGNUP)
        return SignupOutcome(created=True, otp_expires_at=expires_at)

    async def _after_lost_race(self, email: str) -> SignupOutcome:
        existing = await seller_service.find_seller_by_email(self.db, email)
        if existing is None:
            raise ConflictError("Business name unavailable")
        if existing.is_verified:
            raise ConflictError("Account already exists")
        expires_at = await self._send_otp(existing, otp_service.PURPOSE_SIGNUP)
        return SignupOutcome(created=False, otp_expires_at=expires_at)

    async def verify_signup(self, email: str, code: str, user_agent: Optional[str] = None) -> SessionOutcome:
        seller = await self._require_seller(email)
        await self._verify_otp(email, otp_service.PURPOSE_SIGNUP, code)

        first_verification = not seller.is_verified
        seed_phrase = None
        if first_verification:
            # Decrypt first: a vault failure must leave the seller unverified
            seed_phrase = wallet_service.read_seed(seller)
            seller = await seller_service.mark_seller_verified(self.db, seller)
            logger.info("Seller %s verified", seller.id)

        tokens = await self._session(seller, user_agent)

        if seed_phrase is not None:
            await wallet_service.mark_seed_retrieved(self.db, seller)

        return SessionOutcome(
            seller=seller_service.serialize_seller(seller),
            tokens=tokens,
            wallet_seed_phrase=seed_phrase,
        )

    # ---------------------------------------------------------------------
    # Login
    # ---------------------------------------------------------------------

    async def login(self, email: str, password: str) -> datetime:
        seller = await seller_service.find_seller_by_email(self.db, email)
        # Same message for unknown, unverified and wrong password
        if seller is None or not seller.is_verified:
            raise AuthError(INVALID_CREDENTIALS)
        if not seller_service.verify_password(seller, password):
            raise AuthError(INVALID_CREDENTIALS)
        return await self._send_otp(seller, otp_service.PURPOSE_LOGIN)

    async def request_login_otp(self, email: str) -> datetime:
        seller = await self._require_seller(email, verified=True)
        return await self._send_otp(seller, otp_service.PURPOSE_LOGIN)

    async def verify_login_otp(self, email: str, code: str, user_agent: Optional[str] = None) -> SessionOutcome:
        seller = await self._require_seller(email, verified=True)
        await self._verify_otp(email, otp_service.PURPOSE_LOGIN, code)
        tokens = await self._session(seller, user_agent)
        return SessionOutcome(seller=seller_service.serialize_seller(seller), tokens=tokens)

    # ---------------------------------------------------------------------
    # Password reset
    # ---------------------------------------------------------------------

    async def request_password_reset(self, email: str) -> datetime:
        seller = await self._require_seller(email)
        return await self._send_otp(seller, otp_service.PURPOSE_RESET)

    async def reset_password(
        self, email: str, code: str, new_password: str, user_agent: Optional[str] = None
    ) -> SessionOutcome:
        seller = await self._require_seller(email)
        await self._verify_otp(email, otp_service.PURPOSE_RESET, code)
        seller = await seller_service.update_password(self.db, seller, new_password)
        logger.info("Seller %s reset their password", seller.id)
        tokens = await self._session(seller, user_agent)
        return SessionOutcome(seller=seller_service.serialize_seller(seller), tokens=tokens)

    # ---------------------------------------------------------------------
    # Sessions
    # ---------------------------------------------------------------------

    async def refresh(self, refresh_token: str) -> TokenPair:
        tokens = await session_service.rotate_session(self.db, refresh_token)
        if tokens is None:
            raise AuthError(INVALID_REFRESH_TOKEN)
        return tokens

    async def logout(self, refresh_token: str) -> None:
        await session_service.revoke_session(self.db, refresh_token)

    # ---------------------------------------------------------------------
    # Wallet
    # ---------------------------------------------------------------------

    async def import_wallet(self, seller: Seller, mnemonic: str, account_id: str) -> WalletRecord:
        return await wallet_service.import_from_seed(self.db, self.ledger, seller, mnemonic, account_id)
