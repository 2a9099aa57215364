# linkup/api/v1/endpoints/auth.py
"""
Seller authentication endpoints.

Signup and login are both two-step: the first call sends an emailed code,
the second exchanges the code for a session. A password alone never yields
tokens.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Response, status

from linkup.api import deps
from linkup.models.seller import Seller
from linkup.schemas.auth import (
    EmailRequest,
    LoginRequest,
    MessageResponse,
    OtpSentResponse,
    OtpVerifyRequest,
    PasswordResetRequest,
    RefreshRequest,
    SessionResponse,
    SignupRequest,
    SignupVerifyResponse,
    TokensResponse,
)
from linkup.schemas.seller import SellerOut
from linkup.services import seller_service
from linkup.services.identity_flow import IdentityFlow

router = APIRouter()


@router.post("/signup", response_model=OtpSentResponse, status_code=status.HTTP_201_CREATED)
async def signup(
        body: SignupRequest,
        response: Response,
        flow: IdentityFlow = Depends(deps.get_identity_flow),
):
    outcome = await flow.signup(body)
    if not outcome.created:
        response.status_code = status.HTTP_202_ACCEPTED
        return OtpSentResponse(
            message="Account already exists. Please verify via OTP.",
            otp_expires_at=outcome.otp_expires_at,
        )
    return OtpSentResponse(
        message="Signup initiated. Enter the OTP sent to your email.",
        otp_expires_at=outcome.otp_expires_at,
    )


@router.post("/signup/verify", response_model=SignupVerifyResponse)
async def verify_signup(
        body: OtpVerifyRequest,
        flow: IdentityFlow = Depends(deps.get_identity_flow),
        user_agent: Optional[str] = Header(default=None),
):
    outcome = await flow.verify_signup(body.email, body.code, user_agent)
    return SignupVerifyResponse(
        message="Signup verified",
        seller=outcome.seller,
        tokens=outcome.tokens,
        wallet_seed_phrase=outcome.wallet_seed_phrase,
    )


@router.post("/login", response_model=OtpSentResponse)
async def login(body: LoginRequest, flow: IdentityFlow = Depends(deps.get_identity_flow)):
    expires_at = await flow.login(body.email, body.password)
    return OtpSentResponse(message="OTP sent to your email", otp_expires_at=expires_at)


@router.post("/login/otp/request", response_model=OtpSentResponse)
async def request_login_otp(body: EmailRequest, flow: IdentityFlow = Depends(deps.get_identity_flow)):
    expires_at = await flow.request_login_otp(body.email)
    return OtpSentResponse(message="OTP sent", otp_expires_at=expires_at)


@router.post("/login/otp/verify", response_model=SessionResponse)
async def verify_login_otp(
        body: OtpVerifyRequest,
        flow: IdentityFlow = Depends(deps.get_identity_flow),
        user_agent: Optional[str] = Header(default=None),
):
    outcome = await flow.verify_login_otp(body.email, body.code, user_agent)
    return SessionResponse(message="Login successful", seller=outcome.seller, tokens=outcome.tokens)


@router.post("/password/request", response_model=OtpSentResponse)
async def request_password_reset(body: EmailRequest, flow: IdentityFlow = Depends(deps.get_identity_flow)):
    expires_at = await flow.request_password_reset(body.email)
    return OtpSentResponse(message="Password reset OTP sent", otp_expires_at=expires_at)


@router.post("/password/reset", response_model=SessionResponse)
async def reset_password(
        body: PasswordResetRequest,
        flow: IdentityFlow = Depends(deps.get_identity_flow),
        user_agent: Optional[str] = Header(default=None),
):
    outcome = await flow.reset_password(body.email, body.code, body.new_password, user_agent)
    return SessionResponse(message="Password updated", seller=outcome.seller, tokens=outcome.tokens)


@router.post("/refresh", response_model=TokensResponse)
async def refresh(body: RefreshRequest, flow: IdentityFlow = Depends(deps.get_identity_flow)):
    tokens = await flow.refresh(body.refresh_token)
    return TokensResponse(tokens=tokens)


@router.post("/logout", response_model=MessageResponse)
async def logout(body: RefreshRequest, flow: IdentityFlow = Depends(deps.get_identity_flow)):
    await flow.logout(body.refresh_token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=SellerOut)
async def read_me(current_seller: Seller = Depends(deps.get_current_seller)):
    return seller_service.serialize_seller(current_seller)
