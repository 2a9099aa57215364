# linkup/schemas/auth.py
"""
Request and response bodies for the /auth endpoints.

Field constraints mirror what the frontend enforces; anything failing them
is rejected with 400 before a service is called.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from linkup.schemas.seller import SellerOut
from linkup.security.jwt import TokenPair

EMAIL_PATTERN = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"

# Lowercased on the way in; every lookup is by lowercase email
Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_lower=True, max_length=255, pattern=EMAIL_PATTERN),
]


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_name: str = Field(..., min_length=3, max_length=80, alias="businessName")
    email: Email
    password: str = Field(..., min_length=8)
    country: str = Field(..., min_length=2, max_length=60)


class OtpVerifyRequest(BaseModel):
    email: Email
    code: str = Field(..., min_length=4)


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1)


class EmailRequest(BaseModel):
    email: Email


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Email
    code: str = Field(..., min_length=4)
    new_password: str = Field(..., min_length=8, alias="newPassword")


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., min_length=10, alias="refreshToken")


class MessageResponse(BaseModel):
    message: str


class OtpSentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    otp_expires_at: datetime = Field(alias="otpExpiresAt")


class SessionResponse(BaseModel):
    message: str
    seller: SellerOut
    tokens: TokenPair


class SignupVerifyResponse(SessionResponse):
    model_config = ConfigDict(populate_by_name=True)

    wallet_seed_phrase: Optional[str] = Field(default=None, alias="walletSeedPhrase")


class TokensResponse(BaseModel):
    tokens: TokenPair
