# linkup/security/jwt.py
"""
Access / refresh token pairs.

Access tokens live 15 minutes, refresh tokens 30 days. Each kind has its own
signing secret so a refresh token can never be replayed as a bearer token.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field

from linkup.core.config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenPair(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")
    access_expires_at: datetime = Field(alias="accessExpiresAt")
    refresh_expires_at: datetime = Field(alias="refreshExpiresAt")


def _sign(claims: Dict[str, Any], secret: str, expires_at: datetime, token_type: str) -> str:
    to_encode = dict(claims)
    to_encode.update({
        "exp": int(expires_at.timestamp()),
        "iat": int(datetime.now(timezone.utc).timestamp()),
        "type": token_type,
    })
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def issue_tokens(claims: Dict[str, Any], refresh_claims: Optional[Dict[str, Any]] = None) -> TokenPair:
    """
    Mint a signed access/refresh pair for the given subject claims.

    refresh_claims are merged into the refresh token only (the session id
    travels there as ``jti``).
    """
    now = datetime.now(timezone.utc)
    access_expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    refresh_expires_at = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    access_token = _sign(claims, settings.JWT_ACCESS_SECRET, access_expires_at, ACCESS_TOKEN_TYPE)
    refresh_token = _sign(
        {**claims, **(refresh_claims or {})},
        settings.JWT_REFRESH_SECRET,
        refresh_expires_at,
        REFRESH_TOKEN_TYPE,
    )

    # Expiries are truncated to whole seconds to mirror the exp claim
    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        access_expires_at=access_expires_at.replace(microsecond=0),
        refresh_expires_at=refresh_expires_at.replace(microsecond=0),
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises jose.JWTError on bad signature, expiry or wrong token type."""
    payload = jwt.decode(token, settings.JWT_ACCESS_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Unexpected token type")
    return payload


def decode_refresh_token(token: str, verify_exp: bool = True) -> Dict[str, Any]:
    payload = jwt.decode(
        token,
        settings.JWT_REFRESH_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_exp": verify_exp},
    )
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise JWTError("Unexpected token type")
    return payload
