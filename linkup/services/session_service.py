# linkup/services/session_service.py
"""
Refresh token bookkeeping.

Each row stands for exactly one outstanding refresh token. The token's
``jti`` claim is the row id, so lookup is a primary-key read followed by a
bcrypt comparison against the stored hash. Rotation and revocation both
remove the row with a conditional DELETE; whichever request removes it
first wins and every later use of the same token fails.
"""
import logging
import uuid
from typing import Optional

from jose import JWTError
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.core.config import settings
from linkup.db.types import utcnow
from linkup.models.session import SellerSession
from linkup.security import jwt
from linkup.security.hashing import hash_secret, verify_secret
from linkup.security.jwt import TokenPair

logger = logging.getLogger(__name__)


async def start_session(db: AsyncSession, seller_id: str, user_agent: Optional[str] = None) -> TokenPair:
    session_id = str(uuid.uuid4())
    tokens = jwt.issue_tokens({"sub": seller_id}, refresh_claims={"jti": session_id})
    db.add(SellerSession(
        id=session_id,
        seller_id=seller_id,
        refresh_token_hash=hash_secret(tokens.refresh_token, settings.SESSION_HASH_ROUNDS),
        user_agent=user_agent[:512] if user_agent else None,
        expires_at=tokens.refresh_expires_at,
    ))
    await db.commit()
    return tokens


async def _find_session(db: AsyncSession, refresh_token: str) -> Optional[SellerSession]:
    try:
        # Expiry is judged from the stored row so stale rows still get cleaned
        claims = jwt.decode_refresh_token(refresh_token, verify_exp=False)
    except JWTError:
        return None

    session_id = claims.get("jti")
    if not session_id:
        return None

    session = await db.get(SellerSession, session_id)
    if session is None or session.seller_id != claims.get("sub"):
        return None

    if not verify_secret(refresh_token, session.refresh_token_hash):
        return None
    return session


async def _consume(db: AsyncSession, session: SellerSession) -> bool:
    result = await db.execute(delete(SellerSession).where(SellerSession.id == session.id))
    await db.commit()
    return result.rowcount == 1


async def rotate_session(db: AsyncSession, refresh_token: str) -> Optional[TokenPair]:
    session = await _find_session(db, refresh_token)
    if session is None:
        return None

    seller_id, user_agent = session.seller_id, session.user_agent
    expired = session.expires_at <= utcnow()

    if not await _consume(db, session):
        logger.warning("Refresh token for seller %s was already rotated", seller_id)
        return None
    if expired:
        return None

    return await start_session(db, seller_id, user_agent)


async def revoke_session(db: AsyncSession, refresh_token: str) -> None:
    """Idempotent: unknown or already revoked tokens are ignored."""
    session = await _find_session(db, refresh_token)
    if session is not None:
        await _consume(db, session)
