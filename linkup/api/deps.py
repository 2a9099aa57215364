# linkup/api/deps.py
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.core.errors import AuthError
from linkup.db.base import get_db
from linkup.ledger.base import LedgerClient
from linkup.ledger.client import get_ledger_client
from linkup.models.seller import Seller
from linkup.security import jwt
from linkup.services import seller_service
from linkup.services.email_service import EmailDispatcher, get_email_dispatcher
from linkup.services.identity_flow import IdentityFlow

# auto_error=False so a missing header gets the same 401 as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


def get_ledger() -> LedgerClient:
    return get_ledger_client()


def get_identity_flow(
        db: AsyncSession = Depends(get_db),
        ledger: LedgerClient = Depends(get_ledger),
        mailer: EmailDispatcher = Depends(get_email_dispatcher),
) -> IdentityFlow:
    return IdentityFlow(db, ledger, mailer)


async def get_current_seller(
        db: AsyncSession = Depends(get_db),
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Seller:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Unauthorized")

    try:
        payload = jwt.decode_access_token(credentials.credentials)
    except JWTError:
        raise AuthError("Unauthorized")

    seller_id = payload.get("sub")
    seller = await seller_service.get_seller(db, seller_id) if seller_id else None
    if seller is None:
        raise AuthError("Unauthorized")

    return seller
