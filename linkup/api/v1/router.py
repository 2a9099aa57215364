# linkup/api/v1/router.py
from fastapi import APIRouter
from linkup.api.v1.endpoints import auth, health, wallet

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
