# linkup/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from linkup.api.v1.router import api_router
from linkup.core.config import settings
from linkup.core.errors import IntegrityError, LinkUpError
from linkup.db.base import AsyncSessionLocal
from linkup.db.init_db import init_models
from linkup.services import otp_service

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("linkup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()

    async with AsyncSessionLocal() as db:
        purged = await otp_service.purge_expired(db)
    if purged:
        logger.info("Purged %s expired OTP challenges", purged)

    if not settings.operator_configured:
        logger.warning("Hedera operator not configured; new wallets use placeholder accounts")
    yield


async def linkup_error_handler(request: Request, exc: LinkUpError):
    if isinstance(exc, IntegrityError):
        # Corrupted ciphertext or wrong ENCRYPTION_KEY; never a client problem
        logger.error("Vault integrity failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(LinkUpError, linkup_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME} API"}

    return app


app = create_app()
