# linkup/core/config.py
"""
Production-ready configuration using pydantic-settings.

Security considerations:
- Signing secrets and the vault master key must be at least 32 characters
- Secrets are loaded once per process and never rotated at runtime
- Database URLs normalized for async drivers automatically
- Missing Hedera operator credentials switch wallet provisioning to stub mode
"""
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIRROR_NODE_URLS = {
    "mainnet": "https://mainnet.mirrornode.hedera.com",
    "testnet": "https://testnet.mirrornode.hedera.com",
    "previewnet": "https://previewnet.mirrornode.hedera.com",
}


class Settings(BaseSettings):
    """
    Strictly typed application settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values (lowest priority, dev-safe only)
    """

    # ─────────────────────────────────────────────────────────────
    # Application metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "LinkUp"
    PROJECT_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # ─────────────────────────────────────────────────────────────
    # Security: JWT Configuration
    # Access and refresh tokens are signed with separate secrets
    # ─────────────────────────────────────────────────────────────
    JWT_ACCESS_SECRET: str = Field(
        default="INSECURE_DEV_ACCESS_SECRET_CHANGE_IN_PRODUCTION", min_length=32
    )
    JWT_REFRESH_SECRET: str = Field(
        default="INSECURE_DEV_REFRESH_SECRET_CHANGE_IN_PRODUCTION", min_length=32
    )
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # ─────────────────────────────────────────────────────────────
    # Secret vault: master secret for wallet key encryption
    # ─────────────────────────────────────────────────────────────
    ENCRYPTION_KEY: str = Field(
        default="INSECURE_DEV_ENCRYPTION_KEY_CHANGE_IN_PRODUCTION", min_length=32
    )

    # ─────────────────────────────────────────────────────────────
    # One-time codes and slow hashes
    # ─────────────────────────────────────────────────────────────
    OTP_LENGTH: int = Field(default=6, ge=4, le=10)
    OTP_EXP_MINUTES: int = Field(default=10, gt=0)
    PASSWORD_HASH_ROUNDS: int = Field(default=12, ge=4, le=31)
    OTP_HASH_ROUNDS: int = Field(default=10, ge=4, le=31)
    SESSION_HASH_ROUNDS: int = Field(default=12, ge=4, le=31)

    # ─────────────────────────────────────────────────────────────
    # Hedera ledger
    # Operator credentials are optional: without them new wallets
    # get placeholder account ids (stub mode)
    # ─────────────────────────────────────────────────────────────
    HEDERA_NETWORK: Literal["mainnet", "testnet", "previewnet"] = "testnet"
    HEDERA_KEY_TYPE: Literal["ED25519", "ECDSA"] = "ECDSA"
    HEDERA_OPERATOR_ID: Optional[str] = None
    HEDERA_OPERATOR_KEY: Optional[str] = None
    HEDERA_INITIAL_BALANCE_HBAR: float = 1
    HEDERA_MIRROR_URL: Optional[str] = None
    HEDERA_REQUEST_TIMEOUT: float = 10.0

    # ─────────────────────────────────────────────────────────────
    # Outgoing mail (falls back to logging when incomplete)
    # ─────────────────────────────────────────────────────────────
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: Optional[int] = None
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    EMAIL_FROM: Optional[str] = None

    # ─────────────────────────────────────────────────────────────
    # Database Configuration
    # Priority: DATABASE_URL env var → SQLite fallback for local dev
    # ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./linkup.db"
    DATABASE_ECHO: bool = False

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """
        Normalize database URLs for async SQLAlchemy compatibility.

        Conversions:
        - postgres://     → postgresql+asyncpg://
        - postgresql://   → postgresql+asyncpg://
        - sqlite:///      → sqlite+aiosqlite:///
        """
        if v is None:
            return "sqlite+aiosqlite:///./linkup.db"

        url = v.strip()

        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)

        if url.startswith("postgresql://") and "+asyncpg" not in url:
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)

        if url.startswith("sqlite:///") and "+aiosqlite" not in url:
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        return url

    @field_validator("HEDERA_OPERATOR_ID", "HEDERA_OPERATOR_KEY", "SMTP_HOST", "EMAIL_FROM", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # ─────────────────────────────────────────────────────────────
    # CORS Configuration
    # Empty string → empty list (NOT "*")
    # ─────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        if not self.CORS_ORIGINS or not self.CORS_ORIGINS.strip():
            return []

        return [
            origin.strip()
            for origin in self.CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database (local development)."""
        return "sqlite" in self.DATABASE_URL.lower()

    @property
    def operator_configured(self) -> bool:
        return bool(self.HEDERA_OPERATOR_ID and self.HEDERA_OPERATOR_KEY)

    @property
    def smtp_configured(self) -> bool:
        return bool(
            self.SMTP_HOST and self.SMTP_PORT and self.SMTP_USER
            and self.SMTP_PASS and self.EMAIL_FROM
        )

    @property
    def mirror_node_url(self) -> str:
        if self.HEDERA_MIRROR_URL:
            return self.HEDERA_MIRROR_URL.rstrip("/")
        return MIRROR_NODE_URLS[self.HEDERA_NETWORK]


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    providing consistent configuration across the application.
    """
    return Settings()


settings = get_settings()
