# linkup/db/session.py
"""
Async database session management for SQLAlchemy.

- asyncpg for PostgreSQL (production)
- aiosqlite for SQLite (local development and tests)

The database provides per-row atomicity only. Anything that must happen at
most once (OTP consumption, refresh token rotation) is written as a
conditional DELETE whose affected row count is checked by the caller.
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from linkup.core.config import settings


def _create_async_engine() -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    SQLite: NullPool, check_same_thread=False.
    PostgreSQL: pooled connections with pre-ping and periodic recycling.
    """
    if settings.is_sqlite:
        return create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Global async engine instance
# Created once at module load, reused across all requests
# ─────────────────────────────────────────────────────────────────────────────
engine: AsyncEngine = _create_async_engine()


AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Note: This does NOT auto-commit. Services commit explicitly.
    """
    async with AsyncSessionLocal() as session:
        yield session
