# linkup/db/init_db.py
import asyncio
import logging

from linkup.db.base import Base, engine

# Import models so the metadata knows every table
from linkup import models  # noqa: F401

logger = logging.getLogger(__name__)


async def init_models(drop: bool = False) -> None:
    """Create missing tables. drop=True wipes everything first (dev and tests only)."""
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_models(drop=True))
    logger.info("Tables recreated")
