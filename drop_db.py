"""Drop every table (and the Alembic version marker). Development databases only."""

import asyncio
import logging

from sqlalchemy import text

from app.core.logging import configure_logging
from app.db.base import Base
from app.db.session import engine
from app.models import *  # noqa: F401, F403 - register all models

logger = logging.getLogger("drop_db")


async def drop_tables() -> None:
    logger.info("Dropping all tables...")
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Tables dropped.")
    await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(drop_tables())
