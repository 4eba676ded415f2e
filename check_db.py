"""Print row counts of the catalog and session tables (local debugging aid)."""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.db.session import async_session_maker, engine
from app.models import (
    DayExercise,
    Exercise,
    ExercisePerformance,
    Program,
    SetRecord,
    WorkoutDay,
    WorkoutSession,
)

logger = logging.getLogger("check_db")

MODELS = [Program, WorkoutDay, DayExercise, Exercise, WorkoutSession, ExercisePerformance, SetRecord]


async def check_data() -> None:
    async with async_session_maker() as session:
        for model in MODELS:
            try:
                count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
            except SQLAlchemyError as e:
                logger.error("Table %s: query failed: %s", model.__tablename__, e)
                await session.rollback()
                continue
            logger.info("Table %s: %s rows", model.__tablename__, count)
    await engine.dispose()


if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    asyncio.run(check_data())
