"""WorkoutEngine: one entry point over lifecycle, ledger, substitution and views.

Collaborators are passed in explicitly (database session, catalog, clock) so
callers and tests decide what the engine talks to.
"""

from __future__ import annotations

import functools
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PersistenceError
from app.schemas.workout import SessionView
from app.services.catalog import CatalogService
from app.services.lifecycle import LifecycleManager
from app.services.read_model import SnapshotReadModel
from app.services.session_access import Clock, utcnow
from app.services.set_ledger import SetLedger
from app.services.substitution import SubstitutionManager

logger = logging.getLogger(__name__)


def translate_db_errors(func):
    """Re-raise unexpected SQLAlchemy errors as PersistenceError."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception("Storage failure in %s", func.__name__)
            raise PersistenceError() from e

    return wrapper


class WorkoutEngine:
    def __init__(self, db: AsyncSession, catalog: CatalogService, clock: Clock = utcnow):
        self.db = db
        self.catalog = catalog
        self.clock = clock
        self.lifecycle = LifecycleManager(db, catalog, clock)
        self.ledger = SetLedger(db, catalog, clock)
        self.substitution = SubstitutionManager(db, catalog, clock)
        self.read_model = SnapshotReadModel(db, catalog, clock)

    # Lifecycle

    @translate_db_errors
    async def start(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> uuid.UUID:
        ws = await self.lifecycle.start(user_id, program_id, day_id, program_instance_id)
        return ws.id

    @translate_db_errors
    async def ensure_started(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> tuple[uuid.UUID, bool]:
        """Like ``start``, also telling whether the session is new."""
        ws, created = await self.lifecycle.ensure_started(user_id, program_id, day_id, program_instance_id)
        return ws.id, created

    @translate_db_errors
    async def pause(self, session_id: uuid.UUID, user_id: str) -> None:
        await self.lifecycle.pause(session_id, user_id)

    @translate_db_errors
    async def resume(self, session_id: uuid.UUID, user_id: str) -> int:
        return await self.lifecycle.resume(session_id, user_id)

    @translate_db_errors
    async def complete(
        self,
        session_id: uuid.UUID,
        user_id: str,
        duration_seconds: int | None = None,
        rating: int | None = None,
    ) -> None:
        await self.lifecycle.complete(session_id, user_id, duration_seconds, rating)

    @translate_db_errors
    async def rate(self, session_id: uuid.UUID, user_id: str, rating: int) -> None:
        await self.lifecycle.rate(session_id, user_id, rating)

    @translate_db_errors
    async def reset(self, session_id: uuid.UUID, user_id: str) -> tuple[str, uuid.UUID]:
        return await self.lifecycle.reset(session_id, user_id)

    @translate_db_errors
    async def delete(self, session_id: uuid.UUID, user_id: str) -> None:
        await self.lifecycle.delete(session_id, user_id)

    # Sets and swaps

    @translate_db_errors
    async def upsert_set(
        self,
        session_id: uuid.UUID,
        order_index: int,
        exercise_id: str,
        exercise_name: str,
        set_number: int,
        reps: int,
        weight: float,
        user_id: str,
    ) -> None:
        await self.ledger.upsert_set(
            session_id, order_index, exercise_id, exercise_name, set_number, reps, weight, user_id
        )

    @translate_db_errors
    async def swap_exercise(
        self,
        session_id: uuid.UUID,
        order_index: int,
        new_exercise_id: str,
        new_exercise_name: str,
        user_id: str,
    ) -> None:
        await self.substitution.swap_exercise(
            session_id, order_index, new_exercise_id, new_exercise_name, user_id
        )

    # Views

    @translate_db_errors
    async def get_view(self, session_id: uuid.UUID, user_id: str) -> SessionView:
        return await self.read_model.get_view(session_id, user_id)

    @translate_db_errors
    async def start_and_view(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> tuple[uuid.UUID, SessionView, bool]:
        return await self.read_model.start_and_view(user_id, program_id, day_id, program_instance_id)
