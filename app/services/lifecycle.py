"""Session lifecycle: start, pause, resume, complete, rate, reset and delete.

State machine::

    active  --pause-->    paused
    paused  --resume-->   active
    active | paused  --complete-->  completed
    any     --reset-->    active
    any     --delete-->   (removed)

Allowed source states live in ``TRANSITIONS`` and are checked by
``ensure_transition``. ``resume`` is tolerant: outside of a pause it is a no-op.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import MAX_RATING, MIN_RATING
from app.core.enums import SessionStatus
from app.core.exceptions import (
    InvalidTransition,
    NotFoundOrUnauthorized,
    PersistenceError,
    ValidationError,
)
from app.models.workout import WorkoutSession
from app.services.catalog import CatalogService
from app.services.elapsed import as_utc, elapsed_seconds
from app.services.plan_snapshot import freeze_plan
from app.services.session_access import (
    Clock,
    delete_session_children,
    get_owned_session,
    utcnow,
)

logger = logging.getLogger(__name__)

_ANY = frozenset(SessionStatus)

# operation -> (allowed source states, resulting state)
TRANSITIONS: dict[str, tuple[frozenset[SessionStatus], SessionStatus | None]] = {
    "pause": (frozenset({SessionStatus.ACTIVE}), SessionStatus.PAUSED),
    "resume": (frozenset({SessionStatus.PAUSED}), SessionStatus.ACTIVE),
    "complete": (frozenset({SessionStatus.ACTIVE, SessionStatus.PAUSED}), SessionStatus.COMPLETED),
    "rate": (frozenset({SessionStatus.COMPLETED}), SessionStatus.COMPLETED),
    "reset": (_ANY, SessionStatus.ACTIVE),
    "delete": (_ANY, None),
}


def can_transition(operation: str, status: SessionStatus | str) -> bool:
    allowed, _ = TRANSITIONS[operation]
    return SessionStatus(status) in allowed


def ensure_transition(operation: str, status: SessionStatus | str) -> SessionStatus | None:
    """Return the target state of ``operation`` or raise InvalidTransition."""
    if not can_transition(operation, status):
        raise InvalidTransition(f"Cannot {operation} a workout that is {SessionStatus(status).value}")
    return TRANSITIONS[operation][1]


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def _pause_seconds(last_paused_at, now) -> int:
    return max(0, round((as_utc(now) - as_utc(last_paused_at)).total_seconds()))


class LifecycleManager:
    def __init__(self, db: AsyncSession, catalog: CatalogService, clock: Clock = utcnow):
        self.db = db
        self.catalog = catalog
        self.clock = clock

    async def find_session(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> WorkoutSession | None:
        """Latest session for the exact (user, program, day, instance) tuple, any status."""
        stmt = select(WorkoutSession).where(
            WorkoutSession.user_id == user_id,
            WorkoutSession.program_id == program_id,
            WorkoutSession.day_id == day_id,
        )
        if program_instance_id is None:
            stmt = stmt.where(WorkoutSession.program_instance_id.is_(None))
        else:
            stmt = stmt.where(WorkoutSession.program_instance_id == program_instance_id)
        stmt = stmt.order_by(WorkoutSession.started_at.desc()).limit(1)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def start(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> WorkoutSession:
        ws, _ = await self.ensure_started(user_id, program_id, day_id, program_instance_id)
        return ws

    async def ensure_started(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> tuple[WorkoutSession, bool]:
        """Session for the day and whether this call created it."""
        existing = await self.find_session(user_id, program_id, day_id, program_instance_id)
        if existing is not None:
            return existing, False

        plan = await self.catalog.get_day_plan(program_id, day_id)
        if plan is None:
            raise NotFoundOrUnauthorized("Workout day not found")

        now = self.clock()
        ws = WorkoutSession(
            id=uuid.uuid4(),
            user_id=user_id,
            program_id=program_id,
            day_id=day_id,
            program_instance_id=program_instance_id,
            started_at=now,
            created_at=now,
            status=SessionStatus.ACTIVE,
            accumulated_pause_seconds=0,
            program_name=plan.program_name,
            day_title=plan.day_title,
            plan_snapshot=freeze_plan(plan.exercises),
        )
        self.db.add(ws)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a concurrent double-start; the other request's row wins
            await self.db.rollback()
            winner = await self.find_session(user_id, program_id, day_id, program_instance_id)
            if winner is None:
                raise PersistenceError("Could not start workout") from e
            return winner, False

        logger.info("Workout started: session=%s user=%s day=%s", ws.id, user_id, day_id)
        return ws, True

    async def pause(self, session_id: uuid.UUID, user_id: str) -> WorkoutSession:
        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        ws.status = ensure_transition("pause", ws.status)
        ws.last_paused_at = self.clock()
        await self.db.flush()
        logger.info("Workout paused: session=%s user=%s", session_id, user_id)
        return ws

    async def resume(self, session_id: uuid.UUID, user_id: str) -> int:
        """Close the open pause interval and return the new accumulated pause seconds."""
        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        if not can_transition("resume", ws.status) or ws.last_paused_at is None:
            return ws.accumulated_pause_seconds or 0

        ws.accumulated_pause_seconds = (ws.accumulated_pause_seconds or 0) + _pause_seconds(
            ws.last_paused_at, self.clock()
        )
        ws.status = ensure_transition("resume", ws.status)
        ws.last_paused_at = None
        await self.db.flush()
        logger.info(
            "Workout resumed: session=%s user=%s paused_total=%s",
            session_id,
            user_id,
            ws.accumulated_pause_seconds,
        )
        return ws.accumulated_pause_seconds

    async def complete(
        self,
        session_id: uuid.UUID,
        user_id: str,
        duration_seconds: int | None = None,
        rating: int | None = None,
    ) -> WorkoutSession:
        if duration_seconds is not None and duration_seconds < 0:
            raise ValidationError("duration_seconds must be >= 0")
        if rating is not None:
            validate_rating(rating)

        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        target = ensure_transition("complete", ws.status)
        now = self.clock()

        if duration_seconds is None:
            duration_seconds = elapsed_seconds(
                ws.started_at, ws.status, ws.last_paused_at, ws.accumulated_pause_seconds, now
            )
        if ws.status == SessionStatus.PAUSED and ws.last_paused_at is not None:
            ws.accumulated_pause_seconds = (ws.accumulated_pause_seconds or 0) + _pause_seconds(
                ws.last_paused_at, now
            )
        ws.last_paused_at = None
        ws.status = target
        ws.completed_at = now
        ws.duration_seconds = duration_seconds
        if rating is not None:
            ws.rating = rating
        await self.db.flush()
        logger.info(
            "Workout completed: session=%s user=%s duration=%s", session_id, user_id, duration_seconds
        )
        return ws

    async def rate(self, session_id: uuid.UUID, user_id: str, rating: int) -> WorkoutSession:
        validate_rating(rating)
        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        ensure_transition("rate", ws.status)
        ws.rating = rating
        await self.db.flush()
        logger.info("Workout rated: session=%s user=%s rating=%s", session_id, user_id, rating)
        return ws

    async def reset(self, session_id: uuid.UUID, user_id: str) -> tuple[str, uuid.UUID]:
        """Wipe logged work and restart the timer; the plan snapshot is kept."""
        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        target = ensure_transition("reset", ws.status)
        await delete_session_children(self.db, session_id)

        ws.started_at = self.clock()
        ws.status = target
        ws.last_paused_at = None
        ws.accumulated_pause_seconds = 0
        ws.completed_at = None
        ws.duration_seconds = None
        ws.rating = None
        await self.db.flush()
        logger.info("Workout reset: session=%s user=%s", session_id, user_id)
        return ws.program_id, ws.day_id

    async def delete(self, session_id: uuid.UUID, user_id: str) -> None:
        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        ensure_transition("delete", ws.status)
        await delete_session_children(self.db, session_id)
        await self.db.execute(
            delete(WorkoutSession)
            .where(WorkoutSession.id == session_id, WorkoutSession.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        logger.info("Workout deleted: session=%s user=%s", session_id, user_id)
