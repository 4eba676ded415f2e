"""Owner-scoped loading of sessions and their performance rows."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundOrUnauthorized
from app.models.workout import ExercisePerformance, SetRecord, WorkoutSession
from app.services.catalog import ExerciseDescriptor

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_owned_session(
    db: AsyncSession,
    session_id: uuid.UUID,
    user_id: str,
    *,
    for_update: bool = False,
) -> WorkoutSession:
    """Load a session that belongs to ``user_id``; missing and foreign look the same."""
    stmt = (
        select(WorkoutSession)
        .where(WorkoutSession.id == session_id, WorkoutSession.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    ws = (await db.execute(stmt)).scalar_one_or_none()
    if ws is None:
        raise NotFoundOrUnauthorized()
    return ws


def performance_at_stmt(session_id: uuid.UUID, order_index: int, *, for_update: bool = False):
    stmt = (
        select(ExercisePerformance)
        .where(
            ExercisePerformance.session_id == session_id,
            ExercisePerformance.order_index == order_index,
        )
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    return stmt


async def get_performance_at(
    db: AsyncSession,
    session_id: uuid.UUID,
    order_index: int,
    *,
    for_update: bool = False,
) -> ExercisePerformance | None:
    """Performance row at ``order_index``; ``for_update`` holds its row lock until commit."""
    result = await db.execute(performance_at_stmt(session_id, order_index, for_update=for_update))
    return result.scalar_one_or_none()


async def list_performances(db: AsyncSession, session_id: uuid.UUID) -> list[ExercisePerformance]:
    result = await db.execute(
        select(ExercisePerformance)
        .where(ExercisePerformance.session_id == session_id)
        .order_by(ExercisePerformance.order_index)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def performance_values(descriptor: ExerciseDescriptor) -> dict:
    """Denormalized columns of a performance row for ``descriptor``."""
    return {
        "exercise_id": descriptor.id,
        "exercise_name": descriptor.name,
        "target_sets": descriptor.target_sets,
        "target_reps": descriptor.target_reps,
        "rest_seconds": descriptor.rest_seconds,
        "video_url": descriptor.video_url,
        "thumbnail_url": descriptor.thumbnail_url,
        "muscle_group_id": descriptor.muscle_group_id,
    }


async def delete_session_children(db: AsyncSession, session_id: uuid.UUID) -> None:
    """Remove every performance and set record of a session (sets first)."""
    perf_ids = select(ExercisePerformance.id).where(ExercisePerformance.session_id == session_id)
    await db.execute(
        delete(SetRecord)
        .where(SetRecord.performance_id.in_(perf_ids))
        .execution_options(synchronize_session="fetch")
    )
    await db.execute(
        delete(ExercisePerformance)
        .where(ExercisePerformance.session_id == session_id)
        .execution_options(synchronize_session="fetch")
    )
