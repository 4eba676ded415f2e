"""Read-only history queries over sessions, performances and the set ledger.

Unlike the live view these read ``set_records`` directly; they back history
pages and "last time you did X" hints, not the in-workout screen.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import (
    DEFAULT_EXERCISE_HISTORY_LIMIT,
    DEFAULT_HISTORY_LIMIT,
    LAST_LIFTS_PER_EXERCISE,
)
from app.core.enums import SessionStatus
from app.models.workout import ExercisePerformance, SetRecord, WorkoutSession
from app.schemas.history import (
    CompletedSummary,
    ExerciseHistoryResponse,
    ExerciseSessionSets,
    HistoryExercise,
    HistoryItem,
    HistorySet,
    InProgressSession,
    WorkoutDetail,
)
from app.services.session_access import get_owned_session


def _history_set(record: SetRecord) -> HistorySet:
    return HistorySet(set_number=record.set_number, reps=record.reps, weight=float(record.weight))


def _history_exercise(perf: ExercisePerformance) -> HistoryExercise:
    return HistoryExercise(
        order_index=perf.order_index,
        exercise_id=perf.exercise_id,
        exercise_name=perf.exercise_name,
        sets=[_history_set(s) for s in perf.sets],
    )


class HistoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _performances_with_sets(self, session_id: uuid.UUID) -> list[ExercisePerformance]:
        result = await self.db.execute(
            select(ExercisePerformance)
            .where(ExercisePerformance.session_id == session_id)
            .options(selectinload(ExercisePerformance.sets))
            .order_by(ExercisePerformance.order_index)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_history(self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryItem]:
        """Completed sessions, newest first, with their performance counts."""
        perf_count = func.count(ExercisePerformance.id)
        result = await self.db.execute(
            select(WorkoutSession, perf_count)
            .outerjoin(ExercisePerformance, ExercisePerformance.session_id == WorkoutSession.id)
            .where(
                WorkoutSession.user_id == user_id,
                WorkoutSession.status == SessionStatus.COMPLETED,
            )
            .group_by(WorkoutSession.id)
            .order_by(WorkoutSession.completed_at.desc())
            .limit(limit)
        )
        return [
            HistoryItem(
                id=ws.id,
                program_id=ws.program_id,
                day_id=ws.day_id,
                program_name=ws.program_name,
                day_title=ws.day_title,
                started_at=ws.started_at,
                completed_at=ws.completed_at,
                duration_seconds=ws.duration_seconds,
                rating=ws.rating,
                exercise_count=count,
            )
            for ws, count in result.all()
        ]

    async def get_detail(self, session_id: uuid.UUID, user_id: str) -> WorkoutDetail:
        ws = await get_owned_session(self.db, session_id, user_id)
        performances = await self._performances_with_sets(session_id)
        return WorkoutDetail(
            id=ws.id,
            program_id=ws.program_id,
            day_id=ws.day_id,
            program_instance_id=ws.program_instance_id,
            program_name=ws.program_name,
            day_title=ws.day_title,
            status=ws.status,
            started_at=ws.started_at,
            completed_at=ws.completed_at,
            duration_seconds=ws.duration_seconds,
            rating=ws.rating,
            accumulated_pause_seconds=ws.accumulated_pause_seconds or 0,
            exercise_count=len(performances),
            exercises=[_history_exercise(p) for p in performances],
        )

    async def _sessions_for_exercise(
        self, user_id: str, exercise_id: str, limit: int
    ) -> list[ExerciseSessionSets]:
        result = await self.db.execute(
            select(ExercisePerformance, WorkoutSession.completed_at)
            .join(WorkoutSession, WorkoutSession.id == ExercisePerformance.session_id)
            .where(
                WorkoutSession.user_id == user_id,
                WorkoutSession.status == SessionStatus.COMPLETED,
                ExercisePerformance.exercise_id == exercise_id,
            )
            .options(selectinload(ExercisePerformance.sets))
            .order_by(WorkoutSession.completed_at.desc(), ExercisePerformance.order_index)
            .execution_options(populate_existing=True)
        )
        # A session can hold the same exercise at several indexes; merge them
        grouped: dict[uuid.UUID, ExerciseSessionSets] = {}
        for perf, completed_at in result.all():
            entry = grouped.get(perf.session_id)
            if entry is None:
                if len(grouped) >= limit:
                    continue
                entry = grouped[perf.session_id] = ExerciseSessionSets(
                    session_id=perf.session_id,
                    completed_at=completed_at,
                    exercise_name=perf.exercise_name,
                )
            entry.sets.extend(_history_set(s) for s in perf.sets)
        return list(grouped.values())

    async def exercise_history(
        self,
        user_id: str,
        exercise_id: str,
        limit: int = DEFAULT_EXERCISE_HISTORY_LIMIT,
    ) -> ExerciseHistoryResponse:
        """Sets logged for one exercise in previous completed sessions, newest session first."""
        sessions = await self._sessions_for_exercise(user_id, exercise_id, limit)
        return ExerciseHistoryResponse(exercise_id=exercise_id, sessions=sessions)

    async def last_lifts(
        self,
        user_id: str,
        exercise_ids: Iterable[str],
        per_exercise: int = LAST_LIFTS_PER_EXERCISE,
    ) -> dict[str, list[ExerciseSessionSets]]:
        """Up to ``per_exercise`` latest completed sessions for each exercise id."""
        return {
            exercise_id: await self._sessions_for_exercise(user_id, exercise_id, per_exercise)
            for exercise_id in dict.fromkeys(exercise_ids)
        }

    async def completed_day_ids(self, user_id: str, program_id: str) -> set[uuid.UUID]:
        result = await self.db.execute(
            select(WorkoutSession.day_id)
            .where(
                WorkoutSession.user_id == user_id,
                WorkoutSession.program_id == program_id,
                WorkoutSession.status == SessionStatus.COMPLETED,
            )
            .distinct()
        )
        return set(result.scalars().all())

    async def most_recent_in_progress(
        self, user_id: str, program_id: str, day_id: uuid.UUID
    ) -> InProgressSession | None:
        """Latest unfinished session for a day, with the time of its latest set write."""
        ws = (
            await self.db.execute(
                select(WorkoutSession)
                .where(
                    WorkoutSession.user_id == user_id,
                    WorkoutSession.program_id == program_id,
                    WorkoutSession.day_id == day_id,
                    WorkoutSession.status != SessionStatus.COMPLETED,
                )
                .order_by(WorkoutSession.started_at.desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        if ws is None:
            return None
        last_set_at = (
            await self.db.execute(
                select(func.max(SetRecord.updated_at))
                .join(ExercisePerformance, ExercisePerformance.id == SetRecord.performance_id)
                .where(ExercisePerformance.session_id == ws.id)
            )
        ).scalar_one_or_none()
        return InProgressSession(
            id=ws.id,
            program_id=ws.program_id,
            day_id=ws.day_id,
            program_instance_id=ws.program_instance_id,
            status=ws.status,
            started_at=ws.started_at,
            last_set_at=last_set_at,
        )

    async def completed_summary(
        self, user_id: str, program_id: str, day_id: uuid.UUID
    ) -> CompletedSummary | None:
        """Latest completed session of a day, keeping only exercises with real work logged."""
        ws = (
            await self.db.execute(
                select(WorkoutSession)
                .where(
                    WorkoutSession.user_id == user_id,
                    WorkoutSession.program_id == program_id,
                    WorkoutSession.day_id == day_id,
                    WorkoutSession.status == SessionStatus.COMPLETED,
                )
                .order_by(WorkoutSession.completed_at.desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        if ws is None:
            return None
        performances = await self._performances_with_sets(ws.id)
        exercises = [
            _history_exercise(p) for p in performances if any(s.reps > 0 for s in p.sets)
        ]
        return CompletedSummary(
            id=ws.id,
            program_id=ws.program_id,
            day_id=ws.day_id,
            day_title=ws.day_title,
            completed_at=ws.completed_at,
            duration_seconds=ws.duration_seconds,
            rating=ws.rating,
            exercises=exercises,
        )
