"""Live session view built from the session row and its performance rows.

Two queries per view: the owner-scoped session row and its performances. Sets
come from each performance's cached ``sets_snapshot``; ``set_records`` is never
joined here (see ``app.services.history`` for the ledger-backed detail).
"""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InconsistentData
from app.models.workout import ExercisePerformance, WorkoutSession
from app.schemas.workout import SessionExercise, SessionSet, SessionSummary, SessionView
from app.services.catalog import CatalogService
from app.services.elapsed import elapsed_seconds
from app.services.lifecycle import LifecycleManager
from app.services.plan_snapshot import decode_plan, merge_plan_with_performances
from app.services.session_access import Clock, get_owned_session, list_performances, utcnow


def flatten_sets(performances: list[ExercisePerformance]) -> list[SessionSet]:
    sets = [
        SessionSet(
            exercise_id=perf.exercise_id,
            order_index=perf.order_index,
            set_number=item["set_number"],
            reps=item["reps"],
            weight=item["weight"],
        )
        for perf in performances
        for item in (perf.sets_snapshot or [])
    ]
    sets.sort(key=lambda s: (s.order_index, s.set_number))
    return sets


class SnapshotReadModel:
    def __init__(self, db: AsyncSession, catalog: CatalogService, clock: Clock = utcnow):
        self.db = db
        self.catalog = catalog
        self.clock = clock

    def build_view(self, ws: WorkoutSession, performances: list[ExercisePerformance]) -> SessionView:
        if ws.program_name is None or ws.day_title is None or ws.plan_snapshot is None:
            raise InconsistentData()

        entries = decode_plan(ws.plan_snapshot)
        exercises = [
            SessionExercise(
                order_index=item.order_index,
                swapped=item.swapped,
                **item.descriptor.to_dict(),
            )
            for item in merge_plan_with_performances(entries, performances)
        ]
        summary = SessionSummary.model_validate(ws).model_copy(
            update={
                "elapsed_seconds": elapsed_seconds(
                    ws.started_at,
                    ws.status,
                    ws.last_paused_at,
                    ws.accumulated_pause_seconds,
                    self.clock(),
                )
            }
        )
        return SessionView(workout=summary, exercises=exercises, sets=flatten_sets(performances))

    async def get_view(self, session_id: uuid.UUID, user_id: str) -> SessionView:
        ws = await get_owned_session(self.db, session_id, user_id)
        performances = await list_performances(self.db, session_id)
        return self.build_view(ws, performances)

    async def start_and_view(
        self,
        user_id: str,
        program_id: str,
        day_id: uuid.UUID,
        program_instance_id: uuid.UUID | None = None,
    ) -> tuple[uuid.UUID, SessionView, bool]:
        """Start (or reuse) a session and read it back within the same unit of work.

        The last element tells whether the session was created by this call.
        """
        lifecycle = LifecycleManager(self.db, self.catalog, self.clock)
        ws, created = await lifecycle.ensure_started(user_id, program_id, day_id, program_instance_id)
        return ws.id, await self.get_view(ws.id, user_id), created
