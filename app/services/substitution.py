"""Exercise substitution: swap the exercise at one plan slot mid-session."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundOrUnauthorized, ValidationError
from app.models.workout import ExercisePerformance
from app.services.catalog import CatalogService
from app.services.plan_snapshot import decode_plan, override_entry
from app.services.session_access import (
    Clock,
    get_owned_session,
    get_performance_at,
    performance_values,
    utcnow,
)

logger = logging.getLogger(__name__)


class SubstitutionManager:
    def __init__(self, db: AsyncSession, catalog: CatalogService, clock: Clock = utcnow):
        self.db = db
        self.catalog = catalog
        self.clock = clock

    async def swap_exercise(
        self,
        session_id: uuid.UUID,
        order_index: int,
        new_exercise_id: str,
        new_exercise_name: str,
        user_id: str,
    ) -> ExercisePerformance:
        """Point the slot at ``order_index`` at a different exercise.

        The performance row and the plan snapshot are changed in the same unit
        of work. Sets already logged at that index stay attached to the
        performance and show up under the new exercise.
        """
        ws = await get_owned_session(self.db, session_id, user_id, for_update=True)
        entries = decode_plan(ws.plan_snapshot)
        if not 0 <= order_index < len(entries):
            raise ValidationError(f"order_index {order_index} is outside the session plan")

        descriptor = await self.catalog.get_exercise(new_exercise_id)
        if descriptor is None:
            raise NotFoundOrUnauthorized("Exercise not found")
        if new_exercise_name:
            descriptor = descriptor.renamed(new_exercise_name)

        values = performance_values(descriptor)
        perf = await get_performance_at(self.db, session_id, order_index)
        if perf is not None:
            for key, value in values.items():
                setattr(perf, key, value)
        else:
            perf = ExercisePerformance(
                id=uuid.uuid4(),
                session_id=session_id,
                order_index=order_index,
                sets_snapshot=[],
                sets_version=0,
                **values,
            )
            self.db.add(perf)

        ws.plan_snapshot = override_entry(ws.plan_snapshot, order_index, descriptor, self.clock())
        await self.db.flush()
        logger.info(
            "Exercise swapped: session=%s order=%s exercise=%s", session_id, order_index, descriptor.id
        )
        return perf
