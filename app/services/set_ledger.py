"""Set ledger: idempotent per-set writes and the cached sets snapshot.

``set_records`` is the source of truth. Each performance row carries a
``sets_snapshot`` cache for the live view; it is rebuilt from the ledger after
every write (never patched), and stamped with ``sets_version`` and
``sets_checksum`` so callers can verify it against a fresh recompute.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundOrUnauthorized, ValidationError
from app.db.upsert import conflict_insert
from app.models.workout import ExercisePerformance, SetRecord
from app.services.catalog import CatalogService
from app.services.plan_snapshot import decode_plan
from app.services.session_access import (
    Clock,
    get_owned_session,
    get_performance_at,
    performance_values,
    utcnow,
)

logger = logging.getLogger(__name__)


def serialize_set(set_number: int, reps: int, weight) -> dict:
    return {"set_number": int(set_number), "reps": int(reps), "weight": float(weight)}


def snapshot_checksum(snapshot: list[dict]) -> str:
    canonical = json.dumps(snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class SetLedger:
    def __init__(self, db: AsyncSession, catalog: CatalogService, clock: Clock = utcnow):
        self.db = db
        self.catalog = catalog
        self.clock = clock

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
    ) -> ExercisePerformance:
        """Write one set (insert or overwrite) and rebuild the performance's sets snapshot."""
        if not exercise_id:
            raise ValidationError("exercise_id is required")
        if set_number is None or set_number < 1:
            raise ValidationError("set_number must be >= 1")
        if reps is None or reps < 0:
            raise ValidationError("reps must be >= 0")
        if weight is None or weight < 0:
            raise ValidationError("weight must be >= 0")

        ws = await get_owned_session(self.db, session_id, user_id)
        plan = decode_plan(ws.plan_snapshot)
        if not 0 <= order_index < len(plan):
            raise ValidationError(f"order_index {order_index} is outside the session plan")

        # Writers of one performance rebuild its snapshot one at a time
        perf = await get_performance_at(self.db, session_id, order_index, for_update=True)
        if perf is None:
            perf = await self._create_performance(session_id, order_index, exercise_id, exercise_name)

        now = self.clock()
        stmt = conflict_insert(self.db, SetRecord).values(
            id=uuid.uuid4(),
            performance_id=perf.id,
            set_number=set_number,
            reps=reps,
            weight=Decimal(str(weight)),
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SetRecord.performance_id, SetRecord.set_number],
            set_={
                "reps": stmt.excluded.reps,
                "weight": stmt.excluded.weight,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.db.execute(stmt)
        await self.recompute_sets_snapshot(perf)
        logger.debug(
            "Set upserted: session=%s order=%s set=%s version=%s",
            session_id,
            order_index,
            set_number,
            perf.sets_version,
        )
        return perf

    async def _create_performance(
        self,
        session_id: uuid.UUID,
        order_index: int,
        exercise_id: str,
        exercise_name: str,
    ) -> ExercisePerformance:
        # Targets come from the catalog as it is now, not from the plan snapshot
        descriptor = await self.catalog.get_exercise(exercise_id)
        if descriptor is None:
            raise NotFoundOrUnauthorized("Exercise not found")
        if exercise_name:
            descriptor = descriptor.renamed(exercise_name)
        stmt = (
            conflict_insert(self.db, ExercisePerformance)
            .values(
                id=uuid.uuid4(),
                session_id=session_id,
                order_index=order_index,
                sets_snapshot=[],
                sets_version=0,
                **performance_values(descriptor),
            )
            .on_conflict_do_nothing(
                index_elements=[ExercisePerformance.session_id, ExercisePerformance.order_index]
            )
        )
        await self.db.execute(stmt)
        perf = await get_performance_at(self.db, session_id, order_index, for_update=True)
        if perf is None:
            raise NotFoundOrUnauthorized("Exercise performance could not be created")
        return perf

    async def load_ledger(self, performance_id: uuid.UUID) -> list[dict]:
        """Current sets of a performance straight from ``set_records``, ordered by set number."""
        rows = await self.db.execute(
            select(SetRecord.set_number, SetRecord.reps, SetRecord.weight)
            .where(SetRecord.performance_id == performance_id)
            .order_by(SetRecord.set_number)
        )
        return [serialize_set(r.set_number, r.reps, r.weight) for r in rows.all()]

    async def recompute_sets_snapshot(self, perf: ExercisePerformance) -> list[dict]:
        snapshot = await self.load_ledger(perf.id)
        perf.sets_snapshot = snapshot
        perf.sets_version = (perf.sets_version or 0) + 1
        perf.sets_checksum = snapshot_checksum(snapshot)
        await self.db.flush()
        return snapshot

    async def snapshot_matches_ledger(self, perf: ExercisePerformance) -> bool:
        fresh = await self.load_ledger(perf.id)
        cached = list(perf.sets_snapshot or [])
        return cached == fresh and perf.sets_checksum == snapshot_checksum(fresh)
