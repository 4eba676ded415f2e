"""HTTP client for the set-write endpoint, with debounced writers per workout.

``WorkoutClient.set_writer`` hands out a ``SetWriteDebouncer`` whose sends go to
``POST {api_v1_prefix}/workouts/sets``, so a client logging sets in a live
workout produces one request per settled edit.
"""

from __future__ import annotations

import functools
import logging
import uuid

import httpx

from app.core.config import get_settings
from app.services.debounce import ErrorFn, PendingSetWrite, SetWriteDebouncer

logger = logging.getLogger(__name__)


class IncompleteSetWrite(ValueError):
    """A buffered write is missing fields the endpoint requires."""


def set_write_payload(workout_id: uuid.UUID, write: PendingSetWrite) -> dict:
    missing = [name for name in ("exercise_id", "reps", "weight") if getattr(write, name) is None]
    if missing:
        raise IncompleteSetWrite(f"Set {write.set_number} at {write.order_index} is missing {', '.join(missing)}")
    return {
        "workout_id": str(workout_id),
        "order_index": write.order_index,
        "exercise_id": write.exercise_id,
        "exercise_name": write.exercise_name or write.exercise_id,
        "set_number": write.set_number,
        "reps": write.reps,
        "weight": write.weight,
    }


class WorkoutClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.sets_path = f"{get_settings().api_v1_prefix}/workouts/sets"
        self.http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def upsert_set(self, workout_id: uuid.UUID, write: PendingSetWrite) -> None:
        """Send one set write; HTTP errors are raised to the caller."""
        response = await self.http.post(self.sets_path, json=set_write_payload(workout_id, write))
        response.raise_for_status()
        logger.debug(
            "Set sent: workout=%s order=%s set=%s", workout_id, write.order_index, write.set_number
        )

    def set_writer(
        self,
        workout_id: uuid.UUID,
        *,
        delay: float | None = None,
        on_error: ErrorFn | None = None,
    ) -> SetWriteDebouncer:
        return SetWriteDebouncer(
            functools.partial(self.upsert_set, workout_id), delay=delay, on_error=on_error
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "WorkoutClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
