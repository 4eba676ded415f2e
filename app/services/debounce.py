"""Client-side coalescing of rapid set edits.

Typing "1", "10", "100" into a weight field should produce one write, not
three. ``SetWriteDebouncer`` keeps the latest edit per (order_index,
set_number) and sends it once the key has been quiet for ``delay`` seconds.
There is at most one armed timer per key; a newer edit re-arms it.

Failed sends are not retried. They are logged, recorded in ``failed`` and
passed to ``on_error`` so the UI can show them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from app.core.config import get_settings
from app.core.constants import SET_WRITE_DEBOUNCE_MAX_SECONDS, SET_WRITE_DEBOUNCE_MIN_SECONDS

logger = logging.getLogger(__name__)

SetKey = tuple[int, int]


@dataclass(frozen=True)
class PendingSetWrite:
    """Latest buffered values for one set. Fields not edited yet are None."""

    order_index: int
    set_number: int
    exercise_id: str | None = None
    exercise_name: str | None = None
    reps: int | None = None
    weight: float | None = None

    @property
    def key(self) -> SetKey:
        return (self.order_index, self.set_number)

    def merged(self, **fields) -> "PendingSetWrite":
        return replace(self, **{k: v for k, v in fields.items() if v is not None})


SendFn = Callable[[PendingSetWrite], Awaitable[None]]
ErrorFn = Callable[[PendingSetWrite, Exception], None]


class SetWriteDebouncer:
    def __init__(
        self,
        send: SendFn,
        *,
        delay: float | None = None,
        on_error: ErrorFn | None = None,
    ):
        if delay is None:
            delay = get_settings().set_write_debounce_seconds
        if not SET_WRITE_DEBOUNCE_MIN_SECONDS <= delay <= SET_WRITE_DEBOUNCE_MAX_SECONDS:
            raise ValueError(
                f"delay must be between {SET_WRITE_DEBOUNCE_MIN_SECONDS} "
                f"and {SET_WRITE_DEBOUNCE_MAX_SECONDS} seconds"
            )
        self.send = send
        self.delay = delay
        self.on_error = on_error
        self.failed: dict[SetKey, tuple[PendingSetWrite, Exception]] = {}
        self._pending: dict[SetKey, PendingSetWrite] = {}
        self._timers: dict[SetKey, asyncio.Task] = {}

    @property
    def pending(self) -> dict[SetKey, PendingSetWrite]:
        return dict(self._pending)

    def submit(
        self,
        order_index: int,
        set_number: int,
        *,
        exercise_id: str | None = None,
        exercise_name: str | None = None,
        reps: int | None = None,
        weight: float | None = None,
    ) -> PendingSetWrite:
        """Buffer an edit and (re)arm the timer for its key. Must run inside an event loop."""
        key = (order_index, set_number)
        current = self._pending.get(key) or PendingSetWrite(order_index, set_number)
        write = current.merged(
            exercise_id=exercise_id, exercise_name=exercise_name, reps=reps, weight=weight
        )
        self._pending[key] = write

        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        self._timers[key] = asyncio.get_running_loop().create_task(self._fire(key))
        return write

    async def _fire(self, key: SetKey) -> None:
        await asyncio.sleep(self.delay)
        self._timers.pop(key, None)
        write = self._pending.pop(key, None)
        if write is not None:
            await self._deliver(write)

    async def _deliver(self, write: PendingSetWrite) -> None:
        try:
            await self.send(write)
        except Exception as e:
            logger.warning("Set write failed: order=%s set=%s: %s", write.order_index, write.set_number, e)
            self.failed[write.key] = (write, e)
            if self.on_error is not None:
                self.on_error(write, e)
            return
        self.failed.pop(write.key, None)

    def _cancel_timers(self) -> list[asyncio.Task]:
        timers = list(self._timers.values())
        self._timers.clear()
        for timer in timers:
            timer.cancel()
        return timers

    async def flush(self) -> None:
        """Send every buffered write now, in (order_index, set_number) order."""
        self._cancel_timers()
        writes = [self._pending.pop(key) for key in sorted(self._pending)]
        for write in writes:
            await self._deliver(write)

    async def close(self) -> None:
        """Cancel armed timers and drop unsent edits."""
        timers = self._cancel_timers()
        self._pending.clear()
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
