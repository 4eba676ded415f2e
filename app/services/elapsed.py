"""Elapsed workout time from stored timestamps.

Pure arithmetic, shared by the read model (every view), by ``complete`` when
the client does not send a duration, and by clients ticking a local timer:

- paused:    (last_paused_at - started_at) - accumulated_pause   (frozen)
- otherwise: (now - started_at) - accumulated_pause

Both clamp at zero and are truncated to whole seconds.
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.core.enums import SessionStatus


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_seconds(
    started_at: datetime,
    status: SessionStatus | str,
    last_paused_at: datetime | None,
    accumulated_pause_seconds: int | None,
    now: datetime,
) -> int:
    started = as_utc(started_at)
    paused_total = accumulated_pause_seconds or 0
    if SessionStatus(status) is SessionStatus.PAUSED and last_paused_at is not None:
        end = as_utc(last_paused_at)
    else:
        end = as_utc(now)
    return max(0, int((end - started).total_seconds()) - paused_total)
