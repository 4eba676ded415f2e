import asyncio

import pytest

from app.services.debounce import PendingSetWrite, SetWriteDebouncer


class Recorder:
    def __init__(self, fail: bool = False):
        self.sent: list[PendingSetWrite] = []
        self.fail = fail

    async def __call__(self, write: PendingSetWrite) -> None:
        if self.fail:
            raise RuntimeError("network down")
        self.sent.append(write)


def test_delay_must_stay_in_window():
    with pytest.raises(ValueError):
        SetWriteDebouncer(Recorder(), delay=0.1)
    with pytest.raises(ValueError):
        SetWriteDebouncer(Recorder(), delay=2.0)


def test_default_delay_comes_from_settings():
    assert SetWriteDebouncer(Recorder()).delay == 0.6


async def test_rapid_edits_send_only_the_latest_value():
    send = Recorder()
    debouncer = SetWriteDebouncer(send, delay=0.5)
    for weight in (1, 10, 100):
        debouncer.submit(0, 1, exercise_id="bench-press", reps=8, weight=weight)
        await asyncio.sleep(0.05)
    assert send.sent == []

    await asyncio.sleep(0.7)
    assert len(send.sent) == 1
    assert send.sent[0].weight == 100
    assert debouncer.pending == {}
    await debouncer.close()


async def test_edits_merge_per_set():
    send = Recorder()
    debouncer = SetWriteDebouncer(send, delay=0.5)
    debouncer.submit(0, 1, exercise_id="bench-press", exercise_name="Bench Press", reps=8)
    debouncer.submit(0, 1, weight=80)
    debouncer.submit(1, 1, exercise_id="dips", reps=12, weight=0)

    await debouncer.flush()
    assert [(w.order_index, w.set_number, w.reps, w.weight) for w in send.sent] == [
        (0, 1, 8, 80),
        (1, 1, 12, 0),
    ]
    assert send.sent[0].exercise_name == "Bench Press"


async def test_failures_are_surfaced_not_retried():
    errors = []
    send = Recorder(fail=True)
    debouncer = SetWriteDebouncer(send, delay=0.5, on_error=lambda w, e: errors.append((w.key, str(e))))
    debouncer.submit(0, 2, exercise_id="bench-press", reps=5, weight=90)
    await debouncer.flush()

    assert errors == [((0, 2), "network down")]
    assert (0, 2) in debouncer.failed

    send.fail = False
    debouncer.submit(0, 2, reps=6)
    await debouncer.flush()
    assert debouncer.failed == {}
    assert send.sent[0].reps == 6


async def test_close_drops_pending_writes():
    send = Recorder()
    debouncer = SetWriteDebouncer(send, delay=0.5)
    debouncer.submit(0, 1, reps=8)
    await debouncer.close()
    await asyncio.sleep(0.6)
    assert send.sent == []
    assert debouncer.pending == {}
