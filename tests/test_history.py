import pytest

from app.core.exceptions import NotFoundOrUnauthorized
from app.services.engine import WorkoutEngine
from app.services.history import HistoryService
from tests.conftest import DAY_ID, OTHER_DAY_ID, OTHER_USER, PROGRAM_ID, USER


@pytest.fixture
def engine(db, catalog, clock):
    return WorkoutEngine(db, catalog, clock=clock)


@pytest.fixture
def history(db):
    return HistoryService(db)


async def finished_push_day(engine, clock, bench_weight=80):
    session_id = await engine.start(USER, PROGRAM_ID, DAY_ID)
    await engine.upsert_set(session_id, 0, "bench-press", "Bench Press", 1, 8, bench_weight, USER)
    await engine.upsert_set(session_id, 0, "bench-press", "Bench Press", 2, 7, bench_weight, USER)
    await engine.upsert_set(session_id, 2, "dips", "Dips", 1, 0, 0, USER)
    clock.advance(1800)
    await engine.complete(session_id, USER, rating=4)
    return session_id


async def test_list_history_only_completed_newest_first(engine, history, clock):
    first = await finished_push_day(engine, clock)
    clock.advance(3600)
    second = await engine.start(USER, PROGRAM_ID, OTHER_DAY_ID)
    clock.advance(600)
    await engine.complete(second, USER)
    await engine.start(OTHER_USER, PROGRAM_ID, DAY_ID)

    items = await history.list_history(USER)
    assert [i.id for i in items] == [second, first]
    assert items[1].exercise_count == 2
    assert items[1].duration_seconds == 1800
    assert items[1].rating == 4
    assert await history.list_history(USER, limit=1) == items[:1]


async def test_detail_reads_sets_from_the_ledger(engine, history, clock):
    session_id = await finished_push_day(engine, clock)
    detail = await history.get_detail(session_id, USER)

    assert detail.day_title == "Push A"
    assert [e.exercise_id for e in detail.exercises] == ["bench-press", "dips"]
    bench = detail.exercises[0]
    assert [(s.set_number, s.reps, s.weight) for s in bench.sets] == [(1, 8, 80.0), (2, 7, 80.0)]

    with pytest.raises(NotFoundOrUnauthorized):
        await history.get_detail(session_id, OTHER_USER)


async def test_exercise_history_groups_per_session(engine, history, clock):
    first = await finished_push_day(engine, clock, bench_weight=80)
    clock.advance(86400)
    await engine.reset(first, USER)
    second = await finished_push_day(engine, clock, bench_weight=85)
    assert second == first

    result = await history.exercise_history(USER, "bench-press")
    assert result.exercise_id == "bench-press"
    assert len(result.sessions) == 1
    assert [s.weight for s in result.sessions[0].sets] == [85.0, 85.0]


async def test_exercise_history_ignores_unfinished_and_foreign_sessions(engine, history):
    session_id = await engine.start(USER, PROGRAM_ID, DAY_ID)
    await engine.upsert_set(session_id, 0, "bench-press", "Bench Press", 1, 8, 80, USER)
    assert (await history.exercise_history(USER, "bench-press")).sessions == []
    assert (await history.exercise_history(OTHER_USER, "bench-press")).sessions == []


async def test_last_lifts_per_exercise(engine, history, clock):
    await finished_push_day(engine, clock)
    lifts = await history.last_lifts(USER, ["bench-press", "overhead-press"])
    assert set(lifts) == {"bench-press", "overhead-press"}
    assert len(lifts["bench-press"]) == 1
    assert [s.reps for s in lifts["bench-press"][0].sets] == [8, 7]
    assert lifts["overhead-press"] == []


async def test_last_lifts_counts_sessions_not_performances(engine, history, clock):
    older = await engine.start(USER, PROGRAM_ID, OTHER_DAY_ID)
    await engine.upsert_set(older, 0, "bench-press", "Bench Press", 1, 10, 70, USER)
    clock.advance(1200)
    await engine.complete(older, USER)
    clock.advance(86400)

    newer = await engine.start(USER, PROGRAM_ID, DAY_ID)
    await engine.upsert_set(newer, 0, "bench-press", "Bench Press", 1, 8, 80, USER)
    await engine.upsert_set(newer, 1, "bench-press", "Bench Press", 1, 5, 90, USER)
    clock.advance(1800)
    await engine.complete(newer, USER)

    lifts = (await history.last_lifts(USER, ["bench-press"], per_exercise=2))["bench-press"]
    assert [entry.session_id for entry in lifts] == [newer, older]
    assert [(s.reps, s.weight) for s in lifts[0].sets] == [(8, 80.0), (5, 90.0)]
    assert [s.reps for s in lifts[1].sets] == [10]


async def test_completed_day_ids(engine, history, clock):
    await finished_push_day(engine, clock)
    await engine.start(USER, PROGRAM_ID, OTHER_DAY_ID)
    assert await history.completed_day_ids(USER, PROGRAM_ID) == {DAY_ID}
    assert await history.completed_day_ids(USER, "other-program") == set()


async def test_most_recent_in_progress(engine, history, clock):
    assert await history.most_recent_in_progress(USER, PROGRAM_ID, DAY_ID) is None

    session_id = await engine.start(USER, PROGRAM_ID, DAY_ID)
    in_progress = await history.most_recent_in_progress(USER, PROGRAM_ID, DAY_ID)
    assert in_progress.id == session_id
    assert in_progress.last_set_at is None

    clock.advance(120)
    await engine.upsert_set(session_id, 0, "bench-press", "Bench Press", 1, 8, 80, USER)
    in_progress = await history.most_recent_in_progress(USER, PROGRAM_ID, DAY_ID)
    assert in_progress.last_set_at is not None

    await engine.complete(session_id, USER)
    assert await history.most_recent_in_progress(USER, PROGRAM_ID, DAY_ID) is None


async def test_completed_summary_skips_exercises_without_reps(engine, history, clock):
    assert await history.completed_summary(USER, PROGRAM_ID, DAY_ID) is None
    session_id = await finished_push_day(engine, clock)

    summary = await history.completed_summary(USER, PROGRAM_ID, DAY_ID)
    assert summary.id == session_id
    assert summary.rating == 4
    assert [e.exercise_id for e in summary.exercises] == ["bench-press"]
