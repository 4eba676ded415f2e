import pytest
from sqlalchemy import func, select

from app.core.exceptions import NotFoundOrUnauthorized, ValidationError
from app.models.workout import SetRecord
from app.services.engine import WorkoutEngine
from app.services.session_access import get_owned_session, get_performance_at
from tests.conftest import DAY_ID, OTHER_USER, PROGRAM_ID, USER


@pytest.fixture
def engine(db, catalog, clock):
    return WorkoutEngine(db, catalog, clock=clock)


@pytest.fixture
async def session_id(engine):
    return await engine.start(USER, PROGRAM_ID, DAY_ID)


async def test_swap_without_sets_changes_display_only(engine, session_id, clock):
    await engine.swap_exercise(session_id, 1, "incline-db-press", "Incline DB Press", USER)

    view = await engine.get_view(session_id, USER)
    swapped = view.exercises[1]
    assert (swapped.id, swapped.name, swapped.swapped) == ("incline-db-press", "Incline DB Press", True)
    assert (swapped.target_reps, swapped.rest_seconds) == ("8-10", 90)
    assert [e.swapped for e in view.exercises] == [False, True, False]
    assert (await engine.db.execute(select(func.count()).select_from(SetRecord))).scalar_one() == 0

    perf = await get_performance_at(engine.db, session_id, 1)
    assert perf.sets_snapshot == []

    ws = await get_owned_session(engine.db, session_id, USER)
    entry = ws.plan_snapshot[1]
    assert entry["kind"] == "overridden"
    assert entry["exercise"]["id"] == "incline-db-press"
    assert entry["original"]["id"] == "overhead-press"
    assert entry["superseded_at"] == clock.now.isoformat()


async def test_swap_twice_keeps_first_original(engine, session_id):
    await engine.swap_exercise(session_id, 1, "incline-db-press", "Incline DB Press", USER)
    await engine.swap_exercise(session_id, 1, "dips", "Dips", USER)

    ws = await get_owned_session(engine.db, session_id, USER)
    entry = ws.plan_snapshot[1]
    assert entry["exercise"]["id"] == "dips"
    assert entry["original"]["id"] == "overhead-press"


async def test_swap_back_to_original_is_not_flagged(engine, session_id):
    await engine.swap_exercise(session_id, 1, "incline-db-press", "Incline DB Press", USER)
    await engine.swap_exercise(session_id, 1, "overhead-press", "Overhead Press", USER)
    view = await engine.get_view(session_id, USER)
    assert view.exercises[1].swapped is False


async def test_swap_after_logged_sets_relabels_them(engine, session_id):
    await engine.upsert_set(session_id, 0, "bench-press", "Bench Press", 1, 8, 80, USER)
    await engine.upsert_set(session_id, 0, "bench-press", "Bench Press", 2, 8, 80, USER)
    await engine.swap_exercise(session_id, 0, "incline-db-press", "Incline DB Press", USER)

    view = await engine.get_view(session_id, USER)
    assert view.exercises[0].id == "incline-db-press"
    assert [(s.exercise_id, s.set_number) for s in view.sets] == [
        ("incline-db-press", 1),
        ("incline-db-press", 2),
    ]
    perf = await get_performance_at(engine.db, session_id, 0)
    assert (perf.target_sets, perf.target_reps) == (3, "8-10")


async def test_swap_out_of_range_index(engine, session_id):
    with pytest.raises(ValidationError):
        await engine.swap_exercise(session_id, 3, "incline-db-press", "Incline DB Press", USER)


async def test_swap_unknown_exercise(engine, session_id):
    with pytest.raises(NotFoundOrUnauthorized):
        await engine.swap_exercise(session_id, 0, "no-such-lift", "Nope", USER)
    ws = await get_owned_session(engine.db, session_id, USER)
    assert {e["kind"] for e in ws.plan_snapshot} == {"original"}


async def test_swap_on_foreign_session(engine, session_id):
    with pytest.raises(NotFoundOrUnauthorized):
        await engine.swap_exercise(session_id, 0, "incline-db-press", "Incline DB Press", OTHER_USER)
