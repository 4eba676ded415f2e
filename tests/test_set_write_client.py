import json
import uuid

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.security import create_access_token
from app.db.session import get_db
from app.main import app
from app.services.debounce import PendingSetWrite
from app.services.set_write_client import IncompleteSetWrite, WorkoutClient, set_write_payload
from tests.conftest import create_schema
from tests.test_api_workouts import DAY_ID, PROGRAM_ID, seed_catalog

WORKOUT_ID = uuid.UUID("55555555-5555-4555-8555-555555555555")


class Capture:
    def __init__(self, status_code: int = 200):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"success": self.status_code == 200})


def test_payload_requires_exercise_reps_and_weight():
    with pytest.raises(IncompleteSetWrite):
        set_write_payload(WORKOUT_ID, PendingSetWrite(0, 1, exercise_id="bench-press", reps=8))

    payload = set_write_payload(WORKOUT_ID, PendingSetWrite(0, 1, exercise_id="bench-press", reps=8, weight=0))
    assert payload["workout_id"] == str(WORKOUT_ID)
    assert payload["exercise_name"] == "bench-press"
    assert payload["weight"] == 0


async def test_writer_posts_latest_value_with_bearer_token():
    capture = Capture()
    async with WorkoutClient("http://api.test", "tok", transport=httpx.MockTransport(capture)) as client:
        writer = client.set_writer(WORKOUT_ID, delay=0.5)
        writer.submit(0, 1, exercise_id="bench-press", exercise_name="Bench Press", reps=8, weight=60)
        writer.submit(0, 1, weight=62.5)
        await writer.flush()

    assert len(capture.requests) == 1
    request = capture.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v1/workouts/sets"
    assert request.headers["Authorization"] == "Bearer tok"
    body = json.loads(request.content)
    assert (body["order_index"], body["set_number"], body["reps"], body["weight"]) == (0, 1, 8, 62.5)


async def test_rejected_write_is_surfaced():
    errors = []
    capture = Capture(status_code=404)
    async with WorkoutClient("http://api.test", "tok", transport=httpx.MockTransport(capture)) as client:
        writer = client.set_writer(WORKOUT_ID, delay=0.5, on_error=lambda w, e: errors.append((w.key, e)))
        writer.submit(1, 2, exercise_id="dips", reps=12, weight=0)
        await writer.flush()

    assert [key for key, _ in errors] == [(1, 2)]
    assert isinstance(errors[0][1], httpx.HTTPStatusError)
    assert (1, 2) in writer.failed


@pytest.fixture
def served_db(tmp_path):
    path = tmp_path / "client.db"
    url = create_schema(path)
    seed_catalog(path)
    engine = create_async_engine(url, poolclass=NullPool)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async def override_get_db():
        async with maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.pop(get_db, None)


async def test_writer_against_the_app(served_db):
    token = create_access_token("athlete-1")
    transport = httpx.ASGITransport(app=app)
    async with WorkoutClient("http://testserver", token, transport=transport) as client:
        r = await client.http.post("/api/v1/workouts", json={"program_id": PROGRAM_ID, "day_id": str(DAY_ID)})
        assert r.status_code == 201
        workout_id = uuid.UUID(r.json()["id"])

        writer = client.set_writer(workout_id, delay=0.5)
        for weight in (6, 60):
            writer.submit(0, 1, exercise_id="bench-press", exercise_name="Bench Press", reps=8, weight=weight)
        writer.submit(0, 2, exercise_id="bench-press", exercise_name="Bench Press", reps=7, weight=60)
        await writer.flush()
        assert writer.failed == {}

        view = (await client.http.get(f"/api/v1/workouts/{workout_id}/session")).json()

    assert [(s["set_number"], s["reps"], s["weight"]) for s in view["sets"]] == [(1, 8, 60.0), (2, 7, 60.0)]
