import os

# Must be set before app modules build the engine and cache settings
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401 - register all models
from app.db.base import Base
from app.services.catalog import DayPlan, ExerciseDescriptor, InMemoryCatalog

PROGRAM_ID = "push-pull-legs"
DAY_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
OTHER_DAY_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")
USER = "user-1"
OTHER_USER = "user-2"

BENCH = ExerciseDescriptor(id="bench-press", name="Bench Press", target_sets=4, target_reps="6-8", rest_seconds=120)
OHP = ExerciseDescriptor(id="overhead-press", name="Overhead Press")
DIPS = ExerciseDescriptor(id="dips", name="Dips", target_reps="10-15", rest_seconds=60)
INCLINE = ExerciseDescriptor(
    id="incline-db-press", name="Incline Dumbbell Press", target_sets=3, target_reps="8-10", rest_seconds=90
)


class FakeClock:
    """Callable clock the tests move by hand."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog() -> InMemoryCatalog:
    cat = InMemoryCatalog()
    cat.add_day(PROGRAM_ID, DAY_ID, DayPlan(program_name="Push Pull Legs", day_title="Push A", exercises=[BENCH, OHP, DIPS]))
    cat.add_day(PROGRAM_ID, OTHER_DAY_ID, DayPlan(program_name="Push Pull Legs", day_title="Push B", exercises=[OHP]))
    cat.add_exercise(INCLINE)
    return cat


def create_schema(path) -> str:
    """Create all tables in a file database; returns the async URL for it."""
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def db_url(tmp_path) -> str:
    return create_schema(tmp_path / "test.db")


@pytest.fixture
async def db(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with maker() as session:
        yield session
    await engine.dispose()
