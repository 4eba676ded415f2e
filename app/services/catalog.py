"""Catalog lookups used by the session engine.

The engine only needs two questions answered: "what is the plan for this
program day right now" (at session start) and "what does this exercise look
like right now" (at set-write and swap time). ``CatalogService`` is that
boundary; ``SqlCatalog`` answers it from the program/exercise tables.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import DEFAULT_REST_SECONDS, DEFAULT_TARGET_REPS, DEFAULT_TARGET_SETS
from app.models.exercise import Exercise
from app.models.program import DayExercise, ProgramWeek, WorkoutDay


def _or_default(value, default):
    # Only a missing value falls back; 0 rest seconds is a real target
    return default if value is None else value


@dataclass(frozen=True, slots=True)
class ExerciseDescriptor:
    """Exercise as shown in a session: identity, targets and media references."""

    id: str
    name: str
    target_sets: int = DEFAULT_TARGET_SETS
    target_reps: str = DEFAULT_TARGET_REPS
    rest_seconds: int = DEFAULT_REST_SECONDS
    video_url: str | None = None
    thumbnail_url: str | None = None
    muscle_group_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExerciseDescriptor":
        return cls(
            id=data["id"],
            name=data["name"],
            target_sets=_or_default(data.get("target_sets"), DEFAULT_TARGET_SETS),
            target_reps=_or_default(data.get("target_reps"), DEFAULT_TARGET_REPS),
            rest_seconds=_or_default(data.get("rest_seconds"), DEFAULT_REST_SECONDS),
            video_url=data.get("video_url"),
            thumbnail_url=data.get("thumbnail_url"),
            muscle_group_id=data.get("muscle_group_id"),
        )

    def renamed(self, name: str) -> "ExerciseDescriptor":
        return ExerciseDescriptor(**{**self.to_dict(), "name": name})


@dataclass(frozen=True, slots=True)
class DayPlan:
    program_name: str
    day_title: str
    exercises: list[ExerciseDescriptor] = field(default_factory=list)


class CatalogService(Protocol):
    async def get_day_plan(self, program_id: str, day_id: uuid.UUID) -> DayPlan | None: ...

    async def get_exercise(self, exercise_id: str) -> ExerciseDescriptor | None: ...


def descriptor_from_exercise(exercise: Exercise) -> ExerciseDescriptor:
    return ExerciseDescriptor(
        id=exercise.id,
        name=exercise.name,
        target_sets=_or_default(exercise.target_sets, DEFAULT_TARGET_SETS),
        target_reps=_or_default(exercise.target_reps, DEFAULT_TARGET_REPS),
        rest_seconds=_or_default(exercise.rest_seconds, DEFAULT_REST_SECONDS),
        video_url=exercise.video_url,
        thumbnail_url=exercise.thumbnail_url,
        muscle_group_id=exercise.muscle_group_id,
    )


class SqlCatalog:
    """CatalogService backed by the programs/exercises tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_day_plan(self, program_id: str, day_id: uuid.UUID) -> DayPlan | None:
        result = await self.db.execute(
            select(WorkoutDay)
            .where(WorkoutDay.id == day_id)
            .options(
                selectinload(WorkoutDay.week).selectinload(ProgramWeek.program),
                selectinload(WorkoutDay.exercises).selectinload(DayExercise.exercise),
            )
        )
        day = result.scalar_one_or_none()
        if day is None or day.week is None or day.week.program is None:
            return None
        if day.week.program_id != program_id:
            return None
        ordered = sorted(day.exercises, key=lambda de: de.exercise_order)
        return DayPlan(
            program_name=day.week.program.name,
            day_title=day.title,
            exercises=[descriptor_from_exercise(de.exercise) for de in ordered],
        )

    async def get_exercise(self, exercise_id: str) -> ExerciseDescriptor | None:
        exercise = await self.db.get(Exercise, exercise_id)
        if exercise is None:
            return None
        return descriptor_from_exercise(exercise)


class InMemoryCatalog:
    """Dict-backed CatalogService for tests and local tooling."""

    def __init__(
        self,
        exercises: dict[str, ExerciseDescriptor] | None = None,
        days: dict[tuple[str, uuid.UUID], DayPlan] | None = None,
    ):
        self.exercises = dict(exercises or {})
        self.days = dict(days or {})

    def add_exercise(self, descriptor: ExerciseDescriptor) -> None:
        self.exercises[descriptor.id] = descriptor

    def add_day(self, program_id: str, day_id: uuid.UUID, plan: DayPlan) -> None:
        self.days[(program_id, day_id)] = plan
        for descriptor in plan.exercises:
            self.exercises.setdefault(descriptor.id, descriptor)

    async def get_day_plan(self, program_id: str, day_id: uuid.UUID) -> DayPlan | None:
        return self.days.get((program_id, day_id))

    async def get_exercise(self, exercise_id: str) -> ExerciseDescriptor | None:
        return self.exercises.get(exercise_id)
