"""Schemas for completed-workout history and previous-session lookups."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import SessionStatus


class HistorySet(BaseModel):
    set_number: int
    reps: int
    weight: float


class HistoryExercise(BaseModel):
    order_index: int
    exercise_id: str
    exercise_name: str
    sets: list[HistorySet] = []


class HistoryItem(BaseModel):
    id: UUID
    program_id: str
    day_id: UUID
    program_name: str | None = None
    day_title: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    duration_seconds: int | None = None
    rating: int | None = None
    exercise_count: int = 0


class WorkoutDetail(HistoryItem):
    """History item with every exercise and its sets, read from the set ledger."""

    status: SessionStatus
    program_instance_id: UUID | None = None
    accumulated_pause_seconds: int = 0
    exercises: list[HistoryExercise] = []


class ExerciseSessionSets(BaseModel):
    """Sets of one exercise within one completed session."""

    session_id: UUID
    completed_at: datetime | None = None
    exercise_name: str
    sets: list[HistorySet] = []


class ExerciseHistoryResponse(BaseModel):
    exercise_id: str
    sessions: list[ExerciseSessionSets] = []


class InProgressSession(BaseModel):
    id: UUID
    program_id: str
    day_id: UUID
    program_instance_id: UUID | None = None
    status: SessionStatus
    started_at: datetime
    last_set_at: datetime | None = None


class CompletedDaysResponse(BaseModel):
    program_id: str
    day_ids: list[UUID] = []


class CompletedSummary(BaseModel):
    id: UUID
    program_id: str
    day_id: UUID
    day_title: str | None = None
    completed_at: datetime | None = None
    duration_seconds: int | None = None
    rating: int | None = None
    exercises: list[HistoryExercise] = []
