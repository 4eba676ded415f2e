"""Workout session request and response schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import SessionStatus


class StartWorkoutRequest(BaseModel):
    program_id: str = Field(min_length=1, max_length=64)
    day_id: UUID
    program_instance_id: UUID | None = None


class StartWorkoutResponse(BaseModel):
    id: UUID


class SetUpsertRequest(BaseModel):
    workout_id: UUID
    order_index: int = Field(ge=0)
    exercise_id: str = Field(min_length=1, max_length=64)
    exercise_name: str = Field(min_length=1, max_length=255)
    set_number: int = Field(ge=1)
    reps: int = Field(ge=0)
    weight: float = Field(ge=0)


class SwapExerciseRequest(BaseModel):
    order_index: int = Field(ge=0)
    new_exercise_id: str = Field(min_length=1, max_length=64)
    new_exercise_name: str = Field(min_length=1, max_length=255)


class CompleteWorkoutRequest(BaseModel):
    """Body of PATCH /workouts/{id}. Omitted duration is computed server-side."""

    duration_seconds: int | None = Field(default=None, ge=0)
    rating: int | None = Field(default=None, ge=1, le=5)


class RateRequest(BaseModel):
    rating: int = Field(ge=1, le=5)


class SuccessResponse(BaseModel):
    success: bool = True


class ResumeResponse(BaseModel):
    accumulated_pause_seconds: int


class ResetResponse(SuccessResponse):
    program_id: str
    day_id: UUID


class SessionSummary(BaseModel):
    """Session row as shown in the live view."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    program_id: str
    day_id: UUID
    program_instance_id: UUID | None = None
    program_name: str
    day_title: str
    status: SessionStatus
    started_at: datetime
    completed_at: datetime | None = None
    last_paused_at: datetime | None = None
    accumulated_pause_seconds: int = 0
    duration_seconds: int | None = None
    rating: int | None = None
    elapsed_seconds: int = 0


class SessionExercise(BaseModel):
    order_index: int
    id: str
    name: str
    target_sets: int
    target_reps: str
    rest_seconds: int
    video_url: str | None = None
    thumbnail_url: str | None = None
    muscle_group_id: str | None = None
    swapped: bool = False


class SessionSet(BaseModel):
    exercise_id: str
    order_index: int
    set_number: int
    reps: int
    weight: float


class SessionView(BaseModel):
    """Everything the live workout screen needs, built without touching set_records."""

    workout: SessionSummary
    exercises: list[SessionExercise] = []
    sets: list[SessionSet] = []


class StartAndViewResponse(BaseModel):
    id: UUID
    session: SessionView
