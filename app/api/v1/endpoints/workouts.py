"""Workout session endpoints: lifecycle, set logging, swaps, live view and history."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_current_user_id, get_engine, get_history
from app.core.constants import DEFAULT_HISTORY_LIMIT
from app.schemas.history import (
    CompletedDaysResponse,
    CompletedSummary,
    HistoryItem,
    InProgressSession,
    WorkoutDetail,
)
from app.schemas.workout import (
    CompleteWorkoutRequest,
    RateRequest,
    ResetResponse,
    ResumeResponse,
    SessionView,
    SetUpsertRequest,
    StartAndViewResponse,
    StartWorkoutRequest,
    StartWorkoutResponse,
    SuccessResponse,
    SwapExerciseRequest,
)
from app.services.engine import WorkoutEngine
from app.services.history import HistoryService

router = APIRouter()


# Static paths first so they are not captured by /{workout_id}


@router.get("", response_model=list[HistoryItem])
async def list_workouts(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    """Completed workouts, newest first."""
    return await history.list_history(user_id, limit=limit)


@router.post("", response_model=StartWorkoutResponse, status_code=201)
async def start_workout(
    payload: StartWorkoutRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    """Start a workout for a program day (201), or return the existing one for the same day (200)."""
    session_id, created = await engine.ensure_started(
        user_id, payload.program_id, payload.day_id, payload.program_instance_id
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return StartWorkoutResponse(id=session_id)


@router.post("/session", response_model=StartAndViewResponse, status_code=201)
async def start_workout_with_view(
    payload: StartWorkoutRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    """Start (201) or reuse (200) a workout and return its live view in the same request."""
    session_id, view, created = await engine.start_and_view(
        user_id, payload.program_id, payload.day_id, payload.program_instance_id
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return StartAndViewResponse(id=session_id, session=view)


@router.post("/sets", response_model=SuccessResponse)
async def upsert_set(
    payload: SetUpsertRequest,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    """Insert or overwrite one set; repeating the same write is harmless."""
    await engine.upsert_set(
        payload.workout_id,
        payload.order_index,
        payload.exercise_id,
        payload.exercise_name,
        payload.set_number,
        payload.reps,
        payload.weight,
        user_id,
    )
    return SuccessResponse()


@router.get("/in-progress", response_model=InProgressSession | None)
async def get_in_progress(
    program_id: str,
    day_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    return await history.most_recent_in_progress(user_id, program_id, day_id)


@router.get("/completed-days", response_model=CompletedDaysResponse)
async def get_completed_days(
    program_id: str,
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    day_ids = await history.completed_day_ids(user_id, program_id)
    return CompletedDaysResponse(program_id=program_id, day_ids=sorted(day_ids, key=str))


@router.get("/completed", response_model=CompletedSummary | None)
async def get_completed_summary(
    program_id: str,
    day_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    """Latest completed workout for a day, exercises without logged reps left out."""
    return await history.completed_summary(user_id, program_id, day_id)


@router.get("/{workout_id}/session", response_model=SessionView)
async def get_session_view(
    workout_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    return await engine.get_view(workout_id, user_id)


@router.post("/{workout_id}/pause", response_model=SuccessResponse)
async def pause_workout(
    workout_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    await engine.pause(workout_id, user_id)
    return SuccessResponse()


@router.post("/{workout_id}/resume", response_model=ResumeResponse)
async def resume_workout(
    workout_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    accumulated = await engine.resume(workout_id, user_id)
    return ResumeResponse(accumulated_pause_seconds=accumulated)


@router.post("/{workout_id}/swap", response_model=SuccessResponse)
async def swap_exercise(
    workout_id: uuid.UUID,
    payload: SwapExerciseRequest,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    await engine.swap_exercise(
        workout_id,
        payload.order_index,
        payload.new_exercise_id,
        payload.new_exercise_name,
        user_id,
    )
    return SuccessResponse()


@router.patch("/{workout_id}", response_model=SuccessResponse)
async def complete_workout(
    workout_id: uuid.UUID,
    payload: CompleteWorkoutRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    """Mark the workout completed. Duration defaults to the server-side elapsed time."""
    payload = payload or CompleteWorkoutRequest()
    await engine.complete(workout_id, user_id, payload.duration_seconds, payload.rating)
    return SuccessResponse()


@router.post("/{workout_id}/rate", response_model=SuccessResponse)
async def rate_workout(
    workout_id: uuid.UUID,
    payload: RateRequest,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    await engine.rate(workout_id, user_id, payload.rating)
    return SuccessResponse()


@router.post("/{workout_id}/reset", response_model=ResetResponse)
async def reset_workout(
    workout_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    """Clear logged sets and restart the timer, keeping the planned exercises."""
    program_id, day_id = await engine.reset(workout_id, user_id)
    return ResetResponse(program_id=program_id, day_id=day_id)


@router.get("/{workout_id}", response_model=WorkoutDetail)
async def get_workout(
    workout_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    """Full workout with sets read from the set ledger."""
    return await history.get_detail(workout_id, user_id)


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    engine: WorkoutEngine = Depends(get_engine),
):
    """Delete a workout with all of its exercises and sets."""
    await engine.delete(workout_id, user_id)
    return None
