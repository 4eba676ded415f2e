"""Per-exercise history: what you lifted last time (progressive overload hints)."""

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user_id, get_history
from app.core.constants import DEFAULT_EXERCISE_HISTORY_LIMIT, LAST_LIFTS_PER_EXERCISE
from app.schemas.history import ExerciseHistoryResponse, ExerciseSessionSets
from app.services.history import HistoryService

router = APIRouter()


@router.get("/last-lifts", response_model=dict[str, list[ExerciseSessionSets]])
async def get_last_lifts(
    exercise_ids: list[str] = Query(..., min_length=1),
    per_exercise: int = Query(LAST_LIFTS_PER_EXERCISE, ge=1, le=20),
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    """Most recent completed performances for each requested exercise, with their sets."""
    return await history.last_lifts(user_id, exercise_ids, per_exercise=per_exercise)


@router.get("/{exercise_id}/history", response_model=ExerciseHistoryResponse)
async def get_exercise_history(
    exercise_id: str,
    limit: int = Query(DEFAULT_EXERCISE_HISTORY_LIMIT, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    history: HistoryService = Depends(get_history),
):
    return await history.exercise_history(user_id, exercise_id, limit=limit)
