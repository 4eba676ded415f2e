"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.exercise import Exercise
from app.models.muscle_group import MuscleGroup
from app.models.program import DayExercise, Program, ProgramWeek, WorkoutDay
from app.models.workout import ExercisePerformance, SetRecord, WorkoutSession

__all__ = [
    "DayExercise",
    "Exercise",
    "ExercisePerformance",
    "MuscleGroup",
    "Program",
    "ProgramWeek",
    "SetRecord",
    "WorkoutDay",
    "WorkoutSession",
]
