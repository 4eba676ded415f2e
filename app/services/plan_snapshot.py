"""Plan snapshot: the ordered exercise slots frozen into a session at start.

Each slot is stored as a tagged entry::

    {"kind": "original",   "exercise": {...}}
    {"kind": "overridden", "exercise": {...}, "original": {...}, "superseded_at": "..."}

The only mutation after start is ``override_entry`` (exercise swap). Reads go
through ``merge_plan_with_performances`` so the "which exercise is shown at
this index" rule lives in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from app.core.enums import PlanEntryKind
from app.core.exceptions import InconsistentData
from app.models.workout import ExercisePerformance
from app.services.catalog import ExerciseDescriptor


@dataclass(frozen=True, slots=True)
class PlanEntry:
    kind: PlanEntryKind
    exercise: ExerciseDescriptor
    original: ExerciseDescriptor | None = None
    superseded_at: str | None = None

    @property
    def first_descriptor(self) -> ExerciseDescriptor:
        """The exercise that was planned before any swap."""
        return self.original or self.exercise

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "exercise": self.exercise.to_dict()}
        if self.kind is PlanEntryKind.OVERRIDDEN:
            data["original"] = self.first_descriptor.to_dict()
            data["superseded_at"] = self.superseded_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlanEntry":
        try:
            kind = PlanEntryKind(data.get("kind", PlanEntryKind.ORIGINAL.value))
            exercise = ExerciseDescriptor.from_dict(data["exercise"])
        except (KeyError, TypeError, ValueError) as e:
            raise InconsistentData(f"Unreadable plan snapshot entry: {e}") from e
        original = data.get("original")
        return cls(
            kind=kind,
            exercise=exercise,
            original=ExerciseDescriptor.from_dict(original) if original else None,
            superseded_at=data.get("superseded_at"),
        )


@dataclass(frozen=True, slots=True)
class ResolvedExercise:
    """What the session view shows at one order index."""

    order_index: int
    descriptor: ExerciseDescriptor
    swapped: bool


def freeze_plan(descriptors: Iterable[ExerciseDescriptor]) -> list[dict[str, Any]]:
    """Serialize a catalog day plan into snapshot form (all entries original)."""
    return [PlanEntry(kind=PlanEntryKind.ORIGINAL, exercise=d).to_dict() for d in descriptors]


def decode_plan(raw: list[dict[str, Any]] | None) -> list[PlanEntry]:
    if raw is None:
        raise InconsistentData()
    if not isinstance(raw, list):
        raise InconsistentData("Plan snapshot is not a list")
    return [PlanEntry.from_dict(item) for item in raw]


def override_entry(
    raw: list[dict[str, Any]],
    order_index: int,
    replacement: ExerciseDescriptor,
    at: datetime,
) -> list[dict[str, Any]]:
    """Return a new snapshot with the slot at ``order_index`` pointing at ``replacement``.

    A new list is returned so SQLAlchemy sees the JSON column as changed.
    """
    entries = decode_plan(raw)
    current = entries[order_index]
    entries[order_index] = PlanEntry(
        kind=PlanEntryKind.OVERRIDDEN,
        exercise=replacement,
        original=current.first_descriptor,
        superseded_at=at.isoformat(),
    )
    return [e.to_dict() for e in entries]


def descriptor_from_performance(perf: ExercisePerformance) -> ExerciseDescriptor:
    return ExerciseDescriptor.from_dict(
        {
            "id": perf.exercise_id,
            "name": perf.exercise_name,
            "target_sets": perf.target_sets,
            "target_reps": perf.target_reps,
            "rest_seconds": perf.rest_seconds,
            "video_url": perf.video_url,
            "thumbnail_url": perf.thumbnail_url,
            "muscle_group_id": perf.muscle_group_id,
        }
    )


def merge_plan_with_performances(
    entries: list[PlanEntry],
    performances: Iterable[ExercisePerformance],
) -> list[ResolvedExercise]:
    """Resolve every plan slot against the performance row at the same index.

    The plan's current descriptor is shown unless a performance exists at that
    index for a different exercise, in which case the performance wins.
    """
    by_index = {p.order_index: p for p in performances}
    resolved: list[ResolvedExercise] = []
    for index, entry in enumerate(entries):
        descriptor = entry.exercise
        perf = by_index.get(index)
        if perf is not None and perf.exercise_id != descriptor.id:
            descriptor = descriptor_from_performance(perf)
        swapped = descriptor.id != entry.first_descriptor.id
        resolved.append(ResolvedExercise(order_index=index, descriptor=descriptor, swapped=swapped))
    return resolved
