"""Shared enums for models and API."""

from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle state of a workout session."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class PlanEntryKind(str, Enum):
    """Tag of a plan snapshot slot."""

    ORIGINAL = "original"  # as captured at start
    OVERRIDDEN = "overridden"  # replaced by an exercise swap
