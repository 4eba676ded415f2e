"""Domain errors raised by the workout session engine.

Every engine operation raises one of these synchronously; the API layer maps
them to HTTP responses via the handler registered in ``app.main``.
"""

from __future__ import annotations


class WorkoutError(Exception):
    """Base class. ``status_code`` and ``code`` drive the HTTP mapping."""

    status_code: int = 500
    code: str = "workout_error"

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class NotFoundOrUnauthorized(WorkoutError):
    """Workout not found or unauthorized."""

    status_code = 404
    code = "not_found"


class InvalidTransition(WorkoutError):
    """Operation is not allowed in the session's current status."""

    status_code = 409
    code = "invalid_transition"


class ValidationError(WorkoutError):
    """Invalid input."""

    status_code = 422
    code = "validation_error"


class PersistenceError(WorkoutError):
    """Storage failure."""

    status_code = 500
    code = "persistence_error"


class InconsistentData(WorkoutError):
    """Workout missing denormalized data - please reset and restart workout."""

    status_code = 409
    code = "inconsistent_data"
