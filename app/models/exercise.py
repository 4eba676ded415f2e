"""Exercise model - catalog entry with default targets and media references."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.constants import DEFAULT_REST_SECONDS, DEFAULT_TARGET_REPS, DEFAULT_TARGET_SETS
from app.db.base import Base


class Exercise(Base):
    """Exercise definition. Targets here are copied into sessions at start, set-write and swap time."""

    __tablename__ = "exercises"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    muscle_group_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("muscle_groups.id", ondelete="SET NULL"), nullable=True, index=True
    )
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    target_sets: Mapped[int | None] = mapped_column(Integer, default=DEFAULT_TARGET_SETS)
    target_reps: Mapped[str | None] = mapped_column(String(20), default=DEFAULT_TARGET_REPS)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, default=DEFAULT_REST_SECONDS)

    muscle_group: Mapped["MuscleGroup | None"] = relationship("MuscleGroup", back_populates="exercises")
    day_entries: Mapped[list["DayExercise"]] = relationship("DayExercise", back_populates="exercise")
