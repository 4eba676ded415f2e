"""Workout session, exercise performance and set record models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.enums import SessionStatus
from app.db.base import Base

# Plain JSON everywhere, JSONB on PostgreSQL
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkoutSession(Base):
    """One workout attempt of one user for one program day.

    Carries a denormalized plan snapshot (program name, day title, ordered
    exercise entries) captured at start so the live view never touches the
    catalog again.
    """

    __tablename__ = "workout_sessions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "program_id", "day_id", "program_instance_id", name="uniq_workout_session_day"
        ),
        Index(
            "ix_workout_sessions_start_lookup",
            "user_id",
            "program_id",
            "day_id",
            "program_instance_id",
            "started_at",
        ),
        Index("ix_workout_sessions_user_completed", "user_id", "completed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    program_id: Mapped[str] = mapped_column(String(64), nullable=False)
    day_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    program_instance_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SessionStatus.ACTIVE,
    )
    last_paused_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    accumulated_pause_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)  # set on completion
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5, after completion
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    # Denormalized plan snapshot
    program_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    day_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    plan_snapshot: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    performances: Mapped[list["ExercisePerformance"]] = relationship(
        "ExercisePerformance",
        back_populates="session",
        order_by="ExercisePerformance.order_index",
        passive_deletes=True,
    )


class ExercisePerformance(Base):
    """One exercise slot actually performed in a session, addressed by order index.

    ``sets_snapshot`` is a cache derived from ``set_records``; it is rebuilt
    from scratch after every ledger write and stamped with a version and a
    checksum.
    """

    __tablename__ = "exercise_performances"
    __table_args__ = (
        UniqueConstraint("session_id", "order_index", name="uniq_performance_order"),
        Index("ix_exercise_performances_exercise_id", "exercise_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    exercise_id: Mapped[str] = mapped_column(String(64), nullable=False)
    exercise_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Denormalized from the catalog at creation / swap time
    target_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_reps: Mapped[str | None] = mapped_column(String(20), nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    muscle_group_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    sets_snapshot: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    sets_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sets_checksum: Mapped[str | None] = mapped_column(String(64), nullable=True)

    session: Mapped["WorkoutSession"] = relationship("WorkoutSession", back_populates="performances")
    sets: Mapped[list["SetRecord"]] = relationship(
        "SetRecord",
        back_populates="performance",
        order_by="SetRecord.set_number",
        passive_deletes=True,
    )


class SetRecord(Base):
    """Authoritative record of one logged set. (performance_id, set_number) is the upsert key."""

    __tablename__ = "set_records"
    __table_args__ = (
        UniqueConstraint("performance_id", "set_number", name="uniq_set_record"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    performance_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exercise_performances.id", ondelete="CASCADE"), nullable=False
    )
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    performance: Mapped["ExercisePerformance"] = relationship("ExercisePerformance", back_populates="sets")
