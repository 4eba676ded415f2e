"""Program structure - program > weeks > days > ordered exercises."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Program(Base):
    """A multi-week training program."""

    __tablename__ = "programs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    days_per_week: Mapped[int] = mapped_column(Integer, nullable=False)

    weeks: Mapped[list["ProgramWeek"]] = relationship(
        "ProgramWeek",
        back_populates="program",
        cascade="all, delete-orphan",
        order_by="ProgramWeek.week_number",
    )


class ProgramWeek(Base):
    __tablename__ = "program_weeks"
    __table_args__ = (UniqueConstraint("program_id", "week_number", name="uniq_program_week"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    program_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)

    program: Mapped["Program"] = relationship("Program", back_populates="weeks")
    days: Mapped[list["WorkoutDay"]] = relationship(
        "WorkoutDay",
        back_populates="week",
        cascade="all, delete-orphan",
        order_by="WorkoutDay.day_order",
    )


class WorkoutDay(Base):
    """One day of a program week (title + ordered exercises)."""

    __tablename__ = "workout_days"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    week_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("program_weeks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    day_order: Mapped[int] = mapped_column(Integer, nullable=False)

    week: Mapped["ProgramWeek"] = relationship("ProgramWeek", back_populates="days")
    exercises: Mapped[list["DayExercise"]] = relationship(
        "DayExercise",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="DayExercise.exercise_order",
    )


class DayExercise(Base):
    """Exercise slot in a day (order only; sets are logged during the live session)."""

    __tablename__ = "day_exercises"
    __table_args__ = (Index("ix_day_exercises_day_order", "day_id", "exercise_order"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    day_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workout_days.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    exercise_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    day: Mapped["WorkoutDay"] = relationship("WorkoutDay", back_populates="exercises")
    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="day_entries")
