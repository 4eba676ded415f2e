"""Catalog tables and the workout session engine schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
session_status = sa.Enum("active", "paused", "completed", name="session_status")


def upgrade() -> None:
    # Catalog
    op.create_table(
        "muscle_groups",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("cover_image", sa.String(length=500), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_muscle_groups_name"), "muscle_groups", ["name"], unique=True)

    op.create_table(
        "exercises",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("muscle_group_id", sa.String(length=64), nullable=True),
        sa.Column("video_url", sa.String(length=500), nullable=True),
        sa.Column("thumbnail_url", sa.String(length=500), nullable=True),
        sa.Column("target_sets", sa.Integer(), nullable=True),
        sa.Column("target_reps", sa.String(length=20), nullable=True),
        sa.Column("rest_seconds", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["muscle_group_id"], ["muscle_groups.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_exercises_name"), "exercises", ["name"], unique=False)
    op.create_index(op.f("ix_exercises_muscle_group_id"), "exercises", ["muscle_group_id"], unique=False)

    op.create_table(
        "programs",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("days_per_week", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "program_weeks",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("program_id", sa.String(length=64), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("program_id", "week_number", name="uniq_program_week"),
    )
    op.create_table(
        "workout_days",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("week_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("day_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["week_id"], ["program_weeks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workout_days_week_id"), "workout_days", ["week_id"], unique=False)
    op.create_table(
        "day_exercises",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("day_id", sa.Uuid(), nullable=False),
        sa.Column("exercise_id", sa.String(length=64), nullable=False),
        sa.Column("exercise_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["day_id"], ["workout_days.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_day_exercises_day_order", "day_exercises", ["day_id", "exercise_order"], unique=False)

    # Sessions
    op.create_table(
        "workout_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("program_id", sa.String(length=64), nullable=False),
        sa.Column("day_id", sa.Uuid(), nullable=False),
        sa.Column("program_instance_id", sa.Uuid(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", session_status, nullable=False),
        sa.Column("last_paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("accumulated_pause_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("program_name", sa.String(length=255), nullable=True),
        sa.Column("day_title", sa.String(length=255), nullable=True),
        sa.Column("plan_snapshot", json_type, nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "program_id", "day_id", "program_instance_id", name="uniq_workout_session_day"
        ),
    )
    op.create_index(op.f("ix_workout_sessions_user_id"), "workout_sessions", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_workout_sessions_program_instance_id"),
        "workout_sessions",
        ["program_instance_id"],
        unique=False,
    )
    op.create_index(
        "ix_workout_sessions_start_lookup",
        "workout_sessions",
        ["user_id", "program_id", "day_id", "program_instance_id", "started_at"],
        unique=False,
    )
    op.create_index(
        "ix_workout_sessions_user_completed",
        "workout_sessions",
        ["user_id", "completed_at"],
        unique=False,
    )

    op.create_table(
        "exercise_performances",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("session_id", sa.Uuid(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("exercise_id", sa.String(length=64), nullable=False),
        sa.Column("exercise_name", sa.String(length=255), nullable=False),
        sa.Column("target_sets", sa.Integer(), nullable=True),
        sa.Column("target_reps", sa.String(length=20), nullable=True),
        sa.Column("rest_seconds", sa.Integer(), nullable=True),
        sa.Column("video_url", sa.String(length=500), nullable=True),
        sa.Column("thumbnail_url", sa.String(length=500), nullable=True),
        sa.Column("muscle_group_id", sa.String(length=64), nullable=True),
        sa.Column("sets_snapshot", json_type, nullable=False),
        sa.Column("sets_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sets_checksum", sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["workout_sessions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "order_index", name="uniq_performance_order"),
    )
    op.create_index(
        "ix_exercise_performances_exercise_id", "exercise_performances", ["exercise_id"], unique=False
    )

    op.create_table(
        "set_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("performance_id", sa.Uuid(), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=False),
        sa.Column("weight", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["performance_id"], ["exercise_performances.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("performance_id", "set_number", name="uniq_set_record"),
    )


def downgrade() -> None:
    op.drop_table("set_records")
    op.drop_index("ix_exercise_performances_exercise_id", table_name="exercise_performances")
    op.drop_table("exercise_performances")
    op.drop_index("ix_workout_sessions_user_completed", table_name="workout_sessions")
    op.drop_index("ix_workout_sessions_start_lookup", table_name="workout_sessions")
    op.drop_index(op.f("ix_workout_sessions_program_instance_id"), table_name="workout_sessions")
    op.drop_index(op.f("ix_workout_sessions_user_id"), table_name="workout_sessions")
    op.drop_table("workout_sessions")
    session_status.drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_day_exercises_day_order", table_name="day_exercises")
    op.drop_table("day_exercises")
    op.drop_index(op.f("ix_workout_days_week_id"), table_name="workout_days")
    op.drop_table("workout_days")
    op.drop_table("program_weeks")
    op.drop_table("programs")
    op.drop_index(op.f("ix_exercises_muscle_group_id"), table_name="exercises")
    op.drop_index(op.f("ix_exercises_name"), table_name="exercises")
    op.drop_table("exercises")
    op.drop_index(op.f("ix_muscle_groups_name"), table_name="muscle_groups")
    op.drop_table("muscle_groups")
