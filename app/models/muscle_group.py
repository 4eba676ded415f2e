"""Muscle group model - catalog grouping for exercises."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class MuscleGroup(Base):
    """Catalog muscle group (e.g. Chest, Quads). Exercises point at one group."""

    __tablename__ = "muscle_groups"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    exercises: Mapped[list["Exercise"]] = relationship("Exercise", back_populates="muscle_group")
