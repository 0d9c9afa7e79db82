"""Habit and per-day completion models."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from habitkeeper.models.base import Base

if TYPE_CHECKING:
    from habitkeeper.models.user import User


class HabitType(str, Enum):
    """Kinds of habit a user can track."""
    GOOD = "Good"
    BAD = "Bad"
    TODO = "To-Do"


# ISO weekday numbers, 1=Monday .. 7=Sunday
DEFAULT_ACTIVE_DAYS = [1, 2, 3, 4, 5]


class Habit(Base):
    """A recurring habit owned by one user."""

    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(20), default="#6C5CE7")
    icon: Mapped[str] = mapped_column(String(50))
    # Use String to avoid PostgreSQL enum mapping issues - values validated at app layer
    type: Mapped[str] = mapped_column(String(20))
    repeat: Mapped[str] = mapped_column(String(50), default="Every day")

    # goal == 1 is a yes/no habit, goal > 1 tracks progress toward a target
    goal: Mapped[int] = mapped_column(Integer, default=1)
    goal_unit: Mapped[str | None] = mapped_column(String(50), nullable=True)  # e.g., "glasses"

    active_days: Mapped[list[int]] = mapped_column(
        JSON,
        default=lambda: list(DEFAULT_ACTIVE_DAYS),
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        default=lambda: datetime.now(timezone.utc).date(),
    )
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="habits")
    completions: Mapped[list["HabitCompletion"]] = relationship(
        "HabitCompletion",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitCompletion.day",
    )


class HabitCompletion(Base):
    """One calendar day of a habit's history.

    There is at most one row per (habit, day). For quantified habits the
    stored ``completed`` flag is informational only; use
    ``habitkeeper.services.completion.is_done`` to read completion status.
    """

    __tablename__ = "habit_completions"

    id: Mapped[int] = mapped_column(primary_key=True)
    habit_id: Mapped[int] = mapped_column(
        ForeignKey("habits.id", ondelete="CASCADE"),
        index=True,
    )

    day: Mapped[date] = mapped_column(Date)  # UTC calendar day, no time component
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    progress: Mapped[float] = mapped_column(Float, default=0.0)

    # Relationship
    habit: Mapped["Habit"] = relationship("Habit", back_populates="completions")

    __table_args__ = (
        UniqueConstraint("habit_id", "day", name="uq_habit_completion_day"),
    )
