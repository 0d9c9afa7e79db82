"""Achievement enums and the per-user unlock table."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    String,
    func,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from habitkeeper.models.base import Base

if TYPE_CHECKING:
    from habitkeeper.models.user import User


class AchievementRarity(str, Enum):
    """Achievement rarity levels."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class AchievementCategory(str, Enum):
    """Achievement categories."""
    STREAK = "streak"
    COMPLETION = "completion"
    HABIT = "habit"
    MILESTONE = "milestone"
    SPECIAL = "special"


class AchievementUnlock(Base):
    """An achievement a user has earned.

    Definitions live in code (see ``habitkeeper.services.achievement_catalog``),
    so ``achievement_id`` is a plain string rather than a foreign key. Rows are
    insert-only; the unique index makes a second insert for the same pair a
    conflict.
    """

    __tablename__ = "achievement_unlocks"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    achievement_id: Mapped[str] = mapped_column(String(100))  # e.g., "streak_7"

    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    progress: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="achievement_unlocks")

    __table_args__ = (
        Index("ix_achievement_unlock_unique", "user_id", "achievement_id", unique=True),
    )
