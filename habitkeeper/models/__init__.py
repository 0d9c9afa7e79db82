from habitkeeper.models.base import Base
from habitkeeper.models.user import User
from habitkeeper.models.habit import Habit, HabitCompletion, HabitType
from habitkeeper.models.achievement import (
    AchievementCategory,
    AchievementRarity,
    AchievementUnlock,
)

__all__ = [
    "Base",
    "User",
    "Habit",
    "HabitCompletion",
    "HabitType",
    "AchievementCategory",
    "AchievementRarity",
    "AchievementUnlock",
]
