from habitkeeper.services.achievements import AchievementService, run_achievement_check
from habitkeeper.services.habits import HabitService
from habitkeeper.services.statistics import UserStats, calculate_stats
from habitkeeper.services.store import HabitStore

__all__ = [
    "AchievementService",
    "HabitService",
    "HabitStore",
    "UserStats",
    "calculate_stats",
    "run_achievement_check",
]
