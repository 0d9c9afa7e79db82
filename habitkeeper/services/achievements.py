"""Achievement evaluation - compares a user's stats to the catalog and records unlocks."""

import logging
from collections.abc import Callable, Collection, Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from habitkeeper.core.database import async_session_maker
from habitkeeper.core.exceptions import HabitKeeperError, UnlockConflictError
from habitkeeper.models.achievement import AchievementCategory
from habitkeeper.models.habit import HabitType
from habitkeeper.services.achievement_catalog import (
    ACHIEVEMENTS,
    AchievementDefinition,
    achievements_by_category,
)
from habitkeeper.services.statistics import UserStats, calculate_stats
from habitkeeper.services.store import HabitStore

logger = logging.getLogger(__name__)

# Perfect-day counts for the two perfect-* achievements. These are fixed
# and do not read the catalog requirement.
PERFECT_WEEK_DAYS = 7
PERFECT_MONTH_DAYS = 30

Rule = Callable[[UserStats, Sequence[Any]], bool]


# =============================================================================
# RULES
# =============================================================================

def _best_streak_at_least(requirement: int) -> Rule:
    return lambda stats, habits: stats.best_streak >= requirement


def _completions_at_least(requirement: int) -> Rule:
    return lambda stats, habits: stats.total_completions >= requirement


def _habits_at_least(requirement: int) -> Rule:
    return lambda stats, habits: len(habits) >= requirement


def _has_every_habit_type(stats: UserStats, habits: Sequence[Any]) -> bool:
    present = {getattr(h.type, "value", h.type) for h in habits}
    return all(habit_type.value in present for habit_type in HabitType)


def _never(stats: UserStats, habits: Sequence[Any]) -> bool:
    # Completions carry no time of day
    return False


ACHIEVEMENT_RULES: dict[str, Rule] = {
    "first_completion": lambda stats, habits: stats.total_completions >= 1,
    **{
        a.id: _best_streak_at_least(a.requirement)
        for a in achievements_by_category(AchievementCategory.STREAK)
    },
    **{
        a.id: _completions_at_least(a.requirement)
        for a in achievements_by_category(AchievementCategory.COMPLETION)
    },
    **{
        a.id: _habits_at_least(a.requirement)
        for a in achievements_by_category(AchievementCategory.HABIT)
    },
    "perfect_week": lambda stats, habits: stats.perfect_days >= PERFECT_WEEK_DAYS,
    "perfect_month": lambda stats, habits: stats.perfect_days >= PERFECT_MONTH_DAYS,
    "variety_pack": _has_every_habit_type,
    "weekend_warrior": lambda stats, habits: stats.has_weekend_completion,
    "early_bird": _never,
    "night_owl": _never,
}


def evaluate_rules(
    habits: Sequence[Any],
    stats: UserStats,
    existing_ids: Collection[str],
    achievements: Iterable[AchievementDefinition] = ACHIEVEMENTS,
    rules: Mapping[str, Rule] = ACHIEVEMENT_RULES,
) -> list[str]:
    """Return ids of achievements that are earned but not yet unlocked.

    A rule that raises is logged and skipped; the remaining rules still run.
    """
    earned = []

    for achievement in achievements:
        if achievement.id in existing_ids:
            continue

        rule = rules.get(achievement.id)
        if rule is None:
            logger.warning(f"No rule registered for achievement {achievement.id}")
            continue

        try:
            holds = rule(stats, habits)
        except Exception:
            logger.exception(f"Rule for achievement {achievement.id} failed")
            continue

        if holds:
            earned.append(achievement.id)
        else:
            logger.debug(f"Achievement {achievement.id} not earned")

    return earned


# =============================================================================
# SERVICE
# =============================================================================

class AchievementService:
    """Evaluates and lists achievements for a user."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = HabitStore(db)

    async def evaluate_achievements(
        self,
        user_id: int,
        today: date | None = None,
    ) -> dict[str, list[str]]:
        """Unlock every newly earned achievement.

        Stats are recomputed from the stored habits on every call. An unlock
        that loses a race to a concurrent evaluation is dropped from the result.
        """
        habits = await self.store.list_habits(user_id)
        stats = calculate_stats(habits, today)
        existing_ids = {u.achievement_id for u in await self.store.list_unlocks(user_id)}

        unlocked = []
        for achievement_id in evaluate_rules(habits, stats, existing_ids):
            try:
                await self.store.create_unlock(user_id, achievement_id)
            except UnlockConflictError:
                logger.debug(f"User {user_id} already holds {achievement_id}")
                continue
            unlocked.append(achievement_id)
            logger.info(f"User {user_id} unlocked achievement {achievement_id}")

        return {"unlocked": unlocked}

    async def list_achievements(
        self,
        user_id: int,
        category: AchievementCategory | None = None,
    ) -> list[dict[str, Any]]:
        """Every catalog entry merged with the user's unlock state.

        Evaluation runs first so the listing reflects the latest stats; if it
        fails the listing is still returned from what is stored.
        """
        try:
            await self.evaluate_achievements(user_id)
        except HabitKeeperError as e:
            logger.warning(f"Achievement check before listing failed for user {user_id}: {e}")

        unlocks = {u.achievement_id: u for u in await self.store.list_unlocks(user_id)}
        definitions = achievements_by_category(category) if category else ACHIEVEMENTS

        achievements = []
        for definition in definitions:
            unlock = unlocks.get(definition.id)
            achievements.append({
                **definition.to_dict(),
                "unlocked": unlock is not None,
                "unlocked_at": unlock.unlocked_at if unlock else None,
                "progress": (unlock.progress or 0) if unlock else 0,
            })
        return achievements

    async def get_stats(self, user_id: int, today: date | None = None) -> UserStats:
        habits = await self.store.list_habits(user_id)
        return calculate_stats(habits, today)


async def run_achievement_check(user_id: int) -> None:
    """Background job: evaluate achievements in a fresh session and commit.

    Runs after the triggering response is sent, so failures are only logged.
    """
    async with async_session_maker() as session:
        try:
            result = await AchievementService(session).evaluate_achievements(user_id)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception(f"Background achievement check failed for user {user_id}")
            return

    if result["unlocked"]:
        logger.info(f"Background check unlocked {result['unlocked']} for user {user_id}")
