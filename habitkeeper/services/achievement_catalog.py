"""Achievement catalog - the static set of achievement definitions."""

from dataclasses import asdict, dataclass
from typing import Any

from habitkeeper.models.achievement import AchievementCategory, AchievementRarity


@dataclass(frozen=True)
class AchievementDefinition:
    """One unlockable achievement. Definitions are never persisted."""

    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    requirement: int
    rarity: AchievementRarity

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category.value
        data["rarity"] = self.rarity.value
        return data


def _streak(days: int, name: str, icon: str, rarity: AchievementRarity) -> AchievementDefinition:
    return AchievementDefinition(
        id=f"streak_{days}",
        name=name,
        description=f"Maintain a {days}-day streak",
        icon=icon,
        category=AchievementCategory.STREAK,
        requirement=days,
        rarity=rarity,
    )


def _completions(count: int, name: str, icon: str, rarity: AchievementRarity) -> AchievementDefinition:
    return AchievementDefinition(
        id=f"completions_{count}",
        name=name,
        description=f"Complete {count} habits",
        icon=icon,
        category=AchievementCategory.COMPLETION,
        requirement=count,
        rarity=rarity,
    )


def _habits_created(count: int, name: str, icon: str, rarity: AchievementRarity) -> AchievementDefinition:
    return AchievementDefinition(
        id=f"habits_created_{count}",
        name=name,
        description=f"Create {count} habits",
        icon=icon,
        category=AchievementCategory.HABIT,
        requirement=count,
        rarity=rarity,
    )


ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        id="first_completion",
        name="Getting Started",
        description="Complete your first habit",
        icon="🎯",
        category=AchievementCategory.MILESTONE,
        requirement=1,
        rarity=AchievementRarity.COMMON,
    ),
    # Streaks
    _streak(3, "On a Roll", "🔥", AchievementRarity.COMMON),
    _streak(7, "Week Warrior", "⭐", AchievementRarity.COMMON),
    _streak(14, "Fortnight Fighter", "💪", AchievementRarity.RARE),
    _streak(30, "Monthly Master", "👑", AchievementRarity.RARE),
    _streak(60, "Two Month Titan", "🏆", AchievementRarity.EPIC),
    _streak(100, "Century Champion", "💯", AchievementRarity.LEGENDARY),
    # Completion totals
    _completions(10, "Decade of Dedication", "🔟", AchievementRarity.COMMON),
    _completions(50, "Half Century", "🎖️", AchievementRarity.RARE),
    _completions(100, "Centurion", "💯", AchievementRarity.EPIC),
    _completions(500, "Five Hundred Hero", "🌟", AchievementRarity.LEGENDARY),
    _completions(1000, "Millennium Master", "✨", AchievementRarity.LEGENDARY),
    # Habit creation
    _habits_created(5, "Habit Builder", "📝", AchievementRarity.COMMON),
    _habits_created(10, "Habit Collector", "📚", AchievementRarity.RARE),
    _habits_created(20, "Habit Master", "🎓", AchievementRarity.EPIC),
    # Special
    AchievementDefinition(
        id="perfect_week",
        name="Perfect Week",
        description="Complete all habits for 7 consecutive days",
        icon="🌙",
        category=AchievementCategory.SPECIAL,
        requirement=7,
        rarity=AchievementRarity.RARE,
    ),
    AchievementDefinition(
        id="perfect_month",
        name="Perfect Month",
        description="Complete all habits for 30 consecutive days",
        icon="🌕",
        category=AchievementCategory.SPECIAL,
        requirement=30,
        rarity=AchievementRarity.EPIC,
    ),
    AchievementDefinition(
        id="early_bird",
        name="Early Bird",
        description="Complete a habit before 6 AM",
        icon="🌅",
        category=AchievementCategory.SPECIAL,
        requirement=1,
        rarity=AchievementRarity.RARE,
    ),
    AchievementDefinition(
        id="night_owl",
        name="Night Owl",
        description="Complete a habit after 11 PM",
        icon="🦉",
        category=AchievementCategory.SPECIAL,
        requirement=1,
        rarity=AchievementRarity.RARE,
    ),
    AchievementDefinition(
        id="weekend_warrior",
        name="Weekend Warrior",
        description="Complete habits on both Saturday and Sunday",
        icon="🏖️",
        category=AchievementCategory.SPECIAL,
        requirement=1,
        rarity=AchievementRarity.COMMON,
    ),
    AchievementDefinition(
        id="variety_pack",
        name="Variety Pack",
        description="Have at least one habit of each type (Good, Bad, To-Do)",
        icon="🎨",
        category=AchievementCategory.SPECIAL,
        requirement=3,
        rarity=AchievementRarity.COMMON,
    ),
)

_BY_ID: dict[str, AchievementDefinition] = {a.id: a for a in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> AchievementDefinition | None:
    """Look up a definition by id."""
    return _BY_ID.get(achievement_id)


def all_achievements() -> tuple[AchievementDefinition, ...]:
    return ACHIEVEMENTS


def achievements_by_category(category: AchievementCategory | str) -> list[AchievementDefinition]:
    """Definitions in ``category``. Unknown categories yield an empty list."""
    value = category.value if isinstance(category, AchievementCategory) else category
    return [a for a in ACHIEVEMENTS if a.category.value == value]
