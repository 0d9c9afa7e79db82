"""Habit service - habit creation and day-keyed completion/progress writes."""

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from habitkeeper.core.exceptions import (
    FutureDateError,
    InvalidArgumentError,
    InvalidProgressError,
    MissingArgumentError,
    NotFoundError,
)
from habitkeeper.models.habit import DEFAULT_ACTIVE_DAYS, Habit, HabitCompletion, HabitType
from habitkeeper.services.completion import (
    clamp_progress,
    coerce_number,
    completion_progress,
    habit_goal,
    to_day_key,
    utc_today,
)
from habitkeeper.services.store import HabitStore

logger = logging.getLogger(__name__)


def resolve_day(value: date | datetime | str, today: date | None = None) -> date:
    """Normalize ``value`` to a day key and reject days after ``today``."""
    try:
        day = to_day_key(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Invalid date: {value!r}") from e

    today = today or utc_today()
    if day > today:
        raise FutureDateError(f"Cannot record {day.isoformat()}: date is in the future")
    return day


def parse_progress(value: Any, field: str = "progress") -> float:
    try:
        return coerce_number(value)
    except ValueError as e:
        raise InvalidProgressError(f"{field} must be a finite number") from e


class HabitService:
    """Writes a user's habits and their per-day history."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = HabitStore(db)

    async def get_habit(self, user_id: int, habit_id: int) -> Habit:
        habit = await self.store.get_habit(user_id, habit_id)
        if habit is None:
            raise NotFoundError(f"Habit {habit_id} not found")
        return habit

    # =========================================================================
    # HABITS
    # =========================================================================

    async def create_habit(
        self,
        user_id: int,
        name: str,
        icon: str,
        type: HabitType | str,
        description: str | None = None,
        color: str | None = None,
        repeat: str | None = None,
        goal: int = 1,
        goal_unit: str | None = None,
        active_days: list[int] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Habit:
        """Create a habit for ``user_id``."""
        if not name or not name.strip():
            raise InvalidArgumentError("Habit name is required")
        try:
            habit_type = HabitType(type)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown habit type: {type!r}") from e
        if goal < 1:
            raise InvalidArgumentError("Goal must be at least 1")

        days = list(DEFAULT_ACTIVE_DAYS) if active_days is None else sorted(set(active_days))
        if any(d < 1 or d > 7 for d in days):
            raise InvalidArgumentError("Active days must be ISO weekdays 1-7")

        start = start_date or utc_today()
        if end_date is not None and end_date < start:
            raise InvalidArgumentError("End date cannot be before start date")

        habit = Habit(
            user_id=user_id,
            name=name.strip(),
            description=description,
            icon=icon,
            type=habit_type.value,
            goal=goal,
            goal_unit=goal_unit,
            active_days=days,
            start_date=start,
            end_date=end_date,
        )
        if color:
            habit.color = color
        if repeat:
            habit.repeat = repeat

        habit = await self.store.add_habit(habit)
        logger.info(f"User {user_id} created habit {habit.id} ({habit.name})")
        return habit

    async def list_habits(self, user_id: int) -> list[Habit]:
        return await self.store.list_habits(user_id)

    # =========================================================================
    # COMPLETIONS
    # =========================================================================

    async def record_completion(
        self,
        user_id: int,
        habit_id: int,
        day: date | datetime | str,
        completed: bool,
        progress: Any = None,
        today: date | None = None,
    ) -> HabitCompletion:
        """Mark a habit done (or not done) for one day.

        Supplying ``progress`` also stores it, clamped to ``[0, goal]``, and
        forces the day complete once the goal is reached.
        """
        habit = await self.get_habit(user_id, habit_id)
        day_key = resolve_day(day, today)
        new_progress = None if progress is None else parse_progress(progress)

        goal = habit_goal(habit)
        existing = await self.store.get_completion(habit.id, day_key)

        if new_progress is not None:
            new_progress = clamp_progress(new_progress, goal)
            is_completed = bool(completed) or new_progress >= goal
        elif existing is not None:
            new_progress = completion_progress(existing)
            is_completed = bool(completed)
        else:
            new_progress = 0
            is_completed = bool(completed)

        completion = await self.store.upsert_completion(
            habit.id, day_key, completed=is_completed, progress=new_progress
        )
        logger.debug(
            f"Habit {habit.id} {day_key}: completed={completion.completed} "
            f"progress={completion.progress}"
        )
        return completion

    async def adjust_progress(
        self,
        user_id: int,
        habit_id: int,
        day: date | datetime | str,
        progress: Any = None,
        increment: Any = None,
        today: date | None = None,
    ) -> HabitCompletion:
        """Set or increment a day's progress and derive ``completed`` from it.

        ``increment`` wins when both are given. The read of the current value
        and the write are separate statements, so two concurrent increments
        on the same day may lose one of them; the day itself is never
        duplicated.
        """
        habit = await self.get_habit(user_id, habit_id)
        day_key = resolve_day(day, today)

        if increment is not None:
            delta = parse_progress(increment, "increment")
        elif progress is not None:
            target = parse_progress(progress)
        else:
            raise MissingArgumentError("Provide either progress or increment")

        goal = habit_goal(habit)
        if increment is not None:
            existing = await self.store.get_completion(habit.id, day_key)
            current = completion_progress(existing) if existing is not None else 0
            new_progress = clamp_progress(current + delta, goal)
        else:
            new_progress = clamp_progress(target, goal)

        completion = await self.store.upsert_completion(
            habit.id, day_key, completed=new_progress >= goal, progress=new_progress
        )
        logger.debug(f"Habit {habit.id} {day_key}: progress={completion.progress} goal={goal}")
        return completion
