"""Statistics derived from a user's complete habit set.

Stats are always recomputed from the habits and their completions; nothing
here reads cached counters. Malformed stored rows are logged and skipped so
one bad habit cannot hide the rest of a user's history.
"""

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any

from habitkeeper.services.completion import is_done, to_day_key, utc_today

logger = logging.getLogger(__name__)

# Trailing window (inclusive of today) scanned for perfect days
PERFECT_DAY_WINDOW_DAYS = 30

# ISO weekday numbers for Saturday and Sunday
WEEKEND_WEEKDAYS = frozenset({6, 7})


@dataclass(frozen=True)
class UserStats:
    """Aggregate completion statistics for one user."""

    total_completions: int = 0
    best_streak: int = 0
    current_streak: int = 0
    perfect_days: int = 0
    has_weekend_completion: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def iter_done_days(habit: Any) -> Iterator[date]:
    """Yield the day of every done completion of ``habit``.

    Completions whose day or progress cannot be read are skipped.
    """
    for completion in getattr(habit, "completions", None) or []:
        try:
            if is_done(habit, completion):
                yield to_day_key(completion.day)
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Skipping malformed completion {getattr(completion, 'id', None)} "
                f"of habit {getattr(habit, 'id', None)}: {e}"
            )


def done_days_for_habit(habit: Any) -> set[date]:
    """Calendar days on which ``habit`` has a done completion."""
    return set(iter_done_days(habit))


def calculate_streaks(days: Iterable[date]) -> tuple[int, int]:
    """Return ``(best_streak, current_streak)`` for a set of done days.

    The current streak is the length of the last run in date order. It is not
    anchored to today, so a streak that lapsed last week still reports its
    final length.
    """
    sorted_days = sorted(set(days))
    if not sorted_days:
        return 0, 0

    best_streak = 0
    run = 1
    for prev, day in zip(sorted_days, sorted_days[1:]):
        if (day - prev).days == 1:
            run += 1
        else:
            best_streak = max(best_streak, run)
            run = 1

    best_streak = max(best_streak, run)
    return best_streak, run


def active_weekdays(habit: Any) -> frozenset[int]:
    """ISO weekdays ``habit`` is active on; empty when the stored value is unusable."""
    active_days = getattr(habit, "active_days", None) or []
    if not isinstance(active_days, (list, tuple, set, frozenset)) or not all(
        isinstance(day, int) and not isinstance(day, bool) for day in active_days
    ):
        logger.warning(
            f"Habit {getattr(habit, 'id', None)} has malformed active_days {active_days!r}"
        )
        return frozenset()
    return frozenset(active_days)


def habit_start(habit: Any) -> date | None:
    """Normalized start day of ``habit``, None when missing or unreadable."""
    start_date = getattr(habit, "start_date", None)
    if start_date is None:
        return None
    try:
        return to_day_key(start_date)
    except (TypeError, ValueError) as e:
        logger.warning(f"Habit {getattr(habit, 'id', None)} has malformed start_date: {e}")
        return None


def count_perfect_days(
    habits: Sequence[Any],
    done_days: set[date],
    today: date,
    window: int = PERFECT_DAY_WINDOW_DAYS,
) -> int:
    """Count perfect days in the ``window`` days ending at ``today``.

    A day is a candidate only if something was done on it. It is perfect when
    every habit scheduled and started that day has a done completion.
    """
    schedules = [
        (active_weekdays(habit), habit_start(habit), done_days_for_habit(habit))
        for habit in habits
    ]

    perfect_days = 0
    for offset in range(window):
        day = today - timedelta(days=offset)
        if day not in done_days:
            continue

        if all(
            day in days
            for weekdays, start, days in schedules
            if day.isoweekday() in weekdays and start is not None and start <= day
        ):
            perfect_days += 1

    return perfect_days


def calculate_stats(habits: Sequence[Any], today: date | None = None) -> UserStats:
    """Aggregate ``habits`` into a :class:`UserStats`."""
    today = today or utc_today()

    total_completions = 0
    done_days: set[date] = set()
    has_weekend_completion = False

    for habit in habits:
        for day in iter_done_days(habit):
            done_days.add(day)
            total_completions += 1
            if day.isoweekday() in WEEKEND_WEEKDAYS:
                has_weekend_completion = True

    best_streak, current_streak = calculate_streaks(done_days)

    return UserStats(
        total_completions=total_completions,
        best_streak=best_streak,
        current_streak=current_streak,
        perfect_days=count_perfect_days(habits, done_days, today),
        has_weekend_completion=has_weekend_completion,
    )
