"""Completion resolution and day-key normalization.

Every place that needs to know whether a habit was done on a day goes through
``is_done``. Quantified habits (goal > 1) derive completion from progress and
ignore whatever ``completed`` flag is stored.
"""

import math
from datetime import date, datetime, timezone
from typing import Any


def habit_goal(habit: Any) -> int:
    """Goal of a habit, treating a missing or zero goal as a yes/no habit."""
    return getattr(habit, "goal", None) or 1


def completion_progress(completion: Any) -> float:
    """Stored progress of a completion, 0 when absent."""
    progress = getattr(completion, "progress", None)
    return progress if progress is not None else 0


def is_done(habit: Any, completion: Any) -> bool:
    """Whether ``completion`` counts as done for ``habit``."""
    goal = habit_goal(habit)
    if goal <= 1:
        return getattr(completion, "completed", False) is True
    return completion_progress(completion) >= goal


def utc_today() -> date:
    """Today's calendar day at the UTC day boundary."""
    return datetime.now(timezone.utc).date()


def to_day_key(value: date | datetime | str) -> date:
    """Normalize a date, datetime or ISO string to its UTC calendar day.

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid date: {value!r}") from e

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    raise TypeError(f"Cannot derive a calendar day from {type(value).__name__}")


def clamp_progress(value: float, goal: int) -> float:
    """Clamp progress into ``[0, goal]``."""
    return max(0, min(goal, value))


def coerce_number(value: Any) -> float:
    """Return ``value`` as a finite float, raising ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Expected a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return number
