"""Tests for the completion resolver and day-key normalization (no database)."""
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from habitkeeper.services.completion import (
    clamp_progress,
    coerce_number,
    is_done,
    to_day_key,
)


def habit(goal):
    return SimpleNamespace(goal=goal)


def completion(completed=False, progress=0):
    return SimpleNamespace(completed=completed, progress=progress)


# =============================================================================
# RESOLVER
# =============================================================================

class TestIsDone:

    @pytest.mark.parametrize("flag", [True, False])
    def test_boolean_habit_follows_stored_flag(self, flag):
        assert is_done(habit(1), completion(completed=flag, progress=0)) is flag

    def test_boolean_habit_ignores_progress(self):
        assert is_done(habit(1), completion(completed=False, progress=5)) is False

    def test_quantified_habit_ignores_stale_flag(self):
        """A stored completed=True with progress below goal is not done."""
        assert is_done(habit(8), completion(completed=True, progress=3)) is False

    def test_quantified_habit_done_at_goal(self):
        assert is_done(habit(8), completion(completed=False, progress=8)) is True

    def test_missing_goal_treated_as_boolean(self):
        assert is_done(habit(None), completion(completed=True)) is True

    def test_missing_progress_treated_as_zero(self):
        assert is_done(habit(3), completion(completed=True, progress=None)) is False


# =============================================================================
# DAY KEYS
# =============================================================================

class TestToDayKey:

    def test_date_passes_through(self):
        assert to_day_key(date(2024, 1, 5)) == date(2024, 1, 5)

    def test_iso_date_string(self):
        assert to_day_key("2024-01-05") == date(2024, 1, 5)

    def test_zulu_timestamp(self):
        assert to_day_key("2024-01-05T23:59:59Z") == date(2024, 1, 5)

    def test_offset_timestamp_converted_to_utc_day(self):
        """21:30 in New York on Jan 5 is already Jan 6 in UTC."""
        assert to_day_key("2024-01-05T21:30:00-05:00") == date(2024, 1, 6)

    def test_aware_datetime(self):
        tz = timezone(timedelta(hours=9))
        assert to_day_key(datetime(2024, 1, 6, 3, 0, tzinfo=tz)) == date(2024, 1, 5)

    def test_naive_datetime_taken_as_utc(self):
        assert to_day_key(datetime(2024, 1, 5, 23, 0)) == date(2024, 1, 5)

    def test_garbage_string_raises_value_error(self):
        with pytest.raises(ValueError):
            to_day_key("yesterday")

    def test_unsupported_type_raises_type_error(self):
        with pytest.raises(TypeError):
            to_day_key(20240105)


# =============================================================================
# NUMBERS
# =============================================================================

class TestProgressNumbers:

    @pytest.mark.parametrize("value,expected", [(-3, 0), (0, 0), (5, 5), (8, 8), (105, 8)])
    def test_clamp_progress(self, value, expected):
        assert clamp_progress(value, 8) == expected

    def test_coerce_numeric_string(self):
        assert coerce_number("2.5") == 2.5

    @pytest.mark.parametrize("value", ["abc", None, float("nan"), float("inf"), True, [1]])
    def test_coerce_rejects_non_finite_or_non_numeric(self, value):
        with pytest.raises(ValueError):
            coerce_number(value)
