"""Habit tracking with streak statistics and unlockable achievements."""

__version__ = "0.1.0"
