"""Error taxonomy shared by the habit services and the HTTP layer.

Validation errors and NotFound are surfaced to the caller. ConflictError is
raised by the store for duplicate unlocks and absorbed by the achievement
service. StoreUnavailableError wraps transient database failures.
"""


class HabitKeeperError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(HabitKeeperError):
    """Referenced habit or user does not exist (or is not owned by the caller)."""


class InvalidArgumentError(HabitKeeperError):
    """Client supplied a value that fails validation."""


class FutureDateError(InvalidArgumentError):
    """Completion or progress targeted a day after today."""


class InvalidProgressError(InvalidArgumentError):
    """Progress or increment was not a finite number."""


class MissingArgumentError(InvalidArgumentError):
    """Neither progress nor increment was supplied."""


class ConflictError(HabitKeeperError):
    """A uniqueness constraint rejected the write."""


class UnlockConflictError(ConflictError):
    """The user already holds an unlock for this achievement."""

    def __init__(self, user_id: int, achievement_id: str):
        super().__init__(f"User {user_id} already unlocked {achievement_id}")
        self.user_id = user_id
        self.achievement_id = achievement_id


class StoreUnavailableError(HabitKeeperError):
    """The database could not be reached or failed transiently."""
