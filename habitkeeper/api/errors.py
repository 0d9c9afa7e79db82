"""Translation of domain errors into HTTP responses."""

from fastapi import HTTPException, status

from habitkeeper.core.exceptions import (
    HabitKeeperError,
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
)

_STATUS_CODES: list[tuple[type[HabitKeeperError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def http_error(error: HabitKeeperError) -> HTTPException:
    """Build the HTTPException for a domain error. Unmapped errors become 500s."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message or "Internal server error",
    )
