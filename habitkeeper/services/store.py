"""Persistence for habits, completions and achievement unlocks.

The two writes that must be race-safe use the dialect's native
``INSERT ... ON CONFLICT`` so they are single statements on both PostgreSQL
and the SQLite engine used in tests.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from habitkeeper.core.exceptions import StoreUnavailableError, UnlockConflictError
from habitkeeper.models.achievement import AchievementUnlock
from habitkeeper.models.habit import Habit, HabitCompletion

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise connection-level database failures as StoreUnavailableError."""
    try:
        yield
    except OperationalError as e:
        logger.error(f"Database unavailable: {e}")
        raise StoreUnavailableError("Database is unavailable") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.error(f"Database connection lost: {e}")
            raise StoreUnavailableError("Database connection was lost") from e
        raise


class HabitStore:
    """Data access for one request's session. Writes flush, callers commit."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self, model: type) -> Any:
        dialect = self.db.get_bind().dialect.name
        try:
            insert = _DIALECT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Unsupported database dialect: {dialect}") from None
        return insert(model)

    # =========================================================================
    # HABITS
    # =========================================================================

    async def list_habits(self, user_id: int) -> list[Habit]:
        """All of a user's habits with their completions loaded."""
        with translate_store_errors():
            result = await self.db.execute(
                select(Habit)
                .where(Habit.user_id == user_id)
                .options(selectinload(Habit.completions))
                .order_by(Habit.id)
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())

    async def get_habit(self, user_id: int, habit_id: int) -> Habit | None:
        """A habit by id, or None when it does not exist or belongs to someone else."""
        with translate_store_errors():
            result = await self.db.execute(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def add_habit(self, habit: Habit) -> Habit:
        with translate_store_errors():
            self.db.add(habit)
            await self.db.flush()
            await self.db.refresh(habit)
        return habit

    # =========================================================================
    # COMPLETIONS
    # =========================================================================

    async def get_completion(self, habit_id: int, day: date) -> HabitCompletion | None:
        with translate_store_errors():
            result = await self.db.execute(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id, HabitCompletion.day == day)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def upsert_completion(
        self,
        habit_id: int,
        day: date,
        completed: bool,
        progress: float,
    ) -> HabitCompletion:
        """Insert the day's completion or overwrite the existing one."""
        stmt = self._insert(HabitCompletion).values(
            habit_id=habit_id,
            day=day,
            completed=completed,
            progress=progress,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["habit_id", "day"],
            set_={
                "completed": stmt.excluded.completed,
                "progress": stmt.excluded.progress,
            },
        )

        with translate_store_errors():
            await self.db.execute(stmt)

        completion = await self.get_completion(habit_id, day)
        if completion is None:
            raise StoreUnavailableError(f"Completion for habit {habit_id} on {day} was not stored")
        return completion

    # =========================================================================
    # ACHIEVEMENT UNLOCKS
    # =========================================================================

    async def list_unlocks(self, user_id: int) -> list[AchievementUnlock]:
        with translate_store_errors():
            result = await self.db.execute(
                select(AchievementUnlock)
                .where(AchievementUnlock.user_id == user_id)
                .order_by(AchievementUnlock.unlocked_at, AchievementUnlock.id)
            )
            return list(result.scalars().all())

    async def create_unlock(
        self,
        user_id: int,
        achievement_id: str,
        progress: float | None = None,
    ) -> None:
        """Record an unlock.

        Raises UnlockConflictError when the user already holds this
        achievement. The insert is ``ON CONFLICT DO NOTHING`` so the
        transaction stays usable after a conflict.
        """
        stmt = (
            self._insert(AchievementUnlock)
            .values(user_id=user_id, achievement_id=achievement_id, progress=progress)
            .on_conflict_do_nothing(index_elements=["user_id", "achievement_id"])
        )

        with translate_store_errors():
            result = await self.db.execute(stmt)

        if result.rowcount == 0:
            raise UnlockConflictError(user_id, achievement_id)
