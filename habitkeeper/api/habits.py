"""Habit API endpoints for creating habits and recording daily progress."""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from habitkeeper.api.auth import get_current_user
from habitkeeper.api.errors import http_error
from habitkeeper.api.schemas import ErrorResponse
from habitkeeper.core.config import settings
from habitkeeper.core.database import get_db
from habitkeeper.core.exceptions import HabitKeeperError
from habitkeeper.models.habit import Habit, HabitCompletion, HabitType
from habitkeeper.models.user import User
from habitkeeper.services.achievements import run_achievement_check
from habitkeeper.services.completion import is_done
from habitkeeper.services.habits import HabitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/habits", tags=["habits"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# =============================================================================
# REQUEST / RESPONSE SCHEMAS
# =============================================================================

class HabitCreateRequest(BaseModel):
    """Request body for creating a habit."""
    name: str = Field(min_length=1, max_length=255)
    icon: str = Field(min_length=1, max_length=50)
    type: HabitType
    description: str | None = None
    color: str | None = Field(default=None, max_length=20)
    repeat: str | None = Field(default=None, max_length=50)
    goal: int = Field(default=1, ge=1)
    goal_unit: str | None = Field(default=None, max_length=50)
    active_days: list[int] | None = Field(default=None, description="ISO weekdays, 1=Monday")
    start_date: date | None = None
    end_date: date | None = None


class CompleteRequest(BaseModel):
    """Mark a habit done or not done for one day."""
    date: str = Field(description="ISO date or datetime; normalized to the UTC day")
    completed: bool = True
    progress: float | None = None


class ProgressRequest(BaseModel):
    """Set or increment a day's progress. ``increment`` wins when both are set."""
    date: str = Field(description="ISO date or datetime; normalized to the UTC day")
    progress: float | None = None
    increment: float | None = None


class CompletionResponse(BaseModel):
    """One day of a habit's history."""
    habit_id: int
    day: date
    completed: bool
    progress: float


class HabitResponse(BaseModel):
    """A habit with its completion history."""
    id: int
    name: str
    description: str | None
    color: str
    icon: str
    type: str
    repeat: str
    goal: int
    goal_unit: str | None
    active_days: list[int]
    start_date: date
    end_date: date | None
    completions: list[CompletionResponse]


def completion_response(habit: Habit, completion: HabitCompletion) -> CompletionResponse:
    """Serialize a completion, reporting ``completed`` through the resolver."""
    return CompletionResponse(
        habit_id=habit.id,
        day=completion.day,
        completed=is_done(habit, completion),
        progress=completion.progress or 0,
    )


def habit_response(habit: Habit, completions: list[HabitCompletion]) -> HabitResponse:
    return HabitResponse(
        id=habit.id,
        name=habit.name,
        description=habit.description,
        color=habit.color,
        icon=habit.icon,
        type=habit.type,
        repeat=habit.repeat,
        goal=habit.goal,
        goal_unit=habit.goal_unit,
        active_days=habit.active_days or [],
        start_date=habit.start_date,
        end_date=habit.end_date,
        completions=[completion_response(habit, c) for c in completions],
    )


def schedule_achievement_check(background_tasks: BackgroundTasks, user_id: int) -> None:
    if settings.evaluate_on_mutation:
        background_tasks.add_task(run_achievement_check, user_id)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_habit(
    request: HabitCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> HabitResponse:
    """Create a new habit for the current user."""
    service = HabitService(db)
    try:
        habit = await service.create_habit(current_user.id, **request.model_dump())
    except HabitKeeperError as e:
        raise http_error(e) from e

    await db.commit()
    return habit_response(habit, [])


@router.get("", response_model=list[HabitResponse], responses=ERROR_RESPONSES)
async def list_habits(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[HabitResponse]:
    """List the current user's habits with their completion history."""
    service = HabitService(db)
    try:
        habits = await service.list_habits(current_user.id)
    except HabitKeeperError as e:
        raise http_error(e) from e

    return [habit_response(h, h.completions) for h in habits]


@router.post("/{habit_id}/complete", response_model=CompletionResponse, responses=ERROR_RESPONSES)
async def complete_habit(
    habit_id: int,
    request: CompleteRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CompletionResponse:
    """Mark a habit complete (or incomplete) for a day."""
    service = HabitService(db)
    try:
        habit = await service.get_habit(current_user.id, habit_id)
        completion = await service.record_completion(
            current_user.id,
            habit_id,
            request.date,
            completed=request.completed,
            progress=request.progress,
        )
    except HabitKeeperError as e:
        raise http_error(e) from e

    await db.commit()
    schedule_achievement_check(background_tasks, current_user.id)
    return completion_response(habit, completion)


@router.post("/{habit_id}/progress", response_model=CompletionResponse, responses=ERROR_RESPONSES)
async def update_progress(
    habit_id: int,
    request: ProgressRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CompletionResponse:
    """Set or increment progress toward a quantified habit's goal for a day."""
    service = HabitService(db)
    try:
        habit = await service.get_habit(current_user.id, habit_id)
        completion = await service.adjust_progress(
            current_user.id,
            habit_id,
            request.date,
            progress=request.progress,
            increment=request.increment,
        )
    except HabitKeeperError as e:
        raise http_error(e) from e

    await db.commit()
    schedule_achievement_check(background_tasks, current_user.id)
    return completion_response(habit, completion)
