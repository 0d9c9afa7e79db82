"""Achievement API endpoints: checking, listing and stats."""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from habitkeeper.api.auth import get_current_user
from habitkeeper.api.errors import http_error
from habitkeeper.core.database import get_db
from habitkeeper.core.exceptions import HabitKeeperError
from habitkeeper.models.achievement import AchievementCategory, AchievementRarity
from habitkeeper.models.user import User
from habitkeeper.services.achievement_catalog import get_achievement
from habitkeeper.services.achievements import AchievementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/achievements", tags=["achievements"])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class AchievementResponse(BaseModel):
    """Catalog entry merged with the user's unlock state."""
    id: str
    name: str
    description: str
    icon: str
    category: str
    requirement: int
    rarity: str
    unlocked: bool
    unlocked_at: datetime | None
    progress: float


class AchievementListResponse(BaseModel):
    achievements: list[AchievementResponse]
    unlocked: int
    total: int


class CheckResponse(BaseModel):
    """Achievements unlocked by this check."""
    message: str
    unlocked: list[AchievementResponse]


class StatsResponse(BaseModel):
    """Aggregate completion statistics."""
    total_completions: int
    best_streak: int
    current_streak: int
    perfect_days: int
    has_weekend_completion: bool


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/check", response_model=CheckResponse)
async def check_achievements(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Check for and unlock any newly earned achievements."""
    service = AchievementService(db)
    try:
        result = await service.evaluate_achievements(current_user.id)
    except HabitKeeperError as e:
        raise http_error(e) from e

    await db.commit()

    now = datetime.now(timezone.utc)
    unlocked = []
    for achievement_id in result["unlocked"]:
        definition = get_achievement(achievement_id)
        if definition is None:
            continue
        unlocked.append({
            **definition.to_dict(),
            "unlocked": True,
            "unlocked_at": now,
            "progress": 0,
        })

    if unlocked:
        message = f"Unlocked {len(unlocked)} achievement(s)!"
    else:
        message = "No new achievements unlocked"
    return {"message": message, "unlocked": unlocked}


@router.get("", response_model=AchievementListResponse)
async def list_achievements(
    category: str | None = Query(default=None, description="Filter by category"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """List every achievement with the current user's unlock state."""
    category_filter = None
    if category:
        try:
            category_filter = AchievementCategory(category)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid category. Must be one of: {[c.value for c in AchievementCategory]}",
            )

    service = AchievementService(db)
    try:
        achievements = await service.list_achievements(current_user.id, category_filter)
    except HabitKeeperError as e:
        raise http_error(e) from e

    # Listing may have unlocked something
    await db.commit()

    return {
        "achievements": achievements,
        "unlocked": sum(1 for a in achievements if a["unlocked"]),
        "total": len(achievements),
    }


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Get the current user's streaks, totals and perfect days."""
    service = AchievementService(db)
    try:
        stats = await service.get_stats(current_user.id)
    except HabitKeeperError as e:
        raise http_error(e) from e
    return stats.to_dict()


@router.get("/categories")
async def get_categories() -> dict[str, list[str]]:
    """Get available achievement categories and rarities."""
    return {
        "categories": [c.value for c in AchievementCategory],
        "rarities": [r.value for r in AchievementRarity],
    }
