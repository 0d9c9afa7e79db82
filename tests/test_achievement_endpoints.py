"""Tests for the achievement API endpoints.

Covers:
  - POST /achievements/check: auth, unlocked definitions, commit
  - GET /achievements: auth, category validation, unlock counts
  - GET /achievements/stats
  - GET /achievements/categories: public (no auth)
"""
from datetime import datetime, timezone
from unittest.mock import patch

from conftest import make_user

from habitkeeper.core.exceptions import StoreUnavailableError
from habitkeeper.services.achievement_catalog import get_achievement
from habitkeeper.services.statistics import UserStats

UNAUTHENTICATED = (401, 403)


def listing_entry(achievement_id, unlocked=False):
    return {
        **get_achievement(achievement_id).to_dict(),
        "unlocked": unlocked,
        "unlocked_at": datetime(2024, 1, 5, tzinfo=timezone.utc) if unlocked else None,
        "progress": 0,
    }


# =============================================================================
# AUTH CHECKS
# =============================================================================

class TestAchievementsNoAuth:

    async def test_check_no_auth(self, client):
        response = await client.post("/api/v1/achievements/check")
        assert response.status_code in UNAUTHENTICATED

    async def test_list_no_auth(self, client):
        response = await client.get("/api/v1/achievements")
        assert response.status_code in UNAUTHENTICATED

    async def test_stats_no_auth(self, client):
        response = await client.get("/api/v1/achievements/stats")
        assert response.status_code in UNAUTHENTICATED

    async def test_categories_public(self, client):
        """Categories endpoint does NOT require auth."""
        response = await client.get("/api/v1/achievements/categories")
        assert response.status_code == 200
        assert response.json() == {
            "categories": ["streak", "completion", "habit", "milestone", "special"],
            "rarities": ["common", "rare", "epic", "legendary"],
        }


# =============================================================================
# CHECK
# =============================================================================

class TestCheckEndpoint:

    async def test_check_returns_unlocked_definitions(self, client, auth_headers):
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()), \
             patch("habitkeeper.services.achievements.AchievementService.evaluate_achievements",
                   return_value={"unlocked": ["first_completion", "streak_3"]}):
            response = await client.post("/api/v1/achievements/check", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Unlocked 2 achievement(s)!"
        assert [a["id"] for a in data["unlocked"]] == ["first_completion", "streak_3"]
        assert data["unlocked"][1]["name"] == "On a Roll"
        assert all(a["unlocked"] for a in data["unlocked"])
        client._mock_db.commit.assert_awaited()

    async def test_check_nothing_new(self, client, auth_headers):
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()), \
             patch("habitkeeper.services.achievements.AchievementService.evaluate_achievements",
                   return_value={"unlocked": []}):
            response = await client.post("/api/v1/achievements/check", headers=auth_headers)

        assert response.json() == {"message": "No new achievements unlocked", "unlocked": []}

    async def test_check_database_down_is_503(self, client, auth_headers):
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()), \
             patch("habitkeeper.services.achievements.AchievementService.evaluate_achievements",
                   side_effect=StoreUnavailableError("Database is unavailable")):
            response = await client.post("/api/v1/achievements/check", headers=auth_headers)

        assert response.status_code == 503


# =============================================================================
# LIST
# =============================================================================

class TestListEndpoint:

    async def test_list_counts_unlocked(self, client, auth_headers):
        entries = [
            listing_entry("first_completion", unlocked=True),
            listing_entry("streak_3"),
        ]
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()), \
             patch("habitkeeper.services.achievements.AchievementService.list_achievements",
                   return_value=entries):
            response = await client.get("/api/v1/achievements", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["unlocked"] == 1
        assert data["total"] == 2
        assert data["achievements"][0]["unlocked_at"].startswith("2024-01-05")
        assert data["achievements"][1]["unlocked_at"] is None

    async def test_list_passes_category(self, client, auth_headers):
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()), \
             patch("habitkeeper.services.achievements.AchievementService.list_achievements",
                   return_value=[]) as list_achievements:
            response = await client.get(
                "/api/v1/achievements?category=streak",
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert list_achievements.await_args.args[1].value == "streak"

    async def test_list_invalid_category(self, client, auth_headers):
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()):
            response = await client.get(
                "/api/v1/achievements?category=social",
                headers=auth_headers,
            )

        assert response.status_code == 400
        assert "Invalid category" in response.json()["detail"]


# =============================================================================
# STATS
# =============================================================================

class TestStatsEndpoint:

    async def test_stats(self, client, auth_headers):
        stats = UserStats(
            total_completions=12,
            best_streak=5,
            current_streak=2,
            perfect_days=4,
            has_weekend_completion=True,
        )
        with patch("habitkeeper.api.auth.get_user_by_id", return_value=make_user()), \
             patch("habitkeeper.services.achievements.AchievementService.get_stats",
                   return_value=stats):
            response = await client.get("/api/v1/achievements/stats", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "total_completions": 12,
            "best_streak": 5,
            "current_streak": 2,
            "perfect_days": 4,
            "has_weekend_completion": True,
        }
