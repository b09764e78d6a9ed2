# tests/test_api_errors.py

"""Tests for API error responses."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient
from pullup.exceptions import StatsConflictError

# =============================================================================
# Helper Functions
# =============================================================================


def match_payload(**overrides) -> dict:
    payload = {
        "sport": "pickleball",
        "team1_score": 11,
        "team2_score": 7,
        "roster": [
            {"player_id": "alice", "team": 1},
            {"player_id": "bob", "team": 2},
        ],
        "recorded_by": "alice",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Validation Errors (422)
# =============================================================================


@pytest.mark.parametrize(
    "overrides, error_type",
    [
        ({"sport": "curling"}, "UnknownSportError"),
        ({"team2_score": -3}, "InvalidScoreError"),
        ({"team1_score": 2**64}, "InvalidScoreError"),
        ({"note": "n" * 201}, "NoteTooLongError"),
        ({"roster": []}, "EmptyRosterError"),
        (
            {
                "roster": [
                    {"player_id": "alice", "team": 1},
                    {"player_id": "alice", "team": 2},
                ]
            },
            "DuplicateParticipantError",
        ),
        (
            {
                "team2_score": 0,
                "roster": [
                    {"player_id": "alice", "team": 1},
                    {"player_id": "bob", "team": 1},
                ],
            },
            "InsufficientTeamsError",
        ),
        (
            {
                "roster": [
                    {"player_id": "alice", "team": 1},
                    {"player_id": "bob", "team": 1},
                ],
            },
            "EmptyTeamScoreError",
        ),
    ],
)
@pytest.mark.asyncio
async def test_invalid_match_returns_typed_422(
    async_client: AsyncClient, overrides: dict, error_type: str
):
    # 1. ARRANGE & 2. ACT
    response = await async_client.post("/matches/", json=match_payload(**overrides))

    # 3. ASSERT: The error is typed and nothing was recorded.
    assert response.status_code == 422
    assert response.json()["error_type"] == error_type

    matches = await async_client.get("/matches/")
    assert matches.json()["total"] == 0


@pytest.mark.asyncio
async def test_malformed_roster_entry_rejected(async_client: AsyncClient):
    """An entry that is both member and guest matches neither shape."""
    response = await async_client.post(
        "/matches/",
        json=match_payload(
            roster=[
                {"player_id": "alice", "name": "Alice", "team": 1},
                {"player_id": "bob", "team": 2},
            ]
        ),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_team_outside_one_and_two_rejected(async_client: AsyncClient):
    response = await async_client.post(
        "/matches/",
        json=match_payload(
            roster=[
                {"player_id": "alice", "team": 1},
                {"player_id": "bob", "team": 3},
            ]
        ),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_leaderboard_sport(async_client: AsyncClient):
    response = await async_client.get("/sports/curling/leaderboard")

    assert response.status_code == 422
    assert response.json()["error_type"] == "UnknownSportError"


@pytest.mark.asyncio
async def test_unknown_leaderboard_sort_key(async_client: AsyncClient):
    response = await async_client.get(
        "/sports/pickleball/leaderboard", params={"sort_by": "elo"}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "InvalidSortKeyError"


# =============================================================================
# Not Found Errors (404)
# =============================================================================


@pytest.mark.asyncio
async def test_match_not_found(async_client: AsyncClient):
    response = await async_client.get("/matches/9999")

    assert response.status_code == 404
    assert response.json()["error_type"] == "MatchNotFoundError"


@pytest.mark.asyncio
async def test_player_stats_not_found(async_client: AsyncClient):
    response = await async_client.get("/players/nobody/stats")

    assert response.status_code == 404
    assert response.json()["error_type"] == "PlayerStatsNotFoundError"


@pytest.mark.asyncio
async def test_player_summary_not_found(async_client: AsyncClient):
    response = await async_client.get("/players/nobody/summary")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_referral_code_not_found(async_client: AsyncClient):
    response = await async_client.get("/referrals/codes/lookup/ZZZZ9999")

    assert response.status_code == 404
    assert response.json()["error_type"] == "ReferralCodeNotFoundError"


# =============================================================================
# Conflict Errors (409)
# =============================================================================


@pytest.mark.asyncio
async def test_stats_conflict_returns_409(async_client: AsyncClient):
    with patch(
        "pullup.services.stats_service.get_or_create_stats",
        side_effect=StatsConflictError("pickleball"),
    ):
        response = await async_client.post("/matches/", json=match_payload())

    assert response.status_code == 409
    assert response.json()["error_type"] == "StatsConflictError"

    matches = await async_client.get("/matches/")
    assert matches.json()["total"] == 0
