# tests/test_transaction_rollback.py

"""Tests for transaction atomicity and rollback behavior."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient
from pullup.db.models import Match, MatchParticipant, PlayerStats
from pullup.exceptions import StorageError
from pullup.schemas.match import MatchCreate
from pullup.services import match_service, stats_service
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# =============================================================================
# Helper Functions
# =============================================================================


def one_v_one(player1: str, player2: str, score1: int = 11, score2: int = 7) -> dict:
    return {
        "sport": "pickleball",
        "team1_score": score1,
        "team2_score": score2,
        "roster": [
            {"player_id": player1, "team": 1},
            {"player_id": player2, "team": 2},
        ],
        "recorded_by": player1,
    }


async def count_rows(
    session_factory: async_sessionmaker[AsyncSession], model
) -> int:
    """Count rows using a fresh session so nothing is served from a stale cache."""
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def rating_of(
    session_factory: async_sessionmaker[AsyncSession], player_id: str
) -> int:
    async with session_factory() as session:
        stats = await PlayerStats.find(session, player_id, "pickleball")
        assert stats is not None
        return stats.rating


def fail_on_call(n: int, real):
    """Wrap ``real`` so that its n-th call raises a database error."""
    calls = {"count": 0}

    def wrapper(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == n:
            raise OperationalError("UPDATE player_stats", {}, Exception("disk I/O"))
        return real(*args, **kwargs)

    return wrapper


# =============================================================================
# Transaction Rollback Tests
# =============================================================================


@pytest.mark.asyncio
async def test_failure_after_first_stats_update_rolls_back_everything(
    db_session: AsyncSession, session_factory
):
    """
    If the store fails after one member's stats were applied, neither the
    match nor any stats row (not even the newly created ones) survives.
    """
    # 1. ARRANGE
    match_in = MatchCreate.model_validate(one_v_one("alice", "bob"))

    # 2. ACT: The second apply_result call fails.
    with patch(
        "pullup.services.stats_service.apply_result",
        side_effect=fail_on_call(2, stats_service.apply_result),
    ):
        with pytest.raises(StorageError):
            await match_service.record_match(db_session, match_in)

    # 3. ASSERT
    assert await count_rows(session_factory, Match) == 0
    assert await count_rows(session_factory, MatchParticipant) == 0
    assert await count_rows(session_factory, PlayerStats) == 0


@pytest.mark.asyncio
async def test_failure_leaves_existing_stats_untouched(
    db_session: AsyncSession, session_factory
):
    # 1. ARRANGE: A successful first match.
    await match_service.record_match(
        db_session, MatchCreate.model_validate(one_v_one("alice", "bob"))
    )
    alice_before = await rating_of(session_factory, "alice")
    bob_before = await rating_of(session_factory, "bob")

    # 2. ACT: The rematch fails halfway through applying results.
    with patch(
        "pullup.services.stats_service.apply_result",
        side_effect=fail_on_call(2, stats_service.apply_result),
    ):
        with pytest.raises(StorageError):
            await match_service.record_match(
                db_session, MatchCreate.model_validate(one_v_one("bob", "alice"))
            )

    # 3. ASSERT
    assert await count_rows(session_factory, Match) == 1
    assert await rating_of(session_factory, "alice") == alice_before
    assert await rating_of(session_factory, "bob") == bob_before


@pytest.mark.asyncio
async def test_session_usable_after_rollback(db_session: AsyncSession):
    """A failed record leaves the session clean for the next (retried) call."""
    match_in = MatchCreate.model_validate(one_v_one("alice", "bob"))

    with patch(
        "pullup.services.stats_service.apply_result",
        side_effect=fail_on_call(1, stats_service.apply_result),
    ):
        with pytest.raises(StorageError):
            await match_service.record_match(db_session, match_in)

    match = await match_service.record_match(db_session, match_in)

    assert match.id is not None
    by_player = {p.player_id: p for p in match.participants}
    assert by_player["alice"].rating_delta == 16


@pytest.mark.asyncio
async def test_api_reports_storage_failure_as_503(
    async_client: AsyncClient, session_factory
):
    # 1. ARRANGE & 2. ACT
    with patch(
        "pullup.services.stats_service.apply_result",
        side_effect=fail_on_call(1, stats_service.apply_result),
    ):
        response = await async_client.post("/matches/", json=one_v_one("alice", "bob"))

    # 3. ASSERT: Retry-safe failure and nothing persisted.
    assert response.status_code == 503
    assert response.json()["error_type"] == "StorageError"
    assert await count_rows(session_factory, Match) == 0
    assert await count_rows(session_factory, PlayerStats) == 0
