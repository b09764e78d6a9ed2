# src/pullup/services/stats_service.py

"""Player stats ledger: one row per (player, sport)."""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pullup import config
from pullup.db import models
from pullup.exceptions import PlayerStatsNotFoundError, StatsConflictError
from pullup.rating.elo import Outcome, apply_delta
from pullup.schemas.player_stats import PlayerStatsRead, PlayerStatsSummary

logger = logging.getLogger(__name__)


class PlayerResult(str, Enum):
    """A single player's result in a match."""

    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


def result_for_team(outcome: Outcome, team: int) -> PlayerResult:
    """Translate a match outcome into the result for one team."""
    if outcome == Outcome.DRAW:
        return PlayerResult.DRAW
    team1_won = outcome == Outcome.TEAM1_WINS
    if (team == 1) == team1_won:
        return PlayerResult.WIN
    return PlayerResult.LOSS


async def get_or_create_stats(
    db: AsyncSession, player_id: str, sport: str
) -> models.PlayerStats:
    """
    Retrieves (and locks, where supported) a player's stats row for a sport,
    creating it with the seed rating and zeroed counters if it doesn't exist.

    Creation runs inside a savepoint: if a concurrent transaction inserts the
    same (player, sport) row first, the unique constraint fires, the savepoint
    is rolled back and the winner's row is loaded instead.
    """
    stats = await models.PlayerStats.find(db, player_id, sport, for_update=True)
    if stats is not None:
        return stats

    try:
        async with db.begin_nested():
            stats = models.PlayerStats(
                player_id=player_id,
                sport=sport,
                rating=config.SEED_RATING,
                highest_rating=config.SEED_RATING,
                matches_played=0,
                wins=0,
                losses=0,
                draws=0,
                points_scored=0,
                points_conceded=0,
            )
            db.add(stats)
        logger.debug(
            "Created new PlayerStats",
            extra={"player_id": player_id, "sport": sport},
        )
        return stats
    except IntegrityError:
        logger.info(
            "PlayerStats created concurrently, loading existing row",
            extra={"player_id": player_id, "sport": sport},
        )

    existing = await models.PlayerStats.find(db, player_id, sport, for_update=True)
    if existing is None:
        raise StatsConflictError(sport)
    return existing


def apply_result(
    stats: models.PlayerStats,
    result: PlayerResult,
    rating_delta: int,
    points_scored: int,
    points_conceded: int,
) -> int:
    """
    Applies one match result to a stats row in place.

    Increments exactly one of wins/losses/draws along with matches_played,
    moves the rating (never below the floor), raises highest_rating if the
    new rating exceeds it, and accumulates points.

    Returns:
        The rating delta actually applied after clamping to the floor.
    """
    stats.matches_played += 1
    if result == PlayerResult.WIN:
        stats.wins += 1
    elif result == PlayerResult.LOSS:
        stats.losses += 1
    else:
        stats.draws += 1

    old_rating = stats.rating
    stats.rating = apply_delta(old_rating, rating_delta)
    if stats.rating > stats.highest_rating:
        stats.highest_rating = stats.rating

    stats.points_scored += points_scored
    stats.points_conceded += points_conceded
    return stats.rating - old_rating


async def get_player_stats(
    db: AsyncSession, player_id: str, sport: str | None = None
) -> list[models.PlayerStats]:
    """
    Returns a player's stats rows, highest rating first.

    Raises:
        PlayerStatsNotFoundError: If the player has no rows (for that sport)
    """
    query = select(models.PlayerStats).where(models.PlayerStats.player_id == player_id)
    if sport is not None:
        query = query.where(models.PlayerStats.sport == sport)
    query = query.order_by(
        models.PlayerStats.rating.desc(), models.PlayerStats.sport
    ).execution_options(populate_existing=True)

    result = await db.execute(query)
    rows = list(result.scalars().all())
    if not rows:
        raise PlayerStatsNotFoundError(player_id, sport)
    return rows


async def summarize_player(db: AsyncSession, player_id: str) -> PlayerStatsSummary:
    """Aggregate a player's record across every sport they have played."""
    rows = await get_player_stats(db, player_id)

    total_matches = sum(r.matches_played for r in rows)
    total_wins = sum(r.wins for r in rows)
    return PlayerStatsSummary(
        player_id=player_id,
        total_matches=total_matches,
        total_wins=total_wins,
        total_losses=sum(r.losses for r in rows),
        total_draws=sum(r.draws for r in rows),
        overall_win_rate=total_wins / total_matches if total_matches else 0.0,
        sports=[PlayerStatsRead.model_validate(r) for r in rows],
    )
