# src/pullup/services/leaderboard_service.py

"""Read-only leaderboard ranking over the player stats ledger."""

from __future__ import annotations

import logging

from sqlalchemy import Float, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pullup import identity
from pullup.db import models
from pullup.exceptions import InvalidSortKeyError, UnknownSportError
from pullup.schemas.common import LeaderboardSortKey, Sport
from pullup.schemas.leaderboard import LeaderboardEntry

logger = logging.getLogger(__name__)

_Stats = models.PlayerStats

# win_rate is 0.0 for a row with no matches, same as PlayerStats.win_rate
_SORT_COLUMNS = {
    LeaderboardSortKey.RATING: _Stats.rating,
    LeaderboardSortKey.WINS: _Stats.wins,
    LeaderboardSortKey.WIN_RATE: func.coalesce(
        cast(_Stats.wins, Float) / func.nullif(_Stats.matches_played, 0), 0.0
    ),
    LeaderboardSortKey.MATCHES_PLAYED: _Stats.matches_played,
}


def _coerce_sort_key(sort_key: LeaderboardSortKey | str) -> LeaderboardSortKey:
    try:
        return LeaderboardSortKey(sort_key)
    except ValueError:
        raise InvalidSortKeyError(str(sort_key)) from None


async def rank(
    db: AsyncSession,
    sport: str,
    min_matches: int = 1,
    sort_key: LeaderboardSortKey | str = LeaderboardSortKey.RATING,
    limit: int | None = None,
    skip: int = 0,
) -> list[models.PlayerStats]:
    """
    Ranks players in a sport.

    Rows with fewer than ``min_matches`` matches and rows belonging to
    guest-session identifiers are left out. Ordering is the sort key
    descending, then matches_played descending, then player_id ascending,
    so identical inputs always produce identical orderings. Ordering and
    paging both happen in the query.

    Raises:
        UnknownSportError: If the sport tag is not supported
        InvalidSortKeyError: If the sort key is not supported
    """
    if sport not in {s.value for s in Sport}:
        raise UnknownSportError(sport)
    key = _coerce_sort_key(sort_key)

    query = (
        select(_Stats)
        .where(
            _Stats.sport == sport,
            _Stats.matches_played >= min_matches,
            _Stats.player_id.not_like(
                identity.guest_namespace_pattern(), escape="\\"
            ),
        )
        .order_by(
            _SORT_COLUMNS[key].desc(),
            _Stats.matches_played.desc(),
            _Stats.player_id.asc(),
        )
        .offset(skip)
    )
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query.execution_options(populate_existing=True))
    rows = list(result.scalars().all())

    logger.debug(
        "Ranked leaderboard",
        extra={"sport": sport, "sort_key": key.value, "count": len(rows)},
    )
    return rows


def to_entries(
    rows: list[models.PlayerStats], offset: int = 0
) -> list[LeaderboardEntry]:
    """Number ranked rows 1..n (shifted by offset) for presentation."""
    return [
        LeaderboardEntry(
            rank=offset + i + 1,
            player_id=row.player_id,
            rating=row.rating,
            highest_rating=row.highest_rating,
            matches_played=row.matches_played,
            wins=row.wins,
            losses=row.losses,
            draws=row.draws,
            win_rate=row.win_rate,
        )
        for i, row in enumerate(rows)
    ]
