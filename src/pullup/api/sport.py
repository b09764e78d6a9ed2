# src/pullup/api/sport.py

"""API endpoints for supported sports and their leaderboards."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pullup import config
from pullup.db.session import get_db
from pullup.schemas.common import LeaderboardSortKey, Sport
from pullup.schemas.leaderboard import LeaderboardRead, SportRead
from pullup.services import leaderboard_service

router = APIRouter(prefix="/sports", tags=["Sports"])


@router.get("/", response_model=list[SportRead])
async def read_sports() -> list[SportRead]:
    """List every supported sport with its K-factor."""
    return [
        SportRead(sport=sport.value, k_factor=config.k_factor_for(sport.value))
        for sport in Sport
    ]


@router.get("/{sport}/leaderboard", response_model=LeaderboardRead)
async def read_leaderboard(
    sport: str,
    sort_by: str = Query(
        LeaderboardSortKey.RATING.value,
        description="rating, wins, win_rate or matches_played",
    ),
    min_matches: int = Query(1, ge=1, description="Minimum matches played"),
    skip: int = Query(0, ge=0, description="Ranked entries to skip"),
    limit: int = Query(
        config.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=500, description="Max entries"
    ),
    db: AsyncSession = Depends(get_db),
) -> LeaderboardRead:
    """
    Ranked leaderboard for a sport.

    Ties on the sort key are broken by matches played (descending), then by
    player ID (ascending). Guest-session accounts are never listed. Ranks
    continue from ``skip``, so page two of a top-10 starts at rank 11.

    Raises:
        422: If the sport or sort key is not supported
    """
    rows = await leaderboard_service.rank(
        db,
        sport,
        min_matches=min_matches,
        sort_key=sort_by,
        limit=limit,
        skip=skip,
    )
    return LeaderboardRead(
        sport=sport,
        sort_by=LeaderboardSortKey(sort_by),
        min_matches=min_matches,
        entries=leaderboard_service.to_entries(rows, offset=skip),
    )
