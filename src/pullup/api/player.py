# src/pullup/api/player.py

"""API endpoints for a player's stats and match history."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pullup.db.models import PlayerStats
from pullup.db.session import get_db
from pullup.schemas import match as match_schema
from pullup.schemas.common import Sport
from pullup.schemas.pagination import PaginatedResponse
from pullup.schemas.player_stats import PlayerStatsRead, PlayerStatsSummary
from pullup.services import match_service, stats_service

# Player identities are owned by the auth provider; this router only exposes
# what the ledger knows about them.
router = APIRouter(prefix="/players", tags=["Players"])


@router.get("/{player_id}/stats", response_model=list[PlayerStatsRead])
async def read_player_stats(
    player_id: str,
    sport: Sport | None = Query(None, description="Only this sport"),
    db: AsyncSession = Depends(get_db),
) -> list[PlayerStats]:
    """
    Retrieve a player's per-sport records, highest rating first.

    Raises:
        404: If the player has no stats (for the requested sport)
    """
    return await stats_service.get_player_stats(
        db, player_id, sport.value if sport else None
    )


@router.get("/{player_id}/summary", response_model=PlayerStatsSummary)
async def read_player_summary(
    player_id: str, db: AsyncSession = Depends(get_db)
) -> PlayerStatsSummary:
    """
    Aggregate a player's record across every sport.

    Raises:
        404: If the player has never played a recorded match
    """
    return await stats_service.summarize_player(db, player_id)


@router.get(
    "/{player_id}/matches",
    response_model=PaginatedResponse[match_schema.MatchRead],
)
async def read_player_matches(
    player_id: str,
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sport: Sport | None = Query(None, description="Filter by sport"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[match_schema.MatchRead]:
    """Retrieve the matches a player took part in, newest first."""
    items, total = await match_service.list_matches(
        db,
        sport=sport.value if sport else None,
        player_id=player_id,
        skip=skip,
        limit=limit,
    )
    return PaginatedResponse(
        items=items,  # type: ignore[arg-type]
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(items)) < total,
    )
