# src/pullup/api/match.py

"""API endpoints for recording and browsing matches."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pullup.db.models import Match
from pullup.db.session import get_db
from pullup.schemas import match as match_schema
from pullup.schemas.common import Sport
from pullup.schemas.pagination import PaginatedResponse
from pullup.services import match_service

router = APIRouter(prefix="/matches", tags=["Matches"])


@router.post(
    "/", response_model=match_schema.MatchRead, status_code=status.HTTP_201_CREATED
)
async def create_match(
    match_in: match_schema.MatchCreate, db: AsyncSession = Depends(get_db)
) -> Match:
    """
    Record a final score and update every member's stats and rating.

    Roster entries are either members (`player_id`) or guests (`name`,
    optional `email`), each assigned to team 1 or 2.

    Raises:
        422: If the sport, scores, note or roster are invalid
        409: If a concurrent match for the same players won the race (retry)
        503: If the store failed; nothing was written (retry)
    """
    return await match_service.record_match(db, match_in)


@router.get("/", response_model=PaginatedResponse[match_schema.MatchRead])
async def read_matches(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sport: Sport | None = Query(None, description="Filter by sport"),
    game_id: str | None = Query(None, description="Filter by pickup game"),
    player_id: str | None = Query(None, description="Filter by member participant"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[match_schema.MatchRead]:
    """
    Retrieve a paginated list of matches, newest first.

    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return (1-100)
    - **sport**: Only matches of this sport
    - **game_id**: Only matches played at this pickup game
    - **player_id**: Only matches this member played in
    """
    items, total = await match_service.list_matches(
        db,
        sport=sport.value if sport else None,
        game_id=game_id,
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


@router.get("/{match_id}", response_model=match_schema.MatchRead)
async def read_match(match_id: int, db: AsyncSession = Depends(get_db)) -> Match:
    """Retrieve a single match by its ID, including its roster."""
    return await match_service.get_match(db, match_id)
