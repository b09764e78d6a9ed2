# src/pullup/schemas/leaderboard.py

"""Leaderboard schemas for sport rankings."""

from pydantic import BaseModel, ConfigDict, Field

from .common import LeaderboardSortKey


class LeaderboardEntry(BaseModel):
    """Single entry in a sport leaderboard.

    Attributes:
        rank: Position in leaderboard (1-indexed)
        player_id: The ranked player
        rating: Current rating
        win_rate: wins / matches_played (0.0 - 1.0)
    """

    rank: int = Field(..., ge=1, description="Position in leaderboard (1-indexed)")
    player_id: str
    rating: int
    highest_rating: int
    matches_played: int
    wins: int
    losses: int
    draws: int
    win_rate: float = Field(..., ge=0.0, le=1.0)

    model_config = ConfigDict(from_attributes=True)


class LeaderboardRead(BaseModel):
    """A ranked leaderboard for one sport."""

    sport: str
    sort_by: LeaderboardSortKey
    min_matches: int
    entries: list[LeaderboardEntry]


class SportRead(BaseModel):
    """A supported sport and its rating volatility."""

    sport: str
    k_factor: int
