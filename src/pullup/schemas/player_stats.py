# src/pullup/schemas/player_stats.py

"""Player statistics schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PlayerStatsRead(BaseModel):
    """A player's record and rating in one sport."""

    player_id: str
    sport: str
    matches_played: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    draws: int = Field(0, ge=0)
    rating: int
    highest_rating: int
    points_scored: int = Field(0, ge=0)
    points_conceded: int = Field(0, ge=0)
    win_rate: float = Field(0.0, ge=0.0, le=1.0)
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PlayerStatsSummary(BaseModel):
    """Aggregate statistics for a player across all sports.

    Attributes:
        player_id: The player's identifier
        total_matches: Total matches across all sports
        total_wins: Total wins across all sports
        total_losses: Total losses across all sports
        total_draws: Total draws across all sports
        overall_win_rate: Wins over total matches
        sports: Per-sport rows, highest rating first
    """

    player_id: str
    total_matches: int = Field(0, ge=0)
    total_wins: int = Field(0, ge=0)
    total_losses: int = Field(0, ge=0)
    total_draws: int = Field(0, ge=0)
    overall_win_rate: float = Field(0.0, ge=0.0, le=1.0)
    sports: list[PlayerStatsRead] = Field(default_factory=list)
