# src/pullup/schemas/match.py

"""Pydantic schemas for the Match resource."""

from datetime import datetime, timezone
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from pullup.rating.elo import Outcome, outcome_from_scores

# ===============================================
# == Roster Entry Variants
# ===============================================


class MemberParticipant(BaseModel):
    """A roster entry for a player with a durable identifier.

    Example:
        {"player_id": "user_2abc", "team": 1}
    """

    player_id: str = Field(..., min_length=1, description="Opaque player identifier")
    team: Literal[1, 2]

    model_config = ConfigDict(extra="forbid")


class GuestParticipant(BaseModel):
    """A roster entry for someone without an account.

    Guests count toward their team's strength at the seed rating but never
    get a stats row of their own.

    Example:
        {"name": "Sam", "email": "sam@example.com", "team": 2}
    """

    name: str = Field(..., min_length=1, max_length=100)
    email: str | None = None
    team: Literal[1, 2]

    model_config = ConfigDict(extra="forbid")


# Pydantic picks whichever variant validates; extra="forbid" means an entry
# carrying both player_id and name matches neither.
Participant = Union[MemberParticipant, GuestParticipant]


# ===============================================
# == Match Schemas
# ===============================================


class MatchCreate(BaseModel):
    """
    Properties to receive via API on create.
    This is the main payload for submitting a final score.

    Scores, sport and note length are checked by the match service so that
    every rejection surfaces as a typed ValidationError.
    """

    sport: str
    team1_score: int
    team2_score: int
    roster: list[Participant]
    recorded_by: str = Field(..., min_length=1)
    note: str | None = None

    # Optional: the pickup game the match was played at
    game_id: str | None = None

    # Optional: when the match was played (defaults to now if not provided)
    played_at: datetime | None = Field(
        default=None,
        description="When the match was played (ISO format). Defaults to current time.",
    )

    @field_validator("played_at")
    @classmethod
    def normalize_played_at(cls, value: datetime | None) -> datetime | None:
        """Store every play time as UTC; naive values are taken to be UTC."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class MatchParticipantRead(BaseModel):
    """Properties to return to the client for a roster entry."""

    id: int
    team: int
    player_id: str | None = None
    guest_name: str | None = None
    guest_email: str | None = None

    # Members only
    rating_before: int | None = None
    rating_delta: int | None = None

    model_config = ConfigDict(from_attributes=True)


class MatchRead(BaseModel):
    """Properties to return to the client for a match."""

    id: int
    sport: str
    game_id: str | None = None
    team1_score: int
    team2_score: int
    recorded_by: str
    note: str | None = None
    played_at: datetime
    participants: list[MatchParticipantRead]

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def outcome(self) -> Outcome:
        return outcome_from_scores(self.team1_score, self.team2_score)
