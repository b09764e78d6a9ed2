# src/pullup/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .common import LeaderboardSortKey, Sport
from .leaderboard import LeaderboardEntry, LeaderboardRead, SportRead
from .match import (
    GuestParticipant,
    MatchCreate,
    MatchParticipantRead,
    MatchRead,
    MemberParticipant,
    Participant,
)
from .pagination import PaginatedResponse
from .player_stats import PlayerStatsRead, PlayerStatsSummary
from .referral import (
    ReferralCodeRead,
    ReferralQualifyResult,
    ReferralRegister,
    ReferralRegisterResult,
    TicketStats,
)

__all__ = [
    # Common
    "LeaderboardSortKey",
    "Sport",
    # Leaderboard
    "LeaderboardEntry",
    "LeaderboardRead",
    "SportRead",
    # Match
    "GuestParticipant",
    "MatchCreate",
    "MatchParticipantRead",
    "MatchRead",
    "MemberParticipant",
    "Participant",
    # Pagination
    "PaginatedResponse",
    # Player stats
    "PlayerStatsRead",
    "PlayerStatsSummary",
    # Referral
    "ReferralCodeRead",
    "ReferralQualifyResult",
    "ReferralRegister",
    "ReferralRegisterResult",
    "TicketStats",
]
