# src/pullup/schemas/common.py

"""Enumerations shared across resources."""

from enum import Enum


class Sport(str, Enum):
    """Sports that can be recorded and ranked."""

    PICKLEBALL = "pickleball"
    SPIKEBALL = "spikeball"
    RUNNING = "running"
    VOLLEYBALL = "volleyball"
    CLIMBING = "climbing"
    SOCCER = "soccer"
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    FRISBEE = "frisbee"
    TENNIS = "tennis"
    BADMINTON = "badminton"


class LeaderboardSortKey(str, Enum):
    """Primary ordering for a leaderboard."""

    RATING = "rating"
    WINS = "wins"
    WIN_RATE = "win_rate"
    MATCHES_PLAYED = "matches_played"
