# src/pullup/rating/elo.py

"""
ELO rating calculation.

Standard logistic expected-score model:
    E_a = 1 / (1 + 10^((R_b - R_a) / 400))
    R_a' = R_a + K * (S_a - E_a)

Everything here is pure; persistence lives in the stats service.
"""

from collections.abc import Sequence
from enum import Enum

from pullup import config


class Outcome(str, Enum):
    """Result of a two-sided match, from team 1's (side A's) point of view."""

    TEAM1_WINS = "team1_wins"
    TEAM2_WINS = "team2_wins"
    DRAW = "draw"


# Actual score for side A under each outcome
_ACTUAL_SCORE = {
    Outcome.TEAM1_WINS: 1.0,
    Outcome.TEAM2_WINS: 0.0,
    Outcome.DRAW: 0.5,
}


def outcome_from_scores(team1_score: int, team2_score: int) -> Outcome:
    """Map a final score line to an outcome."""
    if team1_score > team2_score:
        return Outcome.TEAM1_WINS
    if team2_score > team1_score:
        return Outcome.TEAM2_WINS
    return Outcome.DRAW


def expected_score(rating: float, opponent_rating: float) -> float:
    """Probability-like expected score of ``rating`` against ``opponent_rating``."""
    return 1.0 / (1.0 + 10 ** ((opponent_rating - rating) / 400.0))


def team_rating(ratings: Sequence[float]) -> float:
    """Effective rating of a side: the mean of its members' ratings."""
    if not ratings:
        raise ValueError("a team needs at least one rating")
    return sum(ratings) / len(ratings)


def rating_delta(
    rating_a: float, rating_b: float, outcome: Outcome, k_factor: int
) -> int:
    """Points side A gains (negative: loses). Side B moves by the negation.

    Computing the delta once and mirroring it keeps every exchange exactly
    zero-sum after rounding.
    """
    actual_a = _ACTUAL_SCORE[outcome]
    expected_a = expected_score(rating_a, rating_b)
    return round(k_factor * (actual_a - expected_a))


def apply_delta(rating: int, delta: int, floor: int | None = None) -> int:
    """Apply a delta to a rating, never going below the rating floor."""
    if floor is None:
        floor = config.RATING_FLOOR
    return max(floor, rating + delta)


def compute_new_ratings(
    rating_a: int,
    rating_b: int,
    outcome: Outcome,
    k_factor: int,
    floor: int | None = None,
) -> tuple[int, int]:
    """Post-match ratings for two sides.

    Args:
        rating_a: Pre-match rating of side A (team 1)
        rating_b: Pre-match rating of side B (team 2)
        outcome: Match outcome from side A's point of view
        k_factor: Maximum points exchanged
        floor: Minimum rating; defaults to ``config.RATING_FLOOR``

    Returns:
        ``(new_rating_a, new_rating_b)``
    """
    delta = rating_delta(rating_a, rating_b, outcome, k_factor)
    return apply_delta(rating_a, delta, floor), apply_delta(rating_b, -delta, floor)
