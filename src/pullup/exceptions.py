# src/pullup/exceptions.py

"""Custom exception hierarchy for PullUp.

Every error is scoped to a single request and falls in one of four families:
1. NotFoundError: the referenced record does not exist (not retried)
2. ValidationError: malformed input, rejected before any write
3. ConflictError: a concurrent writer won; safe to retry the operation once
4. StorageError: the store failed or aborted; safe to retry the operation
"""

from __future__ import annotations


class PullUpError(Exception):
    """Base exception for all PullUp errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Not Found Errors (HTTP 404)
# =============================================================================


class NotFoundError(PullUpError):
    """Base class for resource not found errors."""

    pass


class MatchNotFoundError(NotFoundError):
    """Raised when a match ID does not exist."""

    def __init__(self, match_id: int) -> None:
        super().__init__(
            message=f"Match with ID {match_id} not found",
            details={"match_id": match_id},
        )


class PlayerStatsNotFoundError(NotFoundError):
    """Raised when a player has no stats rows (optionally for one sport)."""

    def __init__(self, player_id: str, sport: str | None = None) -> None:
        if sport:
            message = f"No {sport} stats found for player {player_id}"
        else:
            message = f"No stats found for player {player_id}"
        super().__init__(
            message=message,
            details={"player_id": player_id, "sport": sport},
        )


class ReferralCodeNotFoundError(NotFoundError):
    """Raised when a referral code does not resolve to a referrer."""

    def __init__(self, code: str) -> None:
        super().__init__(
            message=f"Referral code {code} not found",
            details={"code": code},
        )


# =============================================================================
# Validation Errors (HTTP 422)
# =============================================================================


class ValidationError(PullUpError):
    """Base class for validation errors."""

    pass


class UnknownSportError(ValidationError):
    """Raised when a sport tag is not in the supported set."""

    def __init__(self, sport: str) -> None:
        super().__init__(
            message=f"Unknown sport: {sport!r}",
            details={"sport": sport},
        )


class InvalidScoreError(ValidationError):
    """Raised when a team score is negative or above the configured maximum."""

    def __init__(self, team: int, score: int, max_score: int) -> None:
        super().__init__(
            message=(
                f"Score for team {team} must be between 0 and {max_score}, "
                f"got {score}"
            ),
            details={"team": team, "score": score, "max_score": max_score},
        )


class NoteTooLongError(ValidationError):
    """Raised when a match note exceeds the configured maximum length."""

    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            message=f"Note must be at most {max_length} characters, got {length}",
            details={"length": length, "max_length": max_length},
        )


class InvalidSortKeyError(ValidationError):
    """Raised when a leaderboard sort key is not supported."""

    def __init__(self, sort_key: str) -> None:
        super().__init__(
            message=f"Unsupported leaderboard sort key: {sort_key!r}",
            details={"sort_key": sort_key},
        )


class RosterValidationError(ValidationError):
    """Base class for roster validation errors."""

    pass


class EmptyRosterError(RosterValidationError):
    """Raised when a match is submitted without participants."""

    def __init__(self) -> None:
        super().__init__(message="Match roster must not be empty")


class DuplicateParticipantError(RosterValidationError):
    """Raised when the same participant appears more than once in a roster."""

    def __init__(self, participants: list[str]) -> None:
        super().__init__(
            message=f"Duplicate participant(s) in roster: {participants}",
            details={"duplicate_participants": participants},
        )


class InsufficientTeamsError(RosterValidationError):
    """Raised when one of the two teams has nobody on it."""

    def __init__(self, empty_team: int) -> None:
        super().__init__(
            message=f"Match requires at least 2 teams, team {empty_team} is empty",
            details={"empty_team": empty_team},
        )


class EmptyTeamScoreError(RosterValidationError):
    """Raised when a team without participants is credited with points."""

    def __init__(self, team: int, score: int) -> None:
        super().__init__(
            message=f"Team {team} has no participants but scored {score}",
            details={"team": team, "score": score},
        )


# =============================================================================
# Conflict Errors (HTTP 409)
# =============================================================================


class ConflictError(PullUpError):
    """Base class for concurrent-write conflicts. Safe to retry once."""

    pass


class StatsConflictError(ConflictError):
    """Raised when a stats row changed underneath an in-flight match."""

    def __init__(self, sport: str) -> None:
        super().__init__(
            message=f"Concurrent update to {sport} stats, please retry",
            details={"sport": sport},
        )


class ReferralConflictError(ConflictError):
    """Raised when two redemptions for the same referee race each other."""

    def __init__(self, referee_id: str) -> None:
        super().__init__(
            message=f"Referral for {referee_id} was registered concurrently",
            details={"referee_id": referee_id},
        )


# =============================================================================
# Storage Errors (HTTP 503)
# =============================================================================


class StorageError(PullUpError):
    """Raised when the backing store is unavailable or aborts a transaction.

    Nothing from the failed operation is visible, so the whole logical
    operation may be retried.
    """

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            message=f"Storage failure during {operation}",
            details={"operation": operation, "reason": reason},
        )
