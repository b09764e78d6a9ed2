# src/pullup/services/match_service.py

"""Business logic for match-related operations."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from pullup import config
from pullup.db import models
from pullup.exceptions import (
    DuplicateParticipantError,
    EmptyRosterError,
    EmptyTeamScoreError,
    InsufficientTeamsError,
    InvalidScoreError,
    MatchNotFoundError,
    NoteTooLongError,
    PullUpError,
    StatsConflictError,
    StorageError,
    UnknownSportError,
)
from pullup.rating.elo import outcome_from_scores, rating_delta, team_rating
from pullup.schemas import match as match_schema
from pullup.schemas.common import Sport
from pullup.services import stats_service

logger = logging.getLogger(__name__)


def _participant_key(participant: match_schema.Participant) -> tuple[str, str]:
    """Identity of a roster entry for duplicate detection, plus a display label."""
    if isinstance(participant, match_schema.MemberParticipant):
        return f"player:{participant.player_id}", participant.player_id
    if participant.email:
        return f"guest-email:{participant.email.strip().lower()}", participant.name
    return f"guest-name:{participant.name.strip().casefold()}", participant.name


def validate_match_submission(match_in: match_schema.MatchCreate) -> None:
    """
    Validates a match submission before anything touches the database.

    Raises:
        UnknownSportError: If the sport tag is not supported
        InvalidScoreError: If either score is negative or above SCORE_MAX
        NoteTooLongError: If the note exceeds NOTE_MAX_LENGTH
        EmptyRosterError: If the roster has no entries
        DuplicateParticipantError: If a member or guest appears twice
        EmptyTeamScoreError: If a team with nobody on it has a nonzero score
        InsufficientTeamsError: If either team has nobody on it
    """
    if match_in.sport not in {s.value for s in Sport}:
        raise UnknownSportError(match_in.sport)

    for team, score in ((1, match_in.team1_score), (2, match_in.team2_score)):
        if not 0 <= score <= config.SCORE_MAX:
            raise InvalidScoreError(team, score, config.SCORE_MAX)

    if match_in.note is not None and len(match_in.note) > config.NOTE_MAX_LENGTH:
        raise NoteTooLongError(len(match_in.note), config.NOTE_MAX_LENGTH)

    if not match_in.roster:
        raise EmptyRosterError()

    seen: set[str] = set()
    duplicates: list[str] = []
    for participant in match_in.roster:
        key, label = _participant_key(participant)
        if key in seen and label not in duplicates:
            duplicates.append(label)
        seen.add(key)
    if duplicates:
        raise DuplicateParticipantError(duplicates)

    team_sizes = {1: 0, 2: 0}
    for participant in match_in.roster:
        team_sizes[participant.team] += 1
    for team, score in ((1, match_in.team1_score), (2, match_in.team2_score)):
        if team_sizes[team] == 0:
            if score != 0:
                raise EmptyTeamScoreError(team, score)
            raise InsufficientTeamsError(team)

    logger.debug("Match submission validation passed")


def _build_participant(
    participant: match_schema.Participant,
) -> models.MatchParticipant:
    if isinstance(participant, match_schema.MemberParticipant):
        return models.MatchParticipant(
            team=participant.team, player_id=participant.player_id
        )
    return models.MatchParticipant(
        team=participant.team,
        guest_name=participant.name.strip(),
        guest_email=participant.email,
    )


async def append_match(
    db: AsyncSession, match_in: match_schema.MatchCreate
) -> models.Match:
    """
    Appends a match and its roster to the ledger and flushes to assign IDs.

    Does NOT commit: the caller owns the transaction. On SQLite the flush is
    also the point where this transaction takes the database write lock.

    Raises:
        ValidationError: If the submission violates a roster/score invariant
    """
    validate_match_submission(match_in)

    match_data = match_in.model_dump(exclude={"roster"}, exclude_none=True)
    new_match = models.Match(**match_data)
    for participant in match_in.roster:
        new_match.participants.append(_build_participant(participant))

    db.add(new_match)
    await db.flush()
    logger.debug(
        "Appended match to ledger",
        extra={"match_id": new_match.id, "sport": new_match.sport},
    )
    return new_match


async def record_match(
    db: AsyncSession, match_in: match_schema.MatchCreate
) -> models.Match:
    """
    Records a final score and updates every member's stats for the sport.

    This service is responsible for:
    1. Validating the roster, scores, sport and note (no effect on failure)
    2. Appending the Match and its roster to the ledger
    3. Loading or creating a stats row for every member participant
    4. Rating the match: each side's strength is the mean of its members'
       ratings, with guests counted at the seed rating
    5. Applying the result (tally, rating, points) to every member's row

    All operations are performed within a single transaction. If any step
    fails, the entire transaction is rolled back, so a match is never visible
    without all of its stats updates.

    Raises:
        ValidationError: If the submission is invalid (nothing is written)
        StatsConflictError: If a stats row was updated concurrently
        StorageError: If the database fails or aborts the transaction
    """
    logger.info(
        "Recording match",
        extra={
            "sport": match_in.sport,
            "roster_size": len(match_in.roster),
            "recorded_by": match_in.recorded_by,
        },
    )

    sport = match_in.sport
    k_factor = config.k_factor_for(sport)

    try:
        # 1-2. Validate and append first, so the write lock is held before any
        # stats are read
        new_match = await append_match(db, match_in)

        # 3. Resolve every member to a (locked) stats row
        member_stats: dict[str, models.PlayerStats] = {}
        for participant in new_match.participants:
            if participant.is_guest:
                continue
            assert participant.player_id is not None
            member_stats[participant.player_id] = (
                await stats_service.get_or_create_stats(
                    db, participant.player_id, sport
                )
            )

        # 4. Rate the two sides
        side_ratings: dict[int, list[float]] = {1: [], 2: []}
        for participant in new_match.participants:
            if participant.is_guest:
                side_ratings[participant.team].append(config.SEED_RATING)
            else:
                assert participant.player_id is not None
                side_ratings[participant.team].append(
                    member_stats[participant.player_id].rating
                )

        outcome = outcome_from_scores(match_in.team1_score, match_in.team2_score)
        team1_delta = rating_delta(
            team_rating(side_ratings[1]),
            team_rating(side_ratings[2]),
            outcome,
            k_factor,
        )
        logger.debug(
            "Rated match",
            extra={
                "match_id": new_match.id,
                "outcome": outcome.value,
                "team1_delta": team1_delta,
                "k_factor": k_factor,
            },
        )

        # 5. Apply the result to every member
        scores = {1: match_in.team1_score, 2: match_in.team2_score}
        for participant in new_match.participants:
            if participant.is_guest:
                continue
            assert participant.player_id is not None
            stats = member_stats[participant.player_id]
            opponent = 2 if participant.team == 1 else 1

            participant.rating_before = stats.rating
            participant.rating_delta = stats_service.apply_result(
                stats,
                stats_service.result_for_team(outcome, participant.team),
                team1_delta if participant.team == 1 else -team1_delta,
                points_scored=scores[participant.team],
                points_conceded=scores[opponent],
            )

        # 6. COMMIT the match and every stats update atomically
        await db.flush()
        await db.commit()
        logger.info(
            "Match recorded successfully",
            extra={"match_id": new_match.id, "outcome": outcome.value},
        )

    except StaleDataError as e:
        logger.warning(
            "Concurrent stats update detected, rolling back",
            extra={"sport": sport},
        )
        await db.rollback()
        raise StatsConflictError(sport) from e

    except PullUpError:
        await db.rollback()
        raise

    except SQLAlchemyError as e:
        logger.error(
            "Failed to record match",
            extra={"sport": sport, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise StorageError("record_match", str(e)) from e

    except Exception as e:
        logger.error(
            "Failed to record match",
            extra={"sport": sport, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise

    return await get_match(db, new_match.id)


async def get_match(db: AsyncSession, match_id: int) -> models.Match:
    """
    Loads a match with its roster.

    Raises:
        MatchNotFoundError: If no match has this ID
    """
    result = await db.execute(
        select(models.Match)
        .where(models.Match.id == match_id)
        .options(selectinload(models.Match.participants))
    )
    match = result.scalar_one_or_none()
    if match is None:
        raise MatchNotFoundError(match_id)
    return match


async def list_matches(
    db: AsyncSession,
    sport: str | None = None,
    game_id: str | None = None,
    player_id: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[models.Match], int]:
    """
    Lists matches newest first (played_at, then id, descending).

    History views depend on this ordering.

    Returns:
        The requested page of matches and the total number matching the filters
    """
    base_query = select(models.Match)

    if sport is not None:
        base_query = base_query.where(models.Match.sport == sport)

    if game_id is not None:
        base_query = base_query.where(models.Match.game_id == game_id)

    if player_id is not None:
        member_matches = select(models.MatchParticipant.match_id).where(
            models.MatchParticipant.player_id == player_id
        )
        base_query = base_query.where(models.Match.id.in_(member_matches))

    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    query = (
        base_query.order_by(models.Match.played_at.desc(), models.Match.id.desc())
        .offset(skip)
        .limit(limit)
        .options(selectinload(models.Match.participants))
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def list_by_sport(
    db: AsyncSession, sport: str, skip: int = 0, limit: int = 50
) -> list[models.Match]:
    """Matches for one sport, newest first."""
    if sport not in {s.value for s in Sport}:
        raise UnknownSportError(sport)
    matches, _ = await list_matches(db, sport=sport, skip=skip, limit=limit)
    return matches


async def list_by_game(
    db: AsyncSession, game_id: str, skip: int = 0, limit: int = 50
) -> list[models.Match]:
    """Matches played at one pickup game, newest first."""
    matches, _ = await list_matches(db, game_id=game_id, skip=skip, limit=limit)
    return matches
