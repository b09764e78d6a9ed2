# src/pullup/db/models.py

"""Database models for the PullUp match ledger."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===============================================
# Mixins for Common Columns
# ===============================================


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(
        default=None,
        onupdate=_utcnow,
        nullable=True,
    )


# ===============================================
# Match Ledger Tables
# ===============================================


class Match(Base, TimestampMixin):
    """A completed match. Rows are append-only; nothing updates or deletes them."""

    __tablename__ = "matches"
    id: Mapped[int] = mapped_column(primary_key=True)
    sport: Mapped[str] = mapped_column(String, nullable=False, index=True)

    # The pickup game this match was played at, if any (owned by the game service)
    game_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    team1_score: Mapped[int] = mapped_column(nullable=False)
    team2_score: Mapped[int] = mapped_column(nullable=False)
    recorded_by: Mapped[str] = mapped_column(String, nullable=False)
    note: Mapped[str | None] = mapped_column(String, nullable=True)

    # Business timestamp: when the match was actually played
    played_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )

    participants: Mapped[List["MatchParticipant"]] = relationship(
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchParticipant.id",
    )

    __table_args__ = (
        CheckConstraint("team1_score >= 0", name="ck_matches_team1_score"),
        CheckConstraint("team2_score >= 0", name="ck_matches_team2_score"),
    )


class MatchParticipant(Base, TimestampMixin):
    """One roster entry: either a member (player_id) or a guest (guest_name)."""

    __tablename__ = "match_participants"
    id: Mapped[int] = mapped_column(primary_key=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id"), nullable=False, index=True
    )
    team: Mapped[int] = mapped_column(nullable=False)

    # Exactly one of player_id / guest_name is set
    player_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    guest_name: Mapped[str | None] = mapped_column(String, nullable=True)
    guest_email: Mapped[str | None] = mapped_column(String, nullable=True)

    # Members only: rating going into the match and the delta applied to it
    rating_before: Mapped[int | None] = mapped_column(nullable=True)
    rating_delta: Mapped[int | None] = mapped_column(nullable=True)

    match: Mapped["Match"] = relationship(back_populates="participants")

    __table_args__ = (
        CheckConstraint("team IN (1, 2)", name="ck_match_participants_team"),
        CheckConstraint(
            "(player_id IS NULL) <> (guest_name IS NULL)",
            name="ck_match_participants_member_or_guest",
        ),
    )

    @property
    def is_guest(self) -> bool:
        return self.player_id is None


class PlayerStats(Base, TimestampMixin):
    """A player's cumulative record and rating in one sport.

    The version column is SQLAlchemy's version_id_col: every UPDATE is
    conditional on the version read, so a concurrent writer that got there
    first makes this one fail with StaleDataError instead of losing its update.
    """

    __tablename__ = "player_stats"
    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    sport: Mapped[str] = mapped_column(String, nullable=False, index=True)

    matches_played: Mapped[int] = mapped_column(default=0, nullable=False)
    wins: Mapped[int] = mapped_column(default=0, nullable=False)
    losses: Mapped[int] = mapped_column(default=0, nullable=False)
    draws: Mapped[int] = mapped_column(default=0, nullable=False)

    rating: Mapped[int] = mapped_column(nullable=False)
    highest_rating: Mapped[int] = mapped_column(nullable=False)

    points_scored: Mapped[int] = mapped_column(default=0, nullable=False)
    points_conceded: Mapped[int] = mapped_column(default=0, nullable=False)

    version: Mapped[int] = mapped_column(nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("player_id", "sport", name="_player_sport_uc"),
        CheckConstraint(
            "matches_played = wins + losses + draws",
            name="ck_player_stats_tally",
        ),
    )

    @property
    def win_rate(self) -> float:
        if self.matches_played == 0:
            return 0.0
        return self.wins / self.matches_played

    @classmethod
    async def find(
        cls, db: AsyncSession, player_id: str, sport: str, for_update: bool = False
    ) -> "PlayerStats | None":
        """Find a stats row by player and sport, optionally locking it."""
        query = select(cls).where(cls.player_id == player_id, cls.sport == sport)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()


# ===============================================
# Referral Ledger Tables
# ===============================================


class ReferralCode(Base, TimestampMixin):
    """The one shareable referral code issued to a player."""

    __tablename__ = "referral_codes"
    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)


class Referral(Base, TimestampMixin):
    """A redeemed referral code. A referee can redeem at most one code ever."""

    __tablename__ = "referrals"
    id: Mapped[int] = mapped_column(primary_key=True)
    referrer_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    referee_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String, nullable=False)

    # Set once, when the referee completes the qualifying action
    qualified_at: Mapped[datetime | None] = mapped_column(nullable=True)


class RaffleTickets(Base, TimestampMixin):
    """Per-referrer ticket tallies.

    Counters are only ever changed with single-statement increments so that
    concurrent redemptions for the same referrer never lose an update.
    """

    __tablename__ = "raffle_tickets"
    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    tickets: Mapped[int] = mapped_column(default=0, nullable=False)
    total_referrals: Mapped[int] = mapped_column(default=0, nullable=False)
    pending_referrals: Mapped[int] = mapped_column(default=0, nullable=False)

    __table_args__ = (
        CheckConstraint("pending_referrals >= 0", name="ck_raffle_tickets_pending"),
    )
