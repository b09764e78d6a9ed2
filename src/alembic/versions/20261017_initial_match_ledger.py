"""Create match ledger and player stats tables

Revision ID: 20261017_match_ledger
Revises:
Create Date: 2026-10-17

This migration creates:
- matches: append-only match records
- match_participants: team rosters (members and guests)
- player_stats: per (player, sport) record and rating, with a version
  column for optimistic locking
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_match_ledger"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create matches, match_participants and player_stats."""
    # === MATCHES ===
    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sport", sa.String(), nullable=False),
        sa.Column("game_id", sa.String(), nullable=True),
        sa.Column("team1_score", sa.Integer(), nullable=False),
        sa.Column("team2_score", sa.Integer(), nullable=False),
        sa.Column("recorded_by", sa.String(), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("team1_score >= 0", name="ck_matches_team1_score"),
        sa.CheckConstraint("team2_score >= 0", name="ck_matches_team2_score"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_matches_sport", "matches", ["sport"])
    op.create_index("ix_matches_game_id", "matches", ["game_id"])
    op.create_index("ix_matches_played_at", "matches", ["played_at"])

    # === MATCH_PARTICIPANTS ===
    op.create_table(
        "match_participants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("team", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(), nullable=True),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("rating_before", sa.Integer(), nullable=True),
        sa.Column("rating_delta", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("team IN (1, 2)", name="ck_match_participants_team"),
        sa.CheckConstraint(
            "(player_id IS NULL) <> (guest_name IS NULL)",
            name="ck_match_participants_member_or_guest",
        ),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_match_participants_match_id", "match_participants", ["match_id"]
    )
    op.create_index(
        "ix_match_participants_player_id", "match_participants", ["player_id"]
    )

    # === PLAYER_STATS ===
    op.create_table(
        "player_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(), nullable=False),
        sa.Column("sport", sa.String(), nullable=False),
        sa.Column("matches_played", sa.Integer(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("draws", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("highest_rating", sa.Integer(), nullable=False),
        sa.Column("points_scored", sa.Integer(), nullable=False),
        sa.Column("points_conceded", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "matches_played = wins + losses + draws", name="ck_player_stats_tally"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "sport", name="_player_sport_uc"),
    )
    op.create_index("ix_player_stats_player_id", "player_stats", ["player_id"])
    op.create_index("ix_player_stats_sport", "player_stats", ["sport"])


def downgrade() -> None:
    """Drop the match ledger tables."""
    op.drop_index("ix_player_stats_sport", table_name="player_stats")
    op.drop_index("ix_player_stats_player_id", table_name="player_stats")
    op.drop_table("player_stats")

    op.drop_index("ix_match_participants_player_id", table_name="match_participants")
    op.drop_index("ix_match_participants_match_id", table_name="match_participants")
    op.drop_table("match_participants")

    op.drop_index("ix_matches_played_at", table_name="matches")
    op.drop_index("ix_matches_game_id", table_name="matches")
    op.drop_index("ix_matches_sport", table_name="matches")
    op.drop_table("matches")
