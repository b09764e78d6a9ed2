"""Add referral codes, referrals and raffle tickets

Revision ID: 20261017_referrals
Revises: 20261017_match_ledger
Create Date: 2026-10-17

This migration adds:
- referral_codes: one shareable code per player
- referrals: one row per referee (unique), stamped when qualified
- raffle_tickets: per-referrer ticket and referral counters
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_referrals"
down_revision: Union[str, Sequence[str], None] = "20261017_match_ledger"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the referral ledger tables."""
    # === REFERRAL_CODES ===
    op.create_table(
        "referral_codes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id"),
        sa.UniqueConstraint("code"),
    )

    # === REFERRALS ===
    # Uniqueness is on the referee: one referrer can have many referees
    op.create_table(
        "referrals",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("referrer_id", sa.String(), nullable=False),
        sa.Column("referee_id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("qualified_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("referee_id"),
    )
    op.create_index("ix_referrals_referrer_id", "referrals", ["referrer_id"])

    # === RAFFLE_TICKETS ===
    op.create_table(
        "raffle_tickets",
        sa.Column("player_id", sa.String(), nullable=False),
        sa.Column("tickets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_referrals", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "pending_referrals", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("pending_referrals >= 0", name="ck_raffle_tickets_pending"),
        sa.PrimaryKeyConstraint("player_id"),
    )


def downgrade() -> None:
    """Drop the referral ledger tables."""
    op.drop_table("raffle_tickets")
    op.drop_index("ix_referrals_referrer_id", table_name="referrals")
    op.drop_table("referrals")
    op.drop_table("referral_codes")
