"""ballot schema

Revision ID: 5c1e8a9d2b7f
Revises:
Create Date: 2026-10-17 09:12:44.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e8a9d2b7f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the period, submission, vote, ballot, winner and member tables."""
    op.create_table(
        "period",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(length=16), nullable=False),
        sa.Column("phase", sa.String(length=16), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "phase IN ('submission', 'voting', 'winner')",
            name="ck_period_phase",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sequence"),
    )
    op.create_index("ix_period_started_at", "period", ["started_at"])

    op.create_table(
        "member",
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("has_required_role", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "submission",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_address", sa.String(length=42), nullable=False),
        sa.Column("submitter_id", sa.String(length=64), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("thumbnail", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("floor_price", sa.Numeric(20, 6), nullable=False),
        sa.Column("volume_24h", sa.Numeric(20, 6), nullable=False),
        sa.Column("total_items", sa.Integer(), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("vote_count >= 0", name="ck_submission_vote_count"),
        sa.ForeignKeyConstraint(["period_id"], ["period.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "contract_address",
            "period_id",
            name="uq_submission_address_period",
        ),
    )
    op.create_index(
        "ix_submission_period_ranking",
        "submission",
        ["period_id", "vote_count", "submitted_at"],
    )

    op.create_table(
        "vote",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("submission_id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("voted_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["submission_id"], ["submission.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["period.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id",
            "submission_id",
            "period_id",
            name="uq_vote_user_submission",
        ),
    )
    op.create_index("ix_vote_user_period", "vote", ["user_id", "period_id"])
    op.create_index("ix_vote_submission_id", "vote", ["submission_id"])

    op.create_table(
        "ballot",
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("toggle_count", sa.Integer(), nullable=False),
        sa.Column("last_toggled_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["period_id"], ["period.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "period_id"),
    )

    op.create_table(
        "winner",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("submission_id", sa.Integer(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("final_vote_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("rank >= 1", name="ck_winner_rank"),
        sa.ForeignKeyConstraint(["period_id"], ["period.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submission_id"], ["submission.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("period_id", "rank", name="uq_winner_period_rank"),
        sa.UniqueConstraint(
            "period_id",
            "submission_id",
            name="uq_winner_period_submission",
        ),
    )
    op.create_index("ix_winner_period_id", "winner", ["period_id"])


def downgrade() -> None:
    """Drop the ballot schema."""
    op.drop_index("ix_winner_period_id", table_name="winner")
    op.drop_table("winner")
    op.drop_table("ballot")
    op.drop_index("ix_vote_submission_id", table_name="vote")
    op.drop_index("ix_vote_user_period", table_name="vote")
    op.drop_table("vote")
    op.drop_index("ix_submission_period_ranking", table_name="submission")
    op.drop_table("submission")
    op.drop_table("member")
    op.drop_index("ix_period_started_at", table_name="period")
    op.drop_table("period")
