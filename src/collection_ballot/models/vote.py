# src/collection_ballot/models/vote.py
"""Models capturing votes on submissions."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from collection_ballot.db.session import Base
from collection_ballot.db.time import utcnow


class Vote(Base):
    """A single user's standing vote toward one submission within one period."""

    __tablename__ = "vote"
    __table_args__ = (
        # Backstop against duplicate inserts; the ballot lock enforces the cap.
        UniqueConstraint("user_id", "submission_id", "period_id", name="uq_vote_user_submission"),
        Index("ix_vote_user_period", "user_id", "period_id"),
        Index("ix_vote_submission_id", "submission_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    submission_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("submission.id", ondelete="CASCADE"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("period.id", ondelete="CASCADE"),
        nullable=False,
    )
    voted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Ballot(Base):
    """Per-voter row for one period.

    Every toggle updates this row first, so its row lock serializes a voter's
    toggles within a period.
    """

    __tablename__ = "ballot"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    period_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("period.id", ondelete="CASCADE"),
        primary_key=True,
    )
    toggle_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_toggled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
