# src/collection_ballot/models/winner.py
"""Immutable ranked winner snapshot rows."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from collection_ballot.db.session import Base
from collection_ballot.db.time import utcnow


class Winner(Base):
    """One ranked entry of a period's winner snapshot.

    Rows are written once when the period enters the winner phase and are
    never updated.
    """

    __tablename__ = "winner"
    __table_args__ = (
        UniqueConstraint("period_id", "rank", name="uq_winner_period_rank"),
        UniqueConstraint("period_id", "submission_id", name="uq_winner_period_submission"),
        CheckConstraint("rank >= 1", name="ck_winner_rank"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    period_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("period.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    submission_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("submission.id", ondelete="CASCADE"),
        nullable=False,
    )
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    # Vote count frozen at computation time.
    final_vote_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
