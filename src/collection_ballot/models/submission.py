# src/collection_ballot/models/submission.py
"""SQLAlchemy model for nominated collections."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from collection_ballot.db.session import Base
from collection_ballot.db.time import utcnow


class Submission(Base):
    """A collection nominated for one period.

    Metadata is a snapshot taken at submission time. ``vote_count`` is a
    cache of the live vote rows and is only ever changed by the vote ledger.
    """

    __tablename__ = "submission"
    __table_args__ = (
        UniqueConstraint("contract_address", "period_id", name="uq_submission_address_period"),
        CheckConstraint("vote_count >= 0", name="ck_submission_vote_count"),
        Index("ix_submission_period_ranking", "period_id", "vote_count", "submitted_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False)
    submitter_id: Mapped[str] = mapped_column(String(64), nullable=False)
    period_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("period.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    floor_price: Mapped[float] = mapped_column(Numeric(20, 6, asdecimal=False), nullable=False, default=0)
    volume_24h: Mapped[float] = mapped_column(Numeric(20, 6, asdecimal=False), nullable=False, default=0)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


def ranking_order() -> tuple:
    """Canonical ranking: most votes first, earlier submissions win ties."""
    return (
        Submission.vote_count.desc(),
        Submission.submitted_at.asc(),
        Submission.id.asc(),
    )
