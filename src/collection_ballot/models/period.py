# src/collection_ballot/models/period.py
"""Models tracking ballot cycles and their phase state machine."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from collection_ballot.db.session import Base
from collection_ballot.db.time import utcnow

PHASE_SUBMISSION = "submission"
PHASE_VOTING = "voting"
PHASE_WINNER = "winner"

# Phase that advance() moves to from each phase; winner rolls over into a new period.
NEXT_PHASE = {
    PHASE_SUBMISSION: PHASE_VOTING,
    PHASE_VOTING: PHASE_WINNER,
    PHASE_WINNER: PHASE_SUBMISSION,
}


class Period(Base):
    """One submission -> voting -> winner cycle.

    The current period is the one with the latest ``started_at``. Once a
    successor exists a period is read-only history.
    """

    __tablename__ = "period"
    __table_args__ = (
        CheckConstraint(
            "phase IN ('submission', 'voting', 'winner')",
            name="ck_period_phase",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Cycle number; uniqueness makes a racing rollover fail instead of forking.
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    label: Mapped[str] = mapped_column(String(16), nullable=False)
    phase: Mapped[str] = mapped_column(String(16), nullable=False, default=PHASE_SUBMISSION)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
