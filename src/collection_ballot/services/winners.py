"""Winner snapshot computation and lookup."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from collection_ballot.core.errors import AlreadyComputed, NoActivePeriod
from collection_ballot.core.settings import settings
from collection_ballot.db.time import utcnow
from collection_ballot.db.transaction import storage_reads
from collection_ballot.models import Period, Submission, Winner, ranking_order
from collection_ballot.models.period import PHASE_WINNER

logger = logging.getLogger(__name__)


class WinnerCalculator:
    """Freezes the top submissions of a period into ranked winner rows."""

    def __init__(self, limit: int | None = None) -> None:
        self.limit = settings.winner_count if limit is None else limit

    def compute(
        self,
        db: Session,
        period_id: int,
        limit: int | None = None,
    ) -> list[Winner]:
        """Write the ranked winner snapshot for ``period_id``.

        The caller owns the transaction: rows are flushed but not committed so
        the snapshot and the phase flip become visible together.

        Args:
            db: Database session
            period_id: Period being closed
            limit: Snapshot size; defaults to the calculator's limit

        Returns:
            The winner rows, ordered by rank.

        Raises:
            AlreadyComputed: If any winner row already exists for the period.
        """
        already = db.execute(
            select(Winner.id).where(Winner.period_id == period_id).limit(1)
        ).first()
        if already is not None:
            raise AlreadyComputed(period_id)

        standings = db.execute(
            select(Submission.id, Submission.vote_count)
            .where(Submission.period_id == period_id)
            .order_by(*ranking_order())
            .limit(self.limit if limit is None else limit)
        ).all()

        created_at = utcnow()
        winners = [
            Winner(
                period_id=period_id,
                submission_id=row.id,
                rank=rank,
                final_vote_count=row.vote_count,
                created_at=created_at,
            )
            for rank, row in enumerate(standings, start=1)
        ]
        db.add_all(winners)
        db.flush()

        logger.info("Computed %d winners for period %s", len(winners), period_id)
        return winners

    @staticmethod
    def list_winners(db: Session, period_id: int) -> list[dict[str, Any]]:
        """Return the ranked winners of ``period_id`` with submission metadata.

        Empty unless the period has reached the winner phase.

        Raises:
            NoActivePeriod: If the period does not exist.
        """
        with storage_reads(db):
            phase = db.execute(
                select(Period.phase).where(Period.id == period_id)
            ).scalar_one_or_none()
        if phase is None:
            raise NoActivePeriod(f"Period {period_id} not found")
        if phase != PHASE_WINNER:
            return []

        with storage_reads(db):
            rows = db.execute(
                select(
                    Winner.id,
                    Winner.period_id,
                    Winner.submission_id,
                    Winner.rank,
                    Winner.final_vote_count,
                    Winner.created_at,
                    Submission.contract_address,
                    Submission.name,
                    Submission.thumbnail,
                    Submission.floor_price,
                    Submission.volume_24h,
                    Submission.total_items,
                )
                .join(Submission, Submission.id == Winner.submission_id)
                .where(Winner.period_id == period_id)
                .order_by(Winner.rank.asc())
            ).mappings()
            return [dict(row) for row in rows]
