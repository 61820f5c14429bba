"""Period state machine: submission -> voting -> winner -> next period."""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from collection_ballot.core.errors import InvalidPeriodState, NoActivePeriod, StaleTransition
from collection_ballot.db.time import cycle_label, is_cycle_label, next_cycle_label, utcnow
from collection_ballot.db.transaction import storage_reads, unit_of_work
from collection_ballot.models import Period
from collection_ballot.models.period import (
    NEXT_PHASE,
    PHASE_SUBMISSION,
    PHASE_VOTING,
    PHASE_WINNER,
)
from collection_ballot.services.winners import WinnerCalculator

logger = logging.getLogger(__name__)


def get_current_period(db: Session) -> Period:
    """Return the period with the latest start time.

    Raises:
        NoActivePeriod: If no period has been opened yet.
        StorageFailure: If the store could not be read.
    """
    with storage_reads(db):
        period = db.execute(
            select(Period)
            .order_by(Period.started_at.desc(), Period.id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
    if period is None:
        raise NoActivePeriod()
    return period


def get_period(db: Session, period_id: int) -> Period:
    """Return the period with ``period_id``.

    Raises:
        NoActivePeriod: If the period does not exist.
        StorageFailure: If the store could not be read.
    """
    with storage_reads(db):
        period = db.get(Period, period_id, populate_existing=True)
    if period is None:
        raise NoActivePeriod(f"Period {period_id} not found")
    return period


class PeriodManager:
    """Drives the phase cycle of the current period.

    Every transition is a compare-and-set against the phase read when
    :meth:`advance` starts, so concurrent callers cannot apply the same
    transition twice.
    """

    def __init__(self, winner_calculator: WinnerCalculator | None = None) -> None:
        self.winner_calculator = winner_calculator or WinnerCalculator()

    def get_current_period(self, db: Session) -> Period:
        return get_current_period(db)

    def advance(self, db: Session) -> Period:
        """Apply the next transition to the current period.

        Returns:
            The updated period, or the newly opened one when a winner period
            rolls over.

        Raises:
            NoActivePeriod: If no period exists.
            InvalidPeriodState: If the stored phase is not a known phase.
            StaleTransition: If another caller changed the period first.
            StorageFailure: If the store failed; nothing was applied.
        """
        current = get_current_period(db)
        observed = current.phase
        if observed not in NEXT_PHASE:
            raise InvalidPeriodState(f"Invalid period state: {observed!r}")

        if observed == PHASE_SUBMISSION:
            period = self._open_voting(db, current)
        elif observed == PHASE_VOTING:
            period = self._close_voting(db, current)
        else:
            period = self._open_next_period(db, current)

        logger.info(
            "Advanced period %s from %s to %s (now period %s)",
            current.id,
            observed,
            NEXT_PHASE[observed],
            period.id,
        )
        return period

    def _compare_and_set(
        self,
        db: Session,
        period: Period,
        expected: str,
        target: str,
        **values: object,
    ) -> None:
        result = db.execute(
            update(Period)
            .where(Period.id == period.id, Period.phase == expected)
            .values(phase=target, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "Stale %s -> %s transition for period %s",
                expected,
                target,
                period.id,
            )
            raise StaleTransition()

    def _open_voting(self, db: Session, current: Period) -> Period:
        with unit_of_work(db):
            self._compare_and_set(db, current, PHASE_SUBMISSION, PHASE_VOTING)
            db.refresh(current)
        return current

    def _close_voting(self, db: Session, current: Period) -> Period:
        # The phase flip and the winner snapshot commit together or not at all.
        with unit_of_work(db):
            self._compare_and_set(
                db,
                current,
                PHASE_VOTING,
                PHASE_WINNER,
                ended_at=utcnow(),
            )
            self.winner_calculator.compute(db, current.id)
            db.refresh(current)
        return current

    def _open_next_period(self, db: Session, current: Period) -> Period:
        if not is_cycle_label(current.label):
            raise InvalidPeriodState(f"Invalid cycle label: {current.label!r}")

        with unit_of_work(db):
            # Serialize rollovers on the outgoing period's row.
            db.execute(
                select(Period.id).where(Period.id == current.id).with_for_update()
            )
            successor_exists = db.execute(
                select(Period.id).where(Period.sequence > current.sequence).limit(1)
            ).first()
            if successor_exists is not None:
                logger.warning("Period %s already has a successor", current.id)
                raise StaleTransition()

            successor = Period(
                sequence=current.sequence + 1,
                label=next_cycle_label(current.label),
                phase=PHASE_SUBMISSION,
                started_at=utcnow(),
            )
            db.add(successor)
            try:
                db.flush()
            except IntegrityError as exc:
                raise StaleTransition() from exc
        return successor

    def open_first_period(self, db: Session, label: str | None = None) -> Period:
        """Create the first period of a fresh deployment.

        Args:
            db: Database session
            label: ``YYYY-MM`` cycle label; defaults to the current month

        Raises:
            InvalidPeriodState: If the label is malformed or a period already exists.
        """
        if label is not None and not is_cycle_label(label):
            raise InvalidPeriodState(f"Invalid cycle label: {label!r} (expected YYYY-MM)")

        with unit_of_work(db):
            existing = db.execute(select(Period.id).limit(1)).first()
            if existing is not None:
                raise InvalidPeriodState("A period already exists")

            started_at = utcnow()
            period = Period(
                sequence=1,
                label=label or cycle_label(started_at),
                phase=PHASE_SUBMISSION,
                started_at=started_at,
            )
            db.add(period)
            try:
                db.flush()
            except IntegrityError as exc:
                raise InvalidPeriodState("A period already exists") from exc

        logger.info("Opened first period %s (%s)", period.id, period.label)
        return period
