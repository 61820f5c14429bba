"""Vote ledger: capped, toggleable votes and the submission vote-count cache.

``toggle`` is the only operation that changes votes. It runs as a single
transaction that first locks the voter's ballot row, so two toggles by the
same voter in the same period never interleave. The ledger write and the
``Submission.vote_count`` update commit together or not at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from collection_ballot.core.errors import (
    NoActivePeriod,
    SubmissionNotFound,
    VoteCapExceeded,
    WrongPhase,
)
from collection_ballot.core.settings import settings
from collection_ballot.db.time import utcnow
from collection_ballot.db.transaction import storage_reads, unit_of_work
from collection_ballot.models import Ballot, Period, Submission, Vote
from collection_ballot.models.period import PHASE_VOTING

logger = logging.getLogger(__name__)

ACTION_ADDED = "added"
ACTION_REMOVED = "removed"


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle: what happened and the submission's new count."""

    action: str
    vote_count: int


@dataclass(frozen=True)
class VoteCountDrift:
    """A submission whose cached count disagreed with the ledger."""

    submission_id: int
    cached_vote_count: int
    actual_vote_count: int


class VoteLedger:
    """Records vote grants and keeps ``Submission.vote_count`` in step."""

    def __init__(self, max_votes: int | None = None) -> None:
        self.max_votes = settings.max_votes_per_period if max_votes is None else max_votes

    def toggle(
        self,
        db: Session,
        user_id: str,
        submission_id: int,
        period_id: int,
    ) -> ToggleResult:
        """Add the voter's vote for a submission, or remove it if present.

        Args:
            db: Database session
            user_id: Voter identifier
            submission_id: Submission being voted on
            period_id: Period the vote belongs to

        Returns:
            The action taken and the submission's vote count after it.

        Raises:
            NoActivePeriod: If the period does not exist.
            WrongPhase: If the period is not in the voting phase.
            SubmissionNotFound: If the submission is not part of the period.
            VoteCapExceeded: If adding would exceed the per-period cap.
            StorageFailure: If the store failed; nothing was changed.
        """
        # Cheap rejection before taking any lock.
        self._require_voting(db, period_id, lock=False)

        with unit_of_work(db):
            self._lock_ballot(db, user_id, period_id)
            self._require_voting(db, period_id, lock=True)

            in_period = db.execute(
                select(Submission.id).where(
                    Submission.id == submission_id,
                    Submission.period_id == period_id,
                )
            ).first()
            if in_period is None:
                raise SubmissionNotFound()

            existing = db.execute(
                select(Vote).where(
                    Vote.user_id == user_id,
                    Vote.submission_id == submission_id,
                    Vote.period_id == period_id,
                )
            ).scalar_one_or_none()

            if existing is not None:
                db.delete(existing)
                action, delta = ACTION_REMOVED, -1
            else:
                active_votes = db.execute(
                    select(func.count())
                    .select_from(Vote)
                    .where(Vote.user_id == user_id, Vote.period_id == period_id)
                ).scalar_one()
                if active_votes >= self.max_votes:
                    raise VoteCapExceeded(self.max_votes)
                db.add(
                    Vote(
                        user_id=user_id,
                        submission_id=submission_id,
                        period_id=period_id,
                        voted_at=utcnow(),
                    )
                )
                action, delta = ACTION_ADDED, 1
            db.flush()

            db.execute(
                update(Submission)
                .where(Submission.id == submission_id)
                .values(vote_count=Submission.vote_count + delta)
            )
            vote_count = db.execute(
                select(Submission.vote_count).where(Submission.id == submission_id)
            ).scalar_one()

        logger.debug(
            "Vote %s by %s on submission %s (count=%s)",
            action,
            user_id,
            submission_id,
            vote_count,
        )
        return ToggleResult(action=action, vote_count=vote_count)

    @staticmethod
    def _require_voting(db: Session, period_id: int, *, lock: bool) -> None:
        stmt = select(Period.phase).where(Period.id == period_id)
        if lock:
            # Shared lock: advance() cannot flip the phase until this toggle commits.
            stmt = stmt.with_for_update(read=True)
        with storage_reads(db):
            phase = db.execute(stmt).scalar_one_or_none()
        if phase is None:
            raise NoActivePeriod(f"Period {period_id} not found")
        if phase != PHASE_VOTING:
            raise WrongPhase(PHASE_VOTING, phase)

    @staticmethod
    def _lock_ballot(db: Session, user_id: str, period_id: int) -> None:
        """Create the voter's ballot row if needed and take its row lock.

        Both statements are writes, so on SQLite the transaction holds the
        database write lock from here on.
        """
        dialect = db.get_bind().dialect.name
        insert_for: Any
        if dialect == "postgresql":
            insert_for = postgresql.insert
        elif dialect == "sqlite":
            insert_for = sqlite.insert
        else:
            insert_for = None

        if insert_for is not None:
            db.execute(
                insert_for(Ballot)
                .values(user_id=user_id, period_id=period_id, toggle_count=0)
                .on_conflict_do_nothing(index_elements=["user_id", "period_id"])
            )
        elif db.get(Ballot, (user_id, period_id)) is None:
            db.add(Ballot(user_id=user_id, period_id=period_id, toggle_count=0))
            db.flush()

        db.execute(
            update(Ballot)
            .where(Ballot.user_id == user_id, Ballot.period_id == period_id)
            .values(toggle_count=Ballot.toggle_count + 1, last_toggled_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def list_for_user(db: Session, user_id: str, period_id: int) -> list[dict[str, Any]]:
        """Return the voter's votes in ``period_id``, newest first."""
        with storage_reads(db):
            rows = db.execute(
                select(
                    Vote.id,
                    Vote.submission_id,
                    Vote.period_id,
                    Vote.voted_at,
                    Submission.name.label("collection_name"),
                    Submission.contract_address,
                )
                .join(Submission, Submission.id == Vote.submission_id)
                .where(Vote.user_id == user_id, Vote.period_id == period_id)
                .order_by(Vote.voted_at.desc(), Vote.id.desc())
            ).mappings()
            return [dict(row) for row in rows]

    @staticmethod
    def reconcile(db: Session, period_id: int) -> list[VoteCountDrift]:
        """Recompute every submission's cached count from the ledger.

        Toggles are excluded for the duration by an exclusive lock on the
        period row.

        Returns:
            The submissions that were repaired.

        Raises:
            NoActivePeriod: If the period does not exist.
        """
        repaired: list[VoteCountDrift] = []
        with unit_of_work(db):
            locked = db.execute(
                update(Period)
                .where(Period.id == period_id)
                .values(phase=Period.phase)
                .execution_options(synchronize_session=False)
            )
            if locked.rowcount != 1:
                raise NoActivePeriod(f"Period {period_id} not found")

            actual_counts = dict(
                db.execute(
                    select(Vote.submission_id, func.count())
                    .where(Vote.period_id == period_id)
                    .group_by(Vote.submission_id)
                ).all()
            )
            cached = db.execute(
                select(Submission.id, Submission.vote_count).where(
                    Submission.period_id == period_id
                )
            ).all()

            for row in cached:
                actual = actual_counts.get(row.id, 0)
                if row.vote_count == actual:
                    continue
                db.execute(
                    update(Submission)
                    .where(Submission.id == row.id)
                    .values(vote_count=actual)
                )
                repaired.append(
                    VoteCountDrift(
                        submission_id=row.id,
                        cached_vote_count=row.vote_count,
                        actual_vote_count=actual,
                    )
                )
                logger.warning(
                    "Repaired vote count drift on submission %s: cached=%s actual=%s",
                    row.id,
                    row.vote_count,
                    actual,
                )

        logger.info(
            "Reconciled period %s: %d submission(s) repaired",
            period_id,
            len(repaired),
        )
        return repaired
