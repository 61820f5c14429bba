"""Submission registry: nominations for the current period."""

from __future__ import annotations

import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from collection_ballot.core.errors import (
    DuplicateSubmission,
    InvalidAddressFormat,
    SubmissionNotFound,
    WrongPhase,
)
from collection_ballot.db.time import utcnow
from collection_ballot.db.transaction import storage_reads, unit_of_work
from collection_ballot.models import Period, Submission, ranking_order
from collection_ballot.models.period import PHASE_SUBMISSION
from collection_ballot.services.metadata import MetadataProvider, resolve_metadata
from collection_ballot.services.periods import get_current_period, get_period

logger = logging.getLogger(__name__)

CONTRACT_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_contract_address(contract_address: str) -> bool:
    """Return True if ``contract_address`` is ``0x`` followed by 40 hex digits."""
    return CONTRACT_ADDRESS_PATTERN.fullmatch(contract_address) is not None


class SubmissionRegistry:
    """Records nominated collections for the current period."""

    async def submit(
        self,
        db: Session,
        contract_address: str,
        submitter_id: str,
        provider: MetadataProvider,
    ) -> Submission:
        """Nominate ``contract_address`` in the current period.

        Args:
            db: Database session
            contract_address: Collection contract address
            submitter_id: Identifier of the nominating member
            provider: Metadata source; its failures fall back to placeholders

        Returns:
            The persisted submission with a zero vote count.

        Raises:
            InvalidAddressFormat: If the address is malformed.
            NoActivePeriod: If no period exists.
            WrongPhase: If the current period is not accepting submissions.
            DuplicateSubmission: If the collection is already nominated.
        """
        if not is_valid_contract_address(contract_address):
            raise InvalidAddressFormat()

        period = get_current_period(db)
        period_id = period.id
        if period.phase != PHASE_SUBMISSION:
            raise WrongPhase(PHASE_SUBMISSION, period.phase)
        with storage_reads(db):
            if self._is_submitted(db, contract_address, period_id):
                raise DuplicateSubmission()
            # Release the read transaction while waiting on the provider.
            db.commit()
        metadata = await resolve_metadata(provider, contract_address)

        with unit_of_work(db):
            submission = Submission(
                contract_address=contract_address,
                submitter_id=submitter_id,
                period_id=period_id,
                name=metadata.name,
                thumbnail=metadata.thumbnail,
                description=metadata.description,
                floor_price=metadata.floor_price,
                volume_24h=metadata.volume_24h,
                total_items=metadata.total_items,
                vote_count=0,
                submitted_at=utcnow(),
            )
            db.add(submission)
            try:
                db.flush()
            except IntegrityError as exc:
                raise DuplicateSubmission() from exc

            # Holding a shared lock on the period keeps advance() from flipping
            # the phase until this insert commits.
            phase = db.execute(
                select(Period.phase).where(Period.id == period_id).with_for_update(read=True)
            ).scalar_one()
            if phase != PHASE_SUBMISSION:
                raise WrongPhase(PHASE_SUBMISSION, phase)

        logger.info(
            "Recorded submission %s (%s) for period %s",
            submission.id,
            contract_address,
            period_id,
        )
        return submission

    @staticmethod
    def _is_submitted(db: Session, contract_address: str, period_id: int) -> bool:
        existing = db.execute(
            select(Submission.id).where(
                Submission.contract_address == contract_address,
                Submission.period_id == period_id,
            )
        ).first()
        return existing is not None

    @staticmethod
    def list_submissions(db: Session, period_id: int) -> list[Submission]:
        """Return the period's submissions in canonical ranking order.

        Raises:
            NoActivePeriod: If the period does not exist.
        """
        get_period(db, period_id)
        with storage_reads(db):
            result = db.execute(
                select(Submission)
                .where(Submission.period_id == period_id)
                .order_by(*ranking_order())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars())

    @staticmethod
    def get_submission(db: Session, submission_id: int) -> Submission:
        """Return a submission by identifier.

        Raises:
            SubmissionNotFound: If no such submission exists.
        """
        with storage_reads(db):
            submission = db.get(Submission, submission_id)
        if submission is None:
            raise SubmissionNotFound()
        return submission
