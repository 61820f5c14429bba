# src/collection_ballot/api/v1/endpoints/admin.py
"""Admin-only endpoints driving the period cycle."""

from fastapi import APIRouter

from collection_ballot.models.period import PHASE_SUBMISSION, PHASE_VOTING, PHASE_WINNER
from collection_ballot.schemas.period import (
    AdvanceResponse,
    PeriodResponse,
    ReconcileEntry,
    ReconcileResponse,
)
from collection_ballot.services.periods import get_current_period

from ..dependencies import AdminDep, PeriodManagerDep, SessionDep, VoteLedgerDep
from ..errors import error_responses

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses=error_responses(401, 403, 404, 409, 503),
)

ADVANCE_MESSAGES = {
    PHASE_VOTING: "Advanced to voting period",
    PHASE_WINNER: "Advanced to winner display period",
    PHASE_SUBMISSION: "Created new submission period",
}


@router.post("/advance", response_model=AdvanceResponse)
def advance_period(
    admin: AdminDep,
    db: SessionDep,
    manager: PeriodManagerDep,
) -> AdvanceResponse:
    """Move the current period to its next phase.

    Not idempotent: callers must re-read the period before retrying.
    """
    period = manager.advance(db)
    return AdvanceResponse(
        message=ADVANCE_MESSAGES[period.phase],
        period=PeriodResponse.model_validate(period),
    )


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_vote_counts(
    admin: AdminDep,
    db: SessionDep,
    ledger: VoteLedgerDep,
    period_id: int | None = None,
) -> ReconcileResponse:
    """Repair cached vote counts that drifted from the vote ledger."""
    if period_id is None:
        period_id = get_current_period(db).id
    repaired = ledger.reconcile(db, period_id)
    return ReconcileResponse(
        period_id=period_id,
        repaired=[
            ReconcileEntry(
                submission_id=item.submission_id,
                cached_vote_count=item.cached_vote_count,
                actual_vote_count=item.actual_vote_count,
            )
            for item in repaired
        ],
    )
