# src/collection_ballot/api/v1/endpoints/votes.py
"""Vote-related endpoints for the collection ballot API."""

from fastapi import APIRouter

from collection_ballot.schemas.vote import ToggleResponse, UserVoteResponse, VoteToggle
from collection_ballot.services.periods import get_current_period

from ..dependencies import MemberDep, SessionDep, VoteLedgerDep
from ..errors import error_responses

router = APIRouter(
    prefix="/votes",
    tags=["votes"],
    responses=error_responses(401, 403, 404, 409, 503),
)


@router.get("", response_model=list[UserVoteResponse])
def list_my_votes(
    member: MemberDep,
    db: SessionDep,
    ledger: VoteLedgerDep,
) -> list[UserVoteResponse]:
    """Return the caller's votes in the current period, newest first."""
    period = get_current_period(db)
    votes = ledger.list_for_user(db, member.user_id, period.id)
    return [UserVoteResponse.model_validate(vote) for vote in votes]


@router.post("", response_model=ToggleResponse)
def toggle_vote(
    payload: VoteToggle,
    member: MemberDep,
    db: SessionDep,
    ledger: VoteLedgerDep,
) -> ToggleResponse:
    """Cast a vote, or withdraw it if the caller already voted for the submission."""
    period = get_current_period(db)
    result = ledger.toggle(db, member.user_id, payload.submission_id, period.id)
    return ToggleResponse(action=result.action, vote_count=result.vote_count)
