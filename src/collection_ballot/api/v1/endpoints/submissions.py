# src/collection_ballot/api/v1/endpoints/submissions.py
"""Submission endpoints for the collection ballot API."""

from fastapi import APIRouter, status

from collection_ballot.schemas.submission import SubmissionCreate, SubmissionResponse
from collection_ballot.services.periods import get_current_period

from ..dependencies import (
    MemberDep,
    MetadataProviderDep,
    SessionDep,
    SubmissionRegistryDep,
)
from ..errors import error_responses

router = APIRouter(
    prefix="/submissions",
    tags=["submissions"],
    responses=error_responses(404, 503),
)


@router.get("", response_model=list[SubmissionResponse])
def list_submissions(
    db: SessionDep,
    registry: SubmissionRegistryDep,
    period_id: int | None = None,
) -> list[SubmissionResponse]:
    """List a period's submissions, most voted first.

    Defaults to the current period.
    """
    if period_id is None:
        period_id = get_current_period(db).id
    submissions = registry.list_submissions(db, period_id)
    return [SubmissionResponse.model_validate(item) for item in submissions]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmissionResponse,
    responses=error_responses(400, 401, 403, 409),
)
async def create_submission(
    payload: SubmissionCreate,
    member: MemberDep,
    db: SessionDep,
    registry: SubmissionRegistryDep,
    provider: MetadataProviderDep,
) -> SubmissionResponse:
    """Nominate a collection in the current submission phase."""
    submission = await registry.submit(
        db,
        payload.contract_address,
        member.user_id,
        provider,
    )
    return SubmissionResponse.model_validate(submission)


@router.get("/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: int,
    db: SessionDep,
    registry: SubmissionRegistryDep,
) -> SubmissionResponse:
    """Return a single submission from any period."""
    submission = registry.get_submission(db, submission_id)
    return SubmissionResponse.model_validate(submission)
