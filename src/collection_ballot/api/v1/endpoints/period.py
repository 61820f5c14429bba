# src/collection_ballot/api/v1/endpoints/period.py
"""Current period endpoint."""

from fastapi import APIRouter

from collection_ballot.schemas.period import PeriodResponse

from ..dependencies import PeriodManagerDep, SessionDep
from ..errors import error_responses

router = APIRouter(
    prefix="/period",
    tags=["period"],
    responses=error_responses(404, 503),
)


@router.get("", response_model=PeriodResponse)
def get_current_period(db: SessionDep, manager: PeriodManagerDep) -> PeriodResponse:
    """Return the current period and its phase."""
    period = manager.get_current_period(db)
    return PeriodResponse.model_validate(period)
