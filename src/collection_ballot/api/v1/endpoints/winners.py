# src/collection_ballot/api/v1/endpoints/winners.py
"""Winner snapshot endpoints."""

from fastapi import APIRouter

from collection_ballot.schemas.winner import WinnerResponse
from collection_ballot.services.periods import get_current_period
from collection_ballot.services.winners import WinnerCalculator

from ..dependencies import SessionDep
from ..errors import error_responses

router = APIRouter(
    prefix="/winners",
    tags=["winners"],
    responses=error_responses(404, 503),
)


@router.get("", response_model=list[WinnerResponse])
def list_winners(db: SessionDep, period_id: int | None = None) -> list[WinnerResponse]:
    """Return a period's ranked winners.

    Defaults to the current period; empty until the period reaches the
    winner phase.
    """
    if period_id is None:
        period_id = get_current_period(db).id
    winners = WinnerCalculator.list_winners(db, period_id)
    return [WinnerResponse.model_validate(winner) for winner in winners]
