"""Period-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

PhaseName = Literal["submission", "voting", "winner"]


class PeriodResponse(BaseModel):
    """Schema for period information returned by the API."""

    id: int
    sequence: int
    label: str
    phase: PhaseName
    started_at: datetime
    ended_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AdvanceResponse(BaseModel):
    """Result of an admin phase transition."""

    message: str
    period: PeriodResponse


class ReconcileEntry(BaseModel):
    """A submission whose cached vote count was repaired."""

    submission_id: int
    cached_vote_count: int
    actual_vote_count: int


class ReconcileResponse(BaseModel):
    """Result of a vote-count reconciliation pass."""

    period_id: int
    repaired: list[ReconcileEntry]
