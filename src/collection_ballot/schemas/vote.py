"""Vote-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class VoteToggle(BaseModel):
    """Schema for casting or withdrawing a vote."""

    submission_id: int


class ToggleResponse(BaseModel):
    """Outcome of a vote toggle."""

    action: Literal["added", "removed"]
    vote_count: int


class UserVoteResponse(BaseModel):
    """A caller's vote joined with the submission it supports."""

    id: int
    submission_id: int
    period_id: int
    voted_at: datetime
    collection_name: str
    contract_address: str

    model_config = ConfigDict(from_attributes=True)
