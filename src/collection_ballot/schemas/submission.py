"""Submission-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SubmissionCreate(BaseModel):
    """Schema for nominating a collection."""

    contract_address: str = Field(
        ...,
        min_length=1,
        description="Collection contract address (0x followed by 40 hex digits)",
    )


class SubmissionResponse(BaseModel):
    """Schema for submission information returned by the API."""

    id: int
    contract_address: str
    submitter_id: str
    period_id: int
    name: str
    thumbnail: str
    description: str
    floor_price: float
    volume_24h: float
    total_items: int
    vote_count: int
    submitted_at: datetime

    model_config = ConfigDict(from_attributes=True)
