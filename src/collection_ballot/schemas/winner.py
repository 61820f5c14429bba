"""Winner-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class WinnerResponse(BaseModel):
    """A ranked winner joined with its frozen submission metadata."""

    id: int
    period_id: int
    submission_id: int
    rank: int
    final_vote_count: int
    created_at: datetime
    contract_address: str
    name: str
    thumbnail: str
    floor_price: float
    volume_24h: float
    total_items: int

    model_config = ConfigDict(from_attributes=True)
