"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ErrorResponse
from .period import AdvanceResponse, PeriodResponse, ReconcileEntry, ReconcileResponse
from .submission import SubmissionCreate, SubmissionResponse
from .vote import ToggleResponse, UserVoteResponse, VoteToggle
from .winner import WinnerResponse

__all__ = [
    "ErrorResponse",
    "AdvanceResponse", "PeriodResponse", "ReconcileEntry", "ReconcileResponse",
    "SubmissionCreate", "SubmissionResponse",
    "ToggleResponse", "UserVoteResponse", "VoteToggle",
    "WinnerResponse",
]
