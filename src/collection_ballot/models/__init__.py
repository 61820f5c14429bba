# src/collection_ballot/models/__init__.py
"""SQLAlchemy models for the collection ballot."""

from .member import Member
from .period import Period
from .submission import Submission, ranking_order
from .vote import Ballot, Vote
from .winner import Winner

__all__ = [
    "Ballot",
    "Member",
    "Period",
    "Submission",
    "Vote",
    "Winner",
    "ranking_order",
]
