# src/collection_ballot/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .period import router as period_router
from .submissions import router as submissions_router
from .votes import router as votes_router
from .winners import router as winners_router

__all__ = [
    "admin_router",
    "period_router",
    "submissions_router",
    "votes_router",
    "winners_router",
]
