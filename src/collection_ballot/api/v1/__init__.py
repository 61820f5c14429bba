# src/collection_ballot/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    period_router,
    submissions_router,
    votes_router,
    winners_router,
)

__all__ = [
    "admin_router",
    "period_router",
    "submissions_router",
    "votes_router",
    "winners_router",
]
