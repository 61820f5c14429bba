# src/collection_ballot/services/__init__.py
"""Business logic services for the collection ballot."""

from .authorization import AuthorizationPolicy, Identity, IdentityResolver
from .ledger import ToggleResult, VoteCountDrift, VoteLedger
from .metadata import CollectionMetadata, CollectionMetadataClient
from .periods import PeriodManager
from .submissions import SubmissionRegistry
from .winners import WinnerCalculator

__all__ = [
    "AuthorizationPolicy", "Identity", "IdentityResolver",
    "ToggleResult", "VoteCountDrift", "VoteLedger",
    "CollectionMetadata", "CollectionMetadataClient",
    "PeriodManager",
    "SubmissionRegistry",
    "WinnerCalculator",
]
