"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from collection_ballot.core.errors import NotAuthenticated
from collection_ballot.db.session import get_db
from collection_ballot.services.authorization import (
    AuthorizationPolicy,
    Identity,
    IdentityResolver,
)
from collection_ballot.services.ledger import VoteLedger
from collection_ballot.services.metadata import MetadataProvider, get_metadata_client
from collection_ballot.services.periods import PeriodManager
from collection_ballot.services.submissions import SubmissionRegistry

# Missing credentials are reported as NotAuthenticated rather than by FastAPI.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> Identity:
    """Resolve the caller's identity from the bearer token.

    Raises:
        NotAuthenticated: If no valid token was presented.
    """
    if credentials is None or not credentials.credentials:
        raise NotAuthenticated()
    resolver = IdentityResolver(AuthorizationPolicy(db))
    return resolver.resolve(credentials.credentials)


IdentityDep = Annotated[Identity, Depends(get_identity)]


def get_member(identity: IdentityDep) -> Identity:
    """Require the caller to hold the community role."""
    identity.require_role()
    return identity


def get_admin(identity: IdentityDep) -> Identity:
    """Require the caller to be an admin."""
    identity.require_admin()
    return identity


def get_period_manager() -> PeriodManager:
    return PeriodManager()


def get_submission_registry() -> SubmissionRegistry:
    return SubmissionRegistry()


def get_vote_ledger() -> VoteLedger:
    return VoteLedger()


def get_metadata_provider() -> MetadataProvider:
    """Return the shared collection metadata client."""
    return get_metadata_client()


MemberDep = Annotated[Identity, Depends(get_member)]
AdminDep = Annotated[Identity, Depends(get_admin)]
PeriodManagerDep = Annotated[PeriodManager, Depends(get_period_manager)]
SubmissionRegistryDep = Annotated[SubmissionRegistry, Depends(get_submission_registry)]
VoteLedgerDep = Annotated[VoteLedger, Depends(get_vote_ledger)]
MetadataProviderDep = Annotated[MetadataProvider, Depends(get_metadata_provider)]
