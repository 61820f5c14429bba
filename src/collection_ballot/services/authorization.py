"""Identity resolution and authorization policy collaborators."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from collection_ballot.core.errors import Forbidden
from collection_ballot.core.security import decode_access_token
from collection_ballot.core.settings import settings
from collection_ballot.db.time import utcnow
from collection_ballot.db.transaction import storage_reads
from collection_ballot.models import Member


@dataclass(frozen=True)
class Identity:
    """Resolved caller identity."""

    user_id: str
    required_role_granted: bool
    is_admin: bool

    def require_role(self) -> None:
        """Raise :class:`Forbidden` unless the caller holds the required role."""
        if not self.required_role_granted:
            raise Forbidden("Required community role missing")

    def require_admin(self) -> None:
        """Raise :class:`Forbidden` unless the caller is an admin."""
        if not self.is_admin:
            raise Forbidden("Admin access required")


class AuthorizationPolicy:
    """Role and admin membership decisions, decoupled from the ballot core.

    Admins come from a flat configured list; the required community role is
    read from the member table kept current by the login flow.
    """

    def __init__(self, db: Session, admin_user_ids: Iterable[str] | None = None) -> None:
        self.db = db
        ids = settings.admin_user_ids if admin_user_ids is None else admin_user_ids
        self._admin_user_ids = frozenset(ids)

    def is_admin(self, user_id: str) -> bool:
        return user_id in self._admin_user_ids

    def has_required_role(self, user_id: str) -> bool:
        if self.is_admin(user_id):
            return True
        with storage_reads(self.db):
            granted = self.db.execute(
                select(Member.has_required_role).where(Member.user_id == user_id)
            ).scalar_one_or_none()
        return bool(granted)


class IdentityResolver:
    """Turns a verified bearer token into an :class:`Identity`."""

    def __init__(self, policy: AuthorizationPolicy) -> None:
        self.policy = policy

    def resolve(self, token: str) -> Identity:
        """Verify ``token`` and evaluate the caller's grants.

        Raises:
            NotAuthenticated: If the token is invalid or expired.
        """
        user_id = decode_access_token(token)
        return Identity(
            user_id=user_id,
            required_role_granted=self.policy.has_required_role(user_id),
            is_admin=self.policy.is_admin(user_id),
        )


def upsert_member(
    db: Session,
    user_id: str,
    *,
    username: str | None = None,
    has_required_role: bool,
) -> Member:
    """Create or refresh a member row, as the login flow does on every sign-in."""
    member = db.get(Member, user_id)
    if member is None:
        member = Member(user_id=user_id)
        db.add(member)
    member.username = username
    member.has_required_role = has_required_role
    member.last_login_at = utcnow()
    db.commit()
    db.refresh(member)
    return member
