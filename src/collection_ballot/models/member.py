# src/collection_ballot/models/member.py
"""Community members known to the authorization policy."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from collection_ballot.db.session import Base


class Member(Base):
    """Community identity and its role grant.

    Rows are upserted by the external login flow whenever a member signs in.
    """

    __tablename__ = "member"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_required_role: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
