# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-ballot-suite")

from collection_ballot.api.v1.dependencies import get_metadata_provider
from collection_ballot.core.security import create_access_token
from collection_ballot.core.settings import settings
from collection_ballot.db.session import Database
from collection_ballot.main import app as fastapi_app
from collection_ballot.models import Period, Submission
from collection_ballot.models.period import PHASE_SUBMISSION
from collection_ballot.services.authorization import upsert_member
from collection_ballot.services.metadata import CollectionMetadata, MetadataProviderError

ADMIN_ID = "admin-1"
MEMBER_ID = "member-1"
OTHER_MEMBER_ID = "member-2"
OUTSIDER_ID = "outsider-1"

_ADDRESS_COUNTER = count(1)
_SEQUENCE_COUNTER = count(1)


def make_address(n: int | None = None) -> str:
    """Return a distinct, well-formed contract address."""
    value = next(_ADDRESS_COUNTER) if n is None else n
    return "0x" + format(value, "040x")


class FakeMetadataProvider:
    """In-memory metadata provider recording the addresses it was asked for."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[str] = []

    async def fetch(self, contract_address: str) -> CollectionMetadata:
        self.calls.append(contract_address)
        if self.fail:
            raise MetadataProviderError("indexer unavailable")
        return CollectionMetadata(
            name=f"Fake {contract_address[-4:]}",
            thumbnail="https://img.example/fake.png",
            description="A fake collection",
            floor_price=1.25,
            volume_24h=42.0,
            total_items=1000,
        )


@pytest.fixture(autouse=True)
def ballot_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the settings the ballot rules depend on."""
    monkeypatch.setattr(settings, "admin_user_ids", [ADMIN_ID])
    monkeypatch.setattr(settings, "max_votes_per_period", 5)
    monkeypatch.setattr(settings, "winner_count", 15)
    monkeypatch.setattr(settings, "metadata_base_url", None)


@pytest.fixture()
def database(tmp_path: Path) -> Iterator[Database]:
    """File-backed SQLite database so several connections see the same data."""
    db = Database(f"sqlite:///{tmp_path / 'ballot.db'}")
    db.create_tables()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture()
def db_session(database: Database) -> Iterator[Session]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fail_statement(database: Database) -> Iterator[Callable[[str], None]]:
    """Make every SQL statement starting with a given prefix fail like a broken disk."""
    listeners: list[Callable[..., None]] = []

    def _fail(prefix: str) -> None:
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith(prefix):
                raise OperationalError(statement, parameters, Exception("disk I/O error"))

        event.listen(database.engine, "before_cursor_execute", before_cursor_execute)
        listeners.append(before_cursor_execute)

    try:
        yield _fail
    finally:
        for listener in listeners:
            event.remove(database.engine, "before_cursor_execute", listener)


@pytest.fixture()
def session_factory(database: Database) -> Iterator[Callable[[], Session]]:
    """Hand out extra sessions, closed at teardown."""
    opened: list[Session] = []

    def _open() -> Session:
        session = database.session()
        opened.append(session)
        return session

    try:
        yield _open
    finally:
        for session in opened:
            session.close()


@pytest.fixture()
def make_period(db_session: Session) -> Callable[..., Period]:
    def _make(phase: str = PHASE_SUBMISSION, label: str = "2024-01") -> Period:
        period = Period(
            sequence=next(_SEQUENCE_COUNTER),
            label=label,
            phase=phase,
            started_at=datetime.now(UTC),
        )
        db_session.add(period)
        db_session.commit()
        return period

    return _make


@pytest.fixture()
def make_submission(db_session: Session) -> Callable[..., Submission]:
    """Insert a submission directly, bypassing the registry."""
    base_time = datetime(2024, 1, 1, tzinfo=UTC)
    offsets = count()

    def _make(
        period: Period,
        *,
        vote_count: int = 0,
        contract_address: str | None = None,
        submitted_at: datetime | None = None,
    ) -> Submission:
        submission = Submission(
            contract_address=contract_address or make_address(),
            submitter_id=MEMBER_ID,
            period_id=period.id,
            name="Test Collection",
            thumbnail="https://img.example/test.png",
            description="",
            floor_price=0.0,
            volume_24h=0.0,
            total_items=0,
            vote_count=vote_count,
            submitted_at=submitted_at or base_time + timedelta(minutes=next(offsets)),
        )
        db_session.add(submission)
        db_session.commit()
        return submission

    return _make


@pytest.fixture()
def members(db_session: Session) -> None:
    """Register role holders and one member without the community role."""
    upsert_member(db_session, MEMBER_ID, username="member", has_required_role=True)
    upsert_member(db_session, OTHER_MEMBER_ID, username="other", has_required_role=True)
    upsert_member(db_session, OUTSIDER_ID, username="outsider", has_required_role=False)


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def member_headers(members: None) -> dict[str, str]:
    return auth_headers(MEMBER_ID)


@pytest.fixture()
def other_member_headers(members: None) -> dict[str, str]:
    return auth_headers(OTHER_MEMBER_ID)


@pytest.fixture()
def outsider_headers(members: None) -> dict[str, str]:
    return auth_headers(OUTSIDER_ID)


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return auth_headers(ADMIN_ID)


@pytest.fixture()
def fake_provider() -> FakeMetadataProvider:
    return FakeMetadataProvider()


@pytest.fixture()
def app(fake_provider: FakeMetadataProvider) -> Iterator[FastAPI]:
    fastapi_app.dependency_overrides[get_metadata_provider] = lambda: fake_provider
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(get_metadata_provider, None)


@pytest.fixture()
def client(app: FastAPI, database: Database) -> Iterator[TestClient]:
    app.state.database = database
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.state.database = None
