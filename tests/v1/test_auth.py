# tests/v1/test_auth.py
"""Authentication and authorization checks across the API."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from jose import jwt

from collection_ballot.core.settings import settings
from collection_ballot.models.period import PHASE_SUBMISSION, PHASE_VOTING

from tests.conftest import auth_headers

VALID_ADDRESS = "0x" + "1" * 40


@pytest.mark.parametrize(
    ("method", "path", "payload"),
    [
        ("post", "/api/v1/submissions", {"contract_address": VALID_ADDRESS}),
        ("get", "/api/v1/votes", None),
        ("post", "/api/v1/votes", {"submission_id": 1}),
        ("post", "/api/v1/admin/advance", None),
        ("post", "/api/v1/admin/reconcile", None),
    ],
)
def test_missing_token_is_unauthenticated(client, make_period, method, path, payload) -> None:
    make_period(PHASE_SUBMISSION)

    response = client.request(method.upper(), path, json=payload)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "not_authenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_is_unauthenticated(client, make_period) -> None:
    make_period(PHASE_SUBMISSION)

    response = client.get("/api/v1/votes", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_expired_token_is_unauthenticated(client, make_period, members) -> None:
    make_period(PHASE_SUBMISSION)
    token = jwt.encode(
        {"sub": "member-1", "exp": datetime.now(UTC) - timedelta(minutes=1)},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )

    response = client.get("/api/v1/votes", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_signed_with_other_key_rejected(client, make_period) -> None:
    make_period(PHASE_SUBMISSION)
    token = jwt.encode({"sub": "member-1"}, "another-key", algorithm="HS256")

    response = client.get("/api/v1/votes", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_member_without_role_is_forbidden(client, make_period, outsider_headers) -> None:
    make_period(PHASE_SUBMISSION)

    response = client.post(
        "/api/v1/submissions",
        json={"contract_address": VALID_ADDRESS},
        headers=outsider_headers,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "forbidden"


def test_unknown_user_is_forbidden(client, make_period) -> None:
    make_period(PHASE_VOTING)

    response = client.post(
        "/api/v1/votes",
        json={"submission_id": 1},
        headers=auth_headers("stranger"),
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_non_admin_cannot_advance(client, make_period, member_headers) -> None:
    make_period(PHASE_SUBMISSION)

    response = client.post("/api/v1/admin/advance", headers=member_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_holds_role_without_member_row(client, make_period, admin_headers) -> None:
    make_period(PHASE_SUBMISSION)

    response = client.post(
        "/api/v1/submissions",
        json={"contract_address": VALID_ADDRESS},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
