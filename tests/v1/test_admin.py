# tests/v1/test_admin.py
"""Tests for the admin cycle endpoints and the winners listing."""

from fastapi import status
from sqlalchemy import update

from collection_ballot.models import Submission
from collection_ballot.models.period import PHASE_SUBMISSION, PHASE_VOTING, PHASE_WINNER


def _advance(client, headers):
    return client.post("/api/v1/admin/advance", headers=headers)


def test_advance_without_period(client, admin_headers) -> None:
    response = _advance(client, admin_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_full_cycle_over_http(
    client, make_period, make_submission, admin_headers, member_headers
) -> None:
    period = make_period(PHASE_SUBMISSION, label="2024-06")
    popular = make_submission(period)
    quiet = make_submission(period)

    to_voting = _advance(client, admin_headers)
    assert to_voting.status_code == status.HTTP_200_OK
    assert to_voting.json()["message"] == "Advanced to voting period"
    assert to_voting.json()["period"]["phase"] == PHASE_VOTING

    client.post("/api/v1/votes", json={"submission_id": popular.id}, headers=member_headers)
    assert client.get("/api/v1/winners").json() == []

    to_winner = _advance(client, admin_headers)
    assert to_winner.json()["message"] == "Advanced to winner display period"
    assert to_winner.json()["period"]["phase"] == PHASE_WINNER

    winners = client.get("/api/v1/winners").json()
    assert [(w["rank"], w["submission_id"], w["final_vote_count"]) for w in winners] == [
        (1, popular.id, 1),
        (2, quiet.id, 0),
    ]
    assert winners[0]["contract_address"] == popular.contract_address

    rollover = _advance(client, admin_headers)
    assert rollover.json()["message"] == "Created new submission period"
    new_period = rollover.json()["period"]
    assert new_period["phase"] == PHASE_SUBMISSION
    assert new_period["label"] == "2024-07"
    assert new_period["id"] != period.id

    assert client.get("/api/v1/winners").json() == []
    history = client.get("/api/v1/winners", params={"period_id": period.id}).json()
    assert len(history) == 2


def test_winners_unknown_period(client, make_period) -> None:
    make_period(PHASE_SUBMISSION)

    response = client.get("/api/v1/winners", params={"period_id": 999})

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reconcile_reports_repairs(
    client, db_session, make_period, make_submission, admin_headers
) -> None:
    period = make_period(PHASE_VOTING)
    submission = make_submission(period)
    db_session.execute(
        update(Submission).where(Submission.id == submission.id).values(vote_count=3)
    )
    db_session.commit()

    response = client.post("/api/v1/admin/reconcile", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "period_id": period.id,
        "repaired": [
            {"submission_id": submission.id, "cached_vote_count": 3, "actual_vote_count": 0}
        ],
    }
