"""Tests for winner snapshot computation."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from collection_ballot.core.errors import AlreadyComputed, NoActivePeriod, StorageFailure
from collection_ballot.models import Submission, Winner
from collection_ballot.models.period import PHASE_VOTING, PHASE_WINNER
from collection_ballot.services.ledger import VoteLedger
from collection_ballot.services.periods import PeriodManager
from collection_ballot.services.winners import WinnerCalculator
from tests.conftest import MEMBER_ID


def _winner_rows(db, period_id: int) -> list[Winner]:
    return list(
        db.scalars(select(Winner).where(Winner.period_id == period_id).order_by(Winner.rank))
    )


def test_tie_break_by_submission_time(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    start = datetime(2024, 3, 1, tzinfo=UTC)
    a = make_submission(period, vote_count=10, submitted_at=start + timedelta(minutes=3))
    b = make_submission(period, vote_count=7, submitted_at=start)
    c = make_submission(period, vote_count=7, submitted_at=start + timedelta(minutes=5))
    d = make_submission(period, vote_count=3, submitted_at=start + timedelta(minutes=1))

    winners = WinnerCalculator().compute(db_session, period.id)

    assert [(w.submission_id, w.rank, w.final_vote_count) for w in winners] == [
        (a.id, 1, 10),
        (b.id, 2, 7),
        (c.id, 3, 7),
        (d.id, 4, 3),
    ]


def test_limit_caps_snapshot_size(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    for votes in range(20):
        make_submission(period, vote_count=votes)

    winners = WinnerCalculator().compute(db_session, period.id)
    db_session.commit()

    rows = _winner_rows(db_session, period.id)
    assert len(winners) == len(rows) == 15
    assert [row.rank for row in rows] == list(range(1, 16))
    counts = [row.final_vote_count for row in rows]
    assert counts == sorted(counts, reverse=True)
    assert counts[0] == 19


def test_fewer_submissions_than_limit(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    for votes in (1, 2, 3):
        make_submission(period, vote_count=votes)

    assert len(WinnerCalculator(limit=15).compute(db_session, period.id)) == 3


def test_no_submissions_yields_empty_snapshot(db_session, make_period) -> None:
    period = make_period(PHASE_VOTING)

    assert WinnerCalculator().compute(db_session, period.id) == []


def test_compute_twice_rejected(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    make_submission(period, vote_count=1)
    calculator = WinnerCalculator()
    calculator.compute(db_session, period.id)
    db_session.commit()

    with pytest.raises(AlreadyComputed):
        calculator.compute(db_session, period.id)


def test_snapshot_is_frozen(db_session, make_period, make_submission) -> None:
    """Later changes to the cached counts do not alter the snapshot."""
    period = make_period(PHASE_VOTING)
    submission = make_submission(period)
    VoteLedger().toggle(db_session, MEMBER_ID, submission.id, period.id)
    PeriodManager().advance(db_session)

    db_session.execute(
        Submission.__table__.update().where(Submission.id == submission.id).values(vote_count=99)
    )
    db_session.commit()

    winners = WinnerCalculator.list_winners(db_session, period.id)
    assert len(winners) == 1
    assert winners[0]["final_vote_count"] == 1
    assert winners[0]["contract_address"] == submission.contract_address


def test_list_winners_empty_before_winner_phase(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    make_submission(period, vote_count=2)

    assert WinnerCalculator.list_winners(db_session, period.id) == []


def test_list_winners_orders_by_rank(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    low = make_submission(period, vote_count=1)
    high = make_submission(period, vote_count=5)
    PeriodManager().advance(db_session)

    winners = WinnerCalculator.list_winners(db_session, period.id)

    assert [(w["rank"], w["submission_id"]) for w in winners] == [(1, high.id), (2, low.id)]


def test_list_winners_unknown_period(db_session) -> None:
    with pytest.raises(NoActivePeriod):
        WinnerCalculator.list_winners(db_session, 999)


def test_winner_phase_history_survives_rollover(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_WINNER)
    submission = make_submission(period, vote_count=4)
    WinnerCalculator().compute(db_session, period.id)
    db_session.commit()

    PeriodManager().advance(db_session)

    winners = WinnerCalculator.list_winners(db_session, period.id)
    assert [w["submission_id"] for w in winners] == [submission.id]


def test_per_call_limit(db_session, make_period, make_submission) -> None:
    period = make_period(PHASE_VOTING)
    for votes in (5, 4, 3):
        make_submission(period, vote_count=votes)

    winners = WinnerCalculator().compute(db_session, period.id, limit=2)

    assert [w.final_vote_count for w in winners] == [5, 4]


def test_list_winners_reports_storage_failure(database, db_session) -> None:
    database.drop_tables()

    with pytest.raises(StorageFailure):
        WinnerCalculator.list_winners(db_session, 1)
