"""
Tests for write serialization of votes, statistics and period activation
"""
import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from treasury.application.locks import vote_lock
from treasury.application.periods import ActivatePeriodUseCase, get_active_period
from treasury.application.statistics import RefreshStatisticsUseCase
from treasury.application.voting import CastVoteUseCase, get_item_vote_amounts
from treasury.domain.consensus import compute_consensus
from treasury.infrastructure.db.models import (
    User, BudgetPeriod, BudgetCategory, BudgetItem, BudgetVote, Statistics,
)
from treasury.infrastructure.db.session import Base

ADA = 1_000_000
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
VOTERS = 8
BLOCK_WAIT = 0.3


@pytest.fixture
def session_factory(tmp_path):
    """File-backed SQLite, one connection per session, seeded with a period, an item and DReps"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'votes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
        poolclass=NullPool,
    )
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False)

    db = factory()
    db.add_all([
        BudgetPeriod(
            id=1, title="Current", total_budget=1000 * ADA,
            start_date=NOW, end_date=NOW + timedelta(days=10), active=True,
        ),
        BudgetPeriod(
            id=2, title="Next", total_budget=1000 * ADA,
            start_date=NOW + timedelta(days=10), end_date=NOW + timedelta(days=20), active=False,
        ),
        BudgetCategory(id=1, name="Infrastructure", description="", color="#166534"),
        BudgetItem(id=1, title="Node Incentives", category_id=1, suggested_amount=100 * ADA),
    ])
    db.add_all([
        User(id=n, username=f"drep{n}", password_hash="x", is_drep=True, voting_power=100)
        for n in range(1, VOTERS + 1)
    ])
    db.commit()
    db.close()

    yield factory
    engine.dispose()


def _start(factory, action):
    """Run action(db) in a worker thread with its own session."""
    done = threading.Event()
    errors = []

    def run():
        db = factory()
        try:
            action(db)
        except Exception as exc:  # asserted in _finish
            errors.append(exc)
        finally:
            db.close()
            done.set()

    thread = threading.Thread(target=run)
    thread.start()
    return thread, done, errors


def _finish(thread, done, errors):
    thread.join(timeout=10)
    assert done.is_set()
    assert errors == []


class TestWritesWaitForVoteLock:
    def test_vote_waits_for_lock(self, session_factory, submitter):
        with vote_lock:
            worker = _start(session_factory, lambda db: CastVoteUseCase(db, submitter).execute(1, 1, 5 * ADA))
            assert not worker[1].wait(BLOCK_WAIT)

            check = session_factory()
            try:
                assert check.query(BudgetVote).count() == 0
            finally:
                check.close()

        _finish(*worker)
        check = session_factory()
        try:
            assert check.query(BudgetVote).count() == 1
        finally:
            check.close()

    def test_statistics_refresh_waits_for_lock(self, session_factory):
        with vote_lock:
            worker = _start(session_factory, lambda db: RefreshStatisticsUseCase(db).execute(commit=True))
            assert not worker[1].wait(BLOCK_WAIT)

            check = session_factory()
            try:
                assert check.query(Statistics).count() == 0
            finally:
                check.close()

        _finish(*worker)
        check = session_factory()
        try:
            assert check.query(Statistics).filter_by(budget_period_id=1).count() == 1
        finally:
            check.close()

    def test_period_activation_waits_for_lock(self, session_factory):
        with vote_lock:
            worker = _start(session_factory, lambda db: ActivatePeriodUseCase(db).execute(2))
            assert not worker[1].wait(BLOCK_WAIT)

            check = session_factory()
            try:
                assert get_active_period(check).id == 1
            finally:
                check.close()

        _finish(*worker)
        check = session_factory()
        try:
            assert get_active_period(check).id == 2
        finally:
            check.close()


def test_concurrent_votes_match_final_vote_set(session_factory, submitter):
    """Every voter votes twice at once; derived values reflect exactly the stored votes."""
    start = threading.Barrier(VOTERS * 2)

    def vote(user_id, amount):
        def action(db):
            start.wait(timeout=10)
            CastVoteUseCase(db, submitter).execute(user_id, 1, amount)
        return action

    workers = [
        _start(session_factory, vote(user_id, (user_id * 10 + attempt) * ADA))
        for user_id in range(1, VOTERS + 1)
        for attempt in range(2)
    ]
    for worker in workers:
        _finish(*worker)

    db = session_factory()
    try:
        amounts = get_item_vote_amounts(db, 1)
        assert len(amounts) == VOTERS

        expected = compute_consensus(amounts, 100 * ADA)
        item = db.get(BudgetItem, 1)
        assert item.current_median_vote == expected.consensus
        assert item.percentage_of_suggested == expected.percentage_of_suggested

        stats = db.query(Statistics).filter_by(budget_period_id=1).one()
        assert stats.active_dreps == VOTERS
        assert stats.total_allocated == expected.consensus
        assert stats.category_distribution == {"1": expected.consensus}
    finally:
        db.close()
