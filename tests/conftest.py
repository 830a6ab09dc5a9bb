"""
Pytest fixtures for testing
"""
from datetime import datetime, timedelta, timezone
from itertools import count
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine, JSON
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import JSONB

from treasury.infrastructure.db.session import Base
from treasury.infrastructure.db.models import (
    User, BudgetPeriod, BudgetCategory, BudgetItem,
)


NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
ADA = 1_000_000


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads, with JSONB→JSON mapping."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # SQLite has no JSONB: remap to JSON for tests
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def submitter():
    """Ledger stand-in returning tx-1, tx-2, ..."""
    seq = count(1)
    mock = Mock()
    mock.submit.side_effect = lambda payload: f"tx-{next(seq)}"
    return mock


@pytest.fixture
def make_user(db_session):
    """Factory: make_user(is_drep=True, wallet_address=None) -> User"""
    seq = count(1)

    def _make(is_drep: bool = True, wallet_address: str | None = None, stake_address: str | None = None,
              voting_power: int = 100) -> User:
        n = next(seq)
        user = User(
            username=f"user{n}",
            password_hash="x",
            wallet_address=wallet_address,
            stake_address=stake_address,
            is_drep=is_drep,
            voting_power=voting_power if is_drep else 0,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def drep(make_user):
    return make_user(is_drep=True, wallet_address="addr_test_drep")


@pytest.fixture
def active_period(db_session):
    period = BudgetPeriod(
        title="2026 Treasury",
        description="Test period",
        total_budget=1000 * ADA,
        start_date=NOW - timedelta(days=5),
        end_date=NOW + timedelta(days=10),
        governance_action="TreasuryWithdrawal_TEST",
        active=True,
    )
    db_session.add(period)
    db_session.commit()
    return period


@pytest.fixture
def categories(db_session):
    cats = [
        BudgetCategory(id=1, name="Infrastructure", description="", color="#166534"),
        BudgetCategory(id=2, name="Developer Ecosystem", description="", color="#1E40AF"),
        BudgetCategory(id=3, name="Governance", description="", color="#854D0E"),
    ]
    db_session.add_all(cats)
    db_session.commit()
    return cats


@pytest.fixture
def items(db_session, categories):
    rows = [
        BudgetItem(id=1, title="Node Incentives", category_id=1, suggested_amount=100 * ADA),
        BudgetItem(id=2, title="Developer Education", category_id=2, suggested_amount=50 * ADA),
        BudgetItem(id=3, title="Library Development", category_id=2, suggested_amount=40 * ADA),
        BudgetItem(id=4, title="Ambassadors", category_id=2, suggested_amount=20 * ADA),
        BudgetItem(id=5, title="Governance Tools", category_id=3, suggested_amount=30 * ADA),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows
