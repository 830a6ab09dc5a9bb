"""
API fixtures: TestClient bound to the test database and a fake ledger
"""
import pytest
from fastapi.testclient import TestClient

from treasury.main import app
from treasury.api.deps import get_db, get_submitter


@pytest.fixture
def client(db_session, submitter):
    """TestClient with the SQLite session and the mock ledger injected"""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_submitter] = lambda: submitter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def drep_headers(drep):
    return {"X-Wallet-Address": drep.wallet_address}
