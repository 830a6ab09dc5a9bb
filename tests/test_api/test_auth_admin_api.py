"""
Tests for wallet login, DRep status and admin endpoints
"""
from treasury.config import get_settings
from treasury.infrastructure.db.models import BudgetPeriod

TEST_STAKE = get_settings().DREP_TEST_ADDRESSES[1]


def _import_body(title="Imported"):
    return {
        "period": {
            "title": title,
            "total_budget": 1_000_000,
            "start_date": "2026-03-01T00:00:00Z",
            "end_date": "2026-04-01T00:00:00Z",
        },
        "categories": [{"name": "Infrastructure"}],
        "items": [
            {"title": "Nodes", "category_name": "infrastructure", "suggested_amount": 500},
            {"title": "Docs", "category_name": "Education", "suggested_amount": 300},
        ],
    }


class TestWalletLogin:
    def test_connect_wallet_starts_session(self, client, items):
        response = client.post(
            "/api/v1/auth/wallet",
            json={"wallet_address": "addr1walletlogin", "stake_address": TEST_STAKE},
        )
        assert response.status_code == 200
        assert response.json()["is_drep"] is True

        # session cookie now authenticates the client
        assert client.get("/api/v1/votes/user").status_code == 200

        client.post("/api/v1/auth/logout")
        assert client.get("/api/v1/votes/user").status_code == 401

    def test_empty_wallet(self, client):
        response = client.post("/api/v1/auth/wallet", json={"wallet_address": " "})
        assert response.status_code == 400

    def test_drep_status(self, client):
        response = client.get("/api/v1/drep/status", params={"stake_address": "stake1nobody"})
        assert response.status_code == 200
        assert response.json() == {"is_drep": False, "voting_power": 0}


class TestAdmin:
    def test_import(self, client, drep_headers):
        response = client.post("/api/v1/admin/import", json=_import_body(), headers=drep_headers)

        assert response.status_code == 200
        assert response.json()["categories_count"] == 2
        assert response.json()["items_count"] == 2
        assert client.get("/api/v1/budget/period/active").json()["title"] == "Imported"

    def test_import_requires_drep(self, client, make_user):
        make_user(is_drep=False, wallet_address="addr_viewer")
        response = client.post(
            "/api/v1/admin/import", json=_import_body(), headers={"X-Wallet-Address": "addr_viewer"},
        )
        assert response.status_code == 403

    def test_import_rejects_bad_dates(self, client, drep_headers):
        body = _import_body()
        body["period"]["end_date"] = "2026-01-01T00:00:00Z"
        response = client.post("/api/v1/admin/import", json=body, headers=drep_headers)
        assert response.status_code == 422

    def test_import_blank_title(self, client, drep_headers, db_session):
        response = client.post("/api/v1/admin/import", json=_import_body(title=" "), headers=drep_headers)
        assert response.status_code == 400
        assert db_session.query(BudgetPeriod).count() == 0

    def test_activate_period(self, client, drep_headers, db_session, active_period):
        first = client.post("/api/v1/admin/import", json=_import_body(), headers=drep_headers).json()

        response = client.post(f"/api/v1/admin/periods/{active_period.id}/activate", headers=drep_headers)

        assert response.status_code == 200
        active = db_session.query(BudgetPeriod).filter(BudgetPeriod.active == True).all()
        assert [p.id for p in active] == [active_period.id]
        assert first["period_id"] != active_period.id

    def test_activate_unknown_period(self, client, drep_headers):
        response = client.post("/api/v1/admin/periods/999/activate", headers=drep_headers)
        assert response.status_code == 404
