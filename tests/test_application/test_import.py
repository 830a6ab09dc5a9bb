"""
Tests for budget import
"""
from datetime import datetime, timedelta, timezone

import pytest

from treasury.application.importer import (
    ImportBudgetDataUseCase, ImportedBudgetData, ImportedPeriod, ImportedCategory, ImportedItem,
    ImportValidationError, AUTO_CATEGORY_COLOR,
)
from treasury.application.periods import get_active_period, PeriodValidationError
from treasury.infrastructure.db.models import BudgetCategory, BudgetItem, BudgetPeriod, EventLog

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
ADA = 1_000_000


def _data(items, categories=None, title="Imported 2026"):
    return ImportedBudgetData(
        period=ImportedPeriod(
            title=title,
            total_budget=500 * ADA,
            start_date=NOW,
            end_date=NOW + timedelta(days=14),
            governance_action="TreasuryWithdrawal_IMPORT",
        ),
        categories=categories if categories is not None else [
            ImportedCategory("Infrastructure", "Network", "#166534"),
            ImportedCategory("Governance"),
        ],
        items=items,
    )


class TestImportBudgetData:
    def test_imports_everything(self, db_session, drep):
        result = ImportBudgetDataUseCase(db_session).execute(
            _data([
                ImportedItem("Nodes", "Infrastructure", 100 * ADA),
                ImportedItem("Tools", "Governance", 20 * ADA, "Voting tools"),
            ]),
            actor_user_id=drep.id,
        )

        assert result.categories_count == 2
        assert result.items_count == 2
        assert get_active_period(db_session).id == result.period_id

        items = db_session.query(BudgetItem).order_by(BudgetItem.id).all()
        cats = {c.name: c for c in db_session.query(BudgetCategory)}
        assert [(i.title, i.category_id) for i in items] == [
            ("Nodes", cats["Infrastructure"].id),
            ("Tools", cats["Governance"].id),
        ]
        assert all(i.current_median_vote == 0 and i.percentage_of_suggested == 0 for i in items)
        assert cats["Governance"].color == AUTO_CATEGORY_COLOR

    def test_case_insensitive_category_match(self, db_session):
        ImportBudgetDataUseCase(db_session).execute(
            _data([ImportedItem("Nodes", "INFRASTRUCTURE", 1)]),
        )
        assert db_session.query(BudgetCategory).count() == 2
        item = db_session.query(BudgetItem).one()
        infra = db_session.query(BudgetCategory).filter_by(name="Infrastructure").one()
        assert item.category_id == infra.id

    def test_unknown_category_created_once(self, db_session):
        result = ImportBudgetDataUseCase(db_session).execute(
            _data([
                ImportedItem("A", "Marketing", 1),
                ImportedItem("B", "marketing", 2),
            ]),
        )
        assert result.categories_count == 3
        marketing = db_session.query(BudgetCategory).filter_by(name="Marketing").one()
        assert marketing.color == AUTO_CATEGORY_COLOR
        assert {i.category_id for i in db_session.query(BudgetItem)} == {marketing.id}

    def test_import_replaces_active_period(self, db_session, active_period):
        result = ImportBudgetDataUseCase(db_session).execute(_data([]))

        active = db_session.query(BudgetPeriod).filter(BudgetPeriod.active == True).all()
        assert [p.id for p in active] == [result.period_id]

    def test_import_event(self, db_session):
        result = ImportBudgetDataUseCase(db_session).execute(_data([ImportedItem("A", "Governance", 1)]))
        event = db_session.query(EventLog).filter_by(event_type="budget_imported").one()
        assert event.payload_json == {
            "period_id": result.period_id, "categories_count": 2, "items_count": 1,
        }

    def test_negative_amount_rejected(self, db_session):
        with pytest.raises(ImportValidationError):
            ImportBudgetDataUseCase(db_session).execute(_data([ImportedItem("A", "Governance", -1)]))
        assert db_session.query(BudgetPeriod).count() == 0

    def test_invalid_period_rolls_back(self, db_session, active_period):
        with pytest.raises(PeriodValidationError):
            ImportBudgetDataUseCase(db_session).execute(_data([ImportedItem("A", "Governance", 1)], title=" "))

        assert db_session.query(BudgetPeriod).count() == 1
        assert get_active_period(db_session).id == active_period.id
        assert db_session.query(BudgetItem).count() == 0
