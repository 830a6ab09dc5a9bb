"""
Budget import - period, categories and items from already-parsed records

Spreadsheet/CSV fetching and parsing live outside this module; it only
consumes plain records. The imported period becomes the active one.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from sqlalchemy.orm import Session

from treasury.application.locks import vote_lock
from treasury.application.periods import CreatePeriodUseCase
from treasury.infrastructure.db.models import BudgetCategory, BudgetItem
from treasury.infrastructure.eventlog.repository import EventLogRepository

logger = logging.getLogger(__name__)

AUTO_CATEGORY_COLOR = "#4C6FFF"


class ImportValidationError(ValueError):
    pass


@dataclass
class ImportedPeriod:
    title: str
    total_budget: int
    start_date: datetime
    end_date: datetime
    description: str = ""
    governance_action: str = ""


@dataclass
class ImportedCategory:
    name: str
    description: str = ""
    color: str = AUTO_CATEGORY_COLOR


@dataclass
class ImportedItem:
    title: str
    category_name: str
    suggested_amount: int
    description: str = ""


@dataclass
class ImportedBudgetData:
    period: ImportedPeriod
    categories: List[ImportedCategory] = field(default_factory=list)
    items: List[ImportedItem] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    period_id: int
    categories_count: int
    items_count: int


class ImportBudgetDataUseCase:
    """
    Use case: load a full budget (period + categories + items) in one transaction

    Item category names resolve exact first, then case-insensitively; unknown
    names create a new category.
    """

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = EventLogRepository(db)

    def execute(self, data: ImportedBudgetData, actor_user_id: int | None = None) -> ImportResult:
        for item in data.items:
            if item.suggested_amount < 0:
                raise ImportValidationError(f"Item '{item.title}': suggested_amount must be >= 0")
            if not item.title.strip():
                raise ImportValidationError("Item title is required")

        with vote_lock:
            try:
                period = CreatePeriodUseCase(self.db).execute(
                    title=data.period.title,
                    total_budget=data.period.total_budget,
                    start_date=data.period.start_date,
                    end_date=data.period.end_date,
                    description=data.period.description,
                    governance_action=data.period.governance_action,
                    activate=True,
                    actor_user_id=actor_user_id,
                    commit=False,
                )

                category_map: Dict[str, int] = {}
                for cat in data.categories:
                    category_map[cat.name] = self._create_category(cat.name, cat.description, cat.color)

                for item in data.items:
                    self.db.add(BudgetItem(
                        title=item.title.strip(),
                        description=item.description,
                        category_id=self._resolve_category(category_map, item.category_name),
                        suggested_amount=item.suggested_amount,
                        current_median_vote=0,
                        percentage_of_suggested=0,
                    ))
                self.db.flush()

                result = ImportResult(
                    period_id=period.id,
                    categories_count=len(category_map),
                    items_count=len(data.items),
                )
                self.event_repo.append_event(
                    event_type="budget_imported",
                    payload={
                        "period_id": result.period_id,
                        "categories_count": result.categories_count,
                        "items_count": result.items_count,
                    },
                    actor_user_id=actor_user_id,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info(
            "Imported budget period %d: %d categories, %d items",
            result.period_id, result.categories_count, result.items_count,
        )
        return result

    def _create_category(self, name: str, description: str, color: str) -> int:
        category = BudgetCategory(name=name, description=description, color=color or AUTO_CATEGORY_COLOR)
        self.db.add(category)
        self.db.flush()
        return category.id

    def _resolve_category(self, category_map: Dict[str, int], name: str) -> int:
        if name in category_map:
            return category_map[name]

        lowered = name.lower()
        for known, category_id in category_map.items():
            if known.lower() == lowered:
                return category_id

        category_id = self._create_category(name, "", AUTO_CATEGORY_COLOR)
        category_map[name] = category_id
        return category_id
