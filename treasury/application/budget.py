"""
Budget read side: items, categories and the voting-page view.

Consensus values are aggregated in real time but hidden from the view
until the active period's voting window has closed.
"""
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from treasury.application.periods import get_active_period, results_visible
from treasury.domain.period import time_remaining, format_countdown
from treasury.infrastructure.db.models import BudgetItem, BudgetCategory

UNCATEGORIZED = "Uncategorized"


def list_budget_items(db: Session) -> List[BudgetItem]:
    return db.query(BudgetItem).order_by(BudgetItem.category_id.asc(), BudgetItem.id.asc()).all()


def list_budget_categories(db: Session) -> List[BudgetCategory]:
    return db.query(BudgetCategory).order_by(BudgetCategory.id.asc()).all()


def category_label(categories_by_id: Dict[int, BudgetCategory], category_id: int) -> str:
    """Category name, or "Uncategorized" when the item points at a missing category."""
    category = categories_by_id.get(category_id)
    return category.name if category else UNCATEGORIZED


def build_budget_view(db: Session, now: datetime) -> Dict[str, Any]:
    """
    Everything the voting page needs in one dict.

    current_median_vote / percentage_of_suggested are None while voting is open.
    """
    period = get_active_period(db)
    categories = list_budget_categories(db)
    by_id = {c.id: c for c in categories}
    visible = results_visible(period, now)

    items = []
    for item in list_budget_items(db):
        items.append({
            "id": item.id,
            "title": item.title,
            "description": item.description,
            "category_id": item.category_id,
            "category_name": category_label(by_id, item.category_id),
            "suggested_amount": item.suggested_amount,
            "current_median_vote": item.current_median_vote if visible else None,
            "percentage_of_suggested": item.percentage_of_suggested if visible else None,
        })

    period_view = None
    if period is not None:
        remaining = time_remaining(period.end_date, now)
        period_view = {
            "id": period.id,
            "title": period.title,
            "description": period.description,
            "total_budget": period.total_budget,
            "start_date": period.start_date,
            "end_date": period.end_date,
            "governance_action": period.governance_action,
            "time_remaining": remaining.to_dict(),
            "countdown": format_countdown(remaining),
        }

    return {
        "period": period_view,
        "results_visible": visible,
        "categories": [
            {"id": c.id, "name": c.name, "description": c.description, "color": c.color}
            for c in categories
        ],
        "items": items,
    }
