"""
Statistics engine - period-wide rollups

Everything here is recomputed from the current store contents; the
statistics row is a cache that can be dropped and rebuilt at any time.
Refreshing twice with no votes in between writes nothing the second time.
"""
import logging
from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import func, distinct
from sqlalchemy.orm import Session

from treasury.application.errors import NotFoundError
from treasury.application.locks import vote_lock
from treasury.application.periods import get_active_period, get_period
from treasury.infrastructure.db.models import (
    User, BudgetItem, BudgetVote, BudgetCategory, Statistics,
)
from treasury.utils.money import scaled_percentage, format_ada, format_percentage

logger = logging.getLogger(__name__)


def get_category_distribution(db: Session) -> Dict[str, int]:
    """
    Summed consensus per category id (string keys, ordered by id).

    Every known category is present (0 when it has no items). Items whose
    category is missing still contribute under their own category id.
    """
    totals: Dict[int, int] = {cid: 0 for (cid,) in db.query(BudgetCategory.id).all()}

    rows = (
        db.query(BudgetItem.category_id, func.coalesce(func.sum(BudgetItem.current_median_vote), 0))
        .group_by(BudgetItem.category_id)
        .all()
    )
    for category_id, amount in rows:
        if category_id not in totals:
            logger.warning("Budget items reference missing category %s", category_id)
        totals[category_id] = totals.get(category_id, 0) + int(amount)

    return {str(cid): totals[cid] for cid in sorted(totals)}


def count_total_dreps(db: Session) -> int:
    return db.query(func.count(User.id)).filter(User.is_drep == True).scalar() or 0


def count_active_dreps(db: Session) -> int:
    """Distinct voters across all votes in the store."""
    return db.query(func.count(distinct(BudgetVote.user_id))).scalar() or 0


def get_total_allocated(db: Session) -> int:
    return int(db.query(func.coalesce(func.sum(BudgetItem.current_median_vote), 0)).scalar() or 0)


def get_statistics(db: Session, period_id: int) -> Statistics:
    stats = db.query(Statistics).filter(Statistics.budget_period_id == period_id).first()
    if not stats:
        raise NotFoundError(f"No statistics for budget period {period_id}")
    return stats


class RefreshStatisticsUseCase:
    """
    Use case: recompute the statistics row of a period (active period by default)

    Flushes only; the caller owns the transaction (commit=True commits here).
    Holds vote_lock so a refresh never interleaves with a vote transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, period_id: int | None = None, commit: bool = False) -> Statistics:
        with vote_lock:
            try:
                stats = self._refresh(period_id)
                if commit:
                    self.db.commit()
            except Exception:
                if commit:
                    self.db.rollback()
                raise
        return stats

    def _refresh(self, period_id: int | None) -> Statistics:
        if period_id is None:
            period = get_active_period(self.db)
            if not period:
                raise NotFoundError("No active budget period found")
        else:
            period = get_period(self.db, period_id)

        total_allocated = get_total_allocated(self.db)
        values = {
            "total_dreps": count_total_dreps(self.db),
            "active_dreps": count_active_dreps(self.db),
            "total_allocated": total_allocated,
            "percentage_allocated": scaled_percentage(total_allocated, period.total_budget),
            "category_distribution": get_category_distribution(self.db),
        }

        stats = self.db.query(Statistics).filter(Statistics.budget_period_id == period.id).first()
        if stats is None:
            stats = Statistics(budget_period_id=period.id, updated_at=datetime.now(timezone.utc), **values)
            self.db.add(stats)
        else:
            changed = False
            for field, value in values.items():
                if getattr(stats, field) != value:
                    setattr(stats, field, value)
                    changed = True
            if changed:
                stats.updated_at = datetime.now(timezone.utc)

        self.db.flush()

        logger.debug(
            "Statistics for period %d: dreps=%d active=%d allocated=%s (%s)",
            period.id, values["total_dreps"], values["active_dreps"],
            format_ada(total_allocated), format_percentage(values["percentage_allocated"]),
        )
        return stats
