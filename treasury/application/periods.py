"""
Budget period lifecycle

The single-active-period invariant is enforced here and only here:
every activation goes through ActivatePeriodUseCase, which flips the
target on and every other period off in one transaction.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from treasury.application.errors import NotFoundError
from treasury.application.locks import vote_lock
from treasury.domain.period import is_voting_ended
from treasury.infrastructure.db.models import BudgetPeriod
from treasury.infrastructure.eventlog.repository import EventLogRepository

logger = logging.getLogger(__name__)


class PeriodValidationError(ValueError):
    pass


def get_active_period(db: Session) -> BudgetPeriod | None:
    return db.query(BudgetPeriod).filter(BudgetPeriod.active == True).first()


def get_period(db: Session, period_id: int) -> BudgetPeriod:
    period = db.query(BudgetPeriod).filter(BudgetPeriod.id == period_id).first()
    if not period:
        raise NotFoundError(f"Budget period {period_id} not found")
    return period


def results_visible(period: BudgetPeriod | None, now: datetime) -> bool:
    """Per-item consensus is shown to users only after voting has ended."""
    if period is None:
        return False
    return is_voting_ended(period.end_date, now)


class ActivatePeriodUseCase:
    """
    Use case: make one period the active one

    Runs under vote_lock. Does not commit when commit=False so callers (import) can fold
    activation into a larger transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = EventLogRepository(db)

    def execute(self, period_id: int, actor_user_id: int | None = None, commit: bool = True) -> BudgetPeriod:
        with vote_lock:
            period = get_period(self.db, period_id)

            previous_ids = [
                pid for (pid,) in self.db.query(BudgetPeriod.id).filter(
                    BudgetPeriod.active == True,
                    BudgetPeriod.id != period_id,
                ).all()
            ]

            try:
                self.db.query(BudgetPeriod).filter(BudgetPeriod.id != period_id).update(
                    {BudgetPeriod.active: False}, synchronize_session="fetch"
                )
                period.active = True

                self.event_repo.append_event(
                    event_type="period_activated",
                    payload={"period_id": period_id, "deactivated_period_ids": previous_ids},
                    actor_user_id=actor_user_id,
                )
                if commit:
                    self.db.commit()
                else:
                    self.db.flush()
            except Exception:
                if commit:
                    self.db.rollback()
                raise

        logger.info("Budget period %d activated (deactivated: %s)", period_id, previous_ids or "none")
        return period


class CreatePeriodUseCase:
    """Use case: create a budget period, optionally activating it right away"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        title: str,
        total_budget: int,
        start_date: datetime,
        end_date: datetime,
        description: str | None = None,
        governance_action: str | None = None,
        activate: bool = False,
        actor_user_id: int | None = None,
        commit: bool = True,
    ) -> BudgetPeriod:
        title = title.strip()
        if not title:
            raise PeriodValidationError("Period title is required")
        if total_budget < 0:
            raise PeriodValidationError("total_budget must be >= 0")
        if end_date <= start_date:
            raise PeriodValidationError("end_date must be after start_date")

        period = BudgetPeriod(
            title=title,
            description=description,
            total_budget=total_budget,
            start_date=start_date,
            end_date=end_date,
            governance_action=governance_action,
            active=False,
        )
        self.db.add(period)
        self.db.flush()

        if activate:
            ActivatePeriodUseCase(self.db).execute(period.id, actor_user_id=actor_user_id, commit=commit)
        elif commit:
            self.db.commit()

        return period
