"""
Budget API endpoints (items, categories, period, statistics)
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from treasury.api.deps import get_db
from treasury.api.errors import to_http_exception
from treasury.application.budget import list_budget_items, list_budget_categories, build_budget_view
from treasury.application.errors import NotFoundError
from treasury.application.periods import get_active_period
from treasury.application.statistics import RefreshStatisticsUseCase
from treasury.domain.period import time_remaining, format_countdown


router = APIRouter(prefix="/api/v1/budget", tags=["budget"])


# === Response models ===

class BudgetItemResponse(BaseModel):
    id: int
    title: str
    description: str | None
    category_id: int
    suggested_amount: int
    current_median_vote: int
    percentage_of_suggested: int


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None
    color: str


class PeriodResponse(BaseModel):
    id: int
    title: str
    description: str | None
    total_budget: int
    start_date: datetime
    end_date: datetime
    governance_action: str | None
    active: bool


class StatisticsResponse(BaseModel):
    """
    category_distribution maps category id (as a string) to summed consensus
    in lovelace. Every existing category is present. An item pointing at a
    deleted category still contributes under that dangling id; compare the
    keys with GET /categories to tell such ids apart.
    """
    budget_period_id: int
    total_dreps: int
    active_dreps: int
    total_allocated: int
    percentage_allocated: int
    category_distribution: dict[str, int]


class CountdownResponse(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int
    is_expired: bool
    label: str


# === Endpoints ===

@router.get("/items", response_model=list[BudgetItemResponse])
def get_items(db: Session = Depends(get_db)):
    """All budget items (raw, for admin tooling; the voting page uses /view)"""
    return [
        BudgetItemResponse(
            id=i.id,
            title=i.title,
            description=i.description,
            category_id=i.category_id,
            suggested_amount=i.suggested_amount,
            current_median_vote=i.current_median_vote,
            percentage_of_suggested=i.percentage_of_suggested,
        )
        for i in list_budget_items(db)
    ]


@router.get("/categories", response_model=list[CategoryResponse])
def get_categories(db: Session = Depends(get_db)):
    return [
        CategoryResponse(id=c.id, name=c.name, description=c.description, color=c.color)
        for c in list_budget_categories(db)
    ]


@router.get("/period/active", response_model=PeriodResponse)
def get_period(db: Session = Depends(get_db)):
    period = get_active_period(db)
    if not period:
        raise HTTPException(status_code=404, detail="No active budget period found")

    return PeriodResponse(
        id=period.id,
        title=period.title,
        description=period.description,
        total_budget=period.total_budget,
        start_date=period.start_date,
        end_date=period.end_date,
        governance_action=period.governance_action,
        active=period.active,
    )


@router.get("/countdown", response_model=CountdownResponse)
def get_countdown(db: Session = Depends(get_db)):
    """Time left in the active period's voting window"""
    period = get_active_period(db)
    if not period:
        raise HTTPException(status_code=404, detail="No active budget period found")

    remaining = time_remaining(period.end_date, datetime.now(timezone.utc))
    return CountdownResponse(**remaining.to_dict(), label=format_countdown(remaining))


@router.get("/statistics", response_model=StatisticsResponse)
def get_statistics(db: Session = Depends(get_db)):
    """Recompute and return statistics for the active period"""
    try:
        stats = RefreshStatisticsUseCase(db).execute(commit=True)
    except NotFoundError as exc:
        raise to_http_exception(exc)

    return StatisticsResponse(
        budget_period_id=stats.budget_period_id,
        total_dreps=stats.total_dreps,
        active_dreps=stats.active_dreps,
        total_allocated=stats.total_allocated,
        percentage_allocated=stats.percentage_allocated,
        category_distribution=stats.category_distribution,
    )


@router.get("/view")
def get_view(db: Session = Depends(get_db)):
    """Voting page data; consensus values are hidden until voting ends"""
    return build_budget_view(db, datetime.now(timezone.utc))
