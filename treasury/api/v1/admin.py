"""
Admin API: budget import and period activation.

Access: DReps only.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from treasury.api.deps import get_db, get_current_user
from treasury.api.errors import to_http_exception
from treasury.application.errors import NotFoundError
from treasury.application.importer import (
    ImportBudgetDataUseCase, ImportedBudgetData, ImportedPeriod, ImportedCategory, ImportedItem,
    ImportValidationError, AUTO_CATEGORY_COLOR,
)
from treasury.application.periods import ActivatePeriodUseCase, PeriodValidationError
from treasury.infrastructure.db.models import User

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


# ── Helpers ──────────────────────────────────────────────────────────────────

def _require_drep(user: User = Depends(get_current_user)) -> User:
    """Return current user if DRep, otherwise raise 403."""
    if not user.is_drep:
        raise HTTPException(status_code=403, detail="Only DReps can manage budget data")
    return user


# ── Request/Response models ──────────────────────────────────────────────────

class PeriodIn(BaseModel):
    title: str
    description: str = ""
    total_budget: int = Field(ge=0)
    start_date: datetime
    end_date: datetime
    governance_action: str = ""

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class CategoryIn(BaseModel):
    name: str
    description: str = ""
    color: str = AUTO_CATEGORY_COLOR


class ItemIn(BaseModel):
    title: str
    description: str = ""
    category_name: str
    suggested_amount: int = Field(ge=0)


class ImportRequest(BaseModel):
    period: PeriodIn
    categories: list[CategoryIn] = []
    items: list[ItemIn] = []


class ImportResponse(BaseModel):
    period_id: int
    categories_count: int
    items_count: int


# ── Routes ───────────────────────────────────────────────────────────────────

@router.post("/import", response_model=ImportResponse)
def import_budget(
    req: ImportRequest,
    user: User = Depends(_require_drep),
    db: Session = Depends(get_db),
):
    """Load a budget (period + categories + items); the new period becomes active"""
    data = ImportedBudgetData(
        period=ImportedPeriod(**req.period.model_dump()),
        categories=[ImportedCategory(**c.model_dump()) for c in req.categories],
        items=[ImportedItem(**i.model_dump()) for i in req.items],
    )
    try:
        result = ImportBudgetDataUseCase(db).execute(data, actor_user_id=user.id)
    except (ImportValidationError, PeriodValidationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return ImportResponse(
        period_id=result.period_id,
        categories_count=result.categories_count,
        items_count=result.items_count,
    )


@router.post("/periods/{period_id}/activate")
def activate_period(
    period_id: int,
    user: User = Depends(_require_drep),
    db: Session = Depends(get_db),
):
    try:
        ActivatePeriodUseCase(db).execute(period_id, actor_user_id=user.id)
    except NotFoundError as exc:
        raise to_http_exception(exc)

    return {"status": "activated", "period_id": period_id}
