"""
Sentiment (emoji reaction) API endpoints
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from treasury.api.deps import get_db, get_current_user
from treasury.api.errors import to_http_exception
from treasury.application.errors import VotingError
from treasury.application.sentiments import (
    SubmitSentimentUseCase, get_item_sentiments, get_user_sentiment,
)
from treasury.infrastructure.db.models import User


router = APIRouter(prefix="/api/v1/sentiments", tags=["sentiments"])


class SubmitSentimentRequest(BaseModel):
    budget_item_id: int
    sentiment: str


class SentimentStatResponse(BaseModel):
    sentiment: str
    count: int


class SentimentResponse(BaseModel):
    budget_item_id: int
    sentiment: str


@router.get("/item/{budget_item_id}", response_model=list[SentimentStatResponse])
def item_sentiments(budget_item_id: int, db: Session = Depends(get_db)):
    return [
        SentimentStatResponse(sentiment=s.sentiment, count=s.count)
        for s in get_item_sentiments(db, budget_item_id)
    ]


@router.get("/user/{budget_item_id}", response_model=SentimentResponse | None)
def my_sentiment(
    budget_item_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = get_user_sentiment(db, user.id, budget_item_id)
    if record is None:
        return None
    return SentimentResponse(budget_item_id=record.budget_item_id, sentiment=record.sentiment)


@router.post("/submit", response_model=SentimentResponse)
def submit_sentiment(
    req: SubmitSentimentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        record = SubmitSentimentUseCase(db).execute(user.id, req.budget_item_id, req.sentiment)
    except VotingError as exc:
        raise to_http_exception(exc)

    return SentimentResponse(budget_item_id=record.budget_item_id, sentiment=record.sentiment)
