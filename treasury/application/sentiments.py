"""
Sentiment use cases - one emoji reaction per (user, item)

budget_sentiment_stats keeps a per-(item, sentiment) counter in step
with the individual reactions; counters never go below zero.
"""
import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from treasury.application.errors import NotFoundError, InvalidSentimentError
from treasury.infrastructure.db.models import BudgetItem, BudgetSentiment, BudgetSentimentStats
from treasury.infrastructure.eventlog.repository import EventLogRepository

logger = logging.getLogger(__name__)

SENTIMENTS = ("thumbsUp", "heart", "rocket", "dollarSign", "alertCircle")


def get_item_sentiments(db: Session, budget_item_id: int) -> List[BudgetSentimentStats]:
    return (
        db.query(BudgetSentimentStats)
        .filter(BudgetSentimentStats.budget_item_id == budget_item_id)
        .order_by(BudgetSentimentStats.sentiment.asc())
        .all()
    )


def get_user_sentiment(db: Session, user_id: int, budget_item_id: int) -> BudgetSentiment | None:
    return db.query(BudgetSentiment).filter(
        BudgetSentiment.user_id == user_id,
        BudgetSentiment.budget_item_id == budget_item_id,
    ).first()


class SubmitSentimentUseCase:
    """Use case: set (or change) a user's reaction to an item"""

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = EventLogRepository(db)

    def execute(self, user_id: int, budget_item_id: int, sentiment: str) -> BudgetSentiment:
        if sentiment not in SENTIMENTS:
            raise InvalidSentimentError(
                f"Unknown sentiment: {sentiment}. Use one of {', '.join(SENTIMENTS)}"
            )

        item = self.db.query(BudgetItem).filter(BudgetItem.id == budget_item_id).first()
        if not item:
            raise NotFoundError(f"Budget item with ID {budget_item_id} not found")

        existing = get_user_sentiment(self.db, user_id, budget_item_id)
        if existing and existing.sentiment == sentiment:
            return existing

        now = datetime.now(timezone.utc)
        try:
            if existing:
                previous = existing.sentiment
                self._adjust(budget_item_id, previous, -1, now)
                existing.sentiment = sentiment
                existing.updated_at = now
                record = existing
            else:
                previous = None
                record = BudgetSentiment(
                    user_id=user_id,
                    budget_item_id=budget_item_id,
                    sentiment=sentiment,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(record)
            self._adjust(budget_item_id, sentiment, 1, now)

            self.event_repo.append_event(
                event_type="sentiment_set",
                payload={
                    "budget_item_id": budget_item_id,
                    "sentiment": sentiment,
                    "previous_sentiment": previous,
                },
                occurred_at=now,
                actor_user_id=user_id,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return record

    def _adjust(self, budget_item_id: int, sentiment: str, delta: int, now: datetime) -> None:
        stats = self.db.query(BudgetSentimentStats).filter(
            BudgetSentimentStats.budget_item_id == budget_item_id,
            BudgetSentimentStats.sentiment == sentiment,
        ).first()

        if stats is None:
            stats = BudgetSentimentStats(
                budget_item_id=budget_item_id, sentiment=sentiment, count=0, updated_at=now,
            )
            self.db.add(stats)

        if stats.count + delta < 0:
            logger.warning("Sentiment counter %s/%s would go negative, clamped", budget_item_id, sentiment)
        stats.count = max(0, stats.count + delta)
        stats.updated_at = now
        self.db.flush()
