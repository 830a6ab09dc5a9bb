"""
Event Log Repository - append-only audit trail

Votes, period activations, imports and reactions are recorded as immutable
events next to the state change itself (same transaction).
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from treasury.infrastructure.db.models import EventLog


class EventLogRepository:
    """
    Repository for the event log
    """

    def __init__(self, db: Session):
        self.db = db

    def append_event(
        self,
        event_type: str,
        payload: Dict[str, Any],
        occurred_at: Optional[datetime] = None,
        actor_user_id: Optional[int] = None,
        idempotency_key: Optional[str] = None,
    ) -> int:
        """
        Append an event to the log

        Args:
            event_type: Event type (e.g. "vote_cast")
            payload: Event data (stored as JSONB)
            occurred_at: When it happened (default: now, UTC)
            actor_user_id: Who did it (optional)
            idempotency_key: Unique key guarding against double writes (optional)

        Returns:
            event_id: ID of the new event

        Raises:
            IntegrityError: if idempotency_key already exists

        Example:
            >>> repo = EventLogRepository(db)
            >>> event_id = repo.append_event(
            ...     event_type="vote_cast",
            ...     payload={"item_id": 3, "amount": 1000000},
            ...     actor_user_id=1,
            ...     idempotency_key="vote-<tx_hash>-3"
            ... )
        """
        if occurred_at is None:
            occurred_at = datetime.now(timezone.utc)

        event = EventLog(
            actor_user_id=actor_user_id,
            event_type=event_type,
            payload_json=payload,
            occurred_at=occurred_at,
            idempotency_key=idempotency_key,
        )

        self.db.add(event)
        self.db.flush()  # get the ID without committing

        return event.id

    def list_events(
        self,
        event_types: Optional[List[str]] = None,
        actor_user_id: Optional[int] = None,
        after_id: int = 0,
        limit: int = 200,
    ) -> List[EventLog]:
        """
        Events after the given ID, ordered by ID ascending

        Args:
            event_types: Filter by event type (optional)
            actor_user_id: Filter by actor (optional)
            after_id: Only events with ID > after_id
            limit: Max events returned (default: 200)
        """
        query = self.db.query(EventLog).filter(EventLog.id > after_id)

        if event_types:
            query = query.filter(EventLog.event_type.in_(event_types))
        if actor_user_id is not None:
            query = query.filter(EventLog.actor_user_id == actor_user_id)

        return query.order_by(EventLog.id.asc()).limit(limit).all()

    def count_events(self, event_types: Optional[List[str]] = None) -> int:
        """Count events, optionally filtered by type"""
        query = self.db.query(EventLog)

        if event_types:
            query = query.filter(EventLog.event_type.in_(event_types))

        return query.count()
