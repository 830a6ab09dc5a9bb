"""
Voting use cases - single and bulk votes from DReps

Write path for one vote:
  item lookup -> delegate check -> threshold guard -> ledger receipt
  -> upsert (user, item) -> consensus refresh -> statistics refresh -> commit

The ledger receipt is obtained before any row is touched, so a failed
submission leaves the store unchanged. Bulk votes validate every entry
first and then apply all of them in one transaction.

vote_lock serializes the whole sequence: FastAPI runs sync endpoints in a
thread pool and the statistics row is shared by every item.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Sequence

from sqlalchemy.orm import Session

from treasury.application.errors import (
    NotFoundError, ForbiddenError, InvalidVoteError, UpstreamFailureError,
)
from treasury.application.locks import vote_lock
from treasury.application.periods import get_active_period
from treasury.application.statistics import RefreshStatisticsUseCase
from treasury.domain.consensus import compute_consensus
from treasury.domain.threshold import is_amount_admissible
from treasury.domain.vote import Vote
from treasury.infrastructure.db.models import BudgetItem, BudgetVote, User
from treasury.infrastructure.eventlog.repository import EventLogRepository
from treasury.infrastructure.ledger.submitter import (
    TransactionSubmitter, LedgerSubmissionError, get_transaction_submitter,
)

logger = logging.getLogger(__name__)


THRESHOLD_REJECTION = "Proposed amount does not meet minimum threshold requirements"


@dataclass(frozen=True)
class VoteEntry:
    budget_item_id: int
    amount: int


@dataclass(frozen=True)
class VoteReceipt:
    transaction_hash: str


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_user_votes(db: Session, user_id: int) -> List[BudgetVote]:
    return (
        db.query(BudgetVote)
        .filter(BudgetVote.user_id == user_id)
        .order_by(BudgetVote.budget_item_id.asc())
        .all()
    )


def get_item_votes(db: Session, budget_item_id: int) -> List[BudgetVote]:
    return db.query(BudgetVote).filter(BudgetVote.budget_item_id == budget_item_id).all()


def get_item_vote_amounts(db: Session, budget_item_id: int) -> List[int]:
    return [
        amount for (amount,) in
        db.query(BudgetVote.amount).filter(BudgetVote.budget_item_id == budget_item_id).all()
    ]


# ---------------------------------------------------------------------------
# Shared steps
# ---------------------------------------------------------------------------

def _get_item(db: Session, budget_item_id: int) -> BudgetItem:
    item = db.query(BudgetItem).filter(BudgetItem.id == budget_item_id).first()
    if not item:
        raise NotFoundError(f"Budget item with ID {budget_item_id} not found")
    return item


def _require_delegate(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_drep:
        raise ForbiddenError("Only DReps can vote on budget items")
    return user


def _check_amount(amount: int, budget_item_id: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidVoteError("Vote amount must be an integer", budget_item_id)
    if amount < 0:
        raise InvalidVoteError("Vote amount must be >= 0", budget_item_id)


def _submit(submitter: TransactionSubmitter, payload: dict) -> str:
    try:
        return submitter.submit(payload)
    except LedgerSubmissionError as exc:
        raise UpstreamFailureError(str(exc)) from exc


def _upsert_vote(
    db: Session,
    event_repo: EventLogRepository,
    user_id: int,
    budget_item_id: int,
    amount: int,
    transaction_hash: str,
    position: int = 0,
) -> BudgetVote:
    """Insert or update the single (user, item) vote row."""
    now = datetime.now(timezone.utc)
    vote = db.query(BudgetVote).filter(
        BudgetVote.user_id == user_id,
        BudgetVote.budget_item_id == budget_item_id,
    ).first()

    previous_amount = None
    if vote:
        previous_amount = vote.amount
        vote.amount = amount
        vote.transaction_hash = transaction_hash
        vote.updated_at = now
    else:
        vote = BudgetVote(
            user_id=user_id,
            budget_item_id=budget_item_id,
            amount=amount,
            transaction_hash=transaction_hash,
            created_at=now,
            updated_at=now,
        )
        db.add(vote)
    db.flush()

    event_repo.append_event(
        event_type="vote_cast",
        payload=Vote.cast(user_id, budget_item_id, amount, transaction_hash, previous_amount),
        occurred_at=now,
        actor_user_id=user_id,
        idempotency_key=f"vote-{transaction_hash}-{position}",
    )
    return vote


def _refresh_statistics(db: Session) -> None:
    """Statistics follow the active period; votes are still accepted without one."""
    if get_active_period(db) is None:
        logger.warning("No active budget period, statistics not refreshed")
        return
    RefreshStatisticsUseCase(db).execute()


class RefreshItemConsensusUseCase:
    """
    Use case: recompute an item's consensus from its current votes

    The only writer of BudgetItem.current_median_vote / percentage_of_suggested.
    Called from the vote write path after every upsert.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, budget_item_id: int) -> BudgetItem:
        item = _get_item(self.db, budget_item_id)
        result = compute_consensus(get_item_vote_amounts(self.db, budget_item_id), item.suggested_amount)

        item.current_median_vote = result.consensus
        item.percentage_of_suggested = result.percentage_of_suggested
        self.db.flush()
        return item


# ---------------------------------------------------------------------------
# Use cases
# ---------------------------------------------------------------------------

class CastVoteUseCase:
    """
    Use case: a DRep votes an amount (lovelace) for one budget item

    Repeat votes on the same item replace the previous amount.
    """

    def __init__(self, db: Session, submitter: TransactionSubmitter | None = None):
        self.db = db
        self.submitter = submitter or get_transaction_submitter()
        self.event_repo = EventLogRepository(db)

    def execute(self, user_id: int, budget_item_id: int, amount: int) -> VoteReceipt:
        _check_amount(amount, budget_item_id)

        with vote_lock:
            try:
                _get_item(self.db, budget_item_id)
                _require_delegate(self.db, user_id)

                # Zero votes bypass the guard
                if amount > 0:
                    existing = get_item_vote_amounts(self.db, budget_item_id)
                    if not is_amount_admissible(existing, amount):
                        raise InvalidVoteError(THRESHOLD_REJECTION, budget_item_id)

                tx_hash = _submit(self.submitter, Vote.encode(budget_item_id, amount))

                _upsert_vote(self.db, self.event_repo, user_id, budget_item_id, amount, tx_hash)
                RefreshItemConsensusUseCase(self.db).execute(budget_item_id)
                _refresh_statistics(self.db)

                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info("Vote by user %d on item %d: %d (tx %s)", user_id, budget_item_id, amount, tx_hash)
        return VoteReceipt(transaction_hash=tx_hash)


class CastBulkVotesUseCase:
    """
    Use case: several votes in one logical transaction (shared receipt)

    All-or-nothing: every entry is validated against the vote set it will
    see (including earlier entries of the same batch) before the ledger is
    called and before anything is written. The writes themselves share one
    DB transaction, rolled back on any error.
    """

    def __init__(self, db: Session, submitter: TransactionSubmitter | None = None):
        self.db = db
        self.submitter = submitter or get_transaction_submitter()
        self.event_repo = EventLogRepository(db)

    def execute(self, user_id: int, entries: Sequence[VoteEntry]) -> VoteReceipt:
        entries = list(entries)
        if not entries:
            raise InvalidVoteError("No votes submitted")
        for entry in entries:
            _check_amount(entry.amount, entry.budget_item_id)

        with vote_lock:
            try:
                _require_delegate(self.db, user_id)
                self._validate(user_id, entries)

                tx_hash = _submit(
                    self.submitter,
                    Vote.encode_bulk((e.budget_item_id, e.amount) for e in entries),
                )

                for position, entry in enumerate(entries):
                    _upsert_vote(
                        self.db, self.event_repo, user_id,
                        entry.budget_item_id, entry.amount, tx_hash, position,
                    )
                    RefreshItemConsensusUseCase(self.db).execute(entry.budget_item_id)
                _refresh_statistics(self.db)

                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info("Bulk vote by user %d: %d entries (tx %s)", user_id, len(entries), tx_hash)
        return VoteReceipt(transaction_hash=tx_hash)

    def _validate(self, user_id: int, entries: List[VoteEntry]) -> None:
        """Dry-run the batch in order over projected vote sets; nothing is written."""
        projected: Dict[int, Dict[int, int]] = {}

        for entry in entries:
            _get_item(self.db, entry.budget_item_id)

            votes = projected.get(entry.budget_item_id)
            if votes is None:
                votes = {
                    uid: amount for uid, amount in
                    self.db.query(BudgetVote.user_id, BudgetVote.amount)
                    .filter(BudgetVote.budget_item_id == entry.budget_item_id)
                    .all()
                }
                projected[entry.budget_item_id] = votes

            if entry.amount > 0 and not is_amount_admissible(list(votes.values()), entry.amount):
                raise InvalidVoteError(
                    f"Proposed amount for item {entry.budget_item_id} does not meet "
                    f"minimum threshold requirements",
                    entry.budget_item_id,
                )
            votes[user_id] = entry.amount
