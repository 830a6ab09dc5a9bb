"""
Vote API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from treasury.api.deps import get_db, get_current_user, get_submitter
from treasury.api.errors import to_http_exception
from treasury.application.errors import VotingError
from treasury.application.voting import (
    CastVoteUseCase, CastBulkVotesUseCase, VoteEntry, get_user_votes,
)
from treasury.infrastructure.db.models import User
from treasury.infrastructure.ledger.submitter import TransactionSubmitter


router = APIRouter(prefix="/api/v1/votes", tags=["votes"])


# === Request/Response models ===

class SubmitVoteRequest(BaseModel):
    budget_item_id: int
    amount: int = Field(ge=0)  # lovelace


class BulkVoteRequest(BaseModel):
    votes: list[SubmitVoteRequest] = Field(min_length=1)


class VoteReceiptResponse(BaseModel):
    tx_hash: str


class VoteResponse(BaseModel):
    id: int
    budget_item_id: int
    amount: int
    transaction_hash: str | None
    created_at: datetime
    updated_at: datetime


# === Endpoints ===

@router.get("/user", response_model=list[VoteResponse])
def list_my_votes(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Votes of the current user"""
    return [
        VoteResponse(
            id=v.id,
            budget_item_id=v.budget_item_id,
            amount=v.amount,
            transaction_hash=v.transaction_hash,
            created_at=v.created_at,
            updated_at=v.updated_at,
        )
        for v in get_user_votes(db, user.id)
    ]


@router.post("/submit", response_model=VoteReceiptResponse)
def submit_vote(
    req: SubmitVoteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    submitter: TransactionSubmitter = Depends(get_submitter),
):
    """Vote (or re-vote) an amount for one item"""
    try:
        receipt = CastVoteUseCase(db, submitter).execute(user.id, req.budget_item_id, req.amount)
    except VotingError as exc:
        raise to_http_exception(exc)

    return VoteReceiptResponse(tx_hash=receipt.transaction_hash)


@router.post("/submit-bulk", response_model=VoteReceiptResponse)
def submit_bulk_votes(
    req: BulkVoteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    submitter: TransactionSubmitter = Depends(get_submitter),
):
    """Several votes, one transaction; nothing is stored if any entry is rejected"""
    entries = [VoteEntry(budget_item_id=v.budget_item_id, amount=v.amount) for v in req.votes]
    try:
        receipt = CastBulkVotesUseCase(db, submitter).execute(user.id, entries)
    except VotingError as exc:
        raise to_http_exception(exc)

    return VoteReceiptResponse(tx_hash=receipt.transaction_hash)
