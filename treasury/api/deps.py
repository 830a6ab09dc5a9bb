"""
FastAPI dependencies (DB session, caller resolution, ledger)
"""
from fastapi import Depends, Request, HTTPException, status
from sqlalchemy.orm import Session

from treasury.auth import get_user_by_wallet
from treasury.infrastructure.db.session import get_db as _get_db
from treasury.infrastructure.db.models import User
from treasury.infrastructure.ledger.submitter import TransactionSubmitter, get_transaction_submitter


# Re-export get_db for convenience
get_db = _get_db

WALLET_HEADER = "x-wallet-address"


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Resolve the caller: X-Wallet-Address header first, then the session user_id

    Raises:
        HTTPException(401): not authenticated / wallet not registered

    Usage:
        @router.get("/votes/user")
        def my_votes(user: User = Depends(get_current_user)):
            ...
    """
    wallet_address = request.headers.get(WALLET_HEADER)
    if wallet_address:
        user = get_user_by_wallet(db, wallet_address)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Wallet not registered"
            )
        return user

    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return user


def get_submitter() -> TransactionSubmitter:
    """Ledger submitter (overridable in tests)"""
    return get_transaction_submitter()
