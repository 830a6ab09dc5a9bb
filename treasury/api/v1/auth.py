"""
Wallet login and DRep status routes
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from treasury.api.deps import get_db
from treasury.application.drep import CheckDRepStatusUseCase, ConnectWalletUseCase


router = APIRouter(prefix="/api/v1", tags=["auth"])


class ConnectWalletRequest(BaseModel):
    wallet_address: str
    stake_address: str | None = None


class UserResponse(BaseModel):
    id: int
    username: str
    wallet_address: str | None
    stake_address: str | None
    is_drep: bool
    voting_power: int


class DRepStatusResponse(BaseModel):
    is_drep: bool
    voting_power: int


@router.post("/auth/wallet", response_model=UserResponse)
def connect_wallet(
    request: Request,
    req: ConnectWalletRequest,
    db: Session = Depends(get_db),
):
    """
    Wallet connected: register if needed, refresh DRep status, start a session
    """
    try:
        user = ConnectWalletUseCase(db).execute(req.wallet_address, req.stake_address)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    request.session["user_id"] = user.id

    return UserResponse(
        id=user.id,
        username=user.username,
        wallet_address=user.wallet_address,
        stake_address=user.stake_address,
        is_drep=user.is_drep,
        voting_power=user.voting_power,
    )


@router.post("/auth/logout")
def logout(request: Request):
    request.session.clear()
    return {"status": "logged_out"}


@router.get("/drep/status", response_model=DRepStatusResponse)
def drep_status(stake_address: str, db: Session = Depends(get_db)):
    status = CheckDRepStatusUseCase(db).execute(stake_address)
    return DRepStatusResponse(is_drep=status.is_drep, voting_power=status.voting_power)
