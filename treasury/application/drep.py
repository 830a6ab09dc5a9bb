"""
DRep status and wallet registration

There is no chain lookup yet: a stake address is a DRep if the stored
user already is one, or if it is listed in DREP_TEST_ADDRESSES.
"""
import logging
import random
import secrets
from dataclasses import dataclass

from sqlalchemy.orm import Session

from treasury.auth import hash_password, get_user_by_wallet
from treasury.config import get_settings
from treasury.infrastructure.db.models import User

logger = logging.getLogger(__name__)

# Voting power is percentage * 100: 1.00% .. 4.99%
TEST_VOTING_POWER_RANGE = (100, 499)


@dataclass(frozen=True)
class DRepStatus:
    is_drep: bool
    voting_power: int


class CheckDRepStatusUseCase:
    """Use case: resolve (and store) whether a stake address is a DRep"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, stake_address: str, commit: bool = True) -> DRepStatus:
        user = self.db.query(User).filter(User.stake_address == stake_address).first()

        if user and user.is_drep:
            return DRepStatus(is_drep=True, voting_power=user.voting_power)

        if stake_address in get_settings().DREP_TEST_ADDRESSES:
            voting_power = random.randint(*TEST_VOTING_POWER_RANGE)
            if user:
                user.is_drep = True
                user.voting_power = voting_power
                if commit:
                    self.db.commit()
                else:
                    self.db.flush()
                logger.info("User %d marked as DRep (voting power %d)", user.id, voting_power)
            return DRepStatus(is_drep=True, voting_power=voting_power)

        return DRepStatus(is_drep=False, voting_power=0)


class ConnectWalletUseCase:
    """
    Use case: wallet connected in the browser -> find or register the user

    Wallet users never log in with a password; a random one is hashed to
    satisfy the column.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, wallet_address: str, stake_address: str | None = None) -> User:
        wallet_address = wallet_address.strip()
        if not wallet_address:
            raise ValueError("wallet_address is required")

        user = get_user_by_wallet(self.db, wallet_address)
        if user is None:
            user = User(
                username=f"wallet_{wallet_address[-16:]}",
                password_hash=hash_password(secrets.token_urlsafe(32)),
                wallet_address=wallet_address,
                stake_address=stake_address,
                is_drep=False,
                voting_power=0,
            )
            self.db.add(user)
            self.db.flush()
            logger.info("Registered wallet user %d", user.id)
        elif stake_address and user.stake_address != stake_address:
            user.stake_address = stake_address
            self.db.flush()

        if user.stake_address:
            CheckDRepStatusUseCase(self.db).execute(user.stake_address, commit=False)

        self.db.commit()
        return user
