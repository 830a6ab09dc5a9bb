from passlib.context import CryptContext
from sqlalchemy.orm import Session

from treasury.infrastructure.db.models import User

# pbkdf2_sha256: no native deps
pwd_context = CryptContext(schemes=["pbkdf2_sha256"])

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def get_user_by_wallet(db: Session, wallet_address: str) -> User | None:
    return db.query(User).filter(User.wallet_address == wallet_address).first()
