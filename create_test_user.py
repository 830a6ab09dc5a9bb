"""
Create test user (a DRep with a known wallet address)
"""
from treasury.infrastructure.db.session import get_db
from treasury.infrastructure.db.models import User
from treasury.auth import hash_password

USERNAME = "test_drep"
WALLET = "addr1qxtest000000000000000000000000000000000000000000000000"

# Create user
db = next(get_db())

# Check if user exists
existing = db.query(User).filter(User.username == USERNAME).first()
if existing:
    print(f"User already exists: {USERNAME} (ID: {existing.id})")
else:
    user = User(
        username=USERNAME,
        password_hash=hash_password("password123"),
        wallet_address=WALLET,
        is_drep=True,
        voting_power=100,
    )
    db.add(user)
    db.commit()
    print("Created user:")
    print(f"  Username: {USERNAME}")
    print(f"  Wallet:   {WALLET} (send as X-Wallet-Address)")

db.close()
