"""
Seed demo data: one active period, four categories, five items, a demo DRep.
Run:  python seed_test_data.py
"""
import sys
from datetime import datetime, timedelta, timezone

# ── bootstrap ────────────────────────────────────────────────────
from treasury.infrastructure.db.session import get_session_factory
from treasury.infrastructure.db.models import User, BudgetPeriod
from treasury.application.importer import (
    ImportBudgetDataUseCase, ImportedBudgetData, ImportedPeriod, ImportedCategory, ImportedItem,
)
from treasury.application.statistics import RefreshStatisticsUseCase
from treasury.auth import hash_password
from treasury.utils.money import format_ada

db = get_session_factory()()

if db.query(BudgetPeriod).count() > 0:
    print("Budget data already exists, nothing to do")
    sys.exit(0)

ADA = 1_000_000  # lovelace
now = datetime.now(timezone.utc)

# ── demo DRep ────────────────────────────────────────────────────
if not db.query(User).filter_by(username="demo_drep").first():
    db.add(User(
        username="demo_drep",
        password_hash=hash_password("password123"),
        stake_address="stake1u8nrng7hhfn7nm0e2m96v80xhwht2j5mmv8jl07xdzh8yccvxk45m",
        wallet_address="addr1qxdemo0000000000000000000000000000000000000000000000",
        is_drep=True,
        voting_power=250,
    ))
    db.commit()

# ── budget ───────────────────────────────────────────────────────
data = ImportedBudgetData(
    period=ImportedPeriod(
        title="2025 Treasury Budget Allocation",
        description="Annual budget for Cardano treasury allocations",
        total_budget=250_000_000 * ADA,
        start_date=now - timedelta(days=15),
        end_date=now + timedelta(days=21),
        governance_action="TreasuryWithdrawal_2025_01",
    ),
    categories=[
        ImportedCategory("Infrastructure", "Network infrastructure support", "#166534"),
        ImportedCategory("Developer Ecosystem", "Support for developers", "#1E40AF"),
        ImportedCategory("Community & Education", "Community growth and education", "#6B21A8"),
        ImportedCategory("Governance", "Governance infrastructure", "#854D0E"),
    ],
    items=[
        ImportedItem("Node Operation Incentives", "Infrastructure", 35_000_000 * ADA,
                     "Rewards for stable network infrastructure operators"),
        ImportedItem("Developer Education Programs", "Developer Ecosystem", 18_500_000 * ADA,
                     "Workshops, hackathons, and learning resources"),
        ImportedItem("Open Source Library Development", "Developer Ecosystem", 15_000_000 * ADA,
                     "Support for core infrastructure libraries and tools"),
        ImportedItem("Community Ambassador Program", "Community & Education", 8_200_000 * ADA,
                     "Global outreach and education network"),
        ImportedItem("Governance Tool Development", "Governance", 12_700_000 * ADA,
                     "Software for governance participation and voting"),
    ],
)

result = ImportBudgetDataUseCase(db).execute(data)
RefreshStatisticsUseCase(db).execute(result.period_id, commit=True)

print(f"Seeded period {result.period_id}: {result.categories_count} categories, {result.items_count} items")
print(f"Total budget: {format_ada(data.period.total_budget)}")
db.close()
