"""
SQLAlchemy ORM models (delegates, budget tables, derived statistics, audit log)

All monetary columns hold integer lovelace (1 ADA = 1 000 000 lovelace).
Percentages are integers scaled by 10000 (9270 == 92.70%).
"""
from datetime import datetime
from sqlalchemy import (
    String, Text, Integer, BigInteger, Boolean, TIMESTAMP, func, false,
    UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB

from treasury.infrastructure.db.session import Base


DEFAULT_CATEGORY_COLOR = "#4570EA"


class User(Base):
    """
    Registered user. DRep status and voting power are written only by
    the DRep status check (CheckDRepStatusUseCase).
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    stake_address: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    wallet_address: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)

    is_drep: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    # Percentage * 100 (250 == 2.50%)
    voting_power: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class EventLog(Base):
    """
    Append-only audit trail, written in the same transaction as the change it describes
    """
    __tablename__ = "event_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    actor_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    payload_json: Mapped[dict] = mapped_column(JSONB, nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        index=True
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


# ============================================================================
# Budget tables
# ============================================================================


class BudgetPeriod(Base):
    """
    One governance cycle. At most one row has active = true
    (owned by ActivatePeriodUseCase).
    """
    __tablename__ = "budget_periods"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_budget: Mapped[int] = mapped_column(BigInteger, nullable=False)
    start_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    governance_action: Mapped[str | None] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class BudgetCategory(Base):
    __tablename__ = "budget_categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(
        String(32), nullable=False, default=DEFAULT_CATEGORY_COLOR, server_default=DEFAULT_CATEGORY_COLOR
    )


class BudgetItem(Base):
    """
    Fundable proposal.

    current_median_vote / percentage_of_suggested are a cache of
    compute_consensus() over the item's votes; only
    RefreshItemConsensusUseCase writes them.
    """
    __tablename__ = "budget_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # No FK: items may point at a category that no longer exists ("Uncategorized")
    category_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    suggested_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    current_median_vote: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    percentage_of_suggested: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class BudgetVote(Base):
    """
    One delegate's allocation for one item. Re-voting updates the row in place.
    """
    __tablename__ = "budget_votes"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    budget_item_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transaction_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "budget_item_id", name="uq_budget_vote_user_item"),
        CheckConstraint("amount >= 0", name="ck_budget_vote_amount_non_negative"),
    )


class Statistics(Base):
    """
    Derived rollup, one row per period. Safe to drop and rebuild.
    """
    __tablename__ = "statistics"

    id: Mapped[int] = mapped_column(primary_key=True)
    budget_period_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    total_dreps: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    active_dreps: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_allocated: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    percentage_allocated: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    # {"<category_id>": summed consensus}
    category_distribution: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "budget_period_id": self.budget_period_id,
            "total_dreps": self.total_dreps,
            "active_dreps": self.active_dreps,
            "total_allocated": self.total_allocated,
            "percentage_allocated": self.percentage_allocated,
            "category_distribution": dict(self.category_distribution or {}),
        }


# ============================================================================
# Sentiments (emoji reactions)
# ============================================================================


class BudgetSentiment(Base):
    __tablename__ = "budget_sentiments"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    budget_item_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    sentiment: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "budget_item_id", name="uq_budget_sentiment_user_item"),
    )


class BudgetSentimentStats(Base):
    """
    Denormalized counter per (item, sentiment); kept consistent with budget_sentiments
    """
    __tablename__ = "budget_sentiment_stats"

    id: Mapped[int] = mapped_column(primary_key=True)
    budget_item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    sentiment: Mapped[str] = mapped_column(String(32), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("budget_item_id", "sentiment", name="uq_sentiment_stats_item_sentiment"),
        CheckConstraint("count >= 0", name="ck_sentiment_stats_count_non_negative"),
        Index("ix_sentiment_stats_item", "budget_item_id"),
    )
