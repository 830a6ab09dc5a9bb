"""create budget voting tables

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('stake_address', sa.String(128), nullable=True),
        sa.Column('wallet_address', sa.String(128), nullable=True, unique=True),
        sa.Column('is_drep', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('voting_power', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_stake_address', 'users', ['stake_address'])

    op.create_table(
        'event_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(128), nullable=False),
        sa.Column('payload_json', JSONB, nullable=False),
        sa.Column('occurred_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('idempotency_key', sa.String(255), nullable=True, unique=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_event_log_actor_user_id', 'event_log', ['actor_user_id'])
    op.create_index('ix_event_log_event_type', 'event_log', ['event_type'])
    op.create_index('ix_event_log_occurred_at', 'event_log', ['occurred_at'])

    op.create_table(
        'budget_periods',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total_budget', sa.BigInteger(), nullable=False),
        sa.Column('start_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('end_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('governance_action', sa.String(255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    # Only one active period (partial unique index, PostgreSQL)
    op.create_index(
        'uq_budget_periods_single_active', 'budget_periods', ['active'],
        unique=True, postgresql_where=sa.text('active'),
    )

    op.create_table(
        'budget_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(32), nullable=False, server_default='#4570EA'),
    )

    op.create_table(
        'budget_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('suggested_amount', sa.BigInteger(), nullable=False),
        sa.Column('current_median_vote', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('percentage_of_suggested', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_budget_items_category_id', 'budget_items', ['category_id'])

    op.create_table(
        'budget_votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('budget_item_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('transaction_hash', sa.String(128), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'budget_item_id', name='uq_budget_vote_user_item'),
        sa.CheckConstraint('amount >= 0', name='ck_budget_vote_amount_non_negative'),
    )
    op.create_index('ix_budget_votes_user_id', 'budget_votes', ['user_id'])
    op.create_index('ix_budget_votes_budget_item_id', 'budget_votes', ['budget_item_id'])

    op.create_table(
        'statistics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('budget_period_id', sa.Integer(), nullable=False, unique=True),
        sa.Column('total_dreps', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active_dreps', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_allocated', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('percentage_allocated', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('category_distribution', JSONB, nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'budget_sentiments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('budget_item_id', sa.Integer(), nullable=False),
        sa.Column('sentiment', sa.String(32), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'budget_item_id', name='uq_budget_sentiment_user_item'),
    )
    op.create_index('ix_budget_sentiments_user_id', 'budget_sentiments', ['user_id'])
    op.create_index('ix_budget_sentiments_budget_item_id', 'budget_sentiments', ['budget_item_id'])

    op.create_table(
        'budget_sentiment_stats',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('budget_item_id', sa.Integer(), nullable=False),
        sa.Column('sentiment', sa.String(32), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('budget_item_id', 'sentiment', name='uq_sentiment_stats_item_sentiment'),
        sa.CheckConstraint('count >= 0', name='ck_sentiment_stats_count_non_negative'),
    )
    op.create_index('ix_sentiment_stats_item', 'budget_sentiment_stats', ['budget_item_id'])


def downgrade() -> None:
    op.drop_index('ix_sentiment_stats_item', table_name='budget_sentiment_stats')
    op.drop_table('budget_sentiment_stats')
    op.drop_index('ix_budget_sentiments_budget_item_id', table_name='budget_sentiments')
    op.drop_index('ix_budget_sentiments_user_id', table_name='budget_sentiments')
    op.drop_table('budget_sentiments')
    op.drop_table('statistics')
    op.drop_index('ix_budget_votes_budget_item_id', table_name='budget_votes')
    op.drop_index('ix_budget_votes_user_id', table_name='budget_votes')
    op.drop_table('budget_votes')
    op.drop_index('ix_budget_items_category_id', table_name='budget_items')
    op.drop_table('budget_items')
    op.drop_table('budget_categories')
    op.drop_index('uq_budget_periods_single_active', table_name='budget_periods')
    op.drop_table('budget_periods')
    op.drop_index('ix_event_log_occurred_at', table_name='event_log')
    op.drop_index('ix_event_log_event_type', table_name='event_log')
    op.drop_index('ix_event_log_actor_user_id', table_name='event_log')
    op.drop_table('event_log')
    op.drop_index('ix_users_stake_address', table_name='users')
    op.drop_table('users')
