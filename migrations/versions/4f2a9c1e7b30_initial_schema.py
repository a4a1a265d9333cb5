"""initial schema

Revision ID: 4f2a9c1e7b30
Revises: 
Create Date: 2026-10-19 09:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1e7b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_date', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('updated_date', sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tbl_users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=True),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('role', sa.Enum('USER', 'ADMIN', name='user_role', native_enum=False), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )

    op.create_table(
        'tbl_mstr_plans',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('nutrition_plan_limit', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        sa.UniqueConstraint('name', name='uq_plans_name'),
        sa.CheckConstraint('price >= 0', name='ck_plans_price_non_negative'),
        sa.CheckConstraint(
            'nutrition_plan_limit IS NULL OR nutrition_plan_limit >= 0',
            name='ck_plans_limit_non_negative',
        ),
    )

    op.create_table(
        'tbl_subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tbl_users.id', ondelete='CASCADE'), nullable=False),
        # No foreign key: plans may be hard-deleted while subscriptions keep their snapshot
        sa.Column('plan_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'CANCELLED', name='subscription_status', native_enum=False),
            nullable=False,
        ),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('subscription_date', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('approved_by_user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('approved_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_audit_columns(),
    )
    op.create_index('ix_subscriptions_user', 'tbl_subscriptions', ['user_id'])
    op.create_index('ix_subscriptions_status', 'tbl_subscriptions', ['status'])
    op.create_index('ix_subscriptions_plan', 'tbl_subscriptions', ['plan_id'])
    op.create_index(
        'uq_subscriptions_user_approved',
        'tbl_subscriptions',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'APPROVED'"),
        sqlite_where=sa.text("status = 'APPROVED'"),
    )

    op.create_table(
        'tbl_nutrition_plans',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tbl_users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('plan_date', sa.Date(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('breakfast', sa.Text(), nullable=True),
        sa.Column('morning_snack', sa.Text(), nullable=True),
        sa.Column('lunch', sa.Text(), nullable=True),
        sa.Column('afternoon_snack', sa.Text(), nullable=True),
        sa.Column('dinner', sa.Text(), nullable=True),
        sa.Column('evening_snack', sa.Text(), nullable=True),
        sa.Column('total_calories', sa.Integer(), nullable=True),
        sa.Column('total_proteins', sa.Numeric(6, 2), nullable=True),
        sa.Column('total_carbohydrates', sa.Numeric(6, 2), nullable=True),
        sa.Column('total_fats', sa.Numeric(6, 2), nullable=True),
        sa.Column('water_intake_ml', sa.Integer(), nullable=True),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint('user_id', 'plan_date', name='uq_nutrition_plan_user_date'),
    )
    op.create_index('ix_nutrition_plans_user', 'tbl_nutrition_plans', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_nutrition_plans_user', table_name='tbl_nutrition_plans')
    op.drop_table('tbl_nutrition_plans')
    op.drop_index('uq_subscriptions_user_approved', table_name='tbl_subscriptions')
    op.drop_index('ix_subscriptions_plan', table_name='tbl_subscriptions')
    op.drop_index('ix_subscriptions_status', table_name='tbl_subscriptions')
    op.drop_index('ix_subscriptions_user', table_name='tbl_subscriptions')
    op.drop_table('tbl_subscriptions')
    op.drop_table('tbl_mstr_plans')
    op.drop_table('tbl_users')
