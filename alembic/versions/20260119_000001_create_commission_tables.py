"""Create partner, deal and commission tables

Revision ID: 20260119_000001
Revises: 
Create Date: 2026-01-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20260119_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Partners and admins
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('parent_partner_id', sa.Integer(), nullable=True),
        sa.Column('partner_level', sa.Integer(), nullable=False, server_default='1',
                  comment='Depth in hierarchy: 1 = root partner, capped at 3'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('partner_level BETWEEN 1 AND 3', name='check_user_partner_level_range'),
        sa.CheckConstraint(
            'parent_partner_id IS NULL OR parent_partner_id <> id',
            name='check_user_not_own_parent',
        ),
        sa.ForeignKeyConstraint(['parent_partner_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_parent_partner_id', 'users', ['parent_partner_id'])

    # Deals
    op.create_table(
        'deals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('referrer_id', sa.Integer(), nullable=False),
        sa.Column('business_name', sa.String(255), nullable=False),
        sa.Column('deal_stage', sa.String(50), nullable=False, server_default='quote_request_received'),
        sa.Column('actual_commission', sa.DECIMAL(12, 2), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['referrer_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_deals_referrer_id', 'deals', ['referrer_id'])
    op.create_index('ix_deals_deal_stage', 'deals', ['deal_stage'])

    # Commission payment records (anchors and legacy per-level records)
    op.create_table(
        'commission_payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('deal_id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('amount', sa.DECIMAL(12, 2), nullable=False),
        sa.Column('percentage', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('total_commission', sa.DECIMAL(12, 2), nullable=True),
        sa.Column('gross_amount', sa.DECIMAL(12, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='GBP'),
        sa.Column('business_name', sa.String(255), nullable=True),
        sa.Column('deal_stage', sa.String(50), nullable=True),
        sa.Column('approval_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('query_notes', sa.Text(), nullable=True),
        sa.Column('evidence_url', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('paid_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('transfer_reference', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount >= 0', name='check_commission_amount_non_negative'),
        sa.CheckConstraint('level BETWEEN 0 AND 2', name='check_commission_level_range'),
        sa.ForeignKeyConstraint(['deal_id'], ['deals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['paid_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_commission_payments_deal_id', 'commission_payments', ['deal_id'])
    op.create_index('ix_commission_payments_recipient_id', 'commission_payments', ['recipient_id'])
    op.create_index(
        'ix_commission_payments_status',
        'commission_payments',
        ['approval_status', 'payment_status'],
    )

    # Split ledger
    op.create_table(
        'payment_splits',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payment_id', sa.Integer(), nullable=False),
        sa.Column('deal_id', sa.Integer(), nullable=False),
        sa.Column('beneficiary_user_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('percentage', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('amount', sa.DECIMAL(12, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount >= 0', name='check_split_amount_non_negative'),
        sa.CheckConstraint('level BETWEEN 0 AND 2', name='check_split_level_range'),
        sa.UniqueConstraint('payment_id', 'level', name='uq_payment_splits_payment_level'),
        sa.ForeignKeyConstraint(['payment_id'], ['commission_payments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['deal_id'], ['deals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['beneficiary_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payment_splits_payment_id', 'payment_splits', ['payment_id'])
    op.create_index('ix_payment_splits_deal_id', 'payment_splits', ['deal_id'])
    op.create_index('ix_payment_splits_beneficiary_user_id', 'payment_splits', ['beneficiary_user_id'])
    op.create_index('ix_payment_splits_status', 'payment_splits', ['status'])

    # Audit trail
    op.create_table(
        'admin_audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_admin_audit_logs_actor_id', 'admin_audit_logs', ['actor_id'])
    op.create_index('ix_admin_audit_logs_action', 'admin_audit_logs', ['action'])
    op.create_index('ix_admin_audit_logs_entity_id', 'admin_audit_logs', ['entity_id'])

    # In-app notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('deal_id', sa.Integer(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['deal_id'], ['deals.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_notifications_user_id', 'notifications')
    op.drop_table('notifications')

    op.drop_index('ix_admin_audit_logs_entity_id', 'admin_audit_logs')
    op.drop_index('ix_admin_audit_logs_action', 'admin_audit_logs')
    op.drop_index('ix_admin_audit_logs_actor_id', 'admin_audit_logs')
    op.drop_table('admin_audit_logs')

    op.drop_index('ix_payment_splits_status', 'payment_splits')
    op.drop_index('ix_payment_splits_beneficiary_user_id', 'payment_splits')
    op.drop_index('ix_payment_splits_deal_id', 'payment_splits')
    op.drop_index('ix_payment_splits_payment_id', 'payment_splits')
    op.drop_table('payment_splits')

    op.drop_index('ix_commission_payments_status', 'commission_payments')
    op.drop_index('ix_commission_payments_recipient_id', 'commission_payments')
    op.drop_index('ix_commission_payments_deal_id', 'commission_payments')
    op.drop_table('commission_payments')

    op.drop_index('ix_deals_deal_stage', 'deals')
    op.drop_index('ix_deals_referrer_id', 'deals')
    op.drop_table('deals')

    op.drop_index('ix_users_parent_partner_id', 'users')
    op.drop_index('ix_users_email', 'users')
    op.drop_table('users')
