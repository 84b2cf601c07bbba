"""ledger schema

Revision ID: 7c41e2d9a0b3
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '7c41e2d9a0b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _lot_listing_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('lot_no', sa.String(50), nullable=False),
        sa.Column('broker', sa.String(10), nullable=False),
        sa.Column('selling_mark', sa.String(100), nullable=True),
        sa.Column('grade', sa.String(10), nullable=False),
        sa.Column('invoice_no', sa.String(50), nullable=True),
        sa.Column('sale_code', sa.String(50), nullable=True),
        sa.Column('bags', sa.Integer(), nullable=False),
        sa.Column('net_weight', sa.Float(), nullable=False),
        sa.Column('total_weight', sa.Float(), nullable=True),
        sa.Column('producer_country', sa.String(100), nullable=True),
        sa.Column('manufacture_date', sa.Date(), nullable=True),
        sa.Column('admin_cognito_id', sa.String(100), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'admins',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('admin_cognito_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admin_cognito_id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(30), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("role IN ('user', 'admin')", name='ck_users_role'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_cognito_id'),
    )

    op.create_table(
        'grade_category_mappings',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('grade', sa.String(10), nullable=False),
        sa.Column('category', sa.String(5), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('grade'),
    )

    op.create_table(
        'catalogs',
        *_lot_listing_columns(),
        sa.Column('category', sa.String(5), nullable=False),
        sa.Column('asking_price', sa.Float(), nullable=True),
        sa.Column('reprint', sa.String(5), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('bags > 0', name='ck_catalogs_bags_positive'),
        sa.CheckConstraint('net_weight > 0', name='ck_catalogs_net_weight_positive'),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lot_no'),
    )

    op.create_table(
        'selling_prices',
        *_lot_listing_columns(),
        sa.Column('category', sa.String(5), nullable=False),
        sa.Column('asking_price', sa.Float(), nullable=True),
        sa.Column('purchase_price', sa.Float(), nullable=True),
        sa.Column('reprint', sa.String(5), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lot_no'),
    )

    op.create_table(
        'out_lots',
        *_lot_listing_columns(),
        sa.Column('auction', sa.String(100), nullable=True),
        sa.Column('baseline_price', sa.Float(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lot_no'),
    )

    op.create_table(
        'stocks',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('lot_no', sa.String(50), nullable=False),
        sa.Column('sale_code', sa.String(50), nullable=True),
        sa.Column('broker', sa.String(10), nullable=False),
        sa.Column('mark', sa.String(100), nullable=True),
        sa.Column('grade', sa.String(10), nullable=False),
        sa.Column('invoice_no', sa.String(50), nullable=True),
        sa.Column('bags', sa.Integer(), nullable=False),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('purchase_value', sa.Float(), nullable=True),
        sa.Column('batch_number', sa.String(50), nullable=True),
        sa.Column('low_stock_threshold', sa.Float(), nullable=True),
        sa.Column('admin_cognito_id', sa.String(100), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('weight >= 0', name='ck_stocks_weight_non_negative'),
        sa.CheckConstraint('bags > 0', name='ck_stocks_bags_positive'),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lot_no'),
    )

    op.create_table(
        'stock_assignments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('stock_id', sa.UUID(), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=False),
        sa.Column('assigned_weight', sa.Float(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('assigned_weight > 0', name='ck_stock_assignments_weight_positive'),
        sa.ForeignKeyConstraint(['stock_id'], ['stocks.id']),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stock_id', 'user_cognito_id', name='uq_stock_assignments_stock_user'),
    )

    op.create_table(
        'shipments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('shipmark', sa.String(100), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('vessel', sa.String(20), nullable=False),
        sa.Column('packaging_instructions', sa.String(30), nullable=False),
        sa.Column('consignee', sa.String(200), nullable=True),
        sa.Column('additional_instructions', sa.Text(), nullable=True),
        sa.Column('shipment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=False),
        sa.Column('admin_cognito_id', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shipmark'),
    )

    op.create_table(
        'shipment_items',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('shipment_id', sa.UUID(), nullable=False),
        sa.Column('stock_id', sa.UUID(), nullable=False),
        sa.Column('assigned_weight', sa.Float(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('assigned_weight > 0', name='ck_shipment_items_weight_positive'),
        sa.ForeignKeyConstraint(['shipment_id'], ['shipments.id']),
        sa.ForeignKeyConstraint(['stock_id'], ['stocks.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shipment_id', 'stock_id', name='uq_shipment_items_shipment_stock'),
    )

    op.create_table(
        'stock_history',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('stock_id', sa.UUID(), nullable=False),
        sa.Column('action', sa.String(255), nullable=False),
        sa.Column('weight_change', sa.Float(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=True),
        sa.Column('admin_cognito_id', sa.String(100), nullable=True),
        sa.Column('shipment_id', sa.UUID(), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('operation_key', sa.String(64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['stock_id'], ['stocks.id']),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.ForeignKeyConstraint(['shipment_id'], ['shipments.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('operation_key'),
    )
    op.create_index(
        'ix_stock_history_stock_id_timestamp', 'stock_history', ['stock_id', 'timestamp']
    )

    op.create_table(
        'shipment_history',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('shipment_id', sa.UUID(), nullable=False),
        sa.Column('action', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=True),
        sa.Column('admin_cognito_id', sa.String(100), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['shipment_id'], ['shipments.id']),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'admin_notifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('admin_cognito_id', sa.String(100), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'contacts',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(200), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('privacy_consent', sa.Boolean(), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'favorites',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=False),
        sa.Column('stock_id', sa.UUID(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.ForeignKeyConstraint(['stock_id'], ['stocks.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_cognito_id', 'stock_id', name='uq_favorites_user_stock'),
    )

    op.create_table(
        'reports',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('file_url', sa.String(1024), nullable=False),
        sa.Column('file_type', sa.String(10), nullable=False),
        sa.Column('admin_cognito_id', sa.String(100), nullable=False),
        sa.Column('user_cognito_id', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['admin_cognito_id'], ['admins.admin_cognito_id']),
        sa.ForeignKeyConstraint(['user_cognito_id'], ['users.user_cognito_id']),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('reports')
    op.drop_table('favorites')
    op.drop_table('contacts')
    op.drop_table('admin_notifications')
    op.drop_table('shipment_history')
    op.drop_index('ix_stock_history_stock_id_timestamp', table_name='stock_history')
    op.drop_table('stock_history')
    op.drop_table('shipment_items')
    op.drop_table('shipments')
    op.drop_table('stock_assignments')
    op.drop_table('stocks')
    op.drop_table('out_lots')
    op.drop_table('selling_prices')
    op.drop_table('catalogs')
    op.drop_table('grade_category_mappings')
    op.drop_table('users')
    op.drop_table('admins')
