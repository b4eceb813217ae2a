"""initial textile production schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates:
- products: live production orders with progress counters
- progress_history: append-only progress audit trail
- sales_history: archived snapshots (completed or deleted orders)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # products: live orders
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('product_type', sa.String(128), nullable=False),
        sa.Column('size', sa.String(64), nullable=False, server_default=''),
        sa.Column('color', sa.String(64), nullable=False, server_default=''),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('quantity_completed', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_products_quantity_positive'),
        sa.CheckConstraint(
            'quantity_completed >= 0 AND quantity_completed <= quantity',
            name='ck_products_quantity_completed_range',
        ),
        sa.CheckConstraint('price_cents >= 0', name='ck_products_price_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_status', ['status'], unique=False)
        batch_op.create_index('ix_products_created_at', ['created_at'], unique=False)
        batch_op.create_index('ix_products_client_name', ['client_name'], unique=False)
        batch_op.create_index('ix_products_status_due', ['status', 'due_date'], unique=False)

    # ============================================================================
    # progress_history: append-only, outlives the product row
    # ============================================================================
    op.create_table(
        'progress_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity_added', sa.Integer(), nullable=False),
        sa.Column('quantity_before', sa.Integer(), nullable=False),
        sa.Column('quantity_after', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table('progress_history', schema=None) as batch_op:
        batch_op.create_index('ix_progress_history_product_created', ['product_id', 'created_at'], unique=False)

    # ============================================================================
    # sales_history: archived snapshots
    # ============================================================================
    op.create_table(
        'sales_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('original_product_id', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('product_type', sa.String(128), nullable=False),
        sa.Column('size', sa.String(64), nullable=True),
        sa.Column('color', sa.String(64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('quantity_completed', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('total_value_cents', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('action', sa.String(16), nullable=False),
        sa.Column('archived_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('original_product_id', name='uq_sales_history_original_product'),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table('sales_history', schema=None) as batch_op:
        batch_op.create_index('ix_sales_history_archived_at', ['archived_at'], unique=False)
        batch_op.create_index('ix_sales_history_action', ['action'], unique=False)


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('sales_history')
    op.drop_table('progress_history')
    op.drop_table('products')
