"""initial schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18 09:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False)
    )
    op.create_table(
        'warehouses',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('company_id', sa.Integer, sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False)
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('sku', sa.String(50), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer, nullable=False, server_default='10'),
        sa.Column('is_bundle', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
        sa.CheckConstraint('low_stock_threshold >= 0', name='ck_products_threshold_non_negative')
    )
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_table(
        'inventory',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('warehouse_id', sa.Integer, sa.ForeignKey('warehouses.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('product_id', 'warehouse_id', name='uq_inventory_product_warehouse'),
        sa.CheckConstraint('quantity >= 0', name='ck_inventory_quantity_non_negative')
    )
    op.create_table(
        'inventory_history',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('inventory_id', sa.Integer, sa.ForeignKey('inventory.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id'), nullable=False, index=True),
        sa.Column('change_type', sa.String(20), nullable=False, index=True),
        sa.Column('quantity_change', sa.Integer, nullable=False),
        sa.Column('quantity_after', sa.Integer, nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True)
    )
    op.create_table(
        'suppliers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False)
    )
    op.create_table(
        'supplier_products',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('supplier_id', sa.Integer, sa.ForeignKey('suppliers.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.UniqueConstraint('supplier_id', 'product_id', name='uq_supplier_products_pair')
    )
    op.create_table(
        'product_bundles',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('bundle_id', sa.Integer, sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('component_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='1'),
        sa.UniqueConstraint('bundle_id', 'component_id', name='uq_product_bundles_pair'),
        sa.CheckConstraint('quantity > 0', name='ck_product_bundles_quantity_positive'),
        sa.CheckConstraint('bundle_id <> component_id', name='ck_product_bundles_not_self')
    )

def downgrade():
    op.drop_table('product_bundles')
    op.drop_table('supplier_products')
    op.drop_table('suppliers')
    op.drop_table('inventory_history')
    op.drop_table('inventory')
    op.drop_index('ix_products_sku', table_name='products')
    op.drop_table('products')
    op.drop_table('warehouses')
    op.drop_table('companies')
