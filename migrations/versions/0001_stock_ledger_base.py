"""0001 stock ledger base schema

Revision ID: 0001_stock_ledger_base
Revises:
Create Date: 2026-10-19 09:12:44.218310

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_stock_ledger_base'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _actor_stamps():
    return [
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('updated_by', sa.String(length=64), nullable=True),
    ]


def _soft_delete():
    return [
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def _location_table(name, unique_name, *columns):
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        *columns,
        *_soft_delete(),
        *_timestamps(),
        *_actor_stamps(),
        sa.ForeignKeyConstraint(['business_id'], ['business.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'code', name=unique_name),
    )
    with op.batch_alter_table(name, schema=None) as batch_op:
        batch_op.create_index(batch_op.f(f'ix_{name}_business_id'), ['business_id'], unique=False)
        for column in columns:
            if column.name.endswith('_id'):
                batch_op.create_index(batch_op.f(f'ix_{name}_{column.name}'), [column.name], unique=False)


def upgrade():
    op.create_table(
        'business',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'app_user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'business_member',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['business_id'], ['business.id']),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'user_id', name='_business_member_uc'),
    )
    with op.batch_alter_table('business_member', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_business_member_business_id'), ['business_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_business_member_user_id'), ['user_id'], unique=False)

    _location_table(
        'warehouses', '_warehouse_business_code_uc',
        sa.Column('address', sa.String(length=512), nullable=True),
        sa.Column('storage_capacity', sa.Integer(), nullable=True),
        sa.Column('stats_total_zones', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stats_total_racks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stats_total_shelves', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stats_total_products', sa.Integer(), nullable=False, server_default='0'),
    )
    _location_table(
        'zones', '_zone_business_code_uc',
        sa.Column('warehouse_id', sa.String(length=64), nullable=False),
        sa.Column('stats_total_racks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stats_total_shelves', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stats_total_products', sa.Integer(), nullable=False, server_default='0'),
    )
    _location_table(
        'racks', '_rack_business_code_uc',
        sa.Column('warehouse_id', sa.String(length=64), nullable=False),
        sa.Column('zone_id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )
    _location_table(
        'shelves', '_shelf_business_code_uc',
        sa.Column('warehouse_id', sa.String(length=64), nullable=False),
        sa.Column('zone_id', sa.String(length=64), nullable=False),
        sa.Column('rack_id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('capacity', sa.Integer(), nullable=True),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('sku', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('opening_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('inward_addition', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('deduction', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('auto_addition', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('auto_deduction', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('blocked_stock', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        *_actor_stamps(),
        sa.ForeignKeyConstraint(['business_id'], ['business.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'sku', name='_product_business_sku_uc'),
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_products_business_id'), ['business_id'], unique=False)

    op.create_table(
        'placements',
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.String(length=128), nullable=False),
        sa.Column('product_sku', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('shelf_id', sa.String(length=64), nullable=False),
        sa.Column('shelf_name', sa.String(length=128), nullable=True),
        sa.Column('rack_id', sa.String(length=64), nullable=False),
        sa.Column('rack_name', sa.String(length=128), nullable=True),
        sa.Column('zone_id', sa.String(length=64), nullable=False),
        sa.Column('zone_name', sa.String(length=128), nullable=True),
        sa.Column('warehouse_id', sa.String(length=64), nullable=False),
        sa.Column('warehouse_name', sa.String(length=128), nullable=True),
        sa.Column('last_movement_reason', sa.String(length=64), nullable=True),
        sa.Column('last_movement_reference', sa.String(length=255), nullable=True),
        *_timestamps(),
        *_actor_stamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_placement_quantity_non_negative'),
        sa.ForeignKeyConstraint(['business_id'], ['business.id']),
        sa.PrimaryKeyConstraint('business_id', 'id'),
    )
    with op.batch_alter_table('placements', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_placements_product_id'), ['product_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_placements_shelf_id'), ['shelf_id'], unique=False)
        batch_op.create_index('idx_placement_product_quantity', ['business_id', 'product_id', 'quantity'], unique=False)

    op.create_table(
        'product_logs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('changes', sa.JSON(), nullable=False),
        sa.Column('adjustment_type', sa.String(length=32), nullable=False),
        sa.Column('adjustment_amount', sa.Integer(), nullable=False),
        sa.Column('performed_by', sa.String(length=64), nullable=False),
        sa.Column('performed_by_email', sa.String(length=120), nullable=True),
        sa.Column('performed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('placement', sa.JSON(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['business.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('product_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_product_logs_business_id'), ['business_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_product_logs_product_id'), ['product_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_product_logs_performed_at'), ['performed_at'], unique=False)
        batch_op.create_index('idx_product_log_product_performed', ['product_id', 'performed_at'], unique=False)


def downgrade():
    op.drop_table('product_logs')
    op.drop_table('placements')
    op.drop_table('products')
    for name in ('shelves', 'racks', 'zones', 'warehouses'):
        op.drop_table(name)
    op.drop_table('business_member')
    op.drop_table('app_user')
    op.drop_table('business')
