"""create_commerce_tables

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f9a2b7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False, comment='商品名称'),
        sa.Column('description', sa.Text(), nullable=True, comment='商品描述'),
        sa.Column('category', sa.String(length=100), nullable=True, comment='分类'),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False, comment='单价'),
        sa.Column('image', sa.String(length=500), nullable=True, comment='图片地址'),
        sa.Column('rating', sa.Numeric(precision=3, scale=2), nullable=False, server_default='0', comment='评分'),
        sa.Column('reviews', sa.Integer(), nullable=False, server_default='0', comment='评论数'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='AVAILABLE', comment='状态: AVAILABLE/NOT_AVAILABLE'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_id', 'products', ['id'], unique=False)
    op.create_index('ix_products_category', 'products', ['category'], unique=False)
    op.create_index('ix_products_status', 'products', ['status'], unique=False)
    op.create_index('ix_products_category_status', 'products', ['category', 'status'], unique=False)

    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False, comment='用户ID（外部身份）'),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
    )
    op.create_index('ix_cart_items_id', 'cart_items', ['id'], unique=False)
    op.create_index('ix_cart_items_user_id', 'cart_items', ['user_id'], unique=False)
    op.create_index('ix_cart_items_product_id', 'cart_items', ['product_id'], unique=False)
    op.create_index('ix_cart_items_created_at', 'cart_items', ['created_at'], unique=False)

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_number', sa.String(length=50), nullable=False, comment='订单号'),
        sa.Column('user_id', sa.String(length=100), nullable=False, comment='用户ID（外部身份）'),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False, comment='订单总额'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING', comment='履约状态'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='PENDING', comment='支付状态'),
        sa.Column('shipping_address', sa.JSON(), nullable=False, comment='收货地址快照'),
        sa.Column('billing_address', sa.JSON(), nullable=True, comment='账单地址快照'),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_id', 'orders', ['id'], unique=False)
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_user_id', 'orders', ['user_id'], unique=False)
    op.create_index('ix_orders_status', 'orders', ['status'], unique=False)
    op.create_index('ix_orders_payment_status', 'orders', ['payment_status'], unique=False)
    op.create_index('ix_orders_created_at', 'orders', ['created_at'], unique=False)
    op.create_index('ix_orders_user_created', 'orders', ['user_id', 'created_at'], unique=False)

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False, comment='下单时单价快照'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'], unique=False)
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'], unique=False)
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'], unique=False)

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False, comment='订单ID'),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False, comment='金额'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD', comment='货币代码 ISO-4217'),
        sa.Column('payment_method', sa.String(length=50), nullable=False, comment='支付方式'),
        sa.Column('gateway', sa.String(length=50), nullable=False, comment='支付网关'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING', comment='支付状态: PENDING/COMPLETED/FAILED/REFUNDED'),
        sa.Column('transaction_id', sa.String(length=200), nullable=True, comment='网关交易号'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='更新时间'),
        sa.Column('metadata', sa.JSON(), nullable=True, comment='扩展元数据'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_id', 'payments', ['id'], unique=False)
    op.create_index('ix_payments_order_id', 'payments', ['order_id'], unique=False)
    op.create_index('ix_payments_payment_method', 'payments', ['payment_method'], unique=False)
    op.create_index('ix_payments_gateway', 'payments', ['gateway'], unique=False)
    op.create_index('ix_payments_status', 'payments', ['status'], unique=False)
    op.create_index('ix_payments_transaction_id', 'payments', ['transaction_id'], unique=False)
    op.create_index('ix_payments_created_at', 'payments', ['created_at'], unique=False)
    op.create_index('ix_payments_order_status', 'payments', ['order_id', 'status'], unique=False)


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('cart_items')
    op.drop_table('products')
