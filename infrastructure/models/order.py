"""
订单与订单行数据库模型
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base


class OrderModel(Base):
    """
    订单数据库模型

    total_amount 为下单时的快照，不随商品价格变化
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True, comment="订单号")
    user_id = Column(String(100), nullable=False, index=True, comment="用户ID（外部身份）")
    total_amount = Column(Numeric(precision=12, scale=2), nullable=False, comment="订单总额")
    status = Column(String(20), nullable=False, default="PENDING", index=True, comment="履约状态")
    payment_status = Column(String(20), nullable=False, default="PENDING", index=True, comment="支付状态")
    shipping_address = Column(JSON, nullable=False, comment="收货地址快照")
    billing_address = Column(JSON, nullable=True, comment="账单地址快照")
    payment_method = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
        lazy="raise",
    )
    payments = relationship(
        "PaymentModel",
        back_populates="order",
        order_by="PaymentModel.id.desc()",
        lazy="raise",
    )

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<OrderModel(id={self.id}, order_number='{self.order_number}', "
            f"total_amount={self.total_amount}, status='{self.status}')>"
        )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(precision=12, scale=2), nullable=False, comment="下单时单价快照")

    order = relationship("OrderModel", back_populates="items")
    product = relationship("ProductModel", lazy="raise")

    def __repr__(self):
        return f"<OrderItemModel(order_id={self.order_id}, product_id={self.product_id}, price={self.price})>"
