"""
支付流水数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON, Index, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base


class PaymentModel(Base):
    """
    支付流水数据库模型

    扣款与退款各占一行，退款行金额为负数
    所有业务规则都在 domain.payment.entity.Payment 中
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="订单ID",
    )

    # 金额信息（使用 Numeric 存储精确金额，退款为负数）
    amount = Column(Numeric(precision=12, scale=2), nullable=False, comment="金额")
    currency = Column(String(3), nullable=False, default="USD", comment="货币代码 ISO-4217")

    payment_method = Column(String(50), nullable=False, index=True, comment="支付方式")
    gateway = Column(String(50), nullable=False, index=True, comment="支付网关")
    status = Column(
        String(20),
        nullable=False,
        default="PENDING",
        index=True,
        comment="支付状态: PENDING/COMPLETED/FAILED/REFUNDED",
    )
    transaction_id = Column(String(200), nullable=True, index=True, comment="网关交易号")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        comment="创建时间",
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间",
    )

    # 元数据（JSON格式，使用 extra_metadata 避免与 SQLAlchemy 的 metadata 冲突）
    extra_metadata = Column("metadata", JSON, nullable=True, comment="扩展元数据")

    order = relationship("OrderModel", back_populates="payments")

    __table_args__ = (
        Index("ix_payments_order_status", "order_id", "status"),
    )

    def __repr__(self):
        return (
            f"<PaymentModel(id={self.id}, order_id={self.order_id}, "
            f"amount={self.amount}, status='{self.status}')>"
        )
