"""
订单领域实体 - 结算时刻的购物车不可变快照
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from domain.catalog.entity import Product
from domain.common.exceptions import DomainValidationException, InvalidStateException
from domain.common.money import line_total, sum_money, to_money
from domain.payment.entity import Payment


class OrderStatus(str, Enum):
    """订单（履约）状态"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class OrderPaymentStatus(str, Enum):
    """订单支付状态 - 与履约状态相互独立"""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# 人工/后台触发的状态流转表；取消与退款为强制流转，不经过此表
ORDER_STATUS_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


@dataclass
class OrderItem:
    """订单行 - 创建后不可变，price 为结算时的商品单价快照"""

    id: Optional[int]
    product_id: int
    quantity: int
    price: Decimal
    order_id: Optional[int] = None
    product: Optional[Product] = None  # 展示用的当前商品摘要，不参与金额计算

    def __post_init__(self):
        if self.quantity <= 0:
            raise DomainValidationException(f"订单行数量必须大于0: {self.quantity}", field="quantity")
        self.price = to_money(self.price)

    @property
    def item_total(self) -> Decimal:
        return line_total(self.price, self.quantity)


@dataclass
class Order:
    """
    订单聚合根

    业务规则：
    1. total_amount 在创建时等于各行小计之和，之后不再重算
    2. 订单行在创建后不可修改
    3. 履约状态变更需符合状态流转表（可配置关闭）
    4. 取消订单强制将两个状态都置为 CANCELLED
    """

    id: Optional[int]
    order_number: str
    user_id: str
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    payment_status: OrderPaymentStatus = OrderPaymentStatus.PENDING
    shipping_address: dict = field(default_factory=dict)
    billing_address: Optional[dict] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)
    payments: List[Payment] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.total_amount = to_money(self.total_amount)
        self.status = OrderStatus(self.status)
        self.payment_status = OrderPaymentStatus(self.payment_status)
        if self.billing_address is None:
            self.billing_address = self.shipping_address

    @classmethod
    def place(
        cls,
        *,
        order_number: str,
        user_id: str,
        items: List[OrderItem],
        shipping_address: dict,
        billing_address: Optional[dict] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> "Order":
        """创建新订单快照（PENDING / PENDING）"""
        if not items:
            raise DomainValidationException("订单至少需要一个商品", field="items")
        now = datetime.now(timezone.utc)
        return cls(
            id=None,
            order_number=order_number,
            user_id=user_id,
            total_amount=sum_money(item.item_total for item in items),
            status=OrderStatus.PENDING,
            payment_status=OrderPaymentStatus.PENDING,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            payment_method=payment_method,
            notes=notes,
            items=list(items),
            created_at=now,
            updated_at=now,
        )

    @property
    def items_total(self) -> Decimal:
        return sum_money(item.item_total for item in self.items)

    def change_status(self, status: OrderStatus, *, enforce_transitions: bool = True) -> None:
        target = OrderStatus(status)
        if target == self.status:
            return
        if enforce_transitions and target not in ORDER_STATUS_TRANSITIONS[self.status]:
            raise InvalidStateException(
                f"Cannot change order status from {self.status.value} to {target.value}",
                current=self.status.value,
                target=target.value,
            )
        self.status = target
        self.updated_at = datetime.now(timezone.utc)

    def change_payment_status(self, payment_status: OrderPaymentStatus) -> None:
        self.payment_status = OrderPaymentStatus(payment_status)
        self.updated_at = datetime.now(timezone.utc)

    def cancel(self) -> None:
        """强制取消，不校验当前状态"""
        self.status = OrderStatus.CANCELLED
        self.payment_status = OrderPaymentStatus.CANCELLED
        self.updated_at = datetime.now(timezone.utc)

    def mark_refunded(self) -> None:
        """全额退款后的强制流转"""
        self.status = OrderStatus.REFUNDED
        self.payment_status = OrderPaymentStatus.REFUNDED
        self.updated_at = datetime.now(timezone.utc)


@dataclass
class OrderStats:
    total_orders: int
    pending_orders: int
    delivered_orders: int
    total_revenue: Decimal
