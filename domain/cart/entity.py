"""
购物车领域实体 - 用户下单前的 (商品, 数量) 工作集
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from domain.catalog.entity import Product
from domain.common.exceptions import DomainValidationException
from domain.common.money import line_total, sum_money


@dataclass
class CartLine:
    """
    购物车行

    业务规则：
    1. (user_id, product_id) 唯一，重复加入时累加数量
    2. 数量必须为正整数；数量降为 0 或负数时整行删除
    """

    id: Optional[int]
    user_id: str
    product_id: int
    quantity: int
    product: Optional[Product] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise DomainValidationException(
                f"购物车数量必须大于0: {self.quantity}",
                field="quantity",
            )

    def increase(self, quantity: int) -> None:
        """业务规则：重复加入同一商品时合并数量"""
        if quantity <= 0:
            raise DomainValidationException(
                f"加入数量必须大于0: {quantity}",
                field="quantity",
            )
        self.quantity += quantity
        self.updated_at = datetime.now(timezone.utc)

    def set_quantity(self, quantity: int) -> None:
        if quantity <= 0:
            raise DomainValidationException(
                f"购物车数量必须大于0: {quantity}",
                field="quantity",
            )
        self.quantity = quantity
        self.updated_at = datetime.now(timezone.utc)

    @property
    def item_total(self) -> Decimal:
        """按商品当前价格计算小计（每次读取都重新计算）"""
        if self.product is None:
            return Decimal("0.00")
        return line_total(self.product.price, self.quantity)


@dataclass
class Cart:
    """用户购物车视图 - 总价与行数均为派生值，不做缓存"""

    user_id: str
    lines: List[CartLine] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum_money(line.item_total for line in self.lines)

    @property
    def item_count(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass
class CartStats:
    """购物车统计（管理端）"""

    total_lines: int
    total_quantity: int
    total_value: Decimal
    active_carts: int

    @property
    def average_items_per_cart(self) -> Decimal:
        if self.active_carts == 0:
            return Decimal("0")
        return (Decimal(self.total_quantity) / self.active_carts).quantize(Decimal("0.01"))

    @property
    def average_cart_value(self) -> Decimal:
        if self.active_carts == 0:
            return Decimal("0.00")
        return (self.total_value / self.active_carts).quantize(Decimal("0.01"))
