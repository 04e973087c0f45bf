"""
商品目录实体 - 购物车与订单只读取，不修改
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from domain.common.exceptions import DomainValidationException
from domain.common.money import to_money


class ProductStatus(str, Enum):
    """商品状态枚举"""
    AVAILABLE = "AVAILABLE"
    NOT_AVAILABLE = "NOT_AVAILABLE"


@dataclass
class Product:
    """商品实体"""

    id: Optional[int]
    name: str
    price: Decimal
    status: ProductStatus = ProductStatus.AVAILABLE
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    rating: Decimal = Decimal("0")
    reviews: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise DomainValidationException("商品名称不能为空", field="name")
        self.price = to_money(self.price)
        if self.price < 0:
            raise DomainValidationException(f"商品价格不能为负数: {self.price}", field="price")
        self.status = ProductStatus(self.status)

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.AVAILABLE

    def change_price(self, price: Decimal) -> None:
        """业务规则：调整价格不影响已下单的快照价格"""
        new_price = to_money(price)
        if new_price < 0:
            raise DomainValidationException(f"商品价格不能为负数: {new_price}", field="price")
        self.price = new_price
        self.updated_at = datetime.now(timezone.utc)

    def change_status(self, status: ProductStatus) -> None:
        self.status = ProductStatus(status)
        self.updated_at = datetime.now(timezone.utc)
