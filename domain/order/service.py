"""
订单领域服务 - 结算快照与订单号生成
"""
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .entity import Order, OrderItem
from .events import OrderPlaced
from .repository import OrderRepository
from domain.catalog.entity import Product, ProductStatus
from domain.catalog.repository import ProductRepository
from domain.common.exceptions import (
    ProductNotFoundException,
    ProductUnavailableException,
    TransactionFailureException,
)


@dataclass(frozen=True)
class RequestedLine:
    """待结算的一行：来自购物车或显式下单列表"""
    product_id: int
    quantity: int


def generate_order_number(
    prefix: str,
    now_ms: Optional[int] = None,
    rng: Optional[Callable[[int, int], int]] = None,
) -> str:
    """生成订单号：PREFIX-<毫秒时间戳>-<三位随机数>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    pick = rng or random.randint
    return f"{prefix}-{now_ms}-{pick(0, 999):03d}"


class OrderDomainService:
    """
    订单领域服务

    职责：
    1. 结算时逐行重新读取商品并校验存在与可售状态
    2. 复制当前单价作为快照，计算订单总额
    3. 生成唯一订单号（冲突时重试）
    4. 产生 OrderPlaced 领域事件
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        product_repository: ProductRepository,
        *,
        order_number_prefix: str = "ORD",
        order_number_max_attempts: int = 5,
        number_factory: Optional[Callable[[str], str]] = None,
    ):
        self.order_repository = order_repository
        self.product_repository = product_repository
        self.order_number_prefix = order_number_prefix
        self.order_number_max_attempts = max(1, order_number_max_attempts)
        self._number_factory = number_factory or generate_order_number
        self.events: List = []

    async def snapshot_items(self, lines: Iterable[RequestedLine]) -> List[OrderItem]:
        """任意一行商品不存在或不可售即中止整个结算"""
        items: List[OrderItem] = []
        for line in lines:
            product: Optional[Product] = await self.product_repository.get_by_id(line.product_id)
            if product is None:
                raise ProductNotFoundException(line.product_id)
            if product.status != ProductStatus.AVAILABLE:
                raise ProductUnavailableException(product.id, product.name)
            items.append(
                OrderItem(
                    id=None,
                    product_id=product.id,
                    quantity=line.quantity,
                    price=product.price,
                    product=product,
                )
            )
        return items

    async def next_order_number(self) -> str:
        for _ in range(self.order_number_max_attempts):
            candidate = self._number_factory(self.order_number_prefix)
            if not await self.order_repository.exists_by_number(candidate):
                return candidate
        raise TransactionFailureException("create_order", reason="order_number_exhausted")

    async def place_order(
        self,
        user_id: str,
        lines: Iterable[RequestedLine],
        *,
        shipping_address: dict,
        billing_address: Optional[dict] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Order:
        items = await self.snapshot_items(lines)
        order = Order.place(
            order_number=await self.next_order_number(),
            user_id=user_id,
            items=items,
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            notes=notes,
        )
        order = await self.order_repository.create(order)

        self.events.append(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                user_id=order.user_id,
                total_amount=str(order.total_amount),
                item_count=len(order.items),
                email=(order.shipping_address or {}).get("email"),
            )
        )
        return order

    def clear_events(self) -> List:
        events = self.events.copy()
        self.events.clear()
        return events
