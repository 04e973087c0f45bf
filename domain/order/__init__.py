from .entity import (
    Order,
    OrderItem,
    OrderStatus,
    OrderPaymentStatus,
    OrderStats,
    ORDER_STATUS_TRANSITIONS,
)
from .events import OrderPlaced
from .repository import OrderRepository
from .service import OrderDomainService, RequestedLine, generate_order_number

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderPaymentStatus",
    "OrderStats",
    "ORDER_STATUS_TRANSITIONS",
    "OrderPlaced",
    "OrderRepository",
    "OrderDomainService",
    "RequestedLine",
    "generate_order_number",
]
