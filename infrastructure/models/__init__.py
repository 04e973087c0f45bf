"""Infrastructure models package exports."""
from .base import Base, metadata
from .product import ProductModel
from .cart import CartItemModel
from .order import OrderModel, OrderItemModel
from .payment import PaymentModel

__all__ = [
    "Base",
    "metadata",
    "ProductModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "PaymentModel",
]
