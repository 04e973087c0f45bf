"""
数据传输对象（DTO）- 应用层与表现层之间的数据传输
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_serializer

from core.response import isoformat_utc
from domain.cart.entity import Cart, CartLine, CartStats
from domain.catalog.entity import Product, ProductStatus
from domain.order.entity import Order, OrderItem, OrderPaymentStatus, OrderStats, OrderStatus
from domain.payment.entity import Payment, PaymentStats, PaymentStatus


PaymentMethod = Literal["stripe", "paypal", "bank_transfer"]
PHONE_PATTERN = r"^\+?[\d\s\-()]+$"


class DTOBase(BaseModel):
    """Base DTO: unify datetime serialization to UTC-Z for all subclasses."""

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                return isoformat_utc(value)
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class ProductCreateDTO(DTOBase):
    """商品创建DTO"""
    name: str = Field(..., min_length=2, max_length=200)
    category: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    image: Optional[str] = Field(None, max_length=500)
    status: ProductStatus = ProductStatus.AVAILABLE


class ProductUpdateDTO(DTOBase):
    """商品更新DTO"""
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    category: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    image: Optional[str] = Field(None, max_length=500)
    status: Optional[ProductStatus] = None


class ProductResponseDTO(DTOBase):
    id: int
    name: str
    category: Optional[str]
    description: Optional[str]
    price: Decimal
    image: Optional[str]
    rating: Decimal
    reviews: int
    status: ProductStatus
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponseDTO":
        return cls.model_validate(product)


class ProductSummaryDTO(DTOBase):
    """购物车/订单行中展示的商品摘要"""
    id: int
    name: str
    price: Decimal
    image: Optional[str] = None
    category: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartItemAddDTO(DTOBase):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1, le=100)


class CartItemUpdateDTO(DTOBase):
    # 数量 <= 0 等价于删除该行
    quantity: int = Field(..., le=100)


class CartItemResponseDTO(DTOBase):
    id: int
    product_id: int
    quantity: int
    item_total: Decimal
    product: Optional[ProductSummaryDTO]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_entity(cls, line: CartLine) -> "CartItemResponseDTO":
        return cls(
            id=line.id,
            product_id=line.product_id,
            quantity=line.quantity,
            item_total=line.item_total,
            product=ProductSummaryDTO.model_validate(line.product) if line.product else None,
            created_at=line.created_at,
            updated_at=line.updated_at,
        )


class CartResponseDTO(DTOBase):
    items: list[CartItemResponseDTO]
    total: Decimal
    item_count: int

    @classmethod
    def from_entity(cls, cart: Cart) -> "CartResponseDTO":
        return cls(
            items=[CartItemResponseDTO.from_entity(line) for line in cart.lines],
            total=cart.total,
            item_count=cart.item_count,
        )


class CartStatsDTO(DTOBase):
    total_lines: int
    total_quantity: int
    total_value: Decimal
    active_carts: int
    average_items_per_cart: Decimal
    average_cart_value: Decimal

    @classmethod
    def from_entity(cls, stats: CartStats) -> "CartStatsDTO":
        return cls(
            total_lines=stats.total_lines,
            total_quantity=stats.total_quantity,
            total_value=stats.total_value,
            active_carts=stats.active_carts,
            average_items_per_cart=stats.average_items_per_cart,
            average_cart_value=stats.average_cart_value,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class AddressDTO(DTOBase):
    """地址快照"""
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    address: str = Field(..., min_length=10, max_length=500)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    zip_code: str = Field(..., min_length=3, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)


class CheckoutDTO(DTOBase):
    """从购物车结算"""
    shipping_address: AddressDTO
    billing_address: Optional[AddressDTO] = None
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=1000)


class OrderLineDTO(DTOBase):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=1)


class OrderCreateDTO(CheckoutDTO):
    """显式商品列表下单（不读取购物车）"""
    items: list[OrderLineDTO] = Field(..., min_length=1)


class OrderStatusUpdateDTO(DTOBase):
    status: OrderStatus


class OrderPaymentStatusUpdateDTO(DTOBase):
    payment_status: OrderPaymentStatus


class OrderItemResponseDTO(DTOBase):
    id: int
    product_id: int
    quantity: int
    price: Decimal
    item_total: Decimal
    product: Optional[ProductSummaryDTO]

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemResponseDTO":
        return cls(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            price=item.price,
            item_total=item.item_total,
            product=ProductSummaryDTO.model_validate(item.product) if item.product else None,
        )


class PaymentResponseDTO(DTOBase):
    id: int
    order_id: int
    amount: Decimal
    currency: str
    payment_method: str
    gateway: str
    status: PaymentStatus
    transaction_id: Optional[str]
    metadata: dict
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentResponseDTO":
        return cls.model_validate(payment)


class OrderResponseDTO(DTOBase):
    id: int
    order_number: str
    user_id: str
    total_amount: Decimal
    status: OrderStatus
    payment_status: OrderPaymentStatus
    shipping_address: dict
    billing_address: Optional[dict]
    payment_method: Optional[str]
    notes: Optional[str]
    items: list[OrderItemResponseDTO]
    payments: list[PaymentResponseDTO]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponseDTO":
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            total_amount=order.total_amount,
            status=order.status,
            payment_status=order.payment_status,
            shipping_address=order.shipping_address,
            billing_address=order.billing_address,
            payment_method=order.payment_method,
            notes=order.notes,
            items=[OrderItemResponseDTO.from_entity(i) for i in order.items],
            payments=[PaymentResponseDTO.from_entity(p) for p in order.payments],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderStatsDTO(DTOBase):
    total_orders: int
    pending_orders: int
    delivered_orders: int
    total_revenue: Decimal

    @classmethod
    def from_entity(cls, stats: OrderStats) -> "OrderStatsDTO":
        return cls(
            total_orders=stats.total_orders,
            pending_orders=stats.pending_orders,
            delivered_orders=stats.delivered_orders,
            total_revenue=stats.total_revenue,
        )


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class PaymentCreateDTO(DTOBase):
    order_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_method: PaymentMethod
    gateway: Optional[str] = Field(None, max_length=50)
    metadata: Optional[dict[str, Any]] = None

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        u = v.upper()
        if not u.isalpha():
            raise ValueError("currency must be ISO-4217 alpha-3")
        return u


class StripePaymentDTO(DTOBase):
    order_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    metadata: Optional[dict[str, Any]] = None


class PaymentStatusUpdateDTO(DTOBase):
    status: PaymentStatus
    transaction_id: Optional[str] = Field(None, max_length=200)


class RefundDTO(DTOBase):
    refund_amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    reason: Optional[str] = Field(None, max_length=500)


class RefundResultDTO(DTOBase):
    refund: PaymentResponseDTO
    original_payment: PaymentResponseDTO
    full_refund: bool


class PaymentStatsDTO(DTOBase):
    total_payments: int
    completed_payments: int
    failed_payments: int
    total_amount: Decimal

    @classmethod
    def from_entity(cls, stats: PaymentStats) -> "PaymentStatsDTO":
        return cls(
            total_payments=stats.total_payments,
            completed_payments=stats.completed_payments,
            failed_payments=stats.failed_payments,
            total_amount=stats.total_amount,
        )


# ---------------------------------------------------------------------------
# Identity / paging
# ---------------------------------------------------------------------------
class CurrentUserDTO(DTOBase):
    """从 JWT 中解析出的调用方身份"""
    id: str
    email: Optional[str] = None
    is_admin: bool = False


class PaginationParams(DTOBase):
    page: int = Field(1, ge=1)
    size: int = Field(20, ge=1)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.size
