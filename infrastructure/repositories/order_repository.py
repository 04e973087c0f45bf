"""
订单仓储实现 - 订单与订单行在同一事务内写入
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.common.exceptions import TransactionFailureException
from domain.common.money import to_money
from domain.order.entity import Order, OrderItem, OrderStatus, OrderPaymentStatus, OrderStats
from domain.order.repository import OrderRepository
from infrastructure.models.order import OrderModel, OrderItemModel
from infrastructure.repositories.payment_repository import payment_to_entity
from infrastructure.repositories.product_repository import product_to_entity
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyOrderRepository(OrderRepository):
    """订单仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: OrderModel) -> Order:
        return Order(
            id=model.id,
            order_number=model.order_number,
            user_id=model.user_id,
            total_amount=Decimal(str(model.total_amount)),
            status=OrderStatus(model.status),
            payment_status=OrderPaymentStatus(model.payment_status),
            shipping_address=model.shipping_address or {},
            billing_address=model.billing_address,
            payment_method=model.payment_method,
            notes=model.notes,
            items=[
                OrderItem(
                    id=item.id,
                    order_id=item.order_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=Decimal(str(item.price)),
                    product=product_to_entity(item.product) if item.product is not None else None,
                )
                for item in model.items
            ],
            payments=[payment_to_entity(p) for p in model.payments],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _query(self):
        return (
            select(OrderModel)
            .options(
                selectinload(OrderModel.items).selectinload(OrderItemModel.product),
                selectinload(OrderModel.payments),
            )
            .execution_options(populate_existing=True)
        )

    def _filtered(
        self,
        query,
        user_id: Optional[str],
        status: Optional[OrderStatus],
        payment_status: Optional[OrderPaymentStatus],
        search: Optional[str],
    ):
        if user_id is not None:
            query = query.where(OrderModel.user_id == user_id)
        if status:
            query = query.where(OrderModel.status == OrderStatus(status).value)
        if payment_status:
            query = query.where(OrderModel.payment_status == OrderPaymentStatus(payment_status).value)
        if search:
            query = query.where(OrderModel.order_number.icontains(search, autoescape=True))
        return query

    async def create(self, order: Order) -> Order:
        db_order = OrderModel(
            order_number=order.order_number,
            user_id=order.user_id,
            total_amount=order.total_amount,
            status=order.status.value,
            payment_status=order.payment_status.value,
            shipping_address=order.shipping_address,
            billing_address=order.billing_address,
            payment_method=order.payment_method,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemModel(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in order.items
            ],
        )
        self.session.add(db_order)
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning(
                "order_create_conflict",
                order_number=order.order_number,
                error=str(e.orig),
            )
            raise TransactionFailureException("create_order", reason="order_number_conflict") from e

        logger.info(
            "order_created",
            order_id=db_order.id,
            order_number=db_order.order_number,
            user_id=db_order.user_id,
            total_amount=str(order.total_amount),
            item_count=len(order.items),
        )
        return await self.get_by_id(db_order.id)

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        result = await self.session.execute(self._query().where(OrderModel.id == order_id))
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    async def get_by_number(self, order_number: str) -> Optional[Order]:
        result = await self.session.execute(
            self._query().where(OrderModel.order_number == order_number)
        )
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    async def exists_by_number(self, order_number: str) -> bool:
        result = await self.session.execute(
            select(func.count(OrderModel.id)).where(OrderModel.order_number == order_number)
        )
        return (result.scalar() or 0) > 0

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
        search: Optional[str] = None,
    ) -> List[Order]:
        query = self._filtered(self._query(), user_id, status, payment_status, search)
        query = query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def count(
        self,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
        search: Optional[str] = None,
    ) -> int:
        query = self._filtered(select(func.count(OrderModel.id)), user_id, status, payment_status, search)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def update(self, order: Order) -> Order:
        result = await self.session.execute(select(OrderModel).where(OrderModel.id == order.id))
        db_order = result.scalar_one()
        db_order.status = order.status.value
        db_order.payment_status = order.payment_status.value
        db_order.updated_at = order.updated_at or datetime.now(timezone.utc)
        await self.session.flush()
        logger.info(
            "order_updated",
            order_id=db_order.id,
            status=db_order.status,
            payment_status=db_order.payment_status,
        )
        return await self.get_by_id(db_order.id)

    async def stats(self, user_id: Optional[str] = None) -> OrderStats:
        delivered = OrderModel.status == OrderStatus.DELIVERED.value
        query = select(
            func.count(OrderModel.id),
            func.coalesce(func.sum(case((OrderModel.status == OrderStatus.PENDING.value, 1), else_=0)), 0),
            func.coalesce(func.sum(case((delivered, 1), else_=0)), 0),
            func.coalesce(func.sum(case((delivered, OrderModel.total_amount), else_=0)), 0),
        )
        if user_id is not None:
            query = query.where(OrderModel.user_id == user_id)
        total, pending, delivered_count, revenue = (await self.session.execute(query)).one()
        return OrderStats(
            total_orders=int(total or 0),
            pending_orders=int(pending or 0),
            delivered_orders=int(delivered_count or 0),
            total_revenue=to_money(Decimal(str(revenue or 0))),
        )
