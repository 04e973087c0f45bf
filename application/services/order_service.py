"""
订单应用服务（application/services）- 结算、查询与状态流转
"""
from typing import Callable, Iterable, List, Optional, Tuple

from application.dto import CheckoutDTO, OrderCreateDTO, OrderResponseDTO, OrderStatsDTO
from application.ports.event_publisher import EventPublisher
from core.config import OrderSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import EmptyCartException, OrderNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.order.entity import Order, OrderPaymentStatus, OrderStatus
from domain.order.service import OrderDomainService, RequestedLine


logger = get_logger(__name__)


class OrderApplicationService:
    """
    订单应用服务

    订单与订单行在同一个事务内写入；清空购物车与发送通知在提交之后执行，
    失败只记录日志，不影响已创建的订单。
    """

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        event_publisher: Optional[EventPublisher] = None,
        order_settings: Optional[OrderSettings] = None,
        number_factory: Optional[Callable[[str], str]] = None,
    ):
        self._uow_factory = uow_factory
        self._event_publisher = event_publisher
        self._settings = order_settings or settings.orders
        self._number_factory = number_factory

    async def create_order_from_cart(self, user_id: str, data: CheckoutDTO) -> OrderResponseDTO:
        """将购物车快照为订单，成功后清空购物车"""
        async with self._uow_factory() as uow:
            lines = await uow.cart_repository.list_by_user(user_id)
            if not lines:
                raise EmptyCartException(user_id)
            order, events = await self._place(
                uow,
                user_id,
                [RequestedLine(line.product_id, line.quantity) for line in lines],
                data,
            )

        await self._clear_cart_after_checkout(user_id, order)
        self._publish(events)
        return OrderResponseDTO.from_entity(order)

    async def create_order(self, user_id: str, data: OrderCreateDTO) -> OrderResponseDTO:
        """按显式商品列表下单，不读取也不清空购物车"""
        async with self._uow_factory() as uow:
            order, events = await self._place(
                uow,
                user_id,
                [RequestedLine(item.product_id, item.quantity) for item in data.items],
                data,
            )

        self._publish(events)
        return OrderResponseDTO.from_entity(order)

    async def _place(
        self,
        uow: AbstractUnitOfWork,
        user_id: str,
        lines: Iterable[RequestedLine],
        data: CheckoutDTO,
    ) -> Tuple[Order, list]:
        domain_service = OrderDomainService(
            uow.order_repository,
            uow.product_repository,
            order_number_prefix=self._settings.order_number_prefix,
            order_number_max_attempts=self._settings.order_number_max_attempts,
            number_factory=self._number_factory,
        )
        order = await domain_service.place_order(
            user_id,
            lines,
            shipping_address=data.shipping_address.model_dump(mode="json"),
            billing_address=data.billing_address.model_dump(mode="json") if data.billing_address else None,
            payment_method=data.payment_method,
            notes=data.notes,
        )
        return order, domain_service.clear_events()

    async def _clear_cart_after_checkout(self, user_id: str, order: Order) -> None:
        try:
            async with self._uow_factory() as uow:
                removed = await uow.cart_repository.delete_by_user(user_id)
            logger.info("cart_cleared_after_checkout", user_id=user_id, order_id=order.id, removed=removed)
        except Exception as exc:
            # 订单已提交，购物车残留由用户自行处理
            logger.warning(
                "cart_clear_failed",
                user_id=user_id,
                order_id=order.id,
                error=str(exc),
                exc_info=True,
            )

    def _publish(self, events: list) -> None:
        if self._event_publisher is None:
            return
        for event in events:
            try:
                self._event_publisher.publish(event)
            except Exception as exc:
                logger.warning(
                    "event_publish_failed",
                    event_type=type(event).__name__,
                    error=str(exc),
                    exc_info=True,
                )

    async def get_order(self, order_id: int) -> OrderResponseDTO:
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(str(order_id))
        return OrderResponseDTO.from_entity(order)

    async def get_order_by_number(self, order_number: str) -> OrderResponseDTO:
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_number(order_number)
            if order is None:
                raise OrderNotFoundException(order_number)
        return OrderResponseDTO.from_entity(order)

    async def list_user_orders(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 100,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
    ) -> Tuple[List[OrderResponseDTO], int]:
        async with self._uow_factory(readonly=True) as uow:
            orders = await uow.order_repository.get_all(
                skip, limit, user_id=user_id, status=status, payment_status=payment_status
            )
            total = await uow.order_repository.count(
                user_id=user_id, status=status, payment_status=payment_status
            )
        return [OrderResponseDTO.from_entity(o) for o in orders], int(total)

    async def list_orders(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[OrderResponseDTO], int]:
        """管理端订单列表（可按订单号模糊搜索）"""
        async with self._uow_factory(readonly=True) as uow:
            orders = await uow.order_repository.get_all(
                skip, limit, status=status, payment_status=payment_status, search=search
            )
            total = await uow.order_repository.count(
                status=status, payment_status=payment_status, search=search
            )
        return [OrderResponseDTO.from_entity(o) for o in orders], int(total)

    async def update_status(self, order_id: int, status: OrderStatus) -> OrderResponseDTO:
        async with self._uow_factory() as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(str(order_id))
            previous = order.status
            order.change_status(status, enforce_transitions=self._settings.enforce_transitions)
            order = await uow.order_repository.update(order)
        logger.info(
            "order_status_changed",
            order_id=order_id,
            previous=previous.value,
            status=order.status.value,
        )
        return OrderResponseDTO.from_entity(order)

    async def update_payment_status(
        self, order_id: int, payment_status: OrderPaymentStatus
    ) -> OrderResponseDTO:
        async with self._uow_factory() as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(str(order_id))
            order.change_payment_status(payment_status)
            order = await uow.order_repository.update(order)
        return OrderResponseDTO.from_entity(order)

    async def cancel_order(self, order_id: int) -> OrderResponseDTO:
        """强制取消，不检查当前状态"""
        async with self._uow_factory() as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(str(order_id))
            order.cancel()
            order = await uow.order_repository.update(order)
        logger.info("order_cancelled", order_id=order_id)
        return OrderResponseDTO.from_entity(order)

    async def order_stats(self, user_id: Optional[str] = None) -> OrderStatsDTO:
        async with self._uow_factory(readonly=True) as uow:
            stats = await uow.order_repository.stats(user_id)
        return OrderStatsDTO.from_entity(stats)
