"""
支付应用服务 - 支付流水、状态回写与退款
"""
from decimal import Decimal
from typing import Any, Callable, List, Optional, Tuple

from application.dto import (
    PaymentCreateDTO,
    PaymentResponseDTO,
    PaymentStatsDTO,
    RefundResultDTO,
    StripePaymentDTO,
)
from application.dtos.payments import ChargeRequest, WebhookEvent
from application.ports.payment_gateway import PaymentGateway
from core.config import OrderSettings, PaymentSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import OrderNotFoundException, PaymentNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.order.entity import OrderPaymentStatus
from domain.payment.entity import Payment, PaymentStatus


logger = get_logger(__name__)

# 支付流水状态对订单支付状态的投影；其余状态不影响订单
_ORDER_PAYMENT_PROJECTION = {
    PaymentStatus.COMPLETED: OrderPaymentStatus.COMPLETED,
    PaymentStatus.FAILED: OrderPaymentStatus.FAILED,
}


class PaymentApplicationService:
    """支付应用服务"""

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        gateway: Optional[PaymentGateway] = None,
        payment_settings: Optional[PaymentSettings] = None,
        order_settings: Optional[OrderSettings] = None,
    ):
        self._uow_factory = uow_factory
        self._gateway = gateway
        self._payment_settings = payment_settings or settings.payments
        self._order_settings = order_settings or settings.orders

    async def create_payment(self, data: PaymentCreateDTO) -> PaymentResponseDTO:
        """新建待支付流水，不修改订单"""
        async with self._uow_factory() as uow:
            payment = await self._create_pending(
                uow,
                order_id=data.order_id,
                amount=data.amount,
                currency=data.currency,
                payment_method=data.payment_method,
                gateway=data.gateway,
                metadata=data.metadata,
            )
        return PaymentResponseDTO.from_entity(payment)

    async def _create_pending(
        self,
        uow: AbstractUnitOfWork,
        *,
        order_id: int,
        amount: Decimal,
        currency: Optional[str],
        payment_method: str,
        gateway: Optional[str],
        metadata: Optional[dict],
    ) -> Payment:
        order = await uow.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(str(order_id))
        payment = Payment.charge(
            order_id=order.id,
            amount=amount,
            currency=currency or self._payment_settings.default_currency,
            payment_method=payment_method,
            gateway=gateway or self._payment_settings.default_gateway,
            metadata=metadata,
        )
        return await uow.payment_repository.create(payment)

    async def update_payment_status(
        self,
        payment_id: int,
        status: PaymentStatus,
        transaction_id: Optional[str] = None,
    ) -> PaymentResponseDTO:
        """更新流水状态；COMPLETED/FAILED 同步回写订单支付状态"""
        async with self._uow_factory() as uow:
            payment = await uow.payment_repository.get_by_id(payment_id)
            if payment is None:
                raise PaymentNotFoundException(str(payment_id))
            payment.change_status(
                status,
                transaction_id,
                enforce_transitions=self._order_settings.enforce_transitions,
            )
            payment = await uow.payment_repository.update(payment)

            projected = _ORDER_PAYMENT_PROJECTION.get(payment.status)
            if projected is not None:
                order = await uow.order_repository.get_by_id(payment.order_id)
                if order is None:
                    raise OrderNotFoundException(str(payment.order_id))
                order.change_payment_status(projected)
                await uow.order_repository.update(order)
        logger.info(
            "payment_status_changed",
            payment_id=payment_id,
            status=payment.status.value,
            order_payment_status=projected.value if projected else None,
        )
        return PaymentResponseDTO.from_entity(payment)

    async def process_refund(
        self,
        payment_id: int,
        refund_amount: Decimal,
        reason: Optional[str] = None,
    ) -> RefundResultDTO:
        """
        退款：新增负金额流水并将原流水置为 REFUNDED

        全额退款时订单状态与支付状态同时置为 REFUNDED；部分退款不改变订单。
        """
        async with self._uow_factory() as uow:
            payment = await uow.payment_repository.get_by_id(payment_id)
            if payment is None:
                raise PaymentNotFoundException(str(payment_id))

            refund = payment.build_refund(refund_amount, reason)
            full_refund = payment.is_full_refund(refund_amount)
            refund = await uow.payment_repository.create(refund)
            payment = await uow.payment_repository.update(payment)

            if full_refund:
                order = await uow.order_repository.get_by_id(payment.order_id)
                if order is None:
                    raise OrderNotFoundException(str(payment.order_id))
                order.mark_refunded()
                await uow.order_repository.update(order)
        logger.info(
            "payment_refunded",
            payment_id=payment_id,
            refund_payment_id=refund.id,
            refund_amount=str(-refund.amount),
            full_refund=full_refund,
        )
        return RefundResultDTO(
            refund=PaymentResponseDTO.from_entity(refund),
            original_payment=PaymentResponseDTO.from_entity(payment),
            full_refund=full_refund,
        )

    async def process_stripe_payment(self, data: StripePaymentDTO) -> PaymentResponseDTO:
        """
        开发用的 Stripe 支付桩：创建流水、向模拟网关取交易号并立即标记完成。
        """
        if self._gateway is None:
            raise RuntimeError("payment gateway is not configured")

        async with self._uow_factory() as uow:
            payment = await self._create_pending(
                uow,
                order_id=data.order_id,
                amount=data.amount,
                currency=data.currency,
                payment_method="stripe",
                gateway=self._gateway.gateway,
                metadata=data.metadata,
            )

        result = await self._gateway.charge(
            ChargeRequest(
                order_id=payment.order_id,
                amount=payment.amount,
                currency=payment.currency,
                payment_method=payment.payment_method,
                metadata=payment.metadata,
            )
        )
        status = PaymentStatus.COMPLETED if result.status == "succeeded" else PaymentStatus.FAILED
        return await self.update_payment_status(payment.id, status, result.transaction_id)

    def acknowledge_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent:
        """只记录事件类型并确认收到，不做任何状态流转"""
        if self._gateway is None:
            raise RuntimeError("payment gateway is not configured")
        event = self._gateway.parse_webhook(headers, body)
        logger.info("payment_webhook_received", gateway=event.gateway, event_type=event.type, event_id=event.id)
        return event

    async def get_payment(self, payment_id: int) -> PaymentResponseDTO:
        async with self._uow_factory(readonly=True) as uow:
            payment = await uow.payment_repository.get_by_id(payment_id)
            if payment is None:
                raise PaymentNotFoundException(str(payment_id))
        return PaymentResponseDTO.from_entity(payment)

    async def get_payment_by_transaction_id(self, transaction_id: str) -> PaymentResponseDTO:
        async with self._uow_factory(readonly=True) as uow:
            payment = await uow.payment_repository.get_by_transaction_id(transaction_id)
            if payment is None:
                raise PaymentNotFoundException(transaction_id)
        return PaymentResponseDTO.from_entity(payment)

    async def list_order_payments(self, order_id: int) -> List[PaymentResponseDTO]:
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(str(order_id))
            payments = await uow.payment_repository.list_by_order(order_id)
        return [PaymentResponseDTO.from_entity(p) for p in payments]

    async def order_owner(self, order_id: int) -> str:
        """返回订单所属用户，用于路由层的归属校验"""
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundException(str(order_id))
        return order.user_id

    async def list_payments(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
        payment_method: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> Tuple[List[PaymentResponseDTO], int]:
        async with self._uow_factory(readonly=True) as uow:
            payments = await uow.payment_repository.get_all(skip, limit, status, payment_method, gateway)
            total = await uow.payment_repository.count(status, payment_method, gateway)
        return [PaymentResponseDTO.from_entity(p) for p in payments], int(total)

    async def payment_stats(self) -> PaymentStatsDTO:
        async with self._uow_factory(readonly=True) as uow:
            stats = await uow.payment_repository.stats()
        return PaymentStatsDTO.from_entity(stats)
