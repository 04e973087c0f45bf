"""
支付仓储实现 - 使用SQLAlchemy实现数据访问
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.money import to_money
from domain.payment.entity import Payment, PaymentStatus, PaymentStats
from domain.payment.repository import PaymentRepository
from infrastructure.models.payment import PaymentModel
from core.logging_config import get_logger


logger = get_logger(__name__)


def payment_to_entity(model: PaymentModel) -> Payment:
    """将数据库模型转换为领域实体"""
    return Payment(
        id=model.id,
        order_id=model.order_id,
        amount=Decimal(str(model.amount)),
        currency=model.currency,
        payment_method=model.payment_method,
        gateway=model.gateway,
        status=PaymentStatus(model.status),
        transaction_id=model.transaction_id,
        metadata=model.extra_metadata or {},
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyPaymentRepository(PaymentRepository):
    """支付仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_model(self, entity: Payment) -> PaymentModel:
        """将领域实体转换为数据库模型"""
        return PaymentModel(
            id=entity.id,
            order_id=entity.order_id,
            amount=entity.amount,
            currency=entity.currency,
            payment_method=entity.payment_method,
            gateway=entity.gateway,
            status=entity.status.value,
            transaction_id=entity.transaction_id,
            extra_metadata=entity.metadata,
            created_at=entity.created_at or datetime.now(timezone.utc),
            updated_at=entity.updated_at or datetime.now(timezone.utc),
        )

    def _filtered(
        self,
        query,
        status: Optional[PaymentStatus],
        payment_method: Optional[str],
        gateway: Optional[str],
    ):
        if status:
            query = query.where(PaymentModel.status == PaymentStatus(status).value)
        if payment_method:
            query = query.where(PaymentModel.payment_method == payment_method)
        if gateway:
            query = query.where(PaymentModel.gateway == gateway)
        return query

    async def create(self, payment: Payment) -> Payment:
        """创建支付流水"""
        db_payment = self._to_model(payment)
        self.session.add(db_payment)
        await self.session.flush()
        await self.session.refresh(db_payment)
        logger.info(
            "payment_created",
            payment_id=db_payment.id,
            order_id=db_payment.order_id,
            amount=str(payment.amount),
            status=db_payment.status,
            gateway=db_payment.gateway,
        )
        return payment_to_entity(db_payment)

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.id == payment_id)
        )
        db_payment = result.scalar_one_or_none()
        return payment_to_entity(db_payment) if db_payment else None

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.transaction_id == transaction_id)
            .order_by(PaymentModel.id.desc())
            .limit(1)
        )
        db_payment = result.scalar_one_or_none()
        return payment_to_entity(db_payment) if db_payment else None

    async def list_by_order(self, order_id: int) -> List[Payment]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.order_id == order_id)
            .order_by(PaymentModel.created_at.desc(), PaymentModel.id.desc())
        )
        return [payment_to_entity(m) for m in result.scalars().all()]

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
        payment_method: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> List[Payment]:
        query = self._filtered(select(PaymentModel), status, payment_method, gateway)
        query = query.order_by(PaymentModel.created_at.desc(), PaymentModel.id.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return [payment_to_entity(m) for m in result.scalars().all()]

    async def count(
        self,
        status: Optional[PaymentStatus] = None,
        payment_method: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> int:
        query = self._filtered(select(func.count(PaymentModel.id)), status, payment_method, gateway)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def update(self, payment: Payment) -> Payment:
        """更新支付流水（状态、交易号）"""
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.id == payment.id)
        )
        db_payment = result.scalar_one()
        db_payment.status = payment.status.value
        db_payment.transaction_id = payment.transaction_id
        db_payment.updated_at = payment.updated_at or datetime.now(timezone.utc)
        await self.session.flush()
        await self.session.refresh(db_payment)
        logger.info(
            "payment_updated",
            payment_id=db_payment.id,
            status=db_payment.status,
            transaction_id=db_payment.transaction_id,
        )
        return payment_to_entity(db_payment)

    async def stats(self) -> PaymentStats:
        completed = PaymentModel.status == PaymentStatus.COMPLETED.value
        result = await self.session.execute(
            select(
                func.count(PaymentModel.id),
                func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
                func.coalesce(
                    func.sum(case((PaymentModel.status == PaymentStatus.FAILED.value, 1), else_=0)), 0
                ),
                func.coalesce(func.sum(case((completed, PaymentModel.amount), else_=0)), 0),
            )
        )
        total, completed_count, failed, amount = result.one()
        return PaymentStats(
            total_payments=int(total or 0),
            completed_payments=int(completed_count or 0),
            failed_payments=int(failed or 0),
            total_amount=to_money(Decimal(str(amount or 0))),
        )
