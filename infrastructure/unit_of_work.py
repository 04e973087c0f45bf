"""SQLAlchemy Unit of Work 实现"""
from __future__ import annotations

from typing import Optional, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.common.exceptions import TransactionFailureException
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.product_repository import SQLAlchemyProductRepository
from infrastructure.repositories.cart_repository import SQLAlchemyCartRepository
from infrastructure.repositories.order_repository import SQLAlchemyOrderRepository
from infrastructure.repositories.payment_repository import SQLAlchemyPaymentRepository


logger = get_logger(__name__)


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """基于SQLAlchemy的Unit of Work

    数据库层异常（含提交失败）在回滚后统一转换为 TransactionFailureException，
    调用方不会看到部分写入的结果。
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        self.product_repository = SQLAlchemyProductRepository(self.session)
        self.cart_repository = SQLAlchemyCartRepository(self.session)
        self.order_repository = SQLAlchemyOrderRepository(self.session)
        self.payment_repository = SQLAlchemyPaymentRepository(self.session)
        # 仅在非只读模式下显式开启事务
        if not self._readonly and not self.session.in_transaction():
            await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        except SQLAlchemyError as commit_exc:
            logger.error("uow_commit_failed", error=str(commit_exc))
            await self.rollback()
            raise TransactionFailureException("commit", reason=type(commit_exc).__name__) from commit_exc
        finally:
            if self._external_session is None and self.session is not None:
                await self.session.close()
                self.session = None
            self.product_repository = None
            self.cart_repository = None
            self.order_repository = None
            self.payment_repository = None

        if isinstance(exc, SQLAlchemyError):
            logger.error("uow_rolled_back", error=str(exc), error_type=type(exc).__name__)
            raise TransactionFailureException("database", reason=type(exc).__name__) from exc

    async def commit(self) -> None:
        if self._readonly:
            # 只读情况下不提交
            self._committed = True
            return
        if self.session and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False
