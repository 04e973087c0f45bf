"""
支付仓储接口 - 定义支付数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import Payment, PaymentStatus, PaymentStats


class PaymentRepository(ABC):
    """支付仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """创建支付流水"""
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        """根据ID获取支付"""
        pass

    @abstractmethod
    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        """根据网关交易号获取支付"""
        pass

    @abstractmethod
    async def list_by_order(self, order_id: int) -> List[Payment]:
        """获取订单的全部支付流水（按创建时间倒序）"""
        pass

    @abstractmethod
    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
        payment_method: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> List[Payment]:
        pass

    @abstractmethod
    async def count(
        self,
        status: Optional[PaymentStatus] = None,
        payment_method: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> int:
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        """更新支付流水（状态、交易号）"""
        pass

    @abstractmethod
    async def stats(self) -> PaymentStats:
        """支付统计"""
        pass
