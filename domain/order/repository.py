"""
订单仓储接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import Order, OrderStatus, OrderPaymentStatus, OrderStats


class OrderRepository(ABC):
    """订单仓储抽象接口"""

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """在当前事务内写入订单及全部订单行"""
        pass

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[Order]:
        """根据ID获取订单（含订单行、商品摘要与支付记录）"""
        pass

    @abstractmethod
    async def get_by_number(self, order_number: str) -> Optional[Order]:
        """根据订单号获取订单"""
        pass

    @abstractmethod
    async def exists_by_number(self, order_number: str) -> bool:
        """检查订单号是否已被占用"""
        pass

    @abstractmethod
    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
        search: Optional[str] = None,
    ) -> List[Order]:
        """获取订单列表（按创建时间倒序）"""
        pass

    @abstractmethod
    async def count(
        self,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
        search: Optional[str] = None,
    ) -> int:
        """统计订单数量"""
        pass

    @abstractmethod
    async def update(self, order: Order) -> Order:
        """更新订单状态字段（订单行不可变）"""
        pass

    @abstractmethod
    async def stats(self, user_id: Optional[str] = None) -> OrderStats:
        """订单统计"""
        pass
