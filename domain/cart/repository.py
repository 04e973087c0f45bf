"""
购物车仓储接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import CartLine, CartStats


class CartRepository(ABC):
    """购物车仓储抽象接口"""

    @abstractmethod
    async def get_line(self, user_id: str, product_id: int) -> Optional[CartLine]:
        """获取单行（附带商品信息）"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[CartLine]:
        """获取用户全部购物车行（附带商品信息，按创建时间倒序）"""
        pass

    @abstractmethod
    async def add(self, line: CartLine) -> CartLine:
        """新增购物车行"""
        pass

    @abstractmethod
    async def update(self, line: CartLine) -> CartLine:
        """更新购物车行数量"""
        pass

    @abstractmethod
    async def delete(self, user_id: str, product_id: int) -> bool:
        """删除单行，返回是否存在并被删除"""
        pass

    @abstractmethod
    async def delete_by_user(self, user_id: str) -> int:
        """清空用户购物车，返回删除行数"""
        pass

    @abstractmethod
    async def count_by_user(self, user_id: str) -> int:
        """统计用户购物车行数"""
        pass

    @abstractmethod
    async def stats(self) -> CartStats:
        """全局购物车统计"""
        pass
