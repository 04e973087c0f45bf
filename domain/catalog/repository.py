"""
商品仓储接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import Product, ProductStatus


class ProductRepository(ABC):
    """商品仓储抽象接口"""

    @abstractmethod
    async def create(self, product: Product) -> Product:
        """创建商品"""
        pass

    @abstractmethod
    async def get_by_id(self, product_id: int) -> Optional[Product]:
        """根据ID获取商品（不存在返回 None）"""
        pass

    @abstractmethod
    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        category: Optional[str] = None,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        """获取商品列表"""
        pass

    @abstractmethod
    async def count(
        self,
        category: Optional[str] = None,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
    ) -> int:
        """统计商品数量"""
        pass

    @abstractmethod
    async def update(self, product: Product) -> Product:
        """更新商品"""
        pass
