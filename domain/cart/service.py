"""
购物车领域服务 - 合并加购、数量调整与删除规则
"""
from typing import Optional

from .entity import CartLine
from .repository import CartRepository
from domain.catalog.repository import ProductRepository
from domain.common.exceptions import ProductNotFoundException, CartItemNotFoundException


class CartDomainService:
    """
    购物车领域服务

    职责：
    1. 加购前校验商品存在（可售状态在结算时再校验）
    2. 同一商品重复加购时合并数量
    3. 数量 <= 0 视为删除
    """

    def __init__(self, cart_repository: CartRepository, product_repository: ProductRepository):
        self.cart_repository = cart_repository
        self.product_repository = product_repository

    async def add_item(self, user_id: str, product_id: int, quantity: int = 1) -> CartLine:
        product = await self.product_repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundException(product_id)

        line = await self.cart_repository.get_line(user_id, product_id)
        if line is not None:
            line.increase(quantity)
            return await self.cart_repository.update(line)

        line = CartLine(
            id=None,
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            product=product,
        )
        return await self.cart_repository.add(line)

    async def update_quantity(self, user_id: str, product_id: int, quantity: int) -> Optional[CartLine]:
        """设置数量；quantity <= 0 时等价于删除并返回 None"""
        if quantity <= 0:
            await self.remove_item(user_id, product_id)
            return None

        line = await self.cart_repository.get_line(user_id, product_id)
        if line is None:
            raise CartItemNotFoundException(user_id, product_id)
        line.set_quantity(quantity)
        return await self.cart_repository.update(line)

    async def remove_item(self, user_id: str, product_id: int) -> bool:
        """删除行；不存在时不报错（幂等）"""
        return await self.cart_repository.delete(user_id, product_id)
