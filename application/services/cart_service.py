"""
购物车应用服务（application/services）- 编排购物车领域服务
"""
from typing import Callable, Optional

from application.dto import CartItemResponseDTO, CartResponseDTO, CartStatsDTO
from domain.cart.entity import Cart
from domain.cart.service import CartDomainService
from domain.common.unit_of_work import AbstractUnitOfWork


class CartApplicationService:
    """购物车应用服务"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def add_item(self, user_id: str, product_id: int, quantity: int = 1) -> CartItemResponseDTO:
        """加入购物车；同一商品再次加入时合并数量"""
        async with self._uow_factory() as uow:
            domain_service = CartDomainService(uow.cart_repository, uow.product_repository)
            line = await domain_service.add_item(user_id, product_id, quantity)
        return CartItemResponseDTO.from_entity(line)

    async def get_cart(self, user_id: str) -> CartResponseDTO:
        """总价按商品当前价格实时计算"""
        async with self._uow_factory(readonly=True) as uow:
            lines = await uow.cart_repository.list_by_user(user_id)
        return CartResponseDTO.from_entity(Cart(user_id=user_id, lines=lines))

    async def update_quantity(
        self, user_id: str, product_id: int, quantity: int
    ) -> Optional[CartItemResponseDTO]:
        async with self._uow_factory() as uow:
            domain_service = CartDomainService(uow.cart_repository, uow.product_repository)
            line = await domain_service.update_quantity(user_id, product_id, quantity)
        return CartItemResponseDTO.from_entity(line) if line is not None else None

    async def remove_item(self, user_id: str, product_id: int) -> bool:
        async with self._uow_factory() as uow:
            domain_service = CartDomainService(uow.cart_repository, uow.product_repository)
            return await domain_service.remove_item(user_id, product_id)

    async def clear_cart(self, user_id: str) -> int:
        async with self._uow_factory() as uow:
            return await uow.cart_repository.delete_by_user(user_id)

    async def is_in_cart(self, user_id: str, product_id: int) -> bool:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.cart_repository.get_line(user_id, product_id) is not None

    async def get_item_count(self, user_id: str) -> int:
        async with self._uow_factory(readonly=True) as uow:
            return int(await uow.cart_repository.count_by_user(user_id))

    async def cart_stats(self) -> CartStatsDTO:
        async with self._uow_factory(readonly=True) as uow:
            stats = await uow.cart_repository.stats()
        return CartStatsDTO.from_entity(stats)
