"""
购物车仓储实现
"""
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.cart.entity import CartLine, CartStats
from domain.cart.repository import CartRepository
from domain.common.money import to_money
from infrastructure.models.cart import CartItemModel
from infrastructure.models.product import ProductModel
from infrastructure.repositories.product_repository import product_to_entity
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyCartRepository(CartRepository):
    """购物车仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: CartItemModel) -> CartLine:
        return CartLine(
            id=model.id,
            user_id=model.user_id,
            product_id=model.product_id,
            quantity=model.quantity,
            product=product_to_entity(model.product) if model.product is not None else None,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _query(self):
        # 异步会话下禁止惰性加载，统一预加载商品
        return (
            select(CartItemModel)
            .options(selectinload(CartItemModel.product))
            .execution_options(populate_existing=True)
        )

    async def _get_model(self, user_id: str, product_id: int) -> Optional[CartItemModel]:
        result = await self.session.execute(
            self._query().where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_line(self, user_id: str, product_id: int) -> Optional[CartLine]:
        model = await self._get_model(user_id, product_id)
        return self._to_entity(model) if model else None

    async def list_by_user(self, user_id: str) -> List[CartLine]:
        result = await self.session.execute(
            self._query()
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def add(self, line: CartLine) -> CartLine:
        model = CartItemModel(
            user_id=line.user_id,
            product_id=line.product_id,
            quantity=line.quantity,
        )
        self.session.add(model)
        await self.session.flush()
        logger.info(
            "cart_item_added",
            user_id=line.user_id,
            product_id=line.product_id,
            quantity=line.quantity,
        )
        return await self.get_line(line.user_id, line.product_id)

    async def update(self, line: CartLine) -> CartLine:
        model = await self._get_model(line.user_id, line.product_id)
        model.quantity = line.quantity
        await self.session.flush()
        logger.info(
            "cart_item_updated",
            user_id=line.user_id,
            product_id=line.product_id,
            quantity=line.quantity,
        )
        return await self.get_line(line.user_id, line.product_id)

    async def delete(self, user_id: str, product_id: int) -> bool:
        result = await self.session.execute(
            delete(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        )
        removed = (result.rowcount or 0) > 0
        if removed:
            logger.info("cart_item_removed", user_id=user_id, product_id=product_id)
        return removed

    async def delete_by_user(self, user_id: str) -> int:
        result = await self.session.execute(
            delete(CartItemModel).where(CartItemModel.user_id == user_id)
        )
        removed = result.rowcount or 0
        logger.info("cart_cleared", user_id=user_id, removed=removed)
        return removed

    async def count_by_user(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(CartItemModel.id)).where(CartItemModel.user_id == user_id)
        )
        return result.scalar() or 0

    async def stats(self) -> CartStats:
        result = await self.session.execute(
            select(
                func.count(CartItemModel.id),
                func.coalesce(func.sum(CartItemModel.quantity), 0),
                func.coalesce(func.sum(CartItemModel.quantity * ProductModel.price), 0),
                func.count(func.distinct(CartItemModel.user_id)),
            ).join(ProductModel, ProductModel.id == CartItemModel.product_id)
        )
        total_lines, total_quantity, total_value, active_carts = result.one()
        return CartStats(
            total_lines=int(total_lines or 0),
            total_quantity=int(total_quantity or 0),
            total_value=to_money(Decimal(str(total_value or 0))),
            active_carts=int(active_carts or 0),
        )
