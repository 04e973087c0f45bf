"""
商品仓储实现 - 使用SQLAlchemy实现数据访问
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from domain.catalog.entity import Product, ProductStatus
from domain.catalog.repository import ProductRepository
from infrastructure.models.product import ProductModel
from core.logging_config import get_logger


logger = get_logger(__name__)


def product_to_entity(model: ProductModel) -> Product:
    """将数据库模型转换为领域实体（订单、购物车仓储共用）"""
    return Product(
        id=model.id,
        name=model.name,
        price=Decimal(str(model.price)),
        status=ProductStatus(model.status),
        category=model.category,
        description=model.description,
        image=model.image,
        rating=Decimal(str(model.rating or 0)),
        reviews=model.reviews or 0,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyProductRepository(ProductRepository):
    """商品仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_model(self, entity: Product) -> ProductModel:
        return ProductModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            category=entity.category,
            price=entity.price,
            image=entity.image,
            rating=entity.rating,
            reviews=entity.reviews,
            status=entity.status.value,
            created_at=entity.created_at or datetime.now(timezone.utc),
            updated_at=entity.updated_at or datetime.now(timezone.utc),
        )

    def _filtered(self, query, category: Optional[str], status: Optional[ProductStatus], search: Optional[str]):
        if category:
            query = query.where(ProductModel.category == category)
        if status:
            query = query.where(ProductModel.status == ProductStatus(status).value)
        if search:
            query = query.where(
                or_(
                    ProductModel.name.icontains(search, autoescape=True),
                    ProductModel.description.icontains(search, autoescape=True),
                )
            )
        return query

    async def create(self, product: Product) -> Product:
        db_product = self._to_model(product)
        self.session.add(db_product)
        await self.session.flush()
        await self.session.refresh(db_product)
        logger.info("product_created", product_id=db_product.id, price=str(db_product.price))
        return product_to_entity(db_product)

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        result = await self.session.execute(
            select(ProductModel).where(ProductModel.id == product_id)
        )
        db_product = result.scalar_one_or_none()
        return product_to_entity(db_product) if db_product else None

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        category: Optional[str] = None,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        query = self._filtered(select(ProductModel), category, status, search)
        query = query.order_by(ProductModel.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return [product_to_entity(m) for m in result.scalars().all()]

    async def count(
        self,
        category: Optional[str] = None,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
    ) -> int:
        query = self._filtered(select(func.count(ProductModel.id)), category, status, search)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def update(self, product: Product) -> Product:
        result = await self.session.execute(
            select(ProductModel).where(ProductModel.id == product.id)
        )
        db_product = result.scalar_one()
        db_product.name = product.name
        db_product.description = product.description
        db_product.category = product.category
        db_product.price = product.price
        db_product.image = product.image
        db_product.status = product.status.value
        await self.session.flush()
        await self.session.refresh(db_product)
        logger.info("product_updated", product_id=db_product.id, status=db_product.status)
        return product_to_entity(db_product)
