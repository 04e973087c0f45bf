"""
商品目录应用服务 - 为购物车与订单提供可引用的商品
"""
from typing import Callable, List, Optional, Tuple

from application.dto import ProductCreateDTO, ProductResponseDTO, ProductUpdateDTO
from domain.catalog.entity import Product, ProductStatus
from domain.common.exceptions import ProductNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork


class CatalogApplicationService:
    """商品应用服务"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def create_product(self, data: ProductCreateDTO) -> ProductResponseDTO:
        async with self._uow_factory() as uow:
            product = await uow.product_repository.create(
                Product(
                    id=None,
                    name=data.name,
                    price=data.price,
                    status=data.status,
                    category=data.category,
                    description=data.description,
                    image=data.image,
                )
            )
        return ProductResponseDTO.from_entity(product)

    async def get_product(self, product_id: int) -> ProductResponseDTO:
        async with self._uow_factory(readonly=True) as uow:
            product = await uow.product_repository.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundException(product_id)
        return ProductResponseDTO.from_entity(product)

    async def list_products(
        self,
        skip: int = 0,
        limit: int = 100,
        category: Optional[str] = None,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[ProductResponseDTO], int]:
        """获取商品列表（带总数）"""
        async with self._uow_factory(readonly=True) as uow:
            products = await uow.product_repository.get_all(skip, limit, category, status, search)
            total = await uow.product_repository.count(category, status, search)
        return [ProductResponseDTO.from_entity(p) for p in products], int(total)

    async def update_product(self, product_id: int, data: ProductUpdateDTO) -> ProductResponseDTO:
        """更新商品；价格变动不影响已有订单的快照"""
        async with self._uow_factory() as uow:
            product = await uow.product_repository.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundException(product_id)

            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            if "price" in changes:
                product.change_price(changes.pop("price"))
            if "status" in changes:
                product.change_status(changes.pop("status"))
            for field_name, value in changes.items():
                setattr(product, field_name, value)

            product = await uow.product_repository.update(product)
        return ProductResponseDTO.from_entity(product)
