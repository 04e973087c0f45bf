"""
商品API路由 - 目录查询与管理
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_catalog_service, get_pagination, require_admin
from application.dto import (
    CurrentUserDTO,
    PaginationParams,
    ProductCreateDTO,
    ProductResponseDTO,
    ProductUpdateDTO,
)
from application.services.catalog_service import CatalogApplicationService
from core.response import PaginatedData, Response as ApiResponse, paginated_response, success_response
from domain.catalog.entity import ProductStatus

router = APIRouter(
    prefix="/products",
    tags=["商品"],
)


@router.get("", summary="商品列表", response_model=ApiResponse[PaginatedData[ProductResponseDTO]])
async def list_products(
    pagination: PaginationParams = Depends(get_pagination),
    category: Optional[str] = Query(None, max_length=100),
    status: Optional[ProductStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=255),
    service: CatalogApplicationService = Depends(get_catalog_service),
):
    items, total = await service.list_products(
        skip=pagination.skip,
        limit=pagination.size,
        category=category,
        status=status,
        search=search,
    )
    return paginated_response(items=items, total=total, page=pagination.page, size=pagination.size)


@router.get("/{product_id}", summary="商品详情", response_model=ApiResponse[ProductResponseDTO])
async def get_product(
    product_id: int,
    service: CatalogApplicationService = Depends(get_catalog_service),
):
    return success_response(data=await service.get_product(product_id))


@router.post("", summary="创建商品", status_code=201, response_model=ApiResponse[ProductResponseDTO])
async def create_product(
    data: ProductCreateDTO,
    _: CurrentUserDTO = Depends(require_admin),
    service: CatalogApplicationService = Depends(get_catalog_service),
):
    product = await service.create_product(data)
    return success_response(data=product, message="Product created")


@router.patch("/{product_id}", summary="更新商品", response_model=ApiResponse[ProductResponseDTO])
async def update_product(
    product_id: int,
    data: ProductUpdateDTO,
    _: CurrentUserDTO = Depends(require_admin),
    service: CatalogApplicationService = Depends(get_catalog_service),
):
    product = await service.update_product(product_id, data)
    return success_response(data=product, message="Product updated")
