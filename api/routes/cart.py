"""
购物车API路由
"""
from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_cart_service, get_current_user, require_admin
from application.dto import (
    CartItemAddDTO,
    CartItemResponseDTO,
    CartItemUpdateDTO,
    CartResponseDTO,
    CartStatsDTO,
    CurrentUserDTO,
)
from application.services.cart_service import CartApplicationService
from core.response import Response as ApiResponse, success_response

router = APIRouter(
    prefix="/cart",
    tags=["购物车"],
)


@router.get("", summary="获取购物车", response_model=ApiResponse[CartResponseDTO])
async def get_cart(
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    return success_response(data=await service.get_cart(current_user.id))


@router.delete("", summary="清空购物车", response_model=ApiResponse[dict])
async def clear_cart(
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    removed = await service.clear_cart(current_user.id)
    return success_response(data={"removed": removed}, message="Cart cleared")


@router.get("/count", summary="购物车行数", response_model=ApiResponse[dict])
async def get_item_count(
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    return success_response(data={"count": await service.get_item_count(current_user.id)})


@router.get("/stats", summary="购物车统计", response_model=ApiResponse[CartStatsDTO])
async def cart_stats(
    _: CurrentUserDTO = Depends(require_admin),
    service: CartApplicationService = Depends(get_cart_service),
):
    return success_response(data=await service.cart_stats())


@router.post("/items", summary="加入购物车", response_model=ApiResponse[CartItemResponseDTO])
async def add_item(
    data: CartItemAddDTO,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    line = await service.add_item(current_user.id, data.product_id, data.quantity)
    return success_response(data=line, message="Item added to cart")


@router.put(
    "/items/{product_id}",
    summary="修改数量",
    response_model=ApiResponse[Optional[CartItemResponseDTO]],
)
async def update_quantity(
    product_id: int,
    data: CartItemUpdateDTO,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    """数量 <= 0 时删除该行并返回 data=null"""
    line = await service.update_quantity(current_user.id, product_id, data.quantity)
    if line is None:
        return success_response(data=None, message="Item removed from cart")
    return success_response(data=line, message="Cart updated")


@router.delete("/items/{product_id}", summary="移除商品", response_model=ApiResponse[dict])
async def remove_item(
    product_id: int,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    removed = await service.remove_item(current_user.id, product_id)
    return success_response(data={"removed": removed}, message="Item removed from cart")


@router.get("/items/{product_id}/exists", summary="是否在购物车中", response_model=ApiResponse[dict])
async def is_in_cart(
    product_id: int,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: CartApplicationService = Depends(get_cart_service),
):
    return success_response(data={"in_cart": await service.is_in_cart(current_user.id, product_id)})
