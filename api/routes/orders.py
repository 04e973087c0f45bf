"""
订单API路由 - 结算、查询与状态管理
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import (
    ensure_owner_or_admin,
    get_current_user,
    get_order_service,
    get_pagination,
    require_admin,
)
from application.dto import (
    CheckoutDTO,
    CurrentUserDTO,
    OrderCreateDTO,
    OrderPaymentStatusUpdateDTO,
    OrderResponseDTO,
    OrderStatsDTO,
    OrderStatusUpdateDTO,
    PaginationParams,
)
from application.services.order_service import OrderApplicationService
from core.response import PaginatedData, Response as ApiResponse, paginated_response, success_response
from domain.order.entity import OrderPaymentStatus, OrderStatus

router = APIRouter(
    prefix="/orders",
    tags=["订单"],
)


@router.post(
    "/from-cart",
    summary="购物车结算",
    status_code=201,
    response_model=ApiResponse[OrderResponseDTO],
)
async def create_order_from_cart(
    data: CheckoutDTO,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    order = await service.create_order_from_cart(current_user.id, data)
    return success_response(data=order, message="Order created")


@router.post("", summary="按商品列表下单", status_code=201, response_model=ApiResponse[OrderResponseDTO])
async def create_order(
    data: OrderCreateDTO,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    order = await service.create_order(current_user.id, data)
    return success_response(data=order, message="Order created")


@router.get("/me", summary="我的订单", response_model=ApiResponse[PaginatedData[OrderResponseDTO]])
async def list_my_orders(
    pagination: PaginationParams = Depends(get_pagination),
    status: Optional[OrderStatus] = Query(None),
    payment_status: Optional[OrderPaymentStatus] = Query(None),
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    items, total = await service.list_user_orders(
        current_user.id,
        skip=pagination.skip,
        limit=pagination.size,
        status=status,
        payment_status=payment_status,
    )
    return paginated_response(items=items, total=total, page=pagination.page, size=pagination.size)


@router.get("", summary="订单列表（管理员）", response_model=ApiResponse[PaginatedData[OrderResponseDTO]])
async def list_orders(
    pagination: PaginationParams = Depends(get_pagination),
    status: Optional[OrderStatus] = Query(None),
    payment_status: Optional[OrderPaymentStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100, description="按订单号搜索"),
    _: CurrentUserDTO = Depends(require_admin),
    service: OrderApplicationService = Depends(get_order_service),
):
    items, total = await service.list_orders(
        skip=pagination.skip,
        limit=pagination.size,
        status=status,
        payment_status=payment_status,
        search=search,
    )
    return paginated_response(items=items, total=total, page=pagination.page, size=pagination.size)


@router.get("/stats", summary="订单统计（管理员）", response_model=ApiResponse[OrderStatsDTO])
async def order_stats(
    user_id: Optional[str] = Query(None),
    _: CurrentUserDTO = Depends(require_admin),
    service: OrderApplicationService = Depends(get_order_service),
):
    return success_response(data=await service.order_stats(user_id))


@router.get("/stats/me", summary="我的订单统计", response_model=ApiResponse[OrderStatsDTO])
async def my_order_stats(
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    return success_response(data=await service.order_stats(current_user.id))


@router.get("/number/{order_number}", summary="按订单号查询", response_model=ApiResponse[OrderResponseDTO])
async def get_order_by_number(
    order_number: str,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    order = await service.get_order_by_number(order_number)
    ensure_owner_or_admin(current_user, order.user_id)
    return success_response(data=order)


@router.get("/{order_id}", summary="订单详情", response_model=ApiResponse[OrderResponseDTO])
async def get_order(
    order_id: int,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    order = await service.get_order(order_id)
    ensure_owner_or_admin(current_user, order.user_id)
    return success_response(data=order)


@router.patch("/{order_id}/status", summary="更新订单状态", response_model=ApiResponse[OrderResponseDTO])
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdateDTO,
    _: CurrentUserDTO = Depends(require_admin),
    service: OrderApplicationService = Depends(get_order_service),
):
    order = await service.update_status(order_id, data.status)
    return success_response(data=order, message="Order status updated")


@router.patch(
    "/{order_id}/payment-status",
    summary="更新订单支付状态",
    response_model=ApiResponse[OrderResponseDTO],
)
async def update_order_payment_status(
    order_id: int,
    data: OrderPaymentStatusUpdateDTO,
    _: CurrentUserDTO = Depends(require_admin),
    service: OrderApplicationService = Depends(get_order_service),
):
    order = await service.update_payment_status(order_id, data.payment_status)
    return success_response(data=order, message="Payment status updated")


@router.post("/{order_id}/cancel", summary="取消订单", response_model=ApiResponse[OrderResponseDTO])
async def cancel_order(
    order_id: int,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: OrderApplicationService = Depends(get_order_service),
):
    existing = await service.get_order(order_id)
    ensure_owner_or_admin(current_user, existing.user_id)
    order = await service.cancel_order(order_id)
    return success_response(data=order, message="Order cancelled")
