"""
支付API路由 - 支付流水、退款与 Stripe 开发桩
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies import (
    ensure_owner_or_admin,
    get_current_user,
    get_pagination,
    get_payment_service,
    require_admin,
)
from application.dto import (
    CurrentUserDTO,
    PaginationParams,
    PaymentCreateDTO,
    PaymentResponseDTO,
    PaymentStatsDTO,
    PaymentStatusUpdateDTO,
    RefundDTO,
    RefundResultDTO,
    StripePaymentDTO,
)
from application.services.payment_service import PaymentApplicationService
from core.response import PaginatedData, Response as ApiResponse, paginated_response, success_response
from domain.payment.entity import PaymentStatus

router = APIRouter(
    prefix="/payments",
    tags=["支付"],
)


@router.post("", summary="创建支付", status_code=201, response_model=ApiResponse[PaymentResponseDTO])
async def create_payment(
    data: PaymentCreateDTO,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    ensure_owner_or_admin(current_user, await service.order_owner(data.order_id))
    payment = await service.create_payment(data)
    return success_response(data=payment, message="Payment created")


@router.post(
    "/stripe/process",
    summary="Stripe 支付（开发桩）",
    response_model=ApiResponse[PaymentResponseDTO],
)
async def process_stripe_payment(
    data: StripePaymentDTO,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    ensure_owner_or_admin(current_user, await service.order_owner(data.order_id))
    payment = await service.process_stripe_payment(data)
    return success_response(data=payment, message="Payment processed")


@router.post("/stripe/webhook", summary="Stripe 回调")
async def stripe_webhook(
    request: Request,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    body = await request.body()
    service.acknowledge_webhook(dict(request.headers), body)
    return {"received": True}


@router.get("", summary="支付列表（管理员）", response_model=ApiResponse[PaginatedData[PaymentResponseDTO]])
async def list_payments(
    pagination: PaginationParams = Depends(get_pagination),
    status: Optional[PaymentStatus] = Query(None),
    payment_method: Optional[str] = Query(None, max_length=50),
    gateway: Optional[str] = Query(None, max_length=50),
    _: CurrentUserDTO = Depends(require_admin),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    items, total = await service.list_payments(
        skip=pagination.skip,
        limit=pagination.size,
        status=status,
        payment_method=payment_method,
        gateway=gateway,
    )
    return paginated_response(items=items, total=total, page=pagination.page, size=pagination.size)


@router.get("/stats", summary="支付统计（管理员）", response_model=ApiResponse[PaymentStatsDTO])
async def payment_stats(
    _: CurrentUserDTO = Depends(require_admin),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return success_response(data=await service.payment_stats())


@router.get(
    "/order/{order_id}",
    summary="订单的支付流水",
    response_model=ApiResponse[list[PaymentResponseDTO]],
)
async def list_order_payments(
    order_id: int,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    ensure_owner_or_admin(current_user, await service.order_owner(order_id))
    return success_response(data=await service.list_order_payments(order_id))


@router.get(
    "/transaction/{transaction_id}",
    summary="按交易号查询",
    response_model=ApiResponse[PaymentResponseDTO],
)
async def get_payment_by_transaction_id(
    transaction_id: str,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    payment = await service.get_payment_by_transaction_id(transaction_id)
    ensure_owner_or_admin(current_user, await service.order_owner(payment.order_id))
    return success_response(data=payment)


@router.get("/{payment_id}", summary="支付详情", response_model=ApiResponse[PaymentResponseDTO])
async def get_payment(
    payment_id: int,
    current_user: CurrentUserDTO = Depends(get_current_user),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    payment = await service.get_payment(payment_id)
    ensure_owner_or_admin(current_user, await service.order_owner(payment.order_id))
    return success_response(data=payment)


@router.patch("/{payment_id}/status", summary="更新支付状态", response_model=ApiResponse[PaymentResponseDTO])
async def update_payment_status(
    payment_id: int,
    data: PaymentStatusUpdateDTO,
    _: CurrentUserDTO = Depends(require_admin),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    payment = await service.update_payment_status(payment_id, data.status, data.transaction_id)
    return success_response(data=payment, message="Payment status updated")


@router.post("/{payment_id}/refund", summary="退款", response_model=ApiResponse[RefundResultDTO])
async def process_refund(
    payment_id: int,
    data: RefundDTO,
    _: CurrentUserDTO = Depends(require_admin),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    result = await service.process_refund(payment_id, data.refund_amount, data.reason)
    return success_response(data=result, message="Refund processed")
