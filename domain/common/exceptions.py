"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------
class ProductNotFoundException(BusinessException):
    def __init__(self, product_id: Optional[int] = None):
        details = {"product_id": product_id} if product_id is not None else None
        super().__init__(
            code=BusinessCode.PRODUCT_NOT_FOUND,
            message=f"Product with ID {product_id} not found",
            error_type="ProductNotFound",
            details=details,
        )


class CartItemNotFoundException(BusinessException):
    def __init__(self, user_id: str, product_id: int):
        super().__init__(
            code=BusinessCode.CART_ITEM_NOT_FOUND,
            message="Cart item not found",
            error_type="CartItemNotFound",
            details={"user_id": user_id, "product_id": product_id},
        )


class OrderNotFoundException(BusinessException):
    def __init__(self, identifier: Optional[str] = None):
        details = {"order": identifier} if identifier else None
        super().__init__(
            code=BusinessCode.ORDER_NOT_FOUND,
            message="Order not found",
            error_type="OrderNotFound",
            details=details,
        )


class PaymentNotFoundException(BusinessException):
    def __init__(self, identifier: Optional[str] = None):
        details = {"payment": identifier} if identifier else None
        super().__init__(
            code=BusinessCode.PAYMENT_NOT_FOUND,
            message="Payment not found",
            error_type="PaymentNotFound",
            details=details,
        )


# ---------------------------------------------------------------------------
# 业务规则
# ---------------------------------------------------------------------------
class EmptyCartException(BusinessException):
    def __init__(self, user_id: Optional[str] = None):
        super().__init__(
            code=BusinessCode.CART_EMPTY,
            message="Cart is empty",
            error_type="EmptyCart",
            details={"user_id": user_id} if user_id else None,
        )


class ProductUnavailableException(BusinessException):
    def __init__(self, product_id: int, name: str):
        super().__init__(
            code=BusinessCode.PRODUCT_UNAVAILABLE,
            message=f"Product {name} is not available",
            error_type="ProductUnavailable",
            details={"product_id": product_id},
        )


class InvalidStateException(BusinessException):
    """实体当前状态不允许该操作（含非法状态流转）"""

    def __init__(
        self,
        message: str,
        *,
        current: Optional[str] = None,
        target: Optional[str] = None,
        code: int = BusinessCode.ORDER_INVALID_STATE,
    ):
        details = {}
        if current is not None:
            details["current"] = current
        if target is not None:
            details["target"] = target
        super().__init__(
            code=code,
            message=message,
            error_type="InvalidState",
            details=details or None,
            field="status",
        )


class InvalidAmountException(BusinessException):
    def __init__(self, message: str, *, amount: Optional[Decimal] = None, limit: Optional[Decimal] = None):
        details = {}
        if amount is not None:
            details["amount"] = str(amount)
        if limit is not None:
            details["limit"] = str(limit)
        super().__init__(
            code=BusinessCode.PAYMENT_INVALID_AMOUNT,
            message=message,
            error_type="InvalidAmount",
            details=details or None,
            field="amount",
        )


class TransactionFailureException(BusinessException):
    def __init__(self, operation: str, reason: Optional[str] = None):
        details = {"operation": operation}
        if reason:
            details["reason"] = reason
        super().__init__(
            code=BusinessCode.TRANSACTION_FAILED,
            message="Transaction could not be committed",
            error_type="TransactionFailure",
            details=details,
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )
