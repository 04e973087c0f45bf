"""
Shared business codes used across layers (Domain/Core/API).

This module provides a single source of truth to avoid drift between
multiple enum definitions scattered across the codebase.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 成功
    SUCCESS = 0

    # 参数错误 (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_TYPE_ERROR = 10002
    PARAM_VALIDATION_ERROR = 10003

    # 业务错误 (2xxxx)
    BUSINESS_ERROR = 20000
    NOT_FOUND = 20006  # 资源未找到（通用）

    # 商品/购物车 (201xx)
    PRODUCT_NOT_FOUND = 20101
    PRODUCT_UNAVAILABLE = 20102
    CART_ITEM_NOT_FOUND = 20103
    CART_EMPTY = 20104

    # 订单 (202xx)
    ORDER_NOT_FOUND = 20201
    ORDER_INVALID_STATE = 20202

    # 支付 (203xx)
    PAYMENT_NOT_FOUND = 20301
    PAYMENT_INVALID_STATE = 20302
    PAYMENT_INVALID_AMOUNT = 20303

    # 权限错误 (3xxxx)
    PERMISSION_ERROR = 30000
    UNAUTHORIZED = 30001
    FORBIDDEN = 30002
    TOKEN_INVALID = 30003
    TOKEN_EXPIRED = 30004

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    DATABASE_ERROR = 40001
    TRANSACTION_FAILED = 40002
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
