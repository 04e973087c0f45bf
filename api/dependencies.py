"""
API依赖项 - 认证、授权与应用服务装配
"""
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from application.dto import CurrentUserDTO, PaginationParams
from application.services.cart_service import CartApplicationService
from application.services.catalog_service import CatalogApplicationService
from application.services.order_service import OrderApplicationService
from application.services.payment_service import PaymentApplicationService
from core.config import settings
from core.exceptions import ForbiddenException, TokenExpiredException, UnauthorizedException
from core.logging_config import get_logger
from infrastructure.external.payments import get_payment_gateway
from infrastructure.tasks import CeleryEventPublisher
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


logger = get_logger(__name__)

# HTTP Bearer for direct API calls（令牌由外部身份服务签发）
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token authentication",
    auto_error=False,
)


async def get_token(
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> str:
    if bearer_token and bearer_token.credentials:
        return bearer_token.credentials
    raise UnauthorizedException("Authentication credentials were not provided")


def decode_access_token(token: str) -> CurrentUserDTO:
    """校验签名并提取身份：sub 为用户ID，role == ADMIN 或 is_admin 为管理员"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredException() from exc
    except jwt.InvalidTokenError as exc:
        logger.info("token_rejected", reason=type(exc).__name__)
        raise UnauthorizedException("Invalid authentication credentials") from exc

    subject = payload.get("sub")
    if subject is None or str(subject) == "":
        raise UnauthorizedException("Token subject is missing")
    role = str(payload.get("role") or "").upper()
    return CurrentUserDTO(
        id=str(subject),
        email=payload.get("email"),
        is_admin=role == "ADMIN" or bool(payload.get("is_admin")),
    )


async def get_current_user(token: str = Depends(get_token)) -> CurrentUserDTO:
    """获取当前调用方，并把用户ID绑定到本次请求的日志上下文"""
    current_user = decode_access_token(token)
    structlog.contextvars.bind_contextvars(user_id=current_user.id)
    return current_user


async def require_admin(
    current_user: CurrentUserDTO = Depends(get_current_user),
) -> CurrentUserDTO:
    """获取当前管理员"""
    if not current_user.is_admin:
        raise ForbiddenException("Admin privileges required")
    return current_user


def ensure_owner_or_admin(current_user: CurrentUserDTO, owner_id: str) -> None:
    if current_user.is_admin or current_user.id == owner_id:
        return
    raise ForbiddenException()


def get_pagination(
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="每页数量"),
) -> PaginationParams:
    return PaginationParams(page=page, size=size)


async def get_catalog_service() -> CatalogApplicationService:
    return CatalogApplicationService(uow_factory=SQLAlchemyUnitOfWork)


async def get_cart_service() -> CartApplicationService:
    return CartApplicationService(uow_factory=SQLAlchemyUnitOfWork)


async def get_order_service() -> OrderApplicationService:
    return OrderApplicationService(
        uow_factory=SQLAlchemyUnitOfWork,
        event_publisher=CeleryEventPublisher(),
    )


async def get_payment_service() -> PaymentApplicationService:
    return PaymentApplicationService(
        uow_factory=SQLAlchemyUnitOfWork,
        gateway=get_payment_gateway(),
    )
