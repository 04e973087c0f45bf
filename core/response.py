"""
统一响应格式定义

所有接口返回 {code, message, data, error}；金额字段以字符串形式输出，避免精度丢失。
"""
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_serializer

from shared.codes import BusinessCode


T = TypeVar("T")


def isoformat_utc(ts: datetime) -> str:
    """UTC ISO8601，统一使用 Z 结尾；无时区的时间视为 UTC（SQLite 读出的时间不带时区）"""
    ts = ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")


class ErrorDetail(BaseModel):
    type: str
    details: Optional[dict] = None
    field: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return isoformat_utc(timestamp)


class Response(BaseModel, Generic[T]):
    """统一响应模型"""
    code: int
    message: str
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None


class PaginatedData(BaseModel, Generic[T]):
    """分页数据模型（订单、支付、商品列表共用）"""
    items: list[T]
    total: int
    page: int
    size: int
    pages: int

    @classmethod
    def build(cls, items: list, total: int, page: int, size: int) -> "PaginatedData":
        pages = -(-total // size) if size > 0 else 0
        return cls(items=items, total=total, page=page, size=size, pages=pages)


def success_response(
    data: Any = None,
    message: str = "Success",
    code: int = BusinessCode.SUCCESS,
) -> Response:
    return Response(code=code, message=message, data=data)


def error_response(
    code: int,
    message: str,
    error_type: str = "BusinessError",
    details: Optional[dict] = None,
    field: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Response:
    """业务异常、参数校验失败与未处理异常共用的错误体"""
    return Response(
        code=int(code),
        message=message,
        error=ErrorDetail(
            type=error_type,
            details=details,
            field=field,
            request_id=request_id,
        ),
    )


def paginated_response(
    items: list,
    total: int,
    page: int,
    size: int,
    message: str = "Success",
) -> Response[PaginatedData]:
    return Response(
        code=BusinessCode.SUCCESS,
        message=message,
        data=PaginatedData.build(items, total, page, size),
    )
