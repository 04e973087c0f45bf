"""
金额计算辅助函数 - 统一使用 Decimal，禁止浮点数参与金额运算
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

CENT = Decimal("0.01")

MoneyLike = Union[Decimal, int, str]


def to_decimal(value: MoneyLike) -> Decimal:
    """转换为 Decimal，不做舍入。

    float 会被拒绝：二进制浮点数无法精确表示金额。
    """
    if isinstance(value, float):
        raise TypeError("money values must not be float")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"invalid money value: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"invalid money value: {value!r}")
    return amount


def to_money(value: MoneyLike) -> Decimal:
    """转换为两位小数的 Decimal（四舍五入）"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def has_sub_cent(value: MoneyLike) -> bool:
    """是否含有分以下的精度（如 10.005）"""
    amount = to_decimal(value)
    return amount != amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price: MoneyLike, quantity: int) -> Decimal:
    """单行小计 = 单价 × 数量"""
    return to_money(to_money(price) * quantity)


def sum_money(values: Iterable[MoneyLike]) -> Decimal:
    total = Decimal("0")
    for value in values:
        total += to_money(value)
    return to_money(total)


def to_minor(amount: MoneyLike, exponent: int = 2) -> int:
    """转换为最小货币单位（如分）"""
    return int((to_money(amount) * (Decimal(10) ** exponent)).to_integral_value())
