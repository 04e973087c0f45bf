"""
支付领域实体 - 支付流水（扣款与退款）
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Optional

from domain.common.exceptions import (
    DomainValidationException,
    InvalidAmountException,
    InvalidStateException,
)
from domain.common.money import has_sub_cent, to_decimal, to_money
from shared.codes import BusinessCode


class PaymentStatus(str, Enum):
    """支付状态枚举"""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


PAYMENT_STATUS_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}

REFUND_PREFIX = "REFUND-"


def exact_amount(value, label: str = "Payment amount") -> Decimal:
    """按原值校验金额：不舍入，超过两位小数直接拒绝"""
    try:
        amount = to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise InvalidAmountException(f"{label} must be a decimal value") from exc
    if has_sub_cent(amount):
        raise InvalidAmountException(f"{label} must have at most 2 decimal places", amount=amount)
    return amount


@dataclass
class Payment:
    """
    支付流水 - 一个订单可有多条

    业务规则：
    1. 扣款金额必须大于0，退款流水金额为负数
    2. 只有 COMPLETED 的扣款才能退款
    3. 退款金额不能超过原扣款金额
    """

    id: Optional[int]
    order_id: int
    amount: Decimal
    currency: str
    payment_method: str
    gateway: str
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    metadata: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.amount = to_money(self.amount)
        self.status = PaymentStatus(self.status)
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise DomainValidationException(f"无效的货币代码: {self.currency}", field="currency")
        self.currency = self.currency.upper()
        if self.metadata is None:
            self.metadata = {}

    @classmethod
    def charge(
        cls,
        *,
        order_id: int,
        amount: Decimal,
        currency: str,
        payment_method: str,
        gateway: str,
        metadata: Optional[dict] = None,
    ) -> "Payment":
        """新建待支付扣款流水（PENDING）"""
        amount = exact_amount(amount)
        if amount <= 0:
            raise InvalidAmountException("Payment amount must be positive", amount=amount)
        now = datetime.now(timezone.utc)
        return cls(
            id=None,
            order_id=order_id,
            amount=amount,
            currency=currency,
            payment_method=payment_method,
            gateway=gateway,
            status=PaymentStatus.PENDING,
            metadata=dict(metadata or {}),
            created_at=now,
            updated_at=now,
        )

    @property
    def is_refund(self) -> bool:
        return self.amount < 0

    def change_status(
        self,
        status: PaymentStatus,
        transaction_id: Optional[str] = None,
        *,
        enforce_transitions: bool = True,
    ) -> None:
        target = PaymentStatus(status)
        if (
            enforce_transitions
            and target != self.status
            and target not in PAYMENT_STATUS_TRANSITIONS[self.status]
        ):
            raise InvalidStateException(
                f"Cannot change payment status from {self.status.value} to {target.value}",
                current=self.status.value,
                target=target.value,
                code=BusinessCode.PAYMENT_INVALID_STATE,
            )
        self.status = target
        if transaction_id:
            self.transaction_id = transaction_id
        self.updated_at = datetime.now(timezone.utc)

    def ensure_refundable(self, refund_amount: Decimal) -> Decimal:
        if self.status != PaymentStatus.COMPLETED or self.is_refund:
            raise InvalidStateException(
                "Payment must be completed to process refund",
                current=self.status.value,
                target=PaymentStatus.REFUNDED.value,
                code=BusinessCode.PAYMENT_INVALID_STATE,
            )
        refund_amount = exact_amount(refund_amount, "Refund amount")
        if refund_amount <= 0:
            raise InvalidAmountException("Refund amount must be positive", amount=refund_amount)
        if refund_amount > self.amount:
            raise InvalidAmountException(
                "Refund amount cannot exceed payment amount",
                amount=refund_amount,
                limit=self.amount,
            )
        return to_money(refund_amount)

    def build_refund(self, refund_amount: Decimal, reason: Optional[str] = None) -> "Payment":
        """生成退款流水（负金额、已完成），并将原流水置为 REFUNDED"""
        refund_amount = self.ensure_refundable(refund_amount)
        now = datetime.now(timezone.utc)
        refund = Payment(
            id=None,
            order_id=self.order_id,
            amount=-refund_amount,
            currency=self.currency,
            payment_method=self.payment_method,
            gateway=self.gateway,
            status=PaymentStatus.COMPLETED,
            transaction_id=f"{REFUND_PREFIX}{self.transaction_id or self.id}",
            metadata={
                "original_payment_id": self.id,
                "reason": reason,
                "refund_amount": str(refund_amount),
            },
            created_at=now,
            updated_at=now,
        )
        self.status = PaymentStatus.REFUNDED
        self.updated_at = now
        return refund

    def is_full_refund(self, refund_amount: Decimal) -> bool:
        return to_decimal(refund_amount) == self.amount


@dataclass
class PaymentStats:
    total_payments: int
    completed_payments: int
    failed_payments: int
    total_amount: Decimal
