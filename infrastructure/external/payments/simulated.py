"""
Simulated Stripe gateway for development.

No network round-trip: every charge succeeds immediately with a synthetic
transaction id. Replace with a webhook-driven adapter for real settlement.
"""
from __future__ import annotations

import json
import secrets
import time
from typing import Any, Callable, Optional

from application.dtos.payments import ChargeRequest, ChargeResult, WebhookEvent
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger


logger = get_logger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_transaction_id(
    prefix: str = "stripe",
    now_ms: Optional[int] = None,
    token: Optional[Callable[[], str]] = None,
) -> str:
    """stripe_<毫秒时间戳>_<9位 base-36 随机串>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = token() if token else "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{prefix}_{now_ms}_{suffix}"


class SimulatedStripeGateway(PaymentGateway):
    gateway = "stripe"

    async def charge(self, req: ChargeRequest) -> ChargeResult:
        transaction_id = generate_transaction_id(self.gateway)
        logger.info(
            "simulated_charge",
            gateway=self.gateway,
            order_id=req.order_id,
            amount=str(req.amount),
            currency=req.currency,
            transaction_id=transaction_id,
        )
        return ChargeResult(
            transaction_id=transaction_id,
            status="succeeded",
            gateway=self.gateway,
            amount=req.amount,
            currency=req.currency,
        )

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent:
        """只解析事件类型，不做签名校验与状态流转"""
        try:
            payload = json.loads(body or b"{}")
        except json.JSONDecodeError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        return WebhookEvent(
            id=payload.get("id"),
            type=str(payload.get("type") or "unknown"),
            gateway=self.gateway,
            data=payload.get("data") or {},
        )
