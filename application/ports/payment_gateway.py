"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from application.dtos.payments import ChargeRequest, ChargeResult, WebhookEvent


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for third-party payment providers."""

    gateway: str

    async def charge(self, req: ChargeRequest) -> ChargeResult: ...

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent: ...
