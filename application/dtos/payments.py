"""
Payment gateway DTOs (Pydantic v2) used at the gateway port boundary.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, condecimal


class ChargeRequest(BaseModel):
    order_id: int
    amount: condecimal(gt=0, decimal_places=2)  # type: ignore[valid-type]
    currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_method: str = "stripe"
    metadata: Optional[dict[str, Any]] = None


class ChargeResult(BaseModel):
    transaction_id: str
    status: Literal["succeeded", "failed"]
    gateway: str
    amount: Decimal
    currency: str
    failure_reason: Optional[str] = None


class WebhookEvent(BaseModel):
    id: Optional[str] = None
    type: str
    gateway: str
    data: dict[str, Any] = Field(default_factory=dict)
