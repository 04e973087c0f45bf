"""
Factory for payment gateway clients.
"""
from __future__ import annotations

from typing import Optional

from core.config import settings
from application.ports.payment_gateway import PaymentGateway


def get_payment_gateway(gateway: Optional[str] = None) -> PaymentGateway:
    name = (gateway or settings.payments.default_gateway).lower()
    if name == "stripe":
        from .simulated import SimulatedStripeGateway
        return SimulatedStripeGateway()
    raise ValueError(f"Unsupported payment gateway: {name}")
