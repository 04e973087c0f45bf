from .entity import Payment, PaymentStatus, PaymentStats, PAYMENT_STATUS_TRANSITIONS
from .repository import PaymentRepository

__all__ = [
    "Payment",
    "PaymentStatus",
    "PaymentStats",
    "PAYMENT_STATUS_TRANSITIONS",
    "PaymentRepository",
]
