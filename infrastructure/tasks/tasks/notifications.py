"""Order notification Celery tasks"""
from __future__ import annotations

from typing import Optional

from celery import shared_task

from ..utils.base_task import BaseTask
from core.logging_config import get_logger

logger = get_logger(__name__)


@shared_task(
    bind=True,
    base=BaseTask,
    name="infrastructure.tasks.tasks.notifications.send_order_confirmation",
    autoretry_for=(ConnectionError, TimeoutError),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    retry_kwargs={"max_retries": 5},
)
def send_order_confirmation(
    self,
    order_id: int,
    order_number: str,
    user_id: str,
    total_amount: str,
    item_count: int,
    email: Optional[str] = None,
) -> dict:
    """Notify the customer that an order was placed.

    Delivery itself (SMTP/ESP, templates) lives outside this service; the
    task records the notification so an email worker can pick it up.
    """
    logger.info(
        "order_confirmation_sent",
        order_id=order_id,
        order_number=order_number,
        user_id=user_id,
        total_amount=total_amount,
        item_count=item_count,
        email=email,
    )
    return {"order_id": order_id, "notified": email is not None}
