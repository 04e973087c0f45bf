"""Small dispatching helpers to decouple Celery from callers."""
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from ..config.celery import celery_app
from ..tasks.notifications import send_order_confirmation
from core.logging_config import get_logger
from domain.order.events import OrderPlaced

logger = get_logger(__name__)


class TaskDispatcher:
    """Internal facade used by application layer to schedule tasks."""

    def send_order_confirmation(self, event: OrderPlaced) -> None:
        payload = asdict(event)
        payload.pop("event_id", None)
        payload.pop("occurred_at", None)
        # apply_async 遵循 task_always_eager，send_task 不会
        send_order_confirmation.apply_async(kwargs=payload)

    def enqueue(self, task_name: str, *, args: tuple | None = None, kwargs: Dict[str, Any] | None = None) -> None:
        """Generic escape hatch for scheduling arbitrary tasks by name."""
        task = celery_app.tasks.get(task_name)
        if task is not None:
            task.apply_async(args=args or (), kwargs=kwargs or {})
            return
        celery_app.send_task(task_name, args=args or (), kwargs=kwargs or {})


class CeleryEventPublisher:
    """EventPublisher implementation backed by Celery tasks."""

    def __init__(self, dispatcher: TaskDispatcher | None = None) -> None:
        self._dispatcher = dispatcher or TaskDispatcher()

    def publish(self, event: Any) -> None:
        if isinstance(event, OrderPlaced):
            self._dispatcher.send_order_confirmation(event)
            logger.info("event_published", event_type=type(event).__name__, event_id=event.event_id)
            return
        logger.debug("event_ignored", event_type=type(event).__name__)
