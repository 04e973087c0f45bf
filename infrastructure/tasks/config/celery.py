"""Celery application configuration"""
from __future__ import annotations

from celery import Celery
from kombu import Queue

from core.config import settings
from core.logging_config import get_logger


# Task modules are discovered via this tuple so new packages only need to be
# listed here rather than altering the runtime imports scattered elsewhere.
CELERY_IMPORTS = (
    "infrastructure.tasks.tasks",
)


celery_app = Celery("commerce_core")

celery_app.conf.update(
    broker_url=settings.redis.url or "memory://",
    result_backend=settings.redis.url,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Acknowledge after the work is done so retries survive worker loss.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    result_expires=3600,
    worker_prefetch_multiplier=1,
    task_default_queue="default",
    task_default_retry_delay=5,
    task_queues=(
        Queue("default"),
        Queue("notifications"),
    ),
    task_routes={
        "infrastructure.tasks.tasks.notifications.*": {"queue": "notifications"},
    },
)

celery_app.conf.imports = CELERY_IMPORTS

if settings.is_eager_tasks:
    celery_app.conf.task_always_eager = True
    # eager 模式下任务异常不向调用方抛出，保持旁路语义
    celery_app.conf.task_eager_propagates = False


logger = get_logger(__name__)


@celery_app.on_after_configure.connect
def _log_configuration(sender, **kwargs):
    logger.info(
        "celery_configured",
        broker=sender.conf.broker_url,
        eager=bool(sender.conf.task_always_eager),
    )
