"""Utility helpers for Celery tasks."""
from .dispatcher import TaskDispatcher, CeleryEventPublisher
from .base_task import BaseTask

__all__ = ["TaskDispatcher", "CeleryEventPublisher", "BaseTask"]
