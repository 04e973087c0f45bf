"""
Event publisher port - post-commit side channel for domain events.

Implementations must be fire-and-forget: callers log and swallow failures.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class EventPublisher(Protocol):
    def publish(self, event: Any) -> None: ...
