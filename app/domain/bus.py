"""Synchronous in-process bus for booking domain events."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

from app.utils.logger import get_logger

logger = get_logger(__name__)


class EventBus:
    """Publish/subscribe bus for booking domain events.

    Handlers run synchronously in registration order. A failing handler is
    logged and its exception propagates to the publisher; later handlers for
    the same event do not run.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: Any) -> None:
        for handler in self._subscribers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for %s", handler, type(event).__name__)
                raise
