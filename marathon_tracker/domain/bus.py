"""Synchronous in-process event bus for marathon domain events."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Publish/subscribe bus for domain events.

    Handlers run on the publishing thread, in registration order, and have
    all finished by the time ``publish`` returns. Routes publish from
    threadpool workers, so the subscriber table is guarded and each publish
    works on a copy of the handler list.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_type: type, handler: Callable) -> None:
        with self._lock:
            self._subscribers[event_type].append(handler)

    def subscribers(self, event_type: type) -> list[Callable]:
        with self._lock:
            return list(self._subscribers.get(event_type, ()))

    def publish(self, event: Any) -> None:
        handlers = self.subscribers(type(event))
        if not handlers:
            logger.debug("No subscribers for %s", type(event).__name__)
            return
        for handler in handlers:
            handler(event)
