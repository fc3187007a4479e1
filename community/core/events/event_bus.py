"""In-process publish/subscribe used for session changes and post snapshots."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)


EventHandler = Callable[[Event], None]


class EventBus:
    """Synchronous fan-out; handlers run in subscription order on the publisher's thread."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, List[EventHandler]] = defaultdict(list)
        self._guard = threading.Lock()

    def subscribe(self, event_type: str, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler``; the returned callable removes it and is safe to call twice."""
        with self._guard:
            self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            with self._guard:
                registered = self._handlers.get(event_type)
                if registered and handler in registered:
                    registered.remove(handler)

        return unsubscribe

    def publish(self, event: Event) -> None:
        with self._guard:
            targets = tuple(self._handlers.get(event.event_type, ()))
        for target in targets:
            try:
                target(event)
            except Exception:
                # A broken subscriber is logged and skipped.
                logger.exception("Handler %r failed on %s", target, event.event_type)

    def subscriber_count(self, event_type: str) -> int:
        with self._guard:
            return len(self._handlers.get(event_type, ()))
