"""Synchronous publish/subscribe for cache events."""

import logging
from collections.abc import Callable

from cmdcache.models.enums import EventKind
from cmdcache.models.events import CacheEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[CacheEvent], object]


class EventNotifier:
    """Delivers each published event to the handlers subscribed to its kind.

    Handlers run in subscription order inside the publishing call. A handler
    that raises is logged and skipped; remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {kind: [] for kind in EventKind}

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> Callable[[], None]:
        """Register *handler* for *kind*. Returns a callable that unsubscribes it."""
        event_kind = EventKind(kind)
        self._handlers[event_kind].append(handler)
        return lambda: self.unsubscribe(event_kind, handler)

    def unsubscribe(self, kind: EventKind | str, handler: EventHandler) -> bool:
        """Remove one registration of *handler*. Returns True if it was found."""
        handlers = self._handlers[EventKind(kind)]
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        return True

    def handler_count(self, kind: EventKind | str) -> int:
        return len(self._handlers[EventKind(kind)])

    def clear(self) -> None:
        for handlers in self._handlers.values():
            handlers.clear()

    def publish(self, event: CacheEvent) -> None:
        # Copy so handlers may (un)subscribe while being notified
        for handler in list(self._handlers[EventKind(event.kind)]):
            try:
                handler(event)
            except Exception:
                logger.exception("Cache %s handler %r failed", event.kind, handler)
