"""
Event dispatcher.

Architecture:
- Inline delivery on the receive loop, in interpreter order (per-id FIFO)
- Drops events for cancelled request ids; errors are always delivered
- Terminal events close their request id in the registry
- Consumer exceptions are isolated and counted, never fatal
- Exactly one connection_closed notification, nothing after it

Holds no lock shared with the send path, so a consumer may issue requests
from inside a callback.
"""

from __future__ import annotations

import logging
from typing import Any

from ibwire.events import ConnectionClosed, ErrorEvent, Event
from ibwire.registry import PendingRequests


logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Delivers typed events to one consumer.

    Usage:
        dispatcher = Dispatcher(wrapper, PendingRequests())
        for event in interpreter.interpret(raw):
            dispatcher.dispatch(event)
        dispatcher.close()
    """

    def __init__(self, consumer: Any, registry: PendingRequests | None = None) -> None:
        self.consumer = consumer
        self.registry = registry if registry is not None else PendingRequests()
        self._closed = False

        # Metrics
        self._events_delivered = 0
        self._events_dropped = 0
        self._handler_errors = 0

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, event: Event) -> bool:
        """
        Deliver one event.

        Returns:
            True if the consumer operation was invoked
        """
        if self._closed:
            self._events_dropped += 1
            return False

        req_id = event.request_id
        if (
            req_id is not None
            and not isinstance(event, ErrorEvent)
            and self.registry.is_cancelled(req_id)
        ):
            self._events_dropped += 1
            logger.debug("Dropped %s for cancelled request %d", event.handler, req_id)
            return False

        if req_id is not None and event.is_terminal():
            self.registry.complete(req_id)

        self._safe_deliver(event)
        return True

    def _safe_deliver(self, event: Event) -> None:
        """Invoke the consumer with error isolation."""
        self._events_delivered += 1
        try:
            event.deliver(self.consumer)
        except Exception:
            self._handler_errors += 1
            logger.exception("Consumer error in %s", event.handler)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> bool:
        """
        Deliver the terminal connection_closed notification.

        Returns:
            True on the first call, False afterwards
        """
        if self._closed:
            return False
        self._closed = True
        self.registry.clear()
        self._safe_deliver(ConnectionClosed())
        logger.info(
            "Dispatcher closed: delivered=%d dropped=%d errors=%d",
            self._events_delivered,
            self._events_dropped,
            self._handler_errors,
        )
        return True

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def stats(self) -> dict[str, int]:
        """Dispatcher statistics."""
        return {
            "delivered": self._events_delivered,
            "dropped": self._events_dropped,
            "errors": self._handler_errors,
            "pending": len(self.registry),
        }
