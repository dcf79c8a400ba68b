"""
Pending request registry.

Tracks the request ids of stream-producing requests:
- Opened when the request is sent
- Completed when the stream's terminal event is delivered
- Cancelled ids are remembered (bounded, oldest evicted first) so that events
  already in flight for them can be dropped
- Cleared on disconnect
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict


logger = logging.getLogger(__name__)


class PendingRequests:
    """
    Registry of open and cancelled request ids.

    Accessed from the receive loop and from request-issuing threads, so every
    operation takes a short internal lock.
    """

    def __init__(self, max_cancelled_ids: int = 10_000) -> None:
        if max_cancelled_ids <= 0:
            raise ValueError(f"max_cancelled_ids must be positive, got {max_cancelled_ids}")
        self._max_cancelled = max_cancelled_ids
        self._open: set[int] = set()
        self._cancelled: OrderedDict[int, None] = OrderedDict()
        self._lock = threading.Lock()

    def open(self, req_id: int) -> None:
        """Register a request id; reusing a cancelled id makes it live again."""
        with self._lock:
            self._open.add(req_id)
            self._cancelled.pop(req_id, None)

    def complete(self, req_id: int) -> bool:
        """
        Mark a stream finished.

        Returns:
            True if the id was open
        """
        with self._lock:
            if req_id in self._open:
                self._open.discard(req_id)
                return True
            return False

    def cancel(self, req_id: int) -> None:
        """Close a request id and drop any late events for it."""
        with self._lock:
            self._open.discard(req_id)
            self._cancelled[req_id] = None
            self._cancelled.move_to_end(req_id)
            while len(self._cancelled) > self._max_cancelled:
                evicted, _ = self._cancelled.popitem(last=False)
                logger.debug("Forgetting cancelled request id %d", evicted)

    def is_cancelled(self, req_id: int) -> bool:
        with self._lock:
            return req_id in self._cancelled

    def is_open(self, req_id: int) -> bool:
        with self._lock:
            return req_id in self._open

    def clear(self) -> None:
        """Forget everything (connection lost)."""
        with self._lock:
            if self._open:
                logger.debug("Discarding %d pending request ids", len(self._open))
            self._open.clear()
            self._cancelled.clear()

    @property
    def pending(self) -> frozenset[int]:
        """Snapshot of open request ids."""
        with self._lock:
            return frozenset(self._open)

    def __len__(self) -> int:
        with self._lock:
            return len(self._open)

    def __contains__(self, req_id: object) -> bool:
        with self._lock:
            return req_id in self._open
