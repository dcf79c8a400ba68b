"""Tests for PendingRequests."""

from __future__ import annotations

import pytest

from ibwire.registry import PendingRequests


class TestPendingRequests:
    """Open / complete / cancel bookkeeping."""

    def test_open_and_complete(self) -> None:
        registry = PendingRequests()
        registry.open(42)
        assert 42 in registry
        assert registry.is_open(42)
        assert registry.complete(42) is True
        assert 42 not in registry
        assert registry.complete(42) is False

    def test_cancel_closes_and_remembers(self) -> None:
        registry = PendingRequests()
        registry.open(7)
        registry.cancel(7)
        assert not registry.is_open(7)
        assert registry.is_cancelled(7)

    def test_reopen_clears_cancellation(self) -> None:
        registry = PendingRequests()
        registry.cancel(7)
        registry.open(7)
        assert registry.is_open(7)
        assert not registry.is_cancelled(7)

    def test_cancelled_ids_are_bounded(self) -> None:
        """Oldest cancelled ids are forgotten first."""
        registry = PendingRequests(max_cancelled_ids=3)
        for req_id in range(5):
            registry.cancel(req_id)
        assert not registry.is_cancelled(0)
        assert not registry.is_cancelled(1)
        assert all(registry.is_cancelled(i) for i in (2, 3, 4))

    def test_clear(self) -> None:
        registry = PendingRequests()
        registry.open(1)
        registry.open(2)
        registry.cancel(3)
        registry.clear()
        assert len(registry) == 0
        assert registry.pending == frozenset()
        assert not registry.is_cancelled(3)

    def test_pending_snapshot(self) -> None:
        registry = PendingRequests()
        registry.open(1)
        registry.open(2)
        snapshot = registry.pending
        registry.complete(1)
        assert snapshot == frozenset({1, 2})
        assert registry.pending == frozenset({2})

    def test_invalid_bound(self) -> None:
        with pytest.raises(ValueError):
            PendingRequests(max_cancelled_ids=0)
