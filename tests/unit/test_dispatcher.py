"""Tests for the Dispatcher."""

from __future__ import annotations

from typing import Any

from ibwire.dispatcher import Dispatcher
from ibwire.events import (
    AccountSummary,
    AccountSummaryEnd,
    CurrentTime,
    ErrorEvent,
    HistoricalData,
    HistoricalDataEnd,
    NextValidId,
)
from ibwire.models import BarData
from ibwire.registry import PendingRequests


class TestDelivery:
    """Tests for in-order delivery."""

    def test_delivers_positional_args(self, recorder: Any) -> None:
        dispatcher = Dispatcher(recorder)
        assert dispatcher.dispatch(AccountSummary(9001, "DU1", "NetLiquidation", "1", "USD"))
        assert recorder.calls == [
            ("account_summary", (9001, "DU1", "NetLiquidation", "1", "USD")),
        ]

    def test_preserves_order(self, recorder: Any) -> None:
        dispatcher = Dispatcher(recorder)
        bars = [HistoricalData(42, BarData(date=str(i))) for i in range(3)]
        for event in [*bars, HistoricalDataEnd(42, "s", "e")]:
            dispatcher.dispatch(event)
        assert recorder.names() == ["historical_data"] * 3 + ["historical_data_end"]
        assert [args[1].date for args in recorder.of("historical_data")] == ["0", "1", "2"]

    def test_terminal_event_completes_request(self, recorder: Any) -> None:
        registry = PendingRequests()
        registry.open(9001)
        dispatcher = Dispatcher(recorder, registry)
        dispatcher.dispatch(AccountSummaryEnd(9001))
        assert 9001 not in registry

    def test_consumer_error_is_isolated(self, recorder: Any) -> None:
        """A raising callback is logged and counted; later events still flow."""

        def boom(*args: Any) -> None:
            raise RuntimeError("consumer bug")

        recorder.hooks["next_valid_id"] = boom
        dispatcher = Dispatcher(recorder)
        dispatcher.dispatch(NextValidId(1))
        dispatcher.dispatch(CurrentTime(1700000000))
        assert recorder.names() == ["next_valid_id", "current_time"]
        assert dispatcher.stats["errors"] == 1
        assert dispatcher.stats["delivered"] == 2


class TestCancellation:
    """Events for cancelled requests are dropped."""

    def test_drops_after_cancel(self, recorder: Any) -> None:
        registry = PendingRequests()
        dispatcher = Dispatcher(recorder, registry)
        registry.open(42)
        dispatcher.dispatch(HistoricalData(42, BarData()))
        registry.cancel(42)
        assert dispatcher.dispatch(HistoricalData(42, BarData())) is False
        assert dispatcher.dispatch(HistoricalDataEnd(42, "s", "e")) is False
        assert recorder.names() == ["historical_data"]
        assert dispatcher.stats["dropped"] == 2

    def test_errors_still_delivered_after_cancel(self, recorder: Any) -> None:
        registry = PendingRequests()
        dispatcher = Dispatcher(recorder, registry)
        registry.cancel(42)
        assert dispatcher.dispatch(ErrorEvent(42, 366, "No historical data query found"))
        assert recorder.names() == ["error"]

    def test_other_ids_unaffected(self, recorder: Any) -> None:
        registry = PendingRequests()
        dispatcher = Dispatcher(recorder, registry)
        registry.cancel(42)
        dispatcher.dispatch(HistoricalData(43, BarData()))
        assert recorder.names() == ["historical_data"]


class TestClose:
    """Tests for the terminal connection_closed notification."""

    def test_close_once(self, recorder: Any) -> None:
        dispatcher = Dispatcher(recorder)
        assert dispatcher.close() is True
        assert dispatcher.is_closed
        assert dispatcher.close() is False
        assert recorder.names() == ["connection_closed"]

    def test_nothing_after_close(self, recorder: Any) -> None:
        dispatcher = Dispatcher(recorder)
        dispatcher.close()
        assert dispatcher.dispatch(CurrentTime(1)) is False
        assert recorder.names() == ["connection_closed"]

    def test_close_clears_registry(self, recorder: Any) -> None:
        registry = PendingRequests()
        registry.open(1)
        dispatcher = Dispatcher(recorder, registry)
        dispatcher.close()
        assert len(registry) == 0
