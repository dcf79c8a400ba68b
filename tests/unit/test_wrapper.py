"""Tests for the consumer protocol and LoggingWrapper."""

from __future__ import annotations

import inspect
import logging
from typing import Any

import pytest

from ibwire.events import Event, OrderStatus
from ibwire.wrapper import LoggingWrapper, Wrapper


def all_event_types() -> list[type[Event]]:
    return [cls for cls in Event.__subclasses__() if cls.handler]


class TestCapabilitySet:
    """Every event kind maps to one consumer operation."""

    def test_handlers_are_unique(self) -> None:
        handlers = [cls.handler for cls in all_event_types()]
        assert len(handlers) == len(set(handlers))

    @pytest.mark.parametrize("event_type", all_event_types(), ids=lambda cls: cls.__name__)
    def test_protocol_declares_handler(self, event_type: type[Event]) -> None:
        assert callable(getattr(Wrapper, event_type.handler, None))

    @pytest.mark.parametrize("event_type", all_event_types(), ids=lambda cls: cls.__name__)
    def test_logging_wrapper_implements_handler(self, event_type: type[Event]) -> None:
        assert callable(getattr(LoggingWrapper, event_type.handler, None))

    @pytest.mark.parametrize("event_type", all_event_types(), ids=lambda cls: cls.__name__)
    def test_arity_matches_event_fields(self, event_type: type[Event]) -> None:
        for consumer in (Wrapper, LoggingWrapper):
            params = inspect.signature(getattr(consumer, event_type.handler)).parameters
            assert list(params)[1:] == list(event_type.__struct_fields__)

    def test_logging_wrapper_satisfies_protocol(self) -> None:
        assert isinstance(LoggingWrapper(), Wrapper)


class TestLoggingWrapper:
    """Tests for the default logging consumer."""

    def test_informational_codes_are_not_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        wrapper = LoggingWrapper()
        with caplog.at_level(logging.INFO, logger="ibwire.wrapper"):
            wrapper.error(-1, 2104, "Market data farm connection is OK")
        assert [r.levelno for r in caplog.records] == [logging.INFO]

    def test_errors_logged_at_error(self, caplog: pytest.LogCaptureFixture) -> None:
        wrapper = LoggingWrapper()
        with caplog.at_level(logging.INFO, logger="ibwire.wrapper"):
            wrapper.error(42, 200, "No security definition has been found")
        assert caplog.records[-1].levelno == logging.ERROR
        assert "42" in caplog.records[-1].getMessage()

    def test_account_summary_requests_time(self) -> None:
        calls: list[str] = []

        class Client:
            def req_current_time(self) -> None:
                calls.append("req_current_time")

        wrapper = LoggingWrapper(Client())  # type: ignore[arg-type]
        wrapper.account_summary(9001, "DU1", "NetLiquidation", "100", "USD")
        assert calls == ["req_current_time"]

    def test_account_summary_without_client(self, caplog: pytest.LogCaptureFixture) -> None:
        wrapper = LoggingWrapper()
        with caplog.at_level(logging.INFO, logger="ibwire.wrapper"):
            wrapper.account_summary(9001, "DU1", "NetLiquidation", "100", "USD")
        assert "NetLiquidation" in caplog.records[-1].getMessage()


def test_event_delivery_matches_signature(recorder: Any) -> None:
    """Events deliver their fields positionally, in declaration order."""
    event = OrderStatus(7, "Filled", 100.0, 0.0, 185.2, 12345, 0, 185.2, 1, "", None)
    event.deliver(recorder)
    assert recorder.calls == [
        ("order_status", (7, "Filled", 100.0, 0.0, 185.2, 12345, 0, 185.2, 1, "", None)),
    ]
