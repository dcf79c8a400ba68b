"""
Integration tests: Client against an in-process fake gateway.

Covers the handshake, the receive loop, per-request ordering, cancellation,
reentrant requests from callbacks and connection teardown.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

from ibwire.client import Client, ConnState
from ibwire.config import IBConfig
from ibwire.errors import ConnRefusedError, NotConnectedError, VersionMismatchError
from ibwire.models import Contract
from ibwire.protocol.constants import MAX_CLIENT_VERSION, MIN_CLIENT_VERSION, OUT
from ibwire.protocol.framing import encode_message


pytestmark = pytest.mark.integration

AAPL = Contract(symbol="AAPL", sec_type="STK", exchange="SMART", currency="USD")


def bar(date: str, close: str) -> tuple[str, ...]:
    return (date, "10", "11", "9", close, "1000", "10.2", "12")


def make_client(recorder: Any) -> Client:
    return Client(recorder, IBConfig(client_id=7, timeout=2.0))


class TestHandshake:
    """Connection setup."""

    @pytest.mark.asyncio
    async def test_connect(self, recorder: Any, gateway_factory: Any) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)

            assert client.is_connected
            assert client.server_version == MAX_CLIENT_VERSION
            assert client.connection_time == "20240101 12:00:00 EST"
            assert gw.version_text == f"v{MIN_CLIENT_VERSION}..{MAX_CLIENT_VERSION}"
            assert await gw.expect(str(int(OUT.START_API))) == ("71", "2", "7", "")
            assert recorder.names() == ["connect_ack"]

            client.disconnect()
            await client.wait_closed()

    @pytest.mark.asyncio
    async def test_version_mismatch(self, recorder: Any, gateway_factory: Any) -> None:
        async with gateway_factory(server_version=99) as gw:
            client = make_client(recorder)
            with pytest.raises(VersionMismatchError) as exc_info:
                await client.connect("127.0.0.1", gw.port)
            assert exc_info.value.server_version == "99"
            assert client.state is ConnState.DISCONNECTED
            assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_refused(self, recorder: Any, gateway_factory: Any) -> None:
        async with gateway_factory() as gw:
            port = gw.port
        client = make_client(recorder)
        with pytest.raises(ConnRefusedError):
            await client.connect("127.0.0.1", port)
        assert client.state is ConnState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_next_valid_id_makes_client_ready(
        self, recorder: Any, gateway_factory: Any
    ) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)
            await gw.send("15", "1", "DU111,DU222")
            await gw.send("9", "1", "100")

            await client.wait_until_ready(timeout=2.0)
            assert client.next_order_id() == 100
            assert client.next_order_id() == 101
            assert client.managed_accounts == ["DU111", "DU222"]
            assert recorder.of("next_valid_id") == [(100,)]

            client.disconnect()
            await client.wait_closed()


class TestStreams:
    """Request/response flows over the receive loop."""

    @pytest.mark.asyncio
    async def test_historical_bars_then_cancel(
        self, recorder: Any, gateway_factory: Any, wait_for: Any
    ) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)

            client.req_historical_data(42, AAPL, "", "3 D", "1 day", "TRADES", True)
            request = await gw.expect(str(int(OUT.REQ_HISTORICAL_DATA)))
            assert request[1] == "42"
            assert 42 in client.pending_requests

            await gw.send(
                "17", "42", "20240101", "20240104", "3",
                *bar("20240102", "10.5"), *bar("20240103", "11.5"), *bar("20240104", "12.5"),
            )
            await wait_for(lambda: "historical_data_end" in recorder.names())

            bars = [args[1] for args in recorder.of("historical_data")]
            assert [b.date for b in bars] == ["20240102", "20240103", "20240104"]
            assert recorder.names()[-1] == "historical_data_end"
            assert 42 not in client.pending_requests

            # keep-up-to-date stream: late updates after cancel are dropped
            client.cancel_historical_data(42)
            await gw.expect(str(int(OUT.CANCEL_HISTORICAL_DATA)))
            await gw.send("90", "42", "7", "20240105", "10", "10.8", "11", "9.5", "10.4", "300")
            await gw.send("49", "1", "1700000000")
            await wait_for(lambda: "current_time" in recorder.names())
            assert "historical_data_update" not in recorder.names()

            client.disconnect()
            await client.wait_closed()

    @pytest.mark.asyncio
    async def test_unknown_tag_is_skipped(
        self, recorder: Any, gateway_factory: Any, wait_for: Any
    ) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)

            await gw.send("9999", "whatever")
            await gw.send("9", "1")  # truncated
            await gw.send("49", "1", "1700000000")
            await wait_for(lambda: "current_time" in recorder.names())

            assert recorder.names() == ["connect_ack", "current_time"]
            assert client.is_connected

            client.disconnect()
            await client.wait_closed()

    @pytest.mark.asyncio
    async def test_request_from_callback(
        self, recorder: Any, gateway_factory: Any, wait_for: Any
    ) -> None:
        """A consumer may issue requests from inside a callback."""
        async with gateway_factory() as gw:
            client = make_client(recorder)
            recorder.hooks["account_summary"] = lambda *args: client.req_current_time()
            await client.connect("127.0.0.1", gw.port)

            client.req_account_summary(9001, "All", "NetLiquidation")
            await gw.expect(str(int(OUT.REQ_ACCOUNT_SUMMARY)))
            await gw.send("63", "1", "9001", "DU111", "NetLiquidation", "100000.00", "USD")

            assert await gw.expect(str(int(OUT.REQ_CURRENT_TIME))) == ("49", "1")
            await gw.send("49", "1", "1700000000")
            await wait_for(lambda: "current_time" in recorder.names())
            assert recorder.of("account_summary") == [
                (9001, "DU111", "NetLiquidation", "100000.00", "USD"),
            ]

            client.disconnect()
            await client.wait_closed()

    @pytest.mark.asyncio
    async def test_sends_from_threads_keep_issue_order(
        self, recorder: Any, gateway_factory: Any
    ) -> None:
        """A request issued from a helper thread reaches the wire before a later one."""
        async with gateway_factory() as gw:
            client = make_client(recorder)

            def on_time(*args: Any) -> None:
                helper = threading.Thread(target=client.req_ids)
                helper.start()
                helper.join()
                client.req_managed_accounts()

            recorder.hooks["current_time"] = on_time
            await client.connect("127.0.0.1", gw.port)
            await gw.expect(str(int(OUT.START_API)))

            await gw.send("49", "1", "1700000000")
            first = await asyncio.wait_for(gw.received.get(), timeout=2.0)
            second = await asyncio.wait_for(gw.received.get(), timeout=2.0)
            assert [first[0], second[0]] == [str(int(OUT.REQ_IDS)), str(int(OUT.REQ_MANAGED_ACCTS))]

            client.disconnect()
            await client.wait_closed()

    @pytest.mark.asyncio
    async def test_consumer_exception_does_not_stop_loop(
        self, recorder: Any, gateway_factory: Any, wait_for: Any
    ) -> None:
        def boom(*args: Any) -> None:
            raise RuntimeError("consumer bug")

        async with gateway_factory() as gw:
            client = make_client(recorder)
            recorder.hooks["error"] = boom
            await client.connect("127.0.0.1", gw.port)

            await gw.send("4", "2", "-1", "2104", "Market data farm connection is OK")
            await gw.send("49", "1", "1700000000")
            await wait_for(lambda: "current_time" in recorder.names())
            assert client.stats["errors"] == 1

            client.disconnect()
            await client.wait_closed()


class TestTeardown:
    """Exactly one connection_closed, nothing after it."""

    @pytest.mark.asyncio
    async def test_local_disconnect(self, recorder: Any, gateway_factory: Any) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)

            client.disconnect()
            client.disconnect()
            await client.wait_closed()

            assert recorder.names().count("connection_closed") == 1
            assert recorder.names()[-1] == "connection_closed"
            with pytest.raises(NotConnectedError):
                client.req_current_time()

    @pytest.mark.asyncio
    async def test_peer_close(self, recorder: Any, gateway_factory: Any, wait_for: Any) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)
            await gw.connected.wait()

            gw.drop()
            await asyncio.wait_for(client.wait_closed(), timeout=2.0)

            assert client.state is ConnState.DISCONNECTED
            assert recorder.names() == ["connect_ack", "connection_closed"]

    @pytest.mark.asyncio
    async def test_peer_close_mid_frame(self, recorder: Any, gateway_factory: Any) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)
            await gw.connected.wait()

            await gw.send_raw(encode_message(["49", "1", "1700000000"])[:6])
            gw.drop()
            await asyncio.wait_for(client.wait_closed(), timeout=2.0)

            assert recorder.names() == ["connect_ack", "connection_closed"]

    @pytest.mark.asyncio
    async def test_reconnect(self, recorder: Any, gateway_factory: Any, wait_for: Any) -> None:
        async with gateway_factory() as gw:
            client = make_client(recorder)
            await client.connect("127.0.0.1", gw.port)
            client.disconnect()
            await client.wait_closed()

        async with gateway_factory() as gw:
            await client.connect("127.0.0.1", gw.port)
            await gw.send("49", "1", "1700000000")
            await wait_for(lambda: "current_time" in recorder.names())
            client.disconnect()
            await client.wait_closed()

        assert recorder.names() == [
            "connect_ack",
            "connection_closed",
            "connect_ack",
            "current_time",
            "connection_closed",
        ]
