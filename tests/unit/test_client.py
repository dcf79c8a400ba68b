"""Tests for the Client request API (no network)."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from ibwire.client import Client, ConnState, InvalidStateTransition
from ibwire.errors import (
    ConnClosedError,
    ConnRefusedError,
    NotConnectedError,
    OrderIdUnavailableError,
    SendFailedError,
)
from ibwire.events import NextValidId
from ibwire.models import Contract, Order
from ibwire.protocol.constants import MAX_CLIENT_VERSION, OUT


class StubConnection:
    """Captures outbound messages instead of writing them."""

    def __init__(self, server_version: int = MAX_CLIENT_VERSION, fail: bool = False) -> None:
        self.server_version = server_version
        self.connection_time = "20240101 00:00:00 UTC"
        self.sent: list[list[Any]] = []
        self.fail = fail

    def send(self, fields: Any) -> None:
        if self.fail:
            raise ConnClosedError("Connection is closed")
        self.sent.append(list(fields))

    def close(self) -> None:
        pass


def connected_client(recorder: Any, conn: StubConnection | None = None) -> tuple[Client, StubConnection]:
    client = Client(recorder)
    stub = conn or StubConnection()
    client._conn = stub  # type: ignore[assignment]
    client._state = ConnState.CONNECTED
    return client, stub


AAPL = Contract(symbol="AAPL", sec_type="STK", exchange="SMART", currency="USD")


class TestNotConnected:
    """Requests before connect fail fast."""

    def test_initial_state(self, recorder: Any) -> None:
        client = Client(recorder)
        assert client.state is ConnState.DISCONNECTED
        assert client.is_connected is False
        assert client.server_version is None

    def test_request_raises(self, recorder: Any) -> None:
        client = Client(recorder)
        with pytest.raises(NotConnectedError):
            client.req_current_time()
        with pytest.raises(NotConnectedError):
            client.req_mkt_data(1, AAPL)

    def test_disconnect_is_noop(self, recorder: Any) -> None:
        client = Client(recorder)
        client.disconnect()
        assert recorder.calls == []

    def test_no_order_id_yet(self, recorder: Any) -> None:
        client = Client(recorder)
        with pytest.raises(OrderIdUnavailableError):
            client.next_order_id()


class TestStateMachine:
    """Tests for ConnState transitions."""

    def test_invalid_transition(self, recorder: Any) -> None:
        client = Client(recorder)
        with pytest.raises(InvalidStateTransition) as exc_info:
            client._transition(ConnState.CONNECTED)
        assert exc_info.value.current is ConnState.DISCONNECTED
        assert exc_info.value.target is ConnState.CONNECTED


class TestRequests:
    """Outbound field layouts."""

    def test_current_time(self, recorder: Any) -> None:
        client, conn = connected_client(recorder)
        client.req_current_time()
        assert conn.sent == [[OUT.REQ_CURRENT_TIME, 1]]

    def test_account_summary_opens_request(self, recorder: Any) -> None:
        client, conn = connected_client(recorder)
        client.req_account_summary(9001, "All", "NetLiquidation")
        assert conn.sent == [[OUT.REQ_ACCOUNT_SUMMARY, 1, 9001, "All", "NetLiquidation"]]
        assert 9001 in client.pending_requests

    def test_cancel_marks_request_cancelled(self, recorder: Any) -> None:
        client, conn = connected_client(recorder)
        client.req_account_summary(9001, "All", "NetLiquidation")
        client.cancel_account_summary(9001)
        assert conn.sent[-1] == [OUT.CANCEL_ACCOUNT_SUMMARY, 1, 9001]
        assert 9001 not in client.pending_requests
        assert client._registry.is_cancelled(9001)

    def test_mkt_data_layout(self, recorder: Any) -> None:
        client, conn = connected_client(recorder)
        client.req_mkt_data(5, AAPL, "233", snapshot=False)
        fields = conn.sent[0]
        assert fields[:4] == [OUT.REQ_MKT_DATA, 11, 5, 0]
        assert fields[4:6] == ["AAPL", "STK"]
        assert "233" in fields

    def test_historical_data_layout(self, recorder: Any) -> None:
        client, conn = connected_client(recorder)
        client.req_historical_data(42, AAPL, "", "1 D", "1 hour", "TRADES", True)
        fields = conn.sent[0]
        assert fields[0] == OUT.REQ_HISTORICAL_DATA
        assert fields[1] == 42
        assert fields[-2] is False  # keep up to date
        assert fields[-1] == ""
        assert 42 in client.pending_requests

    def test_send_failure_rolls_back(self, recorder: Any) -> None:
        client, _ = connected_client(recorder, StubConnection(fail=True))
        with pytest.raises(SendFailedError):
            client.req_account_summary(9001, "All", "NetLiquidation")
        assert 9001 not in client.pending_requests


class TestOrders:
    """Order id sequence and order placement."""

    def test_order_ids_increase(self, recorder: Any) -> None:
        client, _ = connected_client(recorder)
        client._next_id = 100
        assert [client.next_order_id() for _ in range(3)] == [100, 101, 102]

    def test_place_order_assigns_id(self, recorder: Any) -> None:
        client, conn = connected_client(recorder)
        client._next_id = 100
        order = Order(action="BUY", total_quantity=10, order_type="LMT", lmt_price=185.0)
        order_id = client.place_order(None, AAPL, order)
        assert order_id == 100
        fields = conn.sent[0]
        assert fields[0] == OUT.PLACE_ORDER
        assert 100 in fields[:3]
        assert "BUY" in fields
        assert "LMT" in fields

    def test_place_order_explicit_id(self, recorder: Any) -> None:
        client, _ = connected_client(recorder)
        order = Order(action="SELL", total_quantity=1, order_type="MKT")
        assert client.place_order(555, AAPL, order) == 555

    def test_reseed_never_moves_backwards(self, recorder: Any) -> None:
        """A later next-valid-id below the ids already handed out is ignored."""
        client, _ = connected_client(recorder)
        client._apply_hooks(NextValidId(100))
        issued = [client.next_order_id() for _ in range(3)]
        client.req_ids()
        client._apply_hooks(NextValidId(100))
        assert client.next_order_id() > max(issued)

    def test_reseed_moves_forwards(self, recorder: Any) -> None:
        client, _ = connected_client(recorder)
        client._apply_hooks(NextValidId(100))
        client._apply_hooks(NextValidId(500))
        assert client.next_order_id() == 500


class HeldConnection(StubConnection):
    """Handshake that completes only when released."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__()
        self.release = asyncio.Event()
        self.error: BaseException | None = None
        self.closed = False

    async def connect(self, host: str, port: int, client_id: int, optional_capabilities: str = "") -> None:
        await self.release.wait()
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        self.closed = True


class TestConnectRace:
    """disconnect() or cancellation while connect() is in flight."""

    @pytest.fixture
    def held(self, monkeypatch: pytest.MonkeyPatch) -> list[HeldConnection]:
        created: list[HeldConnection] = []

        def factory(**kwargs: Any) -> HeldConnection:
            conn = HeldConnection(**kwargs)
            created.append(conn)
            return conn

        monkeypatch.setattr("ibwire.client.Connection", factory)
        return created

    @pytest.mark.asyncio
    async def test_disconnect_aborts_handshake(self, recorder: Any, held: list[HeldConnection]) -> None:
        client = Client(recorder)
        task = asyncio.create_task(client.connect("127.0.0.1", 7497))
        await asyncio.sleep(0)
        assert client.state is ConnState.CONNECTING

        client.disconnect()
        assert client.state is ConnState.DISCONNECTED
        held[0].release.set()

        with pytest.raises(ConnClosedError):
            await task
        assert held[0].closed
        assert client.state is ConnState.DISCONNECTED
        assert recorder.calls == []
        with pytest.raises(NotConnectedError):
            client.req_current_time()

    @pytest.mark.asyncio
    async def test_handshake_error_after_disconnect_is_kept(
        self, recorder: Any, held: list[HeldConnection]
    ) -> None:
        """The original failure surfaces, not a state-machine error."""
        client = Client(recorder)
        task = asyncio.create_task(client.connect("127.0.0.1", 7497))
        await asyncio.sleep(0)
        client.disconnect()
        held[0].error = ConnRefusedError("refused")
        held[0].release.set()

        with pytest.raises(ConnRefusedError):
            await task
        assert client.state is ConnState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_cancelled_connect_resets_state(self, recorder: Any, held: list[HeldConnection]) -> None:
        client = Client(recorder)
        task = asyncio.create_task(client.connect("127.0.0.1", 7497))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert client.state is ConnState.DISCONNECTED
        assert recorder.calls == []
