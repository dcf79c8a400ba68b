"""
Client handle: outbound request API and the receive loop.

Features:
- Connection state machine (DISCONNECTED -> CONNECTING -> CONNECTED)
- One send lock, held only for state check + encode + write
- Receive loop task: frames -> interpreter -> dispatcher, inline and in order
- Order id sequence seeded by the gateway's next-valid-id message
- Requests are synchronous, so consumer callbacks can issue them directly

Example:
    client = Client(LoggingWrapper())
    await client.connect("127.0.0.1", 7497, client_id=1)
    await client.wait_until_ready(timeout=10)
    client.req_account_summary(9001, "All", "NetLiquidation")
    await client.wait_closed()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Iterable, Sequence
from enum import IntEnum
from typing import Any

from ibwire.config import IBConfig
from ibwire.connection import Connection
from ibwire.dispatcher import Dispatcher
from ibwire.errors import (
    ConnClosedError,
    DecodeError,
    InterpretError,
    NotConnectedError,
    OrderIdUnavailableError,
    SendFailedError,
)
from ibwire.events import ConnectAck, Event, ManagedAccounts, NextValidId
from ibwire.interpreter import MessageInterpreter
from ibwire.models import (
    Contract,
    ExecutionFilter,
    Order,
    ScannerSubscription,
    TagValue,
)
from ibwire.protocol.constants import OUT, ServerVersion
from ibwire.registry import PendingRequests


logger = logging.getLogger(__name__)


# =============================================================================
# Connection State Machine
# =============================================================================


class ConnState(IntEnum):
    """
    Connection states.

    State machine transitions:
        DISCONNECTED → CONNECTING → CONNECTED
        CONNECTING → DISCONNECTED (handshake failed)
        CONNECTED → DISCONNECTED
    """

    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2


_VALID_TRANSITIONS: dict[ConnState, set[ConnState]] = {
    ConnState.DISCONNECTED: {ConnState.CONNECTING},
    ConnState.CONNECTING: {ConnState.CONNECTED, ConnState.DISCONNECTED},
    ConnState.CONNECTED: {ConnState.DISCONNECTED},
}


class InvalidStateTransition(Exception):
    """Raised when attempting an invalid state transition."""

    def __init__(self, current: ConnState, target: ConnState) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid state transition: {current.name} → {target.name}. "
            f"Valid transitions: {[s.name for s in _VALID_TRANSITIONS.get(current, set())]}"
        )


# =============================================================================
# Field helpers
# =============================================================================


def _tag_values_str(options: Iterable[TagValue] | None) -> str:
    if not options:
        return ""
    return "".join(f"{tv.tag}={tv.value};" for tv in options)


def _contract_fields(c: Contract) -> list[Any]:
    """Contract block shared by most market data requests."""
    return [
        c.con_id,
        c.symbol,
        c.sec_type,
        c.last_trade_date_or_contract_month,
        c.strike,
        c.right,
        c.multiplier,
        c.exchange,
        c.primary_exchange,
        c.currency,
        c.local_symbol,
        c.trading_class,
    ]


class Client:
    """
    Request-issuing handle over one gateway connection.

    Args:
        wrapper: Event consumer; receives one call per inbound event
        config: Connection defaults (host, port, client id, timeout, ...)
    """

    def __init__(self, wrapper: Any, config: IBConfig | None = None) -> None:
        self.wrapper = wrapper
        self.config = config or IBConfig()

        self._state = ConnState.DISCONNECTED
        self._lock = threading.Lock()
        self._conn: Connection | None = None
        self._interpreter: MessageInterpreter | None = None
        self._registry = PendingRequests(self.config.max_cancelled_ids)
        self._dispatcher = Dispatcher(wrapper, self._registry)
        self._reader_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: int | None = None

        self._client_id: int | None = None
        self._next_id: int | None = None
        self._accounts: list[str] = []
        self._ready = asyncio.Event()
        self._closed = asyncio.Event()
        self._closed.set()

    # =========================================================================
    # State
    # =========================================================================

    def _transition(self, target: ConnState) -> None:
        """Caller holds the lock."""
        if target not in _VALID_TRANSITIONS[self._state]:
            raise InvalidStateTransition(self._state, target)
        logger.debug("Client state %s → %s", self._state.name, target.name)
        self._state = target

    @property
    def state(self) -> ConnState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnState.CONNECTED

    @property
    def server_version(self) -> int | None:
        conn = self._conn
        return conn.server_version if conn is not None else None

    @property
    def connection_time(self) -> str | None:
        conn = self._conn
        return conn.connection_time if conn is not None else None

    @property
    def client_id(self) -> int | None:
        return self._client_id

    @property
    def managed_accounts(self) -> list[str]:
        """Accounts reported by the gateway after connect."""
        return list(self._accounts)

    @property
    def pending_requests(self) -> frozenset[int]:
        return self._registry.pending

    @property
    def stats(self) -> dict[str, int]:
        return self._dispatcher.stats

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(
        self,
        host: str | None = None,
        port: int | None = None,
        client_id: int | None = None,
    ) -> None:
        """
        Connect, handshake and start the receive loop.

        Raises:
            ConnRefusedError: Gateway unreachable or handshake aborted
            VersionMismatchError: Gateway version outside the supported range
            ConnClosedError: disconnect() was called before the handshake finished
            InvalidStateTransition: Already connected or connecting
        """
        host = host if host is not None else self.config.host
        port = port if port is not None else self.config.port
        client_id = client_id if client_id is not None else self.config.client_id

        with self._lock:
            self._transition(ConnState.CONNECTING)

        conn = Connection(timeout=self.config.timeout, connect_options=self.config.connect_options)
        try:
            await conn.connect(host, port, client_id, self.config.optional_capabilities)
        except BaseException:
            with self._lock:
                if self._state is ConnState.CONNECTING:
                    self._transition(ConnState.DISCONNECTED)
            raise

        assert conn.server_version is not None
        with self._lock:
            if self._state is not ConnState.CONNECTING:
                conn.close()
                raise ConnClosedError("Disconnected before the handshake completed")

            self._interpreter = MessageInterpreter(conn.server_version)
            self._loop = asyncio.get_running_loop()
            self._loop_thread = threading.get_ident()
            self._registry.clear()
            self._dispatcher = Dispatcher(self.wrapper, self._registry)
            self._client_id = client_id
            self._next_id = None
            self._accounts = []
            self._ready.clear()
            self._closed.clear()

            self._conn = conn
            self._transition(ConnState.CONNECTED)

        self._dispatcher.dispatch(ConnectAck())
        self._reader_task = asyncio.create_task(self._run(conn), name="ibwire-receive-loop")

    def disconnect(self) -> None:
        """
        Close the connection. Idempotent.

        The consumer receives connection_closed exactly once; requests issued
        afterwards raise NotConnectedError. Called during connect(), it aborts
        the handshake and nothing is delivered.
        """
        with self._lock:
            if self._state is ConnState.DISCONNECTED:
                return
            was_connected = self._state is ConnState.CONNECTED
            self._transition(ConnState.DISCONNECTED)
            conn, self._conn = self._conn, None

        if not was_connected:
            logger.info("Connect aborted")
            return

        logger.info("Disconnecting")
        if conn is not None:
            conn.close()

        if self._loop is not None and threading.get_ident() != self._loop_thread:
            self._loop.call_soon_threadsafe(self._finish_close)
        else:
            self._finish_close()

    def _finish_close(self) -> None:
        self._dispatcher.close()
        self._closed.set()

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        """
        Wait for the gateway's first next-valid-id message.

        Raises:
            TimeoutError: Not ready within timeout
        """
        async with asyncio.timeout(timeout):
            await self._ready.wait()

    async def wait_closed(self) -> None:
        """Wait until connection_closed has been delivered."""
        await self._closed.wait()
        task = self._reader_task
        if task is not None and task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def __aenter__(self) -> Client:
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        self.disconnect()
        await self.wait_closed()

    # =========================================================================
    # Receive loop
    # =========================================================================

    async def _run(self, conn: Connection) -> None:
        interpreter = self._interpreter
        assert interpreter is not None
        try:
            while True:
                raw = await conn.receive()
                try:
                    events = interpreter.interpret(raw)
                except InterpretError as e:
                    logger.warning("Skipping message: %s", e)
                    continue
                for event in events:
                    self._apply_hooks(event)
                    self._dispatcher.dispatch(event)
        except ConnClosedError as e:
            logger.info("Receive loop finished: %s", e)
        except DecodeError as e:
            logger.error("Stream corrupted, closing connection: %s", e)
        except Exception:
            logger.exception("Receive loop failed")
        finally:
            if self._conn is conn:
                self.disconnect()

    def _apply_hooks(self, event: Event) -> None:
        """Client bookkeeping that runs before the consumer sees the event."""
        if isinstance(event, NextValidId):
            with self._lock:
                # the sequence only increases
                if self._next_id is None or event.order_id > self._next_id:
                    self._next_id = event.order_id
            self._ready.set()
        elif isinstance(event, ManagedAccounts):
            self._accounts = [a for a in event.accounts_list.split(",") if a]

    # =========================================================================
    # Sending
    # =========================================================================

    def _require_connected(self) -> int:
        """Negotiated server version; raises if not connected."""
        conn = self._conn
        if self._state is not ConnState.CONNECTED or conn is None:
            raise NotConnectedError("Not connected")
        assert conn.server_version is not None
        return conn.server_version

    def _send(
        self,
        fields: Sequence[Any],
        open_id: int | None = None,
        cancel_id: int | None = None,
    ) -> None:
        """
        Send one message under the send lock.

        Args:
            fields: Outbound fields, tag first
            open_id: Request id that starts a stream
            cancel_id: Request id whose late events should be dropped

        Raises:
            NotConnectedError: Client is not connected (request dropped)
            SendFailedError: Transport rejected the write
        """
        with self._lock:
            conn = self._conn
            if self._state is not ConnState.CONNECTED or conn is None:
                raise NotConnectedError("Not connected")
            if cancel_id is not None:
                self._registry.cancel(cancel_id)
            if open_id is not None:
                self._registry.open(open_id)
            try:
                conn.send(fields)
            except (ConnClosedError, DecodeError, OSError) as e:
                if open_id is not None:
                    self._registry.complete(open_id)
                raise SendFailedError(f"Failed to send message {fields[0]}: {e}") from e
        logger.debug("Sent %s", fields[0])

    # =========================================================================
    # Order ids
    # =========================================================================

    def next_order_id(self) -> int:
        """
        Take the next order id from the gateway-seeded sequence.

        Raises:
            OrderIdUnavailableError: No next-valid-id received yet
        """
        with self._lock:
            if self._next_id is None:
                raise OrderIdUnavailableError("No next valid order id received yet")
            order_id = self._next_id
            self._next_id += 1
            return order_id

    def req_ids(self, num_ids: int = 1) -> None:
        self._require_connected()
        self._send([OUT.REQ_IDS, 1, num_ids])

    # =========================================================================
    # Market data
    # =========================================================================

    def req_mkt_data(
        self,
        req_id: int,
        contract: Contract,
        generic_tick_list: str = "",
        snapshot: bool = False,
        regulatory_snapshot: bool = False,
        mkt_data_options: list[TagValue] | None = None,
    ) -> None:
        """Start streaming top-of-book ticks (or take one snapshot)."""
        sv = self._require_connected()
        fields: list[Any] = [OUT.REQ_MKT_DATA, 11, req_id, *_contract_fields(contract)]
        if contract.sec_type == "BAG":
            fields.append(len(contract.combo_legs))
            for leg in contract.combo_legs:
                fields += [leg.con_id, leg.ratio, leg.action, leg.exchange]
        dn = contract.delta_neutral_contract
        if dn is not None:
            fields += [True, dn.con_id, dn.delta, dn.price]
        else:
            fields.append(False)
        fields += [generic_tick_list, snapshot]
        if sv >= ServerVersion.REQ_SMART_COMPONENTS:
            fields.append(regulatory_snapshot)
        fields.append(_tag_values_str(mkt_data_options))
        self._send(fields, open_id=req_id)

    def cancel_mkt_data(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_MKT_DATA, 2, req_id], cancel_id=req_id)

    def req_market_data_type(self, market_data_type: int) -> None:
        """1 live, 2 frozen, 3 delayed, 4 delayed frozen."""
        self._require_connected()
        self._send([OUT.REQ_MARKET_DATA_TYPE, 1, market_data_type])

    def req_tick_by_tick_data(
        self,
        req_id: int,
        contract: Contract,
        tick_type: str,
        number_of_ticks: int = 0,
        ignore_size: bool = False,
    ) -> None:
        """tick_type is one of Last, AllLast, BidAsk, MidPoint."""
        sv = self._require_connected()
        fields: list[Any] = [OUT.REQ_TICK_BY_TICK_DATA, req_id, *_contract_fields(contract), tick_type]
        if sv >= ServerVersion.TICK_BY_TICK_IGNORE_SIZE:
            fields += [number_of_ticks, ignore_size]
        self._send(fields, open_id=req_id)

    def cancel_tick_by_tick_data(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_TICK_BY_TICK_DATA, req_id], cancel_id=req_id)

    def req_mkt_depth(
        self,
        req_id: int,
        contract: Contract,
        num_rows: int,
        is_smart_depth: bool = False,
        mkt_depth_options: list[TagValue] | None = None,
    ) -> None:
        sv = self._require_connected()
        c = contract
        fields: list[Any] = [
            OUT.REQ_MKT_DEPTH, 5, req_id,
            c.con_id, c.symbol, c.sec_type, c.last_trade_date_or_contract_month,
            c.strike, c.right, c.multiplier, c.exchange,
        ]
        if sv >= ServerVersion.MKT_DEPTH_PRIM_EXCHANGE:
            fields.append(c.primary_exchange)
        fields += [c.currency, c.local_symbol, c.trading_class, num_rows]
        if sv >= ServerVersion.SMART_DEPTH:
            fields.append(is_smart_depth)
        fields.append(_tag_values_str(mkt_depth_options))
        self._send(fields, open_id=req_id)

    def cancel_mkt_depth(self, req_id: int, is_smart_depth: bool = False) -> None:
        sv = self._require_connected()
        fields: list[Any] = [OUT.CANCEL_MKT_DEPTH, 1, req_id]
        if sv >= ServerVersion.SMART_DEPTH:
            fields.append(is_smart_depth)
        self._send(fields, cancel_id=req_id)

    def req_mkt_depth_exchanges(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_MKT_DEPTH_EXCHANGES])

    def req_smart_components(self, req_id: int, bbo_exchange: str) -> None:
        self._require_connected()
        self._send([OUT.REQ_SMART_COMPONENTS, req_id, bbo_exchange], open_id=req_id)

    def req_market_rule(self, market_rule_id: int) -> None:
        self._require_connected()
        self._send([OUT.REQ_MARKET_RULE, market_rule_id])

    def req_real_time_bars(
        self,
        req_id: int,
        contract: Contract,
        bar_size: int,
        what_to_show: str,
        use_rth: bool,
        real_time_bars_options: list[TagValue] | None = None,
    ) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_REAL_TIME_BARS, 3, req_id, *_contract_fields(contract),
            bar_size, what_to_show, use_rth, _tag_values_str(real_time_bars_options),
        ]
        self._send(fields, open_id=req_id)

    def cancel_real_time_bars(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_REAL_TIME_BARS, 1, req_id], cancel_id=req_id)

    # =========================================================================
    # Historical data
    # =========================================================================

    def req_historical_data(
        self,
        req_id: int,
        contract: Contract,
        end_date_time: str,
        duration_str: str,
        bar_size_setting: str,
        what_to_show: str,
        use_rth: bool,
        format_date: int = 1,
        keep_up_to_date: bool = False,
        chart_options: list[TagValue] | None = None,
    ) -> None:
        """Request bars; answered by historical_data per bar and historical_data_end."""
        sv = self._require_connected()
        fields: list[Any] = [OUT.REQ_HISTORICAL_DATA]
        if sv < ServerVersion.SYNT_REALTIME_BARS:
            fields.append(6)
        fields += [
            req_id, *_contract_fields(contract), contract.include_expired,
            end_date_time, bar_size_setting, duration_str, use_rth, what_to_show, format_date,
        ]
        if contract.sec_type == "BAG":
            fields.append(len(contract.combo_legs))
            for leg in contract.combo_legs:
                fields += [leg.con_id, leg.ratio, leg.action, leg.exchange]
        if sv >= ServerVersion.SYNT_REALTIME_BARS:
            fields.append(keep_up_to_date)
        fields.append(_tag_values_str(chart_options))
        self._send(fields, open_id=req_id)

    def cancel_historical_data(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_HISTORICAL_DATA, 1, req_id], cancel_id=req_id)

    def req_head_timestamp(
        self,
        req_id: int,
        contract: Contract,
        what_to_show: str,
        use_rth: bool,
        format_date: int = 1,
    ) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_HEAD_TIMESTAMP, req_id, *_contract_fields(contract), contract.include_expired,
            use_rth, what_to_show, format_date,
        ]
        self._send(fields, open_id=req_id)

    def cancel_head_timestamp(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_HEAD_TIMESTAMP, req_id], cancel_id=req_id)

    def req_histogram_data(self, req_id: int, contract: Contract, use_rth: bool, time_period: str) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_HISTOGRAM_DATA, req_id, *_contract_fields(contract), contract.include_expired,
            use_rth, time_period,
        ]
        self._send(fields, open_id=req_id)

    def cancel_histogram_data(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_HISTOGRAM_DATA, req_id], cancel_id=req_id)

    def req_historical_ticks(
        self,
        req_id: int,
        contract: Contract,
        start_date_time: str,
        end_date_time: str,
        number_of_ticks: int,
        what_to_show: str,
        use_rth: bool,
        ignore_size: bool = False,
        misc_options: list[TagValue] | None = None,
    ) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_HISTORICAL_TICKS, req_id, *_contract_fields(contract), contract.include_expired,
            start_date_time, end_date_time, number_of_ticks, what_to_show, use_rth, ignore_size,
            _tag_values_str(misc_options),
        ]
        self._send(fields, open_id=req_id)

    # =========================================================================
    # Orders
    # =========================================================================

    def place_order(self, order_id: int | None, contract: Contract, order: Order) -> int:
        """
        Place or modify an order.

        Args:
            order_id: Explicit id (modify an existing order), or None to take
                the next id from the gateway-seeded sequence

        Returns:
            The order id used

        Raises:
            OrderIdUnavailableError: order_id is None and no id has been seeded
        """
        sv = self._require_connected()
        if order_id is None:
            order_id = self.next_order_id()
        self._send(self._order_fields(sv, order_id, contract, order))
        return order_id

    def _order_fields(self, sv: int, order_id: int, c: Contract, o: Order) -> list[Any]:
        f: list[Any] = [OUT.PLACE_ORDER]
        if sv < ServerVersion.ORDER_CONTAINER:
            f.append(45)
        f += [
            order_id,
            c.con_id, c.symbol, c.sec_type, c.last_trade_date_or_contract_month, c.strike,
            c.right, c.multiplier, c.exchange, c.primary_exchange, c.currency, c.local_symbol,
            c.trading_class, c.sec_id_type, c.sec_id,
            o.action, o.total_quantity, o.order_type, o.lmt_price, o.aux_price,
            o.tif, o.oca_group, o.account, o.open_close, o.origin, o.order_ref, o.transmit,
            o.parent_id, o.block_order, o.sweep_to_fill, o.display_size, o.trigger_method,
            o.outside_rth, o.hidden,
        ]

        if c.sec_type == "BAG":
            f.append(len(c.combo_legs))
            for leg in c.combo_legs:
                f += [
                    leg.con_id, leg.ratio, leg.action, leg.exchange, leg.open_close,
                    leg.short_sale_slot, leg.designated_location, leg.exempt_code,
                ]
            f.append(len(o.order_combo_legs))
            f += o.order_combo_legs
            f.append(len(o.smart_combo_routing_params))
            for tv in o.smart_combo_routing_params:
                f += [tv.tag, tv.value]

        f += [
            "",  # deprecated shares allocation
            o.discretionary_amt, o.good_after_time, o.good_till_date,
            o.fa_group, o.fa_method, o.fa_percentage, o.fa_profile,
        ]
        if sv >= ServerVersion.MODELS_SUPPORT:
            f.append(o.model_code)
        f += [
            o.short_sale_slot, o.designated_location, o.exempt_code, o.oca_type,
            "",  # rule 80A
            o.settling_firm, o.all_or_none, o.min_qty, o.percent_offset,
            False, False, None,  # e-trade only, firm quote only, NBBO price cap
            o.auction_strategy, o.starting_price, o.stock_ref_price, o.delta,
            o.stock_range_lower, o.stock_range_upper, o.override_percentage_constraints,
            o.volatility, o.volatility_type, o.delta_neutral_order_type, o.delta_neutral_aux_price,
        ]
        if o.delta_neutral_order_type:
            f += [
                o.delta_neutral_con_id, o.delta_neutral_settling_firm,
                o.delta_neutral_clearing_account, o.delta_neutral_clearing_intent,
                o.delta_neutral_open_close, o.delta_neutral_short_sale,
                o.delta_neutral_short_sale_slot, o.delta_neutral_designated_location,
            ]
        f += [
            o.continuous_update, o.reference_price_type, o.trail_stop_price, o.trailing_percent,
            o.scale_init_level_size, o.scale_subs_level_size, o.scale_price_increment,
        ]
        if o.scale_price_increment is not None and o.scale_price_increment > 0.0:
            f += [
                o.scale_price_adjust_value, o.scale_price_adjust_interval, o.scale_profit_offset,
                o.scale_auto_reset, o.scale_init_position, o.scale_init_fill_qty,
                o.scale_random_percent,
            ]
        f += [o.scale_table, o.active_start_time, o.active_stop_time, o.hedge_type]
        if o.hedge_type:
            f.append(o.hedge_param)
        f += [o.opt_out_smart_routing, o.clearing_account, o.clearing_intent, o.not_held]

        dn = c.delta_neutral_contract
        if dn is not None:
            f += [True, dn.con_id, dn.delta, dn.price]
        else:
            f.append(False)

        f.append(o.algo_strategy)
        if o.algo_strategy:
            f.append(len(o.algo_params))
            for tv in o.algo_params:
                f += [tv.tag, tv.value]
        f += [
            o.algo_id, o.what_if, _tag_values_str(o.order_misc_options), o.solicited,
            o.randomize_size, o.randomize_price,
        ]

        if sv >= ServerVersion.PEGGED_TO_BENCHMARK:
            if o.order_type == "PEG BENCH":
                f += [
                    o.reference_contract_id, o.is_pegged_change_amount_decrease,
                    o.pegged_change_amount, o.reference_change_amount, o.reference_exchange_id,
                ]
            f.append(0)  # conditions
            f += [
                o.adjusted_order_type, o.trigger_price, o.lmt_price_offset, o.adjusted_stop_price,
                o.adjusted_stop_limit_price, o.adjusted_trailing_amount, o.adjustable_trailing_unit,
            ]
        if sv >= ServerVersion.EXT_OPERATOR:
            f.append(o.ext_operator)
        if sv >= ServerVersion.SOFT_DOLLAR_TIER:
            f += [o.soft_dollar_tier.name, o.soft_dollar_tier.value]
        if sv >= ServerVersion.CASH_QTY:
            f.append(o.cash_qty)
        if sv >= ServerVersion.DECISION_MAKER:
            f += ["", ""]  # MiFID II decision maker, decision algo
        if sv >= ServerVersion.MIFID_EXECUTION:
            f += ["", ""]  # MiFID II execution trader, execution algo
        if sv >= ServerVersion.AUTO_PRICE_FOR_HEDGE:
            f.append(o.dont_use_auto_price_for_hedge)
        if sv >= ServerVersion.ORDER_CONTAINER:
            f.append(o.is_oms_container)
        if sv >= ServerVersion.D_PEG_ORDERS:
            f.append(o.discretionary_up_to_limit_price)
        if sv >= ServerVersion.PRICE_MGMT_ALGO:
            f.append(o.use_price_mgmt_algo)
        return f

    def cancel_order(self, order_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_ORDER, 1, order_id])

    def req_global_cancel(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_GLOBAL_CANCEL, 1])

    def req_open_orders(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_OPEN_ORDERS, 1])

    def req_all_open_orders(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_ALL_OPEN_ORDERS, 1])

    def req_auto_open_orders(self, auto_bind: bool) -> None:
        self._require_connected()
        self._send([OUT.REQ_AUTO_OPEN_ORDERS, 1, auto_bind])

    def req_completed_orders(self, api_only: bool) -> None:
        self._require_connected()
        self._send([OUT.REQ_COMPLETED_ORDERS, api_only])

    def req_executions(self, req_id: int, exec_filter: ExecutionFilter | None = None) -> None:
        self._require_connected()
        ef = exec_filter or ExecutionFilter()
        fields = [
            OUT.REQ_EXECUTIONS, 3, req_id, ef.client_id, ef.acct_code, ef.time, ef.symbol,
            ef.sec_type, ef.exchange, ef.side,
        ]
        self._send(fields, open_id=req_id)

    def exercise_options(
        self,
        req_id: int,
        contract: Contract,
        exercise_action: int,
        exercise_quantity: int,
        account: str,
        override: int,
    ) -> None:
        """exercise_action: 1 exercise, 2 lapse."""
        self._require_connected()
        c = contract
        fields = [
            OUT.EXERCISE_OPTIONS, 2, req_id,
            c.con_id, c.symbol, c.sec_type, c.last_trade_date_or_contract_month, c.strike,
            c.right, c.multiplier, c.exchange, c.currency, c.local_symbol, c.trading_class,
            exercise_action, exercise_quantity, account, override,
        ]
        self._send(fields)

    # =========================================================================
    # Contracts and reference data
    # =========================================================================

    def req_contract_details(self, req_id: int, contract: Contract) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_CONTRACT_DATA, 8, req_id, *_contract_fields(contract),
            contract.include_expired, contract.sec_id_type, contract.sec_id,
        ]
        self._send(fields, open_id=req_id)

    def req_matching_symbols(self, req_id: int, pattern: str) -> None:
        self._require_connected()
        self._send([OUT.REQ_MATCHING_SYMBOLS, req_id, pattern], open_id=req_id)

    def req_sec_def_opt_params(
        self,
        req_id: int,
        underlying_symbol: str,
        fut_fop_exchange: str,
        underlying_sec_type: str,
        underlying_con_id: int,
    ) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_SEC_DEF_OPT_PARAMS, req_id, underlying_symbol, fut_fop_exchange,
            underlying_sec_type, underlying_con_id,
        ]
        self._send(fields, open_id=req_id)

    def req_fundamental_data(
        self,
        req_id: int,
        contract: Contract,
        report_type: str,
        options: list[TagValue] | None = None,
    ) -> None:
        self._require_connected()
        c = contract
        fields = [
            OUT.REQ_FUNDAMENTAL_DATA, 2, req_id,
            c.con_id, c.symbol, c.sec_type, c.exchange, c.primary_exchange, c.currency,
            c.local_symbol, report_type, len(options or []), _tag_values_str(options),
        ]
        self._send(fields, open_id=req_id)

    def cancel_fundamental_data(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_FUNDAMENTAL_DATA, 1, req_id], cancel_id=req_id)

    def calculate_implied_volatility(
        self,
        req_id: int,
        contract: Contract,
        option_price: float,
        under_price: float,
        options: list[TagValue] | None = None,
    ) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_CALC_IMPLIED_VOLAT, 3, req_id, *_contract_fields(contract),
            option_price, under_price, len(options or []), _tag_values_str(options),
        ]
        self._send(fields, open_id=req_id)

    def cancel_calculate_implied_volatility(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_CALC_IMPLIED_VOLAT, 1, req_id], cancel_id=req_id)

    def calculate_option_price(
        self,
        req_id: int,
        contract: Contract,
        volatility: float,
        under_price: float,
        options: list[TagValue] | None = None,
    ) -> None:
        self._require_connected()
        fields = [
            OUT.REQ_CALC_OPTION_PRICE, 3, req_id, *_contract_fields(contract),
            volatility, under_price, len(options or []), _tag_values_str(options),
        ]
        self._send(fields, open_id=req_id)

    def cancel_calculate_option_price(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_CALC_OPTION_PRICE, 1, req_id], cancel_id=req_id)

    def req_soft_dollar_tiers(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.REQ_SOFT_DOLLAR_TIERS, req_id], open_id=req_id)

    def req_family_codes(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_FAMILY_CODES])

    # =========================================================================
    # Scanner
    # =========================================================================

    def req_scanner_parameters(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_SCANNER_PARAMETERS, 1])

    def req_scanner_subscription(
        self,
        req_id: int,
        subscription: ScannerSubscription,
        options: list[TagValue] | None = None,
        filter_options: list[TagValue] | None = None,
    ) -> None:
        sv = self._require_connected()
        s = subscription
        fields: list[Any] = [OUT.REQ_SCANNER_SUBSCRIPTION]
        if sv < ServerVersion.SCANNER_GENERIC_OPTS:
            fields.append(4)
        fields += [
            req_id, s.number_of_rows, s.instrument, s.location_code, s.scan_code,
            s.above_price, s.below_price, s.above_volume, s.market_cap_above, s.market_cap_below,
            s.moody_rating_above, s.moody_rating_below, s.sp_rating_above, s.sp_rating_below,
            s.maturity_date_above, s.maturity_date_below, s.coupon_rate_above, s.coupon_rate_below,
            s.exclude_convertible, s.average_option_volume_above, s.scanner_setting_pairs,
            s.stock_type_filter,
        ]
        if sv >= ServerVersion.SCANNER_GENERIC_OPTS:
            fields.append(_tag_values_str(filter_options))
        fields.append(_tag_values_str(options))
        self._send(fields, open_id=req_id)

    def cancel_scanner_subscription(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_SCANNER_SUBSCRIPTION, 1, req_id], cancel_id=req_id)

    # =========================================================================
    # Account and portfolio
    # =========================================================================

    def req_account_updates(self, subscribe: bool, acct_code: str) -> None:
        self._require_connected()
        self._send([OUT.REQ_ACCT_DATA, 2, subscribe, acct_code])

    def req_account_summary(self, req_id: int, group_name: str, tags: str) -> None:
        """tags is a comma separated list, e.g. "NetLiquidation,BuyingPower"."""
        self._require_connected()
        self._send([OUT.REQ_ACCOUNT_SUMMARY, 1, req_id, group_name, tags], open_id=req_id)

    def cancel_account_summary(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_ACCOUNT_SUMMARY, 1, req_id], cancel_id=req_id)

    def req_positions(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_POSITIONS, 1])

    def cancel_positions(self) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_POSITIONS, 1])

    def req_positions_multi(self, req_id: int, account: str, model_code: str) -> None:
        self._require_connected()
        self._send([OUT.REQ_POSITIONS_MULTI, 1, req_id, account, model_code], open_id=req_id)

    def cancel_positions_multi(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_POSITIONS_MULTI, 1, req_id], cancel_id=req_id)

    def req_account_updates_multi(
        self, req_id: int, account: str, model_code: str, ledger_and_nlv: bool
    ) -> None:
        self._require_connected()
        fields = [OUT.REQ_ACCOUNT_UPDATES_MULTI, 1, req_id, account, model_code, ledger_and_nlv]
        self._send(fields, open_id=req_id)

    def cancel_account_updates_multi(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_ACCOUNT_UPDATES_MULTI, 1, req_id], cancel_id=req_id)

    def req_pnl(self, req_id: int, account: str, model_code: str) -> None:
        self._require_connected()
        self._send([OUT.REQ_PNL, req_id, account, model_code], open_id=req_id)

    def cancel_pnl(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_PNL, req_id], cancel_id=req_id)

    def req_pnl_single(self, req_id: int, account: str, model_code: str, con_id: int) -> None:
        self._require_connected()
        self._send([OUT.REQ_PNL_SINGLE, req_id, account, model_code, con_id], open_id=req_id)

    def cancel_pnl_single(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_PNL_SINGLE, req_id], cancel_id=req_id)

    def req_managed_accounts(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_MANAGED_ACCTS, 1])

    def request_fa(self, fa_data: int) -> None:
        """fa_data: 1 groups, 2 profiles, 3 account aliases."""
        self._require_connected()
        self._send([OUT.REQ_FA, 1, fa_data])

    def replace_fa(self, fa_data: int, cxml: str) -> None:
        self._require_connected()
        self._send([OUT.REPLACE_FA, 1, fa_data, cxml])

    # =========================================================================
    # News
    # =========================================================================

    def req_news_bulletins(self, all_msgs: bool) -> None:
        self._require_connected()
        self._send([OUT.REQ_NEWS_BULLETINS, 1, all_msgs])

    def cancel_news_bulletins(self) -> None:
        self._require_connected()
        self._send([OUT.CANCEL_NEWS_BULLETINS, 1])

    def req_news_providers(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_NEWS_PROVIDERS])

    def req_news_article(
        self,
        req_id: int,
        provider_code: str,
        article_id: str,
        options: list[TagValue] | None = None,
    ) -> None:
        sv = self._require_connected()
        fields: list[Any] = [OUT.REQ_NEWS_ARTICLE, req_id, provider_code, article_id]
        if sv >= ServerVersion.NEWS_QUERY_ORIGINS:
            fields.append(_tag_values_str(options))
        self._send(fields, open_id=req_id)

    def req_historical_news(
        self,
        req_id: int,
        con_id: int,
        provider_codes: str,
        start_date_time: str,
        end_date_time: str,
        total_results: int,
        options: list[TagValue] | None = None,
    ) -> None:
        sv = self._require_connected()
        fields: list[Any] = [
            OUT.REQ_HISTORICAL_NEWS, req_id, con_id, provider_codes,
            start_date_time, end_date_time, total_results,
        ]
        if sv >= ServerVersion.NEWS_QUERY_ORIGINS:
            fields.append(_tag_values_str(options))
        self._send(fields, open_id=req_id)

    # =========================================================================
    # Miscellaneous
    # =========================================================================

    def req_current_time(self) -> None:
        self._require_connected()
        self._send([OUT.REQ_CURRENT_TIME, 1])

    def set_server_log_level(self, log_level: int) -> None:
        """1 system, 2 error, 3 warning, 4 information, 5 detail."""
        self._require_connected()
        self._send([OUT.SET_SERVER_LOGLEVEL, 1, log_level])

    def query_display_groups(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.QUERY_DISPLAY_GROUPS, 1, req_id], open_id=req_id)

    def subscribe_to_group_events(self, req_id: int, group_id: int) -> None:
        self._require_connected()
        self._send([OUT.SUBSCRIBE_TO_GROUP_EVENTS, 1, req_id, group_id], open_id=req_id)

    def update_display_group(self, req_id: int, contract_info: str) -> None:
        self._require_connected()
        self._send([OUT.UPDATE_DISPLAY_GROUP, 1, req_id, contract_info])

    def unsubscribe_from_group_events(self, req_id: int) -> None:
        self._require_connected()
        self._send([OUT.UNSUBSCRIBE_FROM_GROUP_EVENTS, 1, req_id], cancel_id=req_id)
