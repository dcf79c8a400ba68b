"""
Message interpreter: raw field tuples to typed events.

Features:
- Decoder table keyed by inbound message tag
- Optional fields gated by the negotiated server version
- Missing optional trailing fields take their defaults; extra fields are ignored
- One message may yield several events, returned in wire order

Errors:
- UnknownTagError for a tag outside the known set
- MalformedFieldError for a required field that is missing or does not parse

Both leave the interpreter usable for the next message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ibwire.errors import MalformedFieldError, UnknownTagError
from ibwire.events import (
    AccountDownloadEnd,
    AccountSummary,
    AccountSummaryEnd,
    AccountUpdateMulti,
    AccountUpdateMultiEnd,
    BondContractDetails,
    CommissionReportEvent,
    CompletedOrder,
    CompletedOrdersEnd,
    ContractDetailsEnd,
    ContractDetailsEvent,
    CurrentTime,
    DeltaNeutralValidation,
    DisplayGroupList,
    DisplayGroupUpdated,
    ErrorEvent,
    Event,
    ExecDetails,
    ExecDetailsEnd,
    FamilyCodes,
    FundamentalData,
    HeadTimestamp,
    HistogramData,
    HistoricalData,
    HistoricalDataEnd,
    HistoricalDataUpdate,
    HistoricalNews,
    HistoricalNewsEnd,
    HistoricalTicks,
    HistoricalTicksBidAsk,
    HistoricalTicksLast,
    ManagedAccounts,
    MarketDataType,
    MarketRule,
    MktDepthExchanges,
    NewsArticle,
    NewsProviders,
    NextValidId,
    OpenOrder,
    OpenOrderEnd,
    OrderBound,
    OrderStatus,
    PnL,
    PnLSingle,
    Position,
    PositionEnd,
    PositionMulti,
    PositionMultiEnd,
    RealtimeBar,
    ReceiveFA,
    ReplaceFAEnd,
    RerouteMktDataReq,
    RerouteMktDepthReq,
    ScannerData,
    ScannerDataEnd,
    ScannerParameters,
    SecurityDefinitionOptionParameter,
    SecurityDefinitionOptionParameterEnd,
    SmartComponents,
    SoftDollarTiers,
    SymbolSamples,
    TickByTickAllLast,
    TickByTickBidAsk,
    TickByTickMidPoint,
    TickEFP,
    TickGeneric,
    TickNews,
    TickOptionComputation,
    TickPrice,
    TickReqParams,
    TickSize,
    TickSnapshotEnd,
    TickString,
    UpdateAccountTime,
    UpdateAccountValue,
    UpdateMktDepth,
    UpdateMktDepthL2,
    UpdateNewsBulletin,
    UpdatePortfolio,
    VerifyAndAuthCompleted,
    VerifyAndAuthMessageApi,
    VerifyCompleted,
    VerifyMessageApi,
)
from ibwire.models import (
    BarData,
    CommissionReport,
    Contract,
    ContractDescription,
    ContractDetails,
    DeltaNeutralContract,
    DepthMktDataDescription,
    Execution,
    FamilyCode,
    HistogramEntry,
    HistoricalTick,
    HistoricalTickBidAsk,
    HistoricalTickLast,
    NewsProvider,
    PriceIncrement,
    SmartComponent,
    SoftDollarTier,
    TagValue,
    TickAttrib,
    TickAttribBidAsk,
    TickAttribLast,
)
from ibwire.order_decoder import OrderDecoder, read_message_version
from ibwire.protocol.constants import (
    IN,
    SIZE_TICK_FOR_PRICE,
    UNSET_INTEGER,
    ServerVersion,
    TickType,
)
from ibwire.protocol.fields import FieldReader
from ibwire.protocol.framing import RawMessage


logger = logging.getLogger(__name__)

Decoder = Callable[["MessageInterpreter", FieldReader], list[Event]]

_DECODERS: dict[int, Decoder] = {}


def _decodes(tag: IN) -> Callable[[Decoder], Decoder]:
    """Register a decoder for an inbound tag."""

    def register(fn: Decoder) -> Decoder:
        _DECODERS[tag] = fn
        return fn

    return register


def _computed(value: float, sentinel: float) -> float | None:
    """Option computation fields use negative sentinels for 'not computed'."""
    return None if value == sentinel else value


def _split_last_trade(value: str) -> tuple[str, str]:
    """Date and time tokens of "20240119 16:00 US/Eastern"; the time may be empty."""
    parts = value.split()
    if not parts:
        return value, ""
    return parts[0], parts[1] if len(parts) > 1 else ""


class MessageInterpreter:
    """
    Turns raw messages into events for one negotiated server version.

    Example:
        interpreter = MessageInterpreter(server_version=151)
        for event in interpreter.interpret(("9", "1", "42")):
            event.deliver(consumer)
    """

    def __init__(self, server_version: int) -> None:
        self.server_version = server_version

    @staticmethod
    def known_tags() -> frozenset[int]:
        return frozenset(_DECODERS)

    def interpret(self, raw: RawMessage) -> list[Event]:
        """
        Decode one message.

        Args:
            raw: Field tuple; field 0 is the message tag

        Returns:
            Events in wire order (possibly empty)

        Raises:
            UnknownTagError: Tag is missing from the decoder table
            MalformedFieldError: A required field is missing or unparseable
        """
        if not raw:
            raise MalformedFieldError("", 0, None, "tag")
        try:
            tag = int(raw[0])
        except ValueError:
            raise UnknownTagError(raw[0]) from None

        decoder = _DECODERS.get(tag)
        if decoder is None:
            raise UnknownTagError(raw[0])

        reader = FieldReader(raw)
        reader.tag = tag
        return decoder(self, reader)

    # =========================================================================
    # Shared layouts
    # =========================================================================

    def _read_position_contract(self, r: FieldReader) -> Contract:
        return Contract(
            con_id=r.read_int(),
            symbol=r.read_str(),
            sec_type=r.read_str(),
            last_trade_date_or_contract_month=r.read_str(),
            strike=r.read_float(),
            right=r.read_str(),
            multiplier=r.read_str(),
            exchange=r.read_str(),
            currency=r.read_str(),
            local_symbol=r.read_str(),
            trading_class=r.read_str(),
        )

    def _read_sec_id_list(self, r: FieldReader) -> list[TagValue]:
        return [TagValue(tag=r.read_str(), value=r.read_str()) for _ in range(r.read_int())]

    # =========================================================================
    # Market data
    # =========================================================================

    @_decodes(IN.TICK_PRICE)
    def _tick_price(self, r: FieldReader) -> list[Event]:
        r.skip()
        req_id = r.read_int()
        tick_type = r.read_int()
        price = r.read_float()
        size = r.read_int()
        mask = r.read_int()
        attrib = TickAttrib(
            can_auto_execute=bool(mask & 1),
            past_limit=bool(mask & 2),
            pre_open=bool(mask & 4) and self.server_version >= ServerVersion.PRE_OPEN_BID_ASK,
        )
        events: list[Event] = [TickPrice(req_id, tick_type, price, attrib)]
        size_tick = SIZE_TICK_FOR_PRICE.get(tick_type)
        if size_tick is not None:
            events.append(TickSize(req_id, int(size_tick), size))
        return events

    @_decodes(IN.TICK_SIZE)
    def _tick_size(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [TickSize(r.read_int(), r.read_int(), r.read_int())]

    @_decodes(IN.TICK_GENERIC)
    def _tick_generic(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [TickGeneric(r.read_int(), r.read_int(), r.read_float())]

    @_decodes(IN.TICK_STRING)
    def _tick_string(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [TickString(r.read_int(), r.read_int(), r.read_str())]

    @_decodes(IN.TICK_EFP)
    def _tick_efp(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [
            TickEFP(
                req_id=r.read_int(),
                tick_type=r.read_int(),
                basis_points=r.read_float(),
                formatted_basis_points=r.read_str(),
                total_dividends=r.read_float(),
                hold_days=r.read_int(),
                future_last_trade_date=r.read_str(),
                dividend_impact=r.read_float(),
                dividends_to_last_trade_date=r.read_float(),
            )
        ]

    @_decodes(IN.TICK_OPTION_COMPUTATION)
    def _tick_option_computation(self, r: FieldReader) -> list[Event]:
        version = r.read_int()
        req_id = r.read_int()
        tick_type = r.read_int()
        implied_vol = _computed(r.read_float(), -1)
        delta = _computed(r.read_float(), -2)

        opt_price = pv_dividend = gamma = vega = theta = und_price = None
        if version >= 6 or tick_type in (TickType.MODEL_OPTION, TickType.DELAYED_MODEL_OPTION):
            opt_price = _computed(r.read_float(), -1)
            pv_dividend = _computed(r.read_float(), -1)
        if version >= 6:
            gamma = _computed(r.read_float(), -2)
            vega = _computed(r.read_float(), -2)
            theta = _computed(r.read_float(), -2)
            und_price = _computed(r.read_float(), -1)

        return [
            TickOptionComputation(
                req_id, tick_type, implied_vol, delta, opt_price, pv_dividend,
                gamma, vega, theta, und_price,
            )
        ]

    @_decodes(IN.TICK_SNAPSHOT_END)
    def _tick_snapshot_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [TickSnapshotEnd(r.read_int())]

    @_decodes(IN.MARKET_DATA_TYPE)
    def _market_data_type(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [MarketDataType(r.read_int(), r.read_int())]

    @_decodes(IN.TICK_REQ_PARAMS)
    def _tick_req_params(self, r: FieldReader) -> list[Event]:
        return [TickReqParams(r.read_int(), r.read_float(), r.read_str(), r.read_int())]

    @_decodes(IN.TICK_NEWS)
    def _tick_news(self, r: FieldReader) -> list[Event]:
        return [
            TickNews(
                r.read_int(), r.read_int(), r.read_str(), r.read_str(), r.read_str(), r.read_str()
            )
        ]

    @_decodes(IN.TICK_BY_TICK)
    def _tick_by_tick(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        tick_type = r.read_int()
        time = r.read_int()

        if tick_type in (1, 2):
            price = r.read_float()
            size = r.read_int()
            mask = r.read_int()
            attrib = TickAttribLast(past_limit=bool(mask & 1), unreported=bool(mask & 2))
            return [
                TickByTickAllLast(
                    req_id, tick_type, time, price, size, attrib, r.read_str(), r.read_str()
                )
            ]
        if tick_type == 3:
            bid_price = r.read_float()
            ask_price = r.read_float()
            bid_size = r.read_int()
            ask_size = r.read_int()
            mask = r.read_int()
            attrib = TickAttribBidAsk(bid_past_low=bool(mask & 1), ask_past_high=bool(mask & 2))
            return [TickByTickBidAsk(req_id, time, bid_price, ask_price, bid_size, ask_size, attrib)]
        if tick_type == 4:
            return [TickByTickMidPoint(req_id, time, r.read_float())]

        logger.debug("Ignoring tick-by-tick type %d for request %d", tick_type, req_id)
        return []

    @_decodes(IN.MARKET_DEPTH)
    def _market_depth(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [
            UpdateMktDepth(
                r.read_int(), r.read_int(), r.read_int(), r.read_int(), r.read_float(), r.read_int()
            )
        ]

    @_decodes(IN.MARKET_DEPTH_L2)
    def _market_depth_l2(self, r: FieldReader) -> list[Event]:
        r.skip()
        req_id = r.read_int()
        position = r.read_int()
        market_maker = r.read_str()
        operation = r.read_int()
        side = r.read_int()
        price = r.read_float()
        size = r.read_int()
        is_smart_depth = False
        if self.server_version >= ServerVersion.SMART_DEPTH:
            is_smart_depth = r.read_bool()
        return [
            UpdateMktDepthL2(
                req_id, position, market_maker, operation, side, price, size, is_smart_depth
            )
        ]

    @_decodes(IN.MKT_DEPTH_EXCHANGES)
    def _mkt_depth_exchanges(self, r: FieldReader) -> list[Event]:
        descriptions = []
        for _ in range(r.read_int()):
            exchange = r.read_str()
            sec_type = r.read_str()
            if self.server_version >= ServerVersion.SERVICE_DATA_TYPE:
                descriptions.append(
                    DepthMktDataDescription(
                        exchange=exchange,
                        sec_type=sec_type,
                        listing_exch=r.read_str(),
                        service_data_type=r.read_str(),
                        agg_group=r.read_int_unset(),
                    )
                )
            else:
                service = "Deep2" if r.read_bool() else "Deep"
                descriptions.append(
                    DepthMktDataDescription(
                        exchange=exchange, sec_type=sec_type, service_data_type=service
                    )
                )
        return [MktDepthExchanges(descriptions)]

    @_decodes(IN.SMART_COMPONENTS)
    def _smart_components(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        components = [
            SmartComponent(bit_number=r.read_int(), exchange=r.read_str(), exchange_letter=r.read_str())
            for _ in range(r.read_int())
        ]
        return [SmartComponents(req_id, components)]

    @_decodes(IN.REROUTE_MKT_DATA_REQ)
    def _reroute_mkt_data(self, r: FieldReader) -> list[Event]:
        return [RerouteMktDataReq(r.read_int(), r.read_int(), r.read_str())]

    @_decodes(IN.REROUTE_MKT_DEPTH_REQ)
    def _reroute_mkt_depth(self, r: FieldReader) -> list[Event]:
        return [RerouteMktDepthReq(r.read_int(), r.read_int(), r.read_str())]

    @_decodes(IN.REAL_TIME_BARS)
    def _real_time_bars(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [
            RealtimeBar(
                req_id=r.read_int(),
                time=r.read_int(),
                open_=r.read_float(),
                high=r.read_float(),
                low=r.read_float(),
                close=r.read_float(),
                volume=r.read_int(),
                wap=r.read_float(),
                count=r.read_int(),
            )
        ]

    @_decodes(IN.MARKET_RULE)
    def _market_rule(self, r: FieldReader) -> list[Event]:
        rule_id = r.read_int()
        increments = [
            PriceIncrement(low_edge=r.read_float(), increment=r.read_float())
            for _ in range(r.read_int())
        ]
        return [MarketRule(rule_id, increments)]

    # =========================================================================
    # Historical data
    # =========================================================================

    @_decodes(IN.HISTORICAL_DATA)
    def _historical_data(self, r: FieldReader) -> list[Event]:
        legacy = self.server_version < ServerVersion.SYNT_REALTIME_BARS
        if legacy:
            r.skip()
        req_id = r.read_int()
        start = r.read_str()
        end = r.read_str()

        events: list[Event] = []
        for _ in range(r.read_int()):
            date = r.read_str()
            open_, high, low, close = r.read_float(), r.read_float(), r.read_float(), r.read_float()
            volume = r.read_int()
            wap = r.read_float()
            if legacy:
                r.skip()  # has gaps
            bar = BarData(
                date=date, open=open_, high=high, low=low, close=close,
                volume=volume, wap=wap, bar_count=r.read_int(),
            )
            events.append(HistoricalData(req_id, bar))
        events.append(HistoricalDataEnd(req_id, start, end))
        return events

    @_decodes(IN.HISTORICAL_DATA_UPDATE)
    def _historical_data_update(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        bar_count = r.read_int()
        date = r.read_str()
        open_ = r.read_float()
        close = r.read_float()
        high = r.read_float()
        low = r.read_float()
        wap = r.read_float()
        volume = r.read_int()
        bar = BarData(
            date=date, open=open_, high=high, low=low, close=close,
            volume=volume, wap=wap, bar_count=bar_count,
        )
        return [HistoricalDataUpdate(req_id, bar)]

    @_decodes(IN.HEAD_TIMESTAMP)
    def _head_timestamp(self, r: FieldReader) -> list[Event]:
        return [HeadTimestamp(r.read_int(), r.read_str())]

    @_decodes(IN.HISTOGRAM_DATA)
    def _histogram_data(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        items = [
            HistogramEntry(price=r.read_float(), size=r.read_int()) for _ in range(r.read_int())
        ]
        return [HistogramData(req_id, items)]

    @_decodes(IN.HISTORICAL_TICKS)
    def _historical_ticks(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        ticks = []
        for _ in range(r.read_int()):
            time = r.read_int()
            r.skip()  # unused
            ticks.append(HistoricalTick(time=time, price=r.read_float(), size=r.read_int()))
        return [HistoricalTicks(req_id, ticks, r.read_bool())]

    @_decodes(IN.HISTORICAL_TICKS_BID_ASK)
    def _historical_ticks_bid_ask(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        ticks = []
        for _ in range(r.read_int()):
            time = r.read_int()
            mask = r.read_int()
            ticks.append(
                HistoricalTickBidAsk(
                    time=time,
                    tick_attrib_bid_ask=TickAttribBidAsk(
                        ask_past_high=bool(mask & 1), bid_past_low=bool(mask & 2)
                    ),
                    price_bid=r.read_float(),
                    price_ask=r.read_float(),
                    size_bid=r.read_int(),
                    size_ask=r.read_int(),
                )
            )
        return [HistoricalTicksBidAsk(req_id, ticks, r.read_bool())]

    @_decodes(IN.HISTORICAL_TICKS_LAST)
    def _historical_ticks_last(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        ticks = []
        for _ in range(r.read_int()):
            time = r.read_int()
            mask = r.read_int()
            ticks.append(
                HistoricalTickLast(
                    time=time,
                    tick_attrib_last=TickAttribLast(
                        past_limit=bool(mask & 1), unreported=bool(mask & 2)
                    ),
                    price=r.read_float(),
                    size=r.read_int(),
                    exchange=r.read_str(),
                    special_conditions=r.read_str(),
                )
            )
        return [HistoricalTicksLast(req_id, ticks, r.read_bool())]

    # =========================================================================
    # Orders and executions
    # =========================================================================

    @_decodes(IN.ORDER_STATUS)
    def _order_status(self, r: FieldReader) -> list[Event]:
        has_cap_price = self.server_version >= ServerVersion.MARKET_CAP_PRICE
        if not has_cap_price:
            r.skip()
        return [
            OrderStatus(
                order_id=r.read_int(),
                status=r.read_str(),
                filled=r.read_float(),
                remaining=r.read_float(),
                avg_fill_price=r.read_float(),
                perm_id=r.read_int(),
                parent_id=r.read_int(),
                last_fill_price=r.read_float(),
                client_id=r.read_int(),
                why_held=r.read_str(),
                mkt_cap_price=r.read_float_unset() if has_cap_price and r.remaining else None,
            )
        ]

    @_decodes(IN.OPEN_ORDER)
    def _open_order(self, r: FieldReader) -> list[Event]:
        version = read_message_version(r, self.server_version, ServerVersion.ORDER_CONTAINER)
        order_id, contract, order, state = OrderDecoder(
            r, version, self.server_version
        ).decode_open_order()
        return [OpenOrder(order_id, contract, order, state)]

    @_decodes(IN.OPEN_ORDER_END)
    def _open_order_end(self, r: FieldReader) -> list[Event]:
        return [OpenOrderEnd()]

    @_decodes(IN.COMPLETED_ORDER)
    def _completed_order(self, r: FieldReader) -> list[Event]:
        contract, order = OrderDecoder(
            r, UNSET_INTEGER, self.server_version
        ).decode_completed_order()
        return [CompletedOrder(contract, order)]

    @_decodes(IN.COMPLETED_ORDERS_END)
    def _completed_orders_end(self, r: FieldReader) -> list[Event]:
        return [CompletedOrdersEnd()]

    @_decodes(IN.ORDER_BOUND)
    def _order_bound(self, r: FieldReader) -> list[Event]:
        return [OrderBound(r.read_int(), r.read_int(), r.read_int())]

    @_decodes(IN.NEXT_VALID_ID)
    def _next_valid_id(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [NextValidId(r.read_int())]

    @_decodes(IN.EXECUTION_DATA)
    def _execution_data(self, r: FieldReader) -> list[Event]:
        version = read_message_version(r, self.server_version, ServerVersion.LAST_LIQUIDITY)
        req_id = r.read_int() if version >= 7 else -1
        order_id = r.read_int()

        contract = Contract(
            con_id=r.read_int(),
            symbol=r.read_str(),
            sec_type=r.read_str(),
            last_trade_date_or_contract_month=r.read_str(),
            strike=r.read_float(),
            right=r.read_str(),
            multiplier=r.read_str() if version >= 9 else "",
            exchange=r.read_str(),
            currency=r.read_str(),
            local_symbol=r.read_str(),
            trading_class=r.read_str() if version >= 10 else "",
        )

        ex = {
            "order_id": order_id,
            "exec_id": r.read_str(),
            "time": r.read_str(),
            "acct_number": r.read_str(),
            "exchange": r.read_str(),
            "side": r.read_str(),
            "shares": r.read_float(),
            "price": r.read_float(),
            "perm_id": r.read_int(),
            "client_id": r.read_int(),
            "liquidation": r.read_int(),
        }
        if version >= 6:
            ex["cum_qty"] = r.read_float()
            ex["avg_price"] = r.read_float()
        if version >= 8:
            ex["order_ref"] = r.read_str()
        if version >= 9:
            ex["ev_rule"] = r.read_str()
            ex["ev_multiplier"] = r.read_float_unset()
        if self.server_version >= ServerVersion.MODELS_SUPPORT:
            ex["model_code"] = r.read_str()
        if self.server_version >= ServerVersion.LAST_LIQUIDITY:
            ex["last_liquidity"] = r.read_int()

        return [ExecDetails(req_id, contract, Execution(**ex))]

    @_decodes(IN.EXECUTION_DATA_END)
    def _execution_data_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [ExecDetailsEnd(r.read_int())]

    @_decodes(IN.COMMISSION_REPORT)
    def _commission_report(self, r: FieldReader) -> list[Event]:
        r.skip()
        report = CommissionReport(
            exec_id=r.read_str(),
            commission=r.read_float(),
            currency=r.read_str(),
            realized_pnl=r.read_float_unset(),
            yield_=r.read_float_unset(),
            yield_redemption_date=r.read_int(),
        )
        return [CommissionReportEvent(report)]

    # =========================================================================
    # Contracts and reference data
    # =========================================================================

    @_decodes(IN.CONTRACT_DATA)
    def _contract_data(self, r: FieldReader) -> list[Event]:
        sv = self.server_version
        version = r.read_int()
        req_id = r.read_int() if version >= 3 else -1

        symbol = r.read_str()
        sec_type = r.read_str()
        last_trade_date, last_trade_time = _split_last_trade(r.read_str())
        c = {
            "symbol": symbol,
            "sec_type": sec_type,
            "last_trade_date_or_contract_month": last_trade_date,
            "strike": r.read_float(),
            "right": r.read_str(),
            "exchange": r.read_str(),
            "currency": r.read_str(),
            "local_symbol": r.read_str(),
        }
        d = {"market_name": r.read_str(), "last_trade_time": last_trade_time}
        c["trading_class"] = r.read_str()
        c["con_id"] = r.read_int()
        d["min_tick"] = r.read_float()
        if sv >= ServerVersion.MD_SIZE_MULTIPLIER:
            d["md_size_multiplier"] = r.read_int()
        c["multiplier"] = r.read_str()
        d["order_types"] = r.read_str()
        d["valid_exchanges"] = r.read_str()
        d["price_magnifier"] = r.read_int()
        d["under_con_id"] = r.read_int()
        d["long_name"] = r.read_str()
        c["primary_exchange"] = r.read_str()
        d["contract_month"] = r.read_str()
        d["industry"] = r.read_str()
        d["category"] = r.read_str()
        d["subcategory"] = r.read_str()
        d["time_zone_id"] = r.read_str()
        d["trading_hours"] = r.read_str()
        d["liquid_hours"] = r.read_str()
        d["ev_rule"] = r.read_str()
        d["ev_multiplier"] = r.read_float()
        d["sec_id_list"] = self._read_sec_id_list(r)
        if sv >= ServerVersion.AGG_GROUP:
            d["agg_group"] = r.read_int()
        if sv >= ServerVersion.UNDERLYING_INFO:
            d["under_symbol"] = r.read_str()
            d["under_sec_type"] = r.read_str()
        if sv >= ServerVersion.MARKET_RULES:
            d["market_rule_ids"] = r.read_str()
        if sv >= ServerVersion.REAL_EXPIRATION_DATE:
            d["real_expiration_date"] = r.read_str()

        return [ContractDetailsEvent(req_id, ContractDetails(contract=Contract(**c), **d))]

    @_decodes(IN.BOND_CONTRACT_DATA)
    def _bond_contract_data(self, r: FieldReader) -> list[Event]:
        sv = self.server_version
        version = r.read_int()
        req_id = r.read_int() if version >= 3 else -1

        c = {"symbol": r.read_str(), "sec_type": r.read_str()}
        cusip = r.read_str()
        coupon = r.read_float()
        maturity, last_trade_time = _split_last_trade(r.read_str())
        d = {
            "cusip": cusip,
            "coupon": coupon,
            "maturity": maturity,
            "last_trade_time": last_trade_time,
            "issue_date": r.read_str(),
            "ratings": r.read_str(),
            "bond_type": r.read_str(),
            "coupon_type": r.read_str(),
            "convertible": r.read_bool(),
            "callable": r.read_bool(),
            "putable": r.read_bool(),
            "desc_append": r.read_str(),
        }
        c["exchange"] = r.read_str()
        c["currency"] = r.read_str()
        d["market_name"] = r.read_str()
        c["trading_class"] = r.read_str()
        c["con_id"] = r.read_int()
        d["min_tick"] = r.read_float()
        if sv >= ServerVersion.MD_SIZE_MULTIPLIER:
            d["md_size_multiplier"] = r.read_int()
        d["order_types"] = r.read_str()
        d["valid_exchanges"] = r.read_str()
        d["next_option_date"] = r.read_str()
        d["next_option_type"] = r.read_str()
        d["next_option_partial"] = r.read_bool()
        d["notes"] = r.read_str()
        d["long_name"] = r.read_str()
        d["ev_rule"] = r.read_str()
        d["ev_multiplier"] = r.read_float()
        d["sec_id_list"] = self._read_sec_id_list(r)
        if sv >= ServerVersion.AGG_GROUP:
            d["agg_group"] = r.read_int()
        if sv >= ServerVersion.MARKET_RULES:
            d["market_rule_ids"] = r.read_str()

        return [BondContractDetails(req_id, ContractDetails(contract=Contract(**c), **d))]

    @_decodes(IN.CONTRACT_DATA_END)
    def _contract_data_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [ContractDetailsEnd(r.read_int())]

    @_decodes(IN.SYMBOL_SAMPLES)
    def _symbol_samples(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        descriptions = []
        for _ in range(r.read_int()):
            contract = Contract(
                con_id=r.read_int(),
                symbol=r.read_str(),
                sec_type=r.read_str(),
                primary_exchange=r.read_str(),
                currency=r.read_str(),
            )
            derivative_sec_types = [r.read_str() for _ in range(r.read_int())]
            descriptions.append(
                ContractDescription(contract=contract, derivative_sec_types=derivative_sec_types)
            )
        return [SymbolSamples(req_id, descriptions)]

    @_decodes(IN.SECURITY_DEFINITION_OPTION_PARAMETER)
    def _sec_def_opt_params(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        exchange = r.read_str()
        underlying_con_id = r.read_int()
        trading_class = r.read_str()
        multiplier = r.read_str()
        expirations = [r.read_str() for _ in range(r.read_int())]
        strikes = [r.read_float() for _ in range(r.read_int())]
        return [
            SecurityDefinitionOptionParameter(
                req_id, exchange, underlying_con_id, trading_class, multiplier, expirations, strikes
            )
        ]

    @_decodes(IN.SECURITY_DEFINITION_OPTION_PARAMETER_END)
    def _sec_def_opt_params_end(self, r: FieldReader) -> list[Event]:
        return [SecurityDefinitionOptionParameterEnd(r.read_int())]

    @_decodes(IN.DELTA_NEUTRAL_VALIDATION)
    def _delta_neutral_validation(self, r: FieldReader) -> list[Event]:
        r.skip()
        req_id = r.read_int()
        contract = DeltaNeutralContract(con_id=r.read_int(), delta=r.read_float(), price=r.read_float())
        return [DeltaNeutralValidation(req_id, contract)]

    @_decodes(IN.FUNDAMENTAL_DATA)
    def _fundamental_data(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [FundamentalData(r.read_int(), r.read_str())]

    @_decodes(IN.SOFT_DOLLAR_TIERS)
    def _soft_dollar_tiers(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        tiers = [
            SoftDollarTier(name=r.read_str(), value=r.read_str(), display_name=r.read_str())
            for _ in range(r.read_int())
        ]
        return [SoftDollarTiers(req_id, tiers)]

    @_decodes(IN.FAMILY_CODES)
    def _family_codes(self, r: FieldReader) -> list[Event]:
        codes = [
            FamilyCode(account_id=r.read_str(), family_code=r.read_str())
            for _ in range(r.read_int())
        ]
        return [FamilyCodes(codes)]

    @_decodes(IN.SCANNER_PARAMETERS)
    def _scanner_parameters(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [ScannerParameters(r.read_str())]

    @_decodes(IN.SCANNER_DATA)
    def _scanner_data(self, r: FieldReader) -> list[Event]:
        r.skip()
        req_id = r.read_int()
        events: list[Event] = []
        for _ in range(r.read_int()):
            rank = r.read_int()
            c = {
                "con_id": r.read_int(),
                "symbol": r.read_str(),
                "sec_type": r.read_str(),
                "last_trade_date_or_contract_month": r.read_str(),
                "strike": r.read_float(),
                "right": r.read_str(),
                "exchange": r.read_str(),
                "currency": r.read_str(),
                "local_symbol": r.read_str(),
            }
            market_name = r.read_str()
            c["trading_class"] = r.read_str()
            details = ContractDetails(contract=Contract(**c), market_name=market_name)
            events.append(
                ScannerData(req_id, rank, details, r.read_str(), r.read_str(), r.read_str(), r.read_str())
            )
        events.append(ScannerDataEnd(req_id))
        return events

    # =========================================================================
    # Account and portfolio
    # =========================================================================

    @_decodes(IN.ACCT_VALUE)
    def _acct_value(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [UpdateAccountValue(r.read_str(), r.read_str(), r.read_str(), r.read_str())]

    @_decodes(IN.PORTFOLIO_VALUE)
    def _portfolio_value(self, r: FieldReader) -> list[Event]:
        version = r.read_int()
        c = {
            "con_id": r.read_int(),
            "symbol": r.read_str(),
            "sec_type": r.read_str(),
            "last_trade_date_or_contract_month": r.read_str(),
            "strike": r.read_float(),
            "right": r.read_str(),
        }
        if version >= 7:
            c["multiplier"] = r.read_str()
            c["primary_exchange"] = r.read_str()
        c["currency"] = r.read_str()
        if version >= 2:
            c["local_symbol"] = r.read_str()
        if version >= 8:
            c["trading_class"] = r.read_str()
        return [
            UpdatePortfolio(
                contract=Contract(**c),
                position=r.read_float(),
                market_price=r.read_float(),
                market_value=r.read_float(),
                average_cost=r.read_float(),
                unrealized_pnl=r.read_float(),
                realized_pnl=r.read_float(),
                account_name=r.read_str(),
            )
        ]

    @_decodes(IN.ACCT_UPDATE_TIME)
    def _acct_update_time(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [UpdateAccountTime(r.read_str())]

    @_decodes(IN.ACCT_DOWNLOAD_END)
    def _acct_download_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [AccountDownloadEnd(r.read_str())]

    @_decodes(IN.MANAGED_ACCTS)
    def _managed_accounts(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [ManagedAccounts(r.read_str())]

    @_decodes(IN.POSITION_DATA)
    def _position(self, r: FieldReader) -> list[Event]:
        version = r.read_int()
        account = r.read_str()
        c = {
            "con_id": r.read_int(),
            "symbol": r.read_str(),
            "sec_type": r.read_str(),
            "last_trade_date_or_contract_month": r.read_str(),
            "strike": r.read_float(),
            "right": r.read_str(),
            "multiplier": r.read_str(),
            "exchange": r.read_str(),
            "currency": r.read_str(),
            "local_symbol": r.read_str(),
        }
        if version >= 2:
            c["trading_class"] = r.read_str()
        position = r.read_float()
        avg_cost = r.read_float() if version >= 3 else 0.0
        return [Position(account, Contract(**c), position, avg_cost)]

    @_decodes(IN.POSITION_END)
    def _position_end(self, r: FieldReader) -> list[Event]:
        return [PositionEnd()]

    @_decodes(IN.ACCOUNT_SUMMARY)
    def _account_summary(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [AccountSummary(r.read_int(), r.read_str(), r.read_str(), r.read_str(), r.read_str())]

    @_decodes(IN.ACCOUNT_SUMMARY_END)
    def _account_summary_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [AccountSummaryEnd(r.read_int())]

    @_decodes(IN.POSITION_MULTI)
    def _position_multi(self, r: FieldReader) -> list[Event]:
        r.skip()
        req_id = r.read_int()
        account = r.read_str()
        contract = self._read_position_contract(r)
        pos = r.read_float()
        avg_cost = r.read_float()
        return [PositionMulti(req_id, account, r.read_str(), contract, pos, avg_cost)]

    @_decodes(IN.POSITION_MULTI_END)
    def _position_multi_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [PositionMultiEnd(r.read_int())]

    @_decodes(IN.ACCOUNT_UPDATE_MULTI)
    def _account_update_multi(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [
            AccountUpdateMulti(
                r.read_int(), r.read_str(), r.read_str(), r.read_str(), r.read_str(), r.read_str()
            )
        ]

    @_decodes(IN.ACCOUNT_UPDATE_MULTI_END)
    def _account_update_multi_end(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [AccountUpdateMultiEnd(r.read_int())]

    @_decodes(IN.PNL)
    def _pnl(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        daily = r.read_float_unset()
        unrealized = realized = None
        if self.server_version >= ServerVersion.UNREALIZED_PNL:
            unrealized = r.read_float_unset()
        if self.server_version >= ServerVersion.REALIZED_PNL:
            realized = r.read_float_unset()
        return [PnL(req_id, daily, unrealized, realized)]

    @_decodes(IN.PNL_SINGLE)
    def _pnl_single(self, r: FieldReader) -> list[Event]:
        req_id = r.read_int()
        pos = r.read_int()
        daily = r.read_float_unset()
        unrealized = realized = None
        if self.server_version >= ServerVersion.UNREALIZED_PNL:
            unrealized = r.read_float_unset()
        if self.server_version >= ServerVersion.REALIZED_PNL:
            realized = r.read_float_unset()
        return [PnLSingle(req_id, pos, daily, unrealized, realized, r.read_float_unset())]

    @_decodes(IN.RECEIVE_FA)
    def _receive_fa(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [ReceiveFA(r.read_int(), r.read_str())]

    @_decodes(IN.REPLACE_FA_END)
    def _replace_fa_end(self, r: FieldReader) -> list[Event]:
        return [ReplaceFAEnd(r.read_int(), r.read_str())]

    # =========================================================================
    # News
    # =========================================================================

    @_decodes(IN.NEWS_BULLETINS)
    def _news_bulletins(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [UpdateNewsBulletin(r.read_int(), r.read_int(), r.read_str(), r.read_str())]

    @_decodes(IN.NEWS_PROVIDERS)
    def _news_providers(self, r: FieldReader) -> list[Event]:
        providers = [NewsProvider(code=r.read_str(), name=r.read_str()) for _ in range(r.read_int())]
        return [NewsProviders(providers)]

    @_decodes(IN.NEWS_ARTICLE)
    def _news_article(self, r: FieldReader) -> list[Event]:
        return [NewsArticle(r.read_int(), r.read_int(), r.read_str())]

    @_decodes(IN.HISTORICAL_NEWS)
    def _historical_news(self, r: FieldReader) -> list[Event]:
        return [HistoricalNews(r.read_int(), r.read_str(), r.read_str(), r.read_str(), r.read_str())]

    @_decodes(IN.HISTORICAL_NEWS_END)
    def _historical_news_end(self, r: FieldReader) -> list[Event]:
        return [HistoricalNewsEnd(r.read_int(), r.read_bool())]

    # =========================================================================
    # Miscellaneous
    # =========================================================================

    @_decodes(IN.ERR_MSG)
    def _error(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [ErrorEvent(r.read_int(), r.read_int(), r.read_str())]

    @_decodes(IN.CURRENT_TIME)
    def _current_time(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [CurrentTime(r.read_int())]

    @_decodes(IN.VERIFY_MESSAGE_API)
    def _verify_message_api(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [VerifyMessageApi(r.read_str())]

    @_decodes(IN.VERIFY_COMPLETED)
    def _verify_completed(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [VerifyCompleted(r.read_bool(), r.read_str())]

    @_decodes(IN.VERIFY_AND_AUTH_MESSAGE_API)
    def _verify_and_auth_message_api(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [VerifyAndAuthMessageApi(r.read_str(), r.read_str())]

    @_decodes(IN.VERIFY_AND_AUTH_COMPLETED)
    def _verify_and_auth_completed(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [VerifyAndAuthCompleted(r.read_bool(), r.read_str())]

    @_decodes(IN.DISPLAY_GROUP_LIST)
    def _display_group_list(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [DisplayGroupList(r.read_int(), r.read_str())]

    @_decodes(IN.DISPLAY_GROUP_UPDATED)
    def _display_group_updated(self, r: FieldReader) -> list[Event]:
        r.skip()
        return [DisplayGroupUpdated(r.read_int(), r.read_str())]
