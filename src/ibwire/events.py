"""
Typed inbound events.

Uses msgspec.Struct for every variant:
- Immutable events (frozen=True)
- One struct per consumer operation; field order is the operation's argument order
- ``req_id`` identifies the logical stream where the message belongs to one
- Terminal events close a bounded stream for their ``req_id``

Delivery is written once against the capability set: an event calls the
consumer method named by its ``handler`` with its fields as positional
arguments.
"""

from __future__ import annotations

from typing import Any, ClassVar

import msgspec

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
    Order,
    OrderState,
    PriceIncrement,
    SmartComponent,
    SoftDollarTier,
    TickAttrib,
    TickAttribBidAsk,
    TickAttribLast,
)


class Event(msgspec.Struct, frozen=True, gc=False):
    """Base class for all inbound events."""

    handler: ClassVar[str] = ""
    terminal: ClassVar[bool] = False

    @property
    def request_id(self) -> int | None:
        """Stream key, or None for events not tied to a request."""
        return getattr(self, "req_id", None)

    def is_terminal(self) -> bool:
        """True if this event ends the bounded stream of its request id."""
        return self.terminal

    def args(self) -> tuple[Any, ...]:
        return msgspec.structs.astuple(self)

    def deliver(self, consumer: Any) -> None:
        """Invoke the consumer operation for this event."""
        getattr(consumer, self.handler)(*self.args())


# =============================================================================
# Connection lifecycle (synthesized locally, never on the wire)
# =============================================================================


class ConnectAck(Event):
    handler = "connect_ack"


class ConnectionClosed(Event):
    handler = "connection_closed"


# =============================================================================
# Market data
# =============================================================================


class TickPrice(Event):
    handler = "tick_price"
    req_id: int
    tick_type: int
    price: float
    attrib: TickAttrib


class TickSize(Event):
    handler = "tick_size"
    req_id: int
    tick_type: int
    size: int


class TickGeneric(Event):
    handler = "tick_generic"
    req_id: int
    tick_type: int
    value: float


class TickString(Event):
    handler = "tick_string"
    req_id: int
    tick_type: int
    value: str


class TickEFP(Event):
    handler = "tick_efp"
    req_id: int
    tick_type: int
    basis_points: float
    formatted_basis_points: str
    total_dividends: float
    hold_days: int
    future_last_trade_date: str
    dividend_impact: float
    dividends_to_last_trade_date: float


class TickOptionComputation(Event):
    handler = "tick_option_computation"
    req_id: int
    tick_type: int
    implied_vol: float | None
    delta: float | None
    opt_price: float | None
    pv_dividend: float | None
    gamma: float | None
    vega: float | None
    theta: float | None
    und_price: float | None


class TickSnapshotEnd(Event):
    handler = "tick_snapshot_end"
    terminal = True
    req_id: int


class MarketDataType(Event):
    handler = "market_data_type"
    req_id: int
    market_data_type: int


class TickReqParams(Event):
    handler = "tick_req_params"
    req_id: int
    min_tick: float
    bbo_exchange: str
    snapshot_permissions: int


class TickNews(Event):
    handler = "tick_news"
    req_id: int
    time_stamp: int
    provider_code: str
    article_id: str
    headline: str
    extra_data: str


class TickByTickAllLast(Event):
    handler = "tick_by_tick_all_last"
    req_id: int
    tick_type: int
    time: int
    price: float
    size: int
    tick_attrib_last: TickAttribLast
    exchange: str
    special_conditions: str


class TickByTickBidAsk(Event):
    handler = "tick_by_tick_bid_ask"
    req_id: int
    time: int
    bid_price: float
    ask_price: float
    bid_size: int
    ask_size: int
    tick_attrib_bid_ask: TickAttribBidAsk


class TickByTickMidPoint(Event):
    handler = "tick_by_tick_mid_point"
    req_id: int
    time: int
    mid_point: float


class UpdateMktDepth(Event):
    handler = "update_mkt_depth"
    req_id: int
    position: int
    operation: int
    side: int
    price: float
    size: int


class UpdateMktDepthL2(Event):
    handler = "update_mkt_depth_l2"
    req_id: int
    position: int
    market_maker: str
    operation: int
    side: int
    price: float
    size: int
    is_smart_depth: bool


class MktDepthExchanges(Event):
    handler = "mkt_depth_exchanges"
    depth_mkt_data_descriptions: list[DepthMktDataDescription]


class SmartComponents(Event):
    handler = "smart_components"
    terminal = True
    req_id: int
    smart_components: list[SmartComponent]


class RerouteMktDataReq(Event):
    handler = "reroute_mkt_data_req"
    req_id: int
    con_id: int
    exchange: str


class RerouteMktDepthReq(Event):
    handler = "reroute_mkt_depth_req"
    req_id: int
    con_id: int
    exchange: str


class RealtimeBar(Event):
    handler = "realtime_bar"
    req_id: int
    time: int
    open_: float
    high: float
    low: float
    close: float
    volume: int
    wap: float
    count: int


class MarketRule(Event):
    handler = "market_rule"
    market_rule_id: int
    price_increments: list[PriceIncrement]


# =============================================================================
# Historical data
# =============================================================================


class HistoricalData(Event):
    handler = "historical_data"
    req_id: int
    bar: BarData


class HistoricalDataEnd(Event):
    handler = "historical_data_end"
    terminal = True
    req_id: int
    start: str
    end: str


class HistoricalDataUpdate(Event):
    handler = "historical_data_update"
    req_id: int
    bar: BarData


class HeadTimestamp(Event):
    handler = "head_timestamp"
    terminal = True
    req_id: int
    head_timestamp: str


class HistogramData(Event):
    handler = "histogram_data"
    terminal = True
    req_id: int
    items: list[HistogramEntry]


class HistoricalTicks(Event):
    handler = "historical_ticks"
    req_id: int
    ticks: list[HistoricalTick]
    done: bool

    def is_terminal(self) -> bool:
        return self.done


class HistoricalTicksBidAsk(Event):
    handler = "historical_ticks_bid_ask"
    req_id: int
    ticks: list[HistoricalTickBidAsk]
    done: bool

    def is_terminal(self) -> bool:
        return self.done


class HistoricalTicksLast(Event):
    handler = "historical_ticks_last"
    req_id: int
    ticks: list[HistoricalTickLast]
    done: bool

    def is_terminal(self) -> bool:
        return self.done


# =============================================================================
# Orders and executions
# =============================================================================


class OrderStatus(Event):
    handler = "order_status"
    order_id: int
    status: str
    filled: float
    remaining: float
    avg_fill_price: float
    perm_id: int
    parent_id: int
    last_fill_price: float
    client_id: int
    why_held: str
    mkt_cap_price: float | None


class OpenOrder(Event):
    handler = "open_order"
    order_id: int
    contract: Contract
    order: Order
    order_state: OrderState


class OpenOrderEnd(Event):
    handler = "open_order_end"


class CompletedOrder(Event):
    handler = "completed_order"
    contract: Contract
    order: Order


class CompletedOrdersEnd(Event):
    handler = "completed_orders_end"


class OrderBound(Event):
    handler = "order_bound"
    req_id: int
    api_client_id: int
    api_order_id: int


class NextValidId(Event):
    handler = "next_valid_id"
    order_id: int


class ExecDetails(Event):
    handler = "exec_details"
    req_id: int
    contract: Contract
    execution: Execution


class ExecDetailsEnd(Event):
    handler = "exec_details_end"
    terminal = True
    req_id: int


class CommissionReportEvent(Event):
    handler = "commission_report"
    commission_report: CommissionReport


# =============================================================================
# Contracts and reference data
# =============================================================================


class ContractDetailsEvent(Event):
    handler = "contract_details"
    req_id: int
    contract_details: ContractDetails


class BondContractDetails(Event):
    handler = "bond_contract_details"
    req_id: int
    contract_details: ContractDetails


class ContractDetailsEnd(Event):
    handler = "contract_details_end"
    terminal = True
    req_id: int


class SymbolSamples(Event):
    handler = "symbol_samples"
    terminal = True
    req_id: int
    contract_descriptions: list[ContractDescription]


class SecurityDefinitionOptionParameter(Event):
    handler = "security_definition_option_parameter"
    req_id: int
    exchange: str
    underlying_con_id: int
    trading_class: str
    multiplier: str
    expirations: list[str]
    strikes: list[float]


class SecurityDefinitionOptionParameterEnd(Event):
    handler = "security_definition_option_parameter_end"
    terminal = True
    req_id: int


class DeltaNeutralValidation(Event):
    handler = "delta_neutral_validation"
    req_id: int
    delta_neutral_contract: DeltaNeutralContract


class FundamentalData(Event):
    handler = "fundamental_data"
    terminal = True
    req_id: int
    data: str


class SoftDollarTiers(Event):
    handler = "soft_dollar_tiers"
    terminal = True
    req_id: int
    tiers: list[SoftDollarTier]


class FamilyCodes(Event):
    handler = "family_codes"
    family_codes: list[FamilyCode]


class ScannerParameters(Event):
    handler = "scanner_parameters"
    xml: str


class ScannerData(Event):
    handler = "scanner_data"
    req_id: int
    rank: int
    contract_details: ContractDetails
    distance: str
    benchmark: str
    projection: str
    legs_str: str


class ScannerDataEnd(Event):
    handler = "scanner_data_end"
    terminal = True
    req_id: int


# =============================================================================
# Account and portfolio
# =============================================================================


class UpdateAccountValue(Event):
    handler = "update_account_value"
    key: str
    val: str
    currency: str
    account_name: str


class UpdatePortfolio(Event):
    handler = "update_portfolio"
    contract: Contract
    position: float
    market_price: float
    market_value: float
    average_cost: float
    unrealized_pnl: float
    realized_pnl: float
    account_name: str


class UpdateAccountTime(Event):
    handler = "update_account_time"
    time_stamp: str


class AccountDownloadEnd(Event):
    handler = "account_download_end"
    account_name: str


class ManagedAccounts(Event):
    handler = "managed_accounts"
    accounts_list: str


class Position(Event):
    handler = "position"
    account: str
    contract: Contract
    position: float
    avg_cost: float


class PositionEnd(Event):
    handler = "position_end"


class AccountSummary(Event):
    handler = "account_summary"
    req_id: int
    account: str
    tag: str
    value: str
    currency: str


class AccountSummaryEnd(Event):
    handler = "account_summary_end"
    terminal = True
    req_id: int


class PositionMulti(Event):
    handler = "position_multi"
    req_id: int
    account: str
    model_code: str
    contract: Contract
    pos: float
    avg_cost: float


class PositionMultiEnd(Event):
    handler = "position_multi_end"
    terminal = True
    req_id: int


class AccountUpdateMulti(Event):
    handler = "account_update_multi"
    req_id: int
    account: str
    model_code: str
    key: str
    value: str
    currency: str


class AccountUpdateMultiEnd(Event):
    handler = "account_update_multi_end"
    terminal = True
    req_id: int


class PnL(Event):
    handler = "pnl"
    req_id: int
    daily_pnl: float | None
    unrealized_pnl: float | None
    realized_pnl: float | None


class PnLSingle(Event):
    handler = "pnl_single"
    req_id: int
    pos: int
    daily_pnl: float | None
    unrealized_pnl: float | None
    realized_pnl: float | None
    value: float | None


class ReceiveFA(Event):
    handler = "receive_fa"
    fa_data_type: int
    cxml: str


class ReplaceFAEnd(Event):
    handler = "replace_fa_end"
    req_id: int
    text: str


# =============================================================================
# News
# =============================================================================


class UpdateNewsBulletin(Event):
    handler = "update_news_bulletin"
    msg_id: int
    msg_type: int
    news_message: str
    origin_exch: str


class NewsProviders(Event):
    handler = "news_providers"
    news_providers: list[NewsProvider]


class NewsArticle(Event):
    handler = "news_article"
    terminal = True
    req_id: int
    article_type: int
    article_text: str


class HistoricalNews(Event):
    handler = "historical_news"
    req_id: int
    time: str
    provider_code: str
    article_id: str
    headline: str


class HistoricalNewsEnd(Event):
    handler = "historical_news_end"
    terminal = True
    req_id: int
    has_more: bool


# =============================================================================
# Miscellaneous
# =============================================================================


class ErrorEvent(Event):
    handler = "error"
    req_id: int
    error_code: int
    error_string: str


class CurrentTime(Event):
    handler = "current_time"
    time: int


class VerifyMessageApi(Event):
    handler = "verify_message_api"
    api_data: str


class VerifyCompleted(Event):
    handler = "verify_completed"
    is_successful: bool
    error_text: str


class VerifyAndAuthMessageApi(Event):
    handler = "verify_and_auth_message_api"
    api_data: str
    xyz_challenge: str


class VerifyAndAuthCompleted(Event):
    handler = "verify_and_auth_completed"
    is_successful: bool
    error_text: str


class DisplayGroupList(Event):
    handler = "display_group_list"
    terminal = True
    req_id: int
    groups: str


class DisplayGroupUpdated(Event):
    handler = "display_group_updated"
    req_id: int
    contract_info: str
