"""
Event consumer capability set.

- Wrapper: protocol with one operation per event kind
- LoggingWrapper: default consumer that logs every callback

Consumers are invoked on the receive loop. They may issue requests on the
client directly from inside a callback.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

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


if TYPE_CHECKING:
    from ibwire.client import Client


logger = logging.getLogger(__name__)

# Informational "error" codes (market data farm status and the like)
INFO_CODES = frozenset({2104, 2106, 2107, 2108, 2119, 2158})


# =============================================================================
# Protocol
# =============================================================================


@runtime_checkable
class Wrapper(Protocol):
    """Operations the dispatcher may invoke, one per event kind."""

    # Connection lifecycle
    def connect_ack(self) -> None: ...
    def connection_closed(self) -> None: ...
    def error(self, req_id: int, error_code: int, error_string: str) -> None: ...
    def current_time(self, time: int) -> None: ...

    # Market data
    def tick_price(self, req_id: int, tick_type: int, price: float, attrib: TickAttrib) -> None: ...
    def tick_size(self, req_id: int, tick_type: int, size: int) -> None: ...
    def tick_generic(self, req_id: int, tick_type: int, value: float) -> None: ...
    def tick_string(self, req_id: int, tick_type: int, value: str) -> None: ...
    def tick_efp(
        self,
        req_id: int,
        tick_type: int,
        basis_points: float,
        formatted_basis_points: str,
        total_dividends: float,
        hold_days: int,
        future_last_trade_date: str,
        dividend_impact: float,
        dividends_to_last_trade_date: float,
    ) -> None: ...
    def tick_option_computation(
        self,
        req_id: int,
        tick_type: int,
        implied_vol: float | None,
        delta: float | None,
        opt_price: float | None,
        pv_dividend: float | None,
        gamma: float | None,
        vega: float | None,
        theta: float | None,
        und_price: float | None,
    ) -> None: ...
    def tick_snapshot_end(self, req_id: int) -> None: ...
    def market_data_type(self, req_id: int, market_data_type: int) -> None: ...
    def tick_req_params(
        self, req_id: int, min_tick: float, bbo_exchange: str, snapshot_permissions: int
    ) -> None: ...
    def tick_news(
        self,
        req_id: int,
        time_stamp: int,
        provider_code: str,
        article_id: str,
        headline: str,
        extra_data: str,
    ) -> None: ...
    def tick_by_tick_all_last(
        self,
        req_id: int,
        tick_type: int,
        time: int,
        price: float,
        size: int,
        tick_attrib_last: TickAttribLast,
        exchange: str,
        special_conditions: str,
    ) -> None: ...
    def tick_by_tick_bid_ask(
        self,
        req_id: int,
        time: int,
        bid_price: float,
        ask_price: float,
        bid_size: int,
        ask_size: int,
        tick_attrib_bid_ask: TickAttribBidAsk,
    ) -> None: ...
    def tick_by_tick_mid_point(self, req_id: int, time: int, mid_point: float) -> None: ...
    def update_mkt_depth(
        self, req_id: int, position: int, operation: int, side: int, price: float, size: int
    ) -> None: ...
    def update_mkt_depth_l2(
        self,
        req_id: int,
        position: int,
        market_maker: str,
        operation: int,
        side: int,
        price: float,
        size: int,
        is_smart_depth: bool,
    ) -> None: ...
    def mkt_depth_exchanges(
        self, depth_mkt_data_descriptions: list[DepthMktDataDescription]
    ) -> None: ...
    def smart_components(self, req_id: int, smart_components: list[SmartComponent]) -> None: ...
    def reroute_mkt_data_req(self, req_id: int, con_id: int, exchange: str) -> None: ...
    def reroute_mkt_depth_req(self, req_id: int, con_id: int, exchange: str) -> None: ...
    def realtime_bar(
        self,
        req_id: int,
        time: int,
        open_: float,
        high: float,
        low: float,
        close: float,
        volume: int,
        wap: float,
        count: int,
    ) -> None: ...
    def market_rule(self, market_rule_id: int, price_increments: list[PriceIncrement]) -> None: ...

    # Historical data
    def historical_data(self, req_id: int, bar: BarData) -> None: ...
    def historical_data_end(self, req_id: int, start: str, end: str) -> None: ...
    def historical_data_update(self, req_id: int, bar: BarData) -> None: ...
    def head_timestamp(self, req_id: int, head_timestamp: str) -> None: ...
    def histogram_data(self, req_id: int, items: list[HistogramEntry]) -> None: ...
    def historical_ticks(self, req_id: int, ticks: list[HistoricalTick], done: bool) -> None: ...
    def historical_ticks_bid_ask(
        self, req_id: int, ticks: list[HistoricalTickBidAsk], done: bool
    ) -> None: ...
    def historical_ticks_last(
        self, req_id: int, ticks: list[HistoricalTickLast], done: bool
    ) -> None: ...

    # Orders and executions
    def order_status(
        self,
        order_id: int,
        status: str,
        filled: float,
        remaining: float,
        avg_fill_price: float,
        perm_id: int,
        parent_id: int,
        last_fill_price: float,
        client_id: int,
        why_held: str,
        mkt_cap_price: float | None,
    ) -> None: ...
    def open_order(
        self, order_id: int, contract: Contract, order: Order, order_state: OrderState
    ) -> None: ...
    def open_order_end(self) -> None: ...
    def completed_order(self, contract: Contract, order: Order) -> None: ...
    def completed_orders_end(self) -> None: ...
    def order_bound(self, req_id: int, api_client_id: int, api_order_id: int) -> None: ...
    def next_valid_id(self, order_id: int) -> None: ...
    def exec_details(self, req_id: int, contract: Contract, execution: Execution) -> None: ...
    def exec_details_end(self, req_id: int) -> None: ...
    def commission_report(self, commission_report: CommissionReport) -> None: ...

    # Contracts and reference data
    def contract_details(self, req_id: int, contract_details: ContractDetails) -> None: ...
    def bond_contract_details(self, req_id: int, contract_details: ContractDetails) -> None: ...
    def contract_details_end(self, req_id: int) -> None: ...
    def symbol_samples(
        self, req_id: int, contract_descriptions: list[ContractDescription]
    ) -> None: ...
    def security_definition_option_parameter(
        self,
        req_id: int,
        exchange: str,
        underlying_con_id: int,
        trading_class: str,
        multiplier: str,
        expirations: list[str],
        strikes: list[float],
    ) -> None: ...
    def security_definition_option_parameter_end(self, req_id: int) -> None: ...
    def delta_neutral_validation(
        self, req_id: int, delta_neutral_contract: DeltaNeutralContract
    ) -> None: ...
    def fundamental_data(self, req_id: int, data: str) -> None: ...
    def soft_dollar_tiers(self, req_id: int, tiers: list[SoftDollarTier]) -> None: ...
    def family_codes(self, family_codes: list[FamilyCode]) -> None: ...
    def scanner_parameters(self, xml: str) -> None: ...
    def scanner_data(
        self,
        req_id: int,
        rank: int,
        contract_details: ContractDetails,
        distance: str,
        benchmark: str,
        projection: str,
        legs_str: str,
    ) -> None: ...
    def scanner_data_end(self, req_id: int) -> None: ...

    # Account and portfolio
    def update_account_value(self, key: str, val: str, currency: str, account_name: str) -> None: ...
    def update_portfolio(
        self,
        contract: Contract,
        position: float,
        market_price: float,
        market_value: float,
        average_cost: float,
        unrealized_pnl: float,
        realized_pnl: float,
        account_name: str,
    ) -> None: ...
    def update_account_time(self, time_stamp: str) -> None: ...
    def account_download_end(self, account_name: str) -> None: ...
    def managed_accounts(self, accounts_list: str) -> None: ...
    def position(self, account: str, contract: Contract, position: float, avg_cost: float) -> None: ...
    def position_end(self) -> None: ...
    def account_summary(
        self, req_id: int, account: str, tag: str, value: str, currency: str
    ) -> None: ...
    def account_summary_end(self, req_id: int) -> None: ...
    def position_multi(
        self,
        req_id: int,
        account: str,
        model_code: str,
        contract: Contract,
        pos: float,
        avg_cost: float,
    ) -> None: ...
    def position_multi_end(self, req_id: int) -> None: ...
    def account_update_multi(
        self,
        req_id: int,
        account: str,
        model_code: str,
        key: str,
        value: str,
        currency: str,
    ) -> None: ...
    def account_update_multi_end(self, req_id: int) -> None: ...
    def pnl(
        self,
        req_id: int,
        daily_pnl: float | None,
        unrealized_pnl: float | None,
        realized_pnl: float | None,
    ) -> None: ...
    def pnl_single(
        self,
        req_id: int,
        pos: int,
        daily_pnl: float | None,
        unrealized_pnl: float | None,
        realized_pnl: float | None,
        value: float | None,
    ) -> None: ...
    def receive_fa(self, fa_data_type: int, cxml: str) -> None: ...
    def replace_fa_end(self, req_id: int, text: str) -> None: ...

    # News
    def update_news_bulletin(
        self, msg_id: int, msg_type: int, news_message: str, origin_exch: str
    ) -> None: ...
    def news_providers(self, news_providers: list[NewsProvider]) -> None: ...
    def news_article(self, req_id: int, article_type: int, article_text: str) -> None: ...
    def historical_news(
        self, req_id: int, time: str, provider_code: str, article_id: str, headline: str
    ) -> None: ...
    def historical_news_end(self, req_id: int, has_more: bool) -> None: ...

    # Verification and display groups
    def verify_message_api(self, api_data: str) -> None: ...
    def verify_completed(self, is_successful: bool, error_text: str) -> None: ...
    def verify_and_auth_message_api(self, api_data: str, xyz_challenge: str) -> None: ...
    def verify_and_auth_completed(self, is_successful: bool, error_text: str) -> None: ...
    def display_group_list(self, req_id: int, groups: str) -> None: ...
    def display_group_updated(self, req_id: int, contract_info: str) -> None: ...


# =============================================================================
# Logging consumer
# =============================================================================


class LoggingWrapper:
    """
    Consumer that logs every event.

    Subclass and override the operations you care about. Given a client, the
    account summary handler asks for the gateway's current time, which
    exercises issuing a request from inside a callback.

    Example:
        wrapper = LoggingWrapper()
        client = Client(wrapper)
        wrapper.client = client
    """

    def __init__(self, client: Client | None = None) -> None:
        self.client = client

    # Connection lifecycle

    def connect_ack(self) -> None:
        logger.info("Connected.")

    def connection_closed(self) -> None:
        logger.info("Connection closed.")

    def error(self, req_id: int, error_code: int, error_string: str) -> None:
        if error_code in INFO_CODES:
            logger.info("info [%d]: %s", error_code, error_string)
        else:
            logger.error("error [%d] req_id=%d: %s", error_code, req_id, error_string)

    def current_time(self, time: int) -> None:
        logger.info("current_time: %d", time)

    # Market data

    def tick_price(self, req_id: int, tick_type: int, price: float, attrib: TickAttrib) -> None:
        logger.info("tick_price -- req_id: %d, tick_type: %d, price: %s, attrib: %s", req_id, tick_type, price, attrib)

    def tick_size(self, req_id: int, tick_type: int, size: int) -> None:
        logger.info("tick_size -- req_id: %d, tick_type: %d, size: %d", req_id, tick_type, size)

    def tick_generic(self, req_id: int, tick_type: int, value: float) -> None:
        logger.info("tick_generic -- req_id: %d, tick_type: %d, value: %s", req_id, tick_type, value)

    def tick_string(self, req_id: int, tick_type: int, value: str) -> None:
        logger.info("tick_string -- req_id: %d, tick_type: %d, value: %s", req_id, tick_type, value)

    def tick_efp(
        self,
        req_id: int,
        tick_type: int,
        basis_points: float,
        formatted_basis_points: str,
        total_dividends: float,
        hold_days: int,
        future_last_trade_date: str,
        dividend_impact: float,
        dividends_to_last_trade_date: float,
    ) -> None:
        logger.info(
            "tick_efp -- req_id: %d, tick_type: %d, basis_points: %s, formatted: %s, "
            "total_dividends: %s, hold_days: %d, future_last_trade_date: %s, "
            "dividend_impact: %s, dividends_to_last_trade_date: %s",
            req_id, tick_type, basis_points, formatted_basis_points, total_dividends,
            hold_days, future_last_trade_date, dividend_impact, dividends_to_last_trade_date,
        )

    def tick_option_computation(
        self,
        req_id: int,
        tick_type: int,
        implied_vol: float | None,
        delta: float | None,
        opt_price: float | None,
        pv_dividend: float | None,
        gamma: float | None,
        vega: float | None,
        theta: float | None,
        und_price: float | None,
    ) -> None:
        logger.info(
            "tick_option_computation -- req_id: %d, tick_type: %d, implied_vol: %s, delta: %s, "
            "opt_price: %s, pv_dividend: %s, gamma: %s, vega: %s, theta: %s, und_price: %s",
            req_id, tick_type, implied_vol, delta, opt_price, pv_dividend, gamma, vega, theta,
            und_price,
        )

    def tick_snapshot_end(self, req_id: int) -> None:
        logger.info("tick_snapshot_end -- req_id: %d", req_id)

    def market_data_type(self, req_id: int, market_data_type: int) -> None:
        logger.info("market_data_type -- req_id: %d, market_data_type: %d", req_id, market_data_type)

    def tick_req_params(
        self, req_id: int, min_tick: float, bbo_exchange: str, snapshot_permissions: int
    ) -> None:
        logger.info(
            "tick_req_params -- req_id: %d, min_tick: %s, bbo_exchange: %s, snapshot_permissions: %d",
            req_id, min_tick, bbo_exchange, snapshot_permissions,
        )

    def tick_news(
        self,
        req_id: int,
        time_stamp: int,
        provider_code: str,
        article_id: str,
        headline: str,
        extra_data: str,
    ) -> None:
        logger.info(
            "tick_news -- req_id: %d, time_stamp: %d, provider_code: %s, article_id: %s, "
            "headline: %s, extra_data: %s",
            req_id, time_stamp, provider_code, article_id, headline, extra_data,
        )

    def tick_by_tick_all_last(
        self,
        req_id: int,
        tick_type: int,
        time: int,
        price: float,
        size: int,
        tick_attrib_last: TickAttribLast,
        exchange: str,
        special_conditions: str,
    ) -> None:
        logger.info(
            "tick_by_tick_all_last -- req_id: %d, tick_type: %d, time: %d, price: %s, size: %d, "
            "attrib: %s, exchange: %s, special_conditions: %s",
            req_id, tick_type, time, price, size, tick_attrib_last, exchange, special_conditions,
        )

    def tick_by_tick_bid_ask(
        self,
        req_id: int,
        time: int,
        bid_price: float,
        ask_price: float,
        bid_size: int,
        ask_size: int,
        tick_attrib_bid_ask: TickAttribBidAsk,
    ) -> None:
        logger.info(
            "tick_by_tick_bid_ask -- req_id: %d, time: %d, bid: %s x %d, ask: %s x %d, attrib: %s",
            req_id, time, bid_price, bid_size, ask_price, ask_size, tick_attrib_bid_ask,
        )

    def tick_by_tick_mid_point(self, req_id: int, time: int, mid_point: float) -> None:
        logger.info("tick_by_tick_mid_point -- req_id: %d, time: %d, mid_point: %s", req_id, time, mid_point)

    def update_mkt_depth(
        self, req_id: int, position: int, operation: int, side: int, price: float, size: int
    ) -> None:
        logger.info(
            "update_mkt_depth -- req_id: %d, position: %d, operation: %d, side: %d, price: %s, size: %d",
            req_id, position, operation, side, price, size,
        )

    def update_mkt_depth_l2(
        self,
        req_id: int,
        position: int,
        market_maker: str,
        operation: int,
        side: int,
        price: float,
        size: int,
        is_smart_depth: bool,
    ) -> None:
        logger.info(
            "update_mkt_depth_l2 -- req_id: %d, position: %d, market_maker: %s, operation: %d, "
            "side: %d, price: %s, size: %d, is_smart_depth: %s",
            req_id, position, market_maker, operation, side, price, size, is_smart_depth,
        )

    def mkt_depth_exchanges(self, depth_mkt_data_descriptions: list[DepthMktDataDescription]) -> None:
        logger.info("mkt_depth_exchanges -- %s", depth_mkt_data_descriptions)

    def smart_components(self, req_id: int, smart_components: list[SmartComponent]) -> None:
        logger.info("smart_components -- req_id: %d, components: %s", req_id, smart_components)

    def reroute_mkt_data_req(self, req_id: int, con_id: int, exchange: str) -> None:
        logger.info("reroute_mkt_data_req -- req_id: %d, con_id: %d, exchange: %s", req_id, con_id, exchange)

    def reroute_mkt_depth_req(self, req_id: int, con_id: int, exchange: str) -> None:
        logger.info("reroute_mkt_depth_req -- req_id: %d, con_id: %d, exchange: %s", req_id, con_id, exchange)

    def realtime_bar(
        self,
        req_id: int,
        time: int,
        open_: float,
        high: float,
        low: float,
        close: float,
        volume: int,
        wap: float,
        count: int,
    ) -> None:
        logger.info(
            "realtime_bar -- req_id: %d, time: %d, open: %s, high: %s, low: %s, close: %s, "
            "volume: %d, wap: %s, count: %d",
            req_id, time, open_, high, low, close, volume, wap, count,
        )

    def market_rule(self, market_rule_id: int, price_increments: list[PriceIncrement]) -> None:
        logger.info("market_rule -- market_rule_id: %d, increments: %s", market_rule_id, price_increments)

    # Historical data

    def historical_data(self, req_id: int, bar: BarData) -> None:
        logger.info("historical_data -- req_id: %d, bar: %s", req_id, bar)

    def historical_data_end(self, req_id: int, start: str, end: str) -> None:
        logger.info("historical_data_end -- req_id: %d, start: %s, end: %s", req_id, start, end)

    def historical_data_update(self, req_id: int, bar: BarData) -> None:
        logger.info("historical_data_update -- req_id: %d, bar: %s", req_id, bar)

    def head_timestamp(self, req_id: int, head_timestamp: str) -> None:
        logger.info("head_timestamp -- req_id: %d, head_timestamp: %s", req_id, head_timestamp)

    def histogram_data(self, req_id: int, items: list[HistogramEntry]) -> None:
        logger.info("histogram_data -- req_id: %d, items: %s", req_id, items)

    def historical_ticks(self, req_id: int, ticks: list[HistoricalTick], done: bool) -> None:
        logger.info("historical_ticks -- req_id: %d, ticks: %d, done: %s", req_id, len(ticks), done)

    def historical_ticks_bid_ask(
        self, req_id: int, ticks: list[HistoricalTickBidAsk], done: bool
    ) -> None:
        logger.info("historical_ticks_bid_ask -- req_id: %d, ticks: %d, done: %s", req_id, len(ticks), done)

    def historical_ticks_last(self, req_id: int, ticks: list[HistoricalTickLast], done: bool) -> None:
        logger.info("historical_ticks_last -- req_id: %d, ticks: %d, done: %s", req_id, len(ticks), done)

    # Orders and executions

    def order_status(
        self,
        order_id: int,
        status: str,
        filled: float,
        remaining: float,
        avg_fill_price: float,
        perm_id: int,
        parent_id: int,
        last_fill_price: float,
        client_id: int,
        why_held: str,
        mkt_cap_price: float | None,
    ) -> None:
        logger.info(
            "order_status -- order_id: %d, status: %s, filled: %s, remaining: %s, "
            "avg_fill_price: %s, perm_id: %d, parent_id: %d, last_fill_price: %s, "
            "client_id: %d, why_held: %s, mkt_cap_price: %s",
            order_id, status, filled, remaining, avg_fill_price, perm_id, parent_id,
            last_fill_price, client_id, why_held, mkt_cap_price,
        )

    def open_order(self, order_id: int, contract: Contract, order: Order, order_state: OrderState) -> None:
        logger.info(
            "open_order -- order_id: %d, contract: %s, order: %s %s %s, state: %s",
            order_id, contract.symbol, order.action, order.total_quantity, order.order_type,
            order_state.status,
        )

    def open_order_end(self) -> None:
        logger.info("open_order_end")

    def completed_order(self, contract: Contract, order: Order) -> None:
        logger.info(
            "completed_order -- contract: %s, order: %s %s %s, perm_id: %d",
            contract.symbol, order.action, order.total_quantity, order.order_type, order.perm_id,
        )

    def completed_orders_end(self) -> None:
        logger.info("completed_orders_end")

    def order_bound(self, req_id: int, api_client_id: int, api_order_id: int) -> None:
        logger.info(
            "order_bound -- req_id: %d, api_client_id: %d, api_order_id: %d",
            req_id, api_client_id, api_order_id,
        )

    def next_valid_id(self, order_id: int) -> None:
        logger.info("next_valid_id -- order_id: %d", order_id)

    def exec_details(self, req_id: int, contract: Contract, execution: Execution) -> None:
        logger.info("exec_details -- req_id: %d, contract: %s, execution: %s", req_id, contract.symbol, execution)

    def exec_details_end(self, req_id: int) -> None:
        logger.info("exec_details_end -- req_id: %d", req_id)

    def commission_report(self, commission_report: CommissionReport) -> None:
        logger.info("commission_report -- %s", commission_report)

    # Contracts and reference data

    def contract_details(self, req_id: int, contract_details: ContractDetails) -> None:
        logger.info("contract_details -- req_id: %d, contract: %s", req_id, contract_details.contract)

    def bond_contract_details(self, req_id: int, contract_details: ContractDetails) -> None:
        logger.info("bond_contract_details -- req_id: %d, contract: %s", req_id, contract_details.contract)

    def contract_details_end(self, req_id: int) -> None:
        logger.info("contract_details_end -- req_id: %d", req_id)

    def symbol_samples(self, req_id: int, contract_descriptions: list[ContractDescription]) -> None:
        logger.info("symbol_samples -- req_id: %d, count: %d", req_id, len(contract_descriptions))

    def security_definition_option_parameter(
        self,
        req_id: int,
        exchange: str,
        underlying_con_id: int,
        trading_class: str,
        multiplier: str,
        expirations: list[str],
        strikes: list[float],
    ) -> None:
        logger.info(
            "security_definition_option_parameter -- req_id: %d, exchange: %s, "
            "underlying_con_id: %d, trading_class: %s, multiplier: %s, expirations: %d, strikes: %d",
            req_id, exchange, underlying_con_id, trading_class, multiplier,
            len(expirations), len(strikes),
        )

    def security_definition_option_parameter_end(self, req_id: int) -> None:
        logger.info("security_definition_option_parameter_end -- req_id: %d", req_id)

    def delta_neutral_validation(self, req_id: int, delta_neutral_contract: DeltaNeutralContract) -> None:
        logger.info("delta_neutral_validation -- req_id: %d, contract: %s", req_id, delta_neutral_contract)

    def fundamental_data(self, req_id: int, data: str) -> None:
        logger.info("fundamental_data -- req_id: %d, %d chars", req_id, len(data))

    def soft_dollar_tiers(self, req_id: int, tiers: list[SoftDollarTier]) -> None:
        logger.info("soft_dollar_tiers -- req_id: %d, tiers: %s", req_id, tiers)

    def family_codes(self, family_codes: list[FamilyCode]) -> None:
        logger.info("family_codes -- %s", family_codes)

    def scanner_parameters(self, xml: str) -> None:
        logger.info("scanner_parameters -- %d chars", len(xml))

    def scanner_data(
        self,
        req_id: int,
        rank: int,
        contract_details: ContractDetails,
        distance: str,
        benchmark: str,
        projection: str,
        legs_str: str,
    ) -> None:
        logger.info(
            "scanner_data -- req_id: %d, rank: %d, symbol: %s, distance: %s, benchmark: %s, "
            "projection: %s, legs: %s",
            req_id, rank, contract_details.contract.symbol, distance, benchmark, projection, legs_str,
        )

    def scanner_data_end(self, req_id: int) -> None:
        logger.info("scanner_data_end -- req_id: %d", req_id)

    # Account and portfolio

    def update_account_value(self, key: str, val: str, currency: str, account_name: str) -> None:
        logger.info(
            "update_account_value -- key: %s, val: %s, currency: %s, account: %s",
            key, val, currency, account_name,
        )

    def update_portfolio(
        self,
        contract: Contract,
        position: float,
        market_price: float,
        market_value: float,
        average_cost: float,
        unrealized_pnl: float,
        realized_pnl: float,
        account_name: str,
    ) -> None:
        logger.info(
            "update_portfolio -- symbol: %s, position: %s, market_price: %s, market_value: %s, "
            "average_cost: %s, unrealized_pnl: %s, realized_pnl: %s, account: %s",
            contract.symbol, position, market_price, market_value, average_cost,
            unrealized_pnl, realized_pnl, account_name,
        )

    def update_account_time(self, time_stamp: str) -> None:
        logger.info("update_account_time: %s", time_stamp)

    def account_download_end(self, account_name: str) -> None:
        logger.info("account_download_end: %s", account_name)

    def managed_accounts(self, accounts_list: str) -> None:
        logger.info("managed_accounts -- accounts_list: %s", accounts_list)

    def position(self, account: str, contract: Contract, position: float, avg_cost: float) -> None:
        logger.info(
            "position -- account: %s, symbol: %s, position: %s, avg_cost: %s",
            account, contract.symbol, position, avg_cost,
        )

    def position_end(self) -> None:
        logger.info("position_end")

    def account_summary(self, req_id: int, account: str, tag: str, value: str, currency: str) -> None:
        logger.info(
            "account_summary -- req_id: %d, account: %s, tag: %s, value: %s, currency: %s",
            req_id, account, tag, value, currency,
        )
        if self.client is not None:
            self.client.req_current_time()

    def account_summary_end(self, req_id: int) -> None:
        logger.info("account_summary_end -- req_id: %d", req_id)

    def position_multi(
        self,
        req_id: int,
        account: str,
        model_code: str,
        contract: Contract,
        pos: float,
        avg_cost: float,
    ) -> None:
        logger.info(
            "position_multi -- req_id: %d, account: %s, model_code: %s, symbol: %s, pos: %s, avg_cost: %s",
            req_id, account, model_code, contract.symbol, pos, avg_cost,
        )

    def position_multi_end(self, req_id: int) -> None:
        logger.info("position_multi_end -- req_id: %d", req_id)

    def account_update_multi(
        self,
        req_id: int,
        account: str,
        model_code: str,
        key: str,
        value: str,
        currency: str,
    ) -> None:
        logger.info(
            "account_update_multi -- req_id: %d, account: %s, model_code: %s, key: %s, "
            "value: %s, currency: %s",
            req_id, account, model_code, key, value, currency,
        )

    def account_update_multi_end(self, req_id: int) -> None:
        logger.info("account_update_multi_end -- req_id: %d", req_id)

    def pnl(
        self,
        req_id: int,
        daily_pnl: float | None,
        unrealized_pnl: float | None,
        realized_pnl: float | None,
    ) -> None:
        logger.info(
            "pnl -- req_id: %d, daily: %s, unrealized: %s, realized: %s",
            req_id, daily_pnl, unrealized_pnl, realized_pnl,
        )

    def pnl_single(
        self,
        req_id: int,
        pos: int,
        daily_pnl: float | None,
        unrealized_pnl: float | None,
        realized_pnl: float | None,
        value: float | None,
    ) -> None:
        logger.info(
            "pnl_single -- req_id: %d, pos: %d, daily: %s, unrealized: %s, realized: %s, value: %s",
            req_id, pos, daily_pnl, unrealized_pnl, realized_pnl, value,
        )

    def receive_fa(self, fa_data_type: int, cxml: str) -> None:
        logger.info("receive_fa -- fa_data_type: %d, cxml: %s", fa_data_type, cxml)

    def replace_fa_end(self, req_id: int, text: str) -> None:
        logger.info("replace_fa_end -- req_id: %d, text: %s", req_id, text)

    # News

    def update_news_bulletin(self, msg_id: int, msg_type: int, news_message: str, origin_exch: str) -> None:
        logger.info(
            "update_news_bulletin -- msg_id: %d, msg_type: %d, message: %s, origin_exch: %s",
            msg_id, msg_type, news_message, origin_exch,
        )

    def news_providers(self, news_providers: list[NewsProvider]) -> None:
        logger.info("news_providers -- %s", news_providers)

    def news_article(self, req_id: int, article_type: int, article_text: str) -> None:
        logger.info("news_article -- req_id: %d, article_type: %d, %d chars", req_id, article_type, len(article_text))

    def historical_news(
        self, req_id: int, time: str, provider_code: str, article_id: str, headline: str
    ) -> None:
        logger.info(
            "historical_news -- req_id: %d, time: %s, provider_code: %s, article_id: %s, headline: %s",
            req_id, time, provider_code, article_id, headline,
        )

    def historical_news_end(self, req_id: int, has_more: bool) -> None:
        logger.info("historical_news_end -- req_id: %d, has_more: %s", req_id, has_more)

    # Verification and display groups

    def verify_message_api(self, api_data: str) -> None:
        logger.info("verify_message_api -- api_data: %s", api_data)

    def verify_completed(self, is_successful: bool, error_text: str) -> None:
        logger.info("verify_completed -- is_successful: %s, error_text: %s", is_successful, error_text)

    def verify_and_auth_message_api(self, api_data: str, xyz_challenge: str) -> None:
        logger.info("verify_and_auth_message_api -- api_data: %s, xyz_challenge: %s", api_data, xyz_challenge)

    def verify_and_auth_completed(self, is_successful: bool, error_text: str) -> None:
        logger.info("verify_and_auth_completed -- is_successful: %s, error_text: %s", is_successful, error_text)

    def display_group_list(self, req_id: int, groups: str) -> None:
        logger.info("display_group_list -- req_id: %d, groups: %s", req_id, groups)

    def display_group_updated(self, req_id: int, contract_info: str) -> None:
        logger.info("display_group_updated -- req_id: %d, contract_info: %s", req_id, contract_info)
