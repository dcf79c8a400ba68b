"""
Domain value objects carried by requests and events.

These are payloads as far as the decode/dispatch engine is concerned: the
interpreter fills them from wire fields and the client serializes them into
requests. All are msgspec Structs; unset numeric values are None.

Examples:
    contract = Contract(symbol="AAPL", sec_type="STK", exchange="SMART", currency="USD")
    order = Order(action="BUY", total_quantity=100, order_type="LMT", lmt_price=187.5)
"""

from __future__ import annotations

import msgspec


# =============================================================================
# Contracts
# =============================================================================


class TagValue(msgspec.Struct, frozen=True, gc=False):
    """Key/value pair used for options lists and algo parameters."""

    tag: str
    value: str


class ComboLeg(msgspec.Struct, frozen=True, gc=False):
    """One leg of a BAG contract."""

    con_id: int = 0
    ratio: int = 0
    action: str = ""  # BUY / SELL / SSHORT
    exchange: str = ""
    open_close: int = 0  # 0 same, 1 open, 2 close, 3 unknown
    short_sale_slot: int = 0
    designated_location: str = ""
    exempt_code: int = -1


class DeltaNeutralContract(msgspec.Struct, frozen=True, gc=False):
    con_id: int = 0
    delta: float = 0.0
    price: float = 0.0


class Contract(msgspec.Struct, frozen=True):
    """Instrument description shared by requests and events."""

    con_id: int = 0
    symbol: str = ""
    sec_type: str = ""
    last_trade_date_or_contract_month: str = ""
    strike: float = 0.0
    right: str = ""
    multiplier: str = ""
    exchange: str = ""
    primary_exchange: str = ""
    currency: str = ""
    local_symbol: str = ""
    trading_class: str = ""
    include_expired: bool = False
    sec_id_type: str = ""
    sec_id: str = ""
    combo_legs_descrip: str = ""
    combo_legs: list[ComboLeg] = []
    delta_neutral_contract: DeltaNeutralContract | None = None


class ContractDetails(msgspec.Struct, frozen=True):
    """Contract plus trading metadata (bond-specific fields are empty for other types)."""

    contract: Contract = msgspec.field(default_factory=Contract)
    market_name: str = ""
    min_tick: float = 0.0
    md_size_multiplier: int = 1
    order_types: str = ""
    valid_exchanges: str = ""
    price_magnifier: int = 0
    under_con_id: int = 0
    long_name: str = ""
    contract_month: str = ""
    industry: str = ""
    category: str = ""
    subcategory: str = ""
    time_zone_id: str = ""
    trading_hours: str = ""
    liquid_hours: str = ""
    ev_rule: str = ""
    ev_multiplier: float = 0.0
    sec_id_list: list[TagValue] = []
    agg_group: int = 0
    under_symbol: str = ""
    under_sec_type: str = ""
    market_rule_ids: str = ""
    real_expiration_date: str = ""
    last_trade_time: str = ""
    # Bonds
    cusip: str = ""
    ratings: str = ""
    desc_append: str = ""
    bond_type: str = ""
    coupon_type: str = ""
    callable: bool = False
    putable: bool = False
    coupon: float = 0.0
    convertible: bool = False
    maturity: str = ""
    issue_date: str = ""
    next_option_date: str = ""
    next_option_type: str = ""
    next_option_partial: bool = False
    notes: str = ""


class ContractDescription(msgspec.Struct, frozen=True):
    contract: Contract = msgspec.field(default_factory=Contract)
    derivative_sec_types: list[str] = []


# =============================================================================
# Orders and executions
# =============================================================================


class SoftDollarTier(msgspec.Struct, frozen=True, gc=False):
    name: str = ""
    value: str = ""
    display_name: str = ""


class Order(msgspec.Struct, frozen=True):
    """
    Order ticket.

    Only the fields commonly used by API clients are modelled; the remaining
    wire fields of a placement are sent with their protocol defaults.
    """

    # Identification
    order_id: int = 0
    client_id: int = 0
    perm_id: int = 0
    parent_id: int = 0

    # Main order fields
    action: str = ""
    total_quantity: float = 0.0
    order_type: str = ""
    lmt_price: float | None = None
    aux_price: float | None = None

    # Extended order fields
    tif: str = ""
    active_start_time: str = ""
    active_stop_time: str = ""
    oca_group: str = ""
    oca_type: int = 0
    order_ref: str = ""
    transmit: bool = True
    block_order: bool = False
    sweep_to_fill: bool = False
    display_size: int | None = 0
    trigger_method: int = 0
    outside_rth: bool = False
    hidden: bool = False
    good_after_time: str = ""
    good_till_date: str = ""
    rule80a: str = ""
    all_or_none: bool = False
    min_qty: int | None = None
    percent_offset: float | None = None
    override_percentage_constraints: bool = False
    trail_stop_price: float | None = None
    trailing_percent: float | None = None

    # Financial advisors
    fa_group: str = ""
    fa_profile: str = ""
    fa_method: str = ""
    fa_percentage: str = ""

    # Institutional
    open_close: str = ""
    origin: int = 0  # 0 customer, 1 firm
    short_sale_slot: int = 0
    designated_location: str = ""
    exempt_code: int = -1

    # SMART routing
    discretionary_amt: float = 0.0
    opt_out_smart_routing: bool = False

    # BOX exchange
    auction_strategy: int = 0
    starting_price: float | None = None
    stock_ref_price: float | None = None
    delta: float | None = None

    # Pegged to stock and VOL orders
    stock_range_lower: float | None = None
    stock_range_upper: float | None = None

    # VOL orders
    volatility: float | None = None
    volatility_type: int | None = None
    delta_neutral_order_type: str = ""
    delta_neutral_aux_price: float | None = None
    delta_neutral_con_id: int = 0
    delta_neutral_settling_firm: str = ""
    delta_neutral_clearing_account: str = ""
    delta_neutral_clearing_intent: str = ""
    delta_neutral_open_close: str = ""
    delta_neutral_short_sale: bool = False
    delta_neutral_short_sale_slot: int = 0
    delta_neutral_designated_location: str = ""
    continuous_update: bool = False
    reference_price_type: int | None = None

    # Combo orders
    basis_points: float | None = None
    basis_points_type: int | None = None
    order_combo_legs: list[float | None] = []
    smart_combo_routing_params: list[TagValue] = []

    # Scale orders
    scale_init_level_size: int | None = None
    scale_subs_level_size: int | None = None
    scale_price_increment: float | None = None
    scale_price_adjust_value: float | None = None
    scale_price_adjust_interval: int | None = None
    scale_profit_offset: float | None = None
    scale_auto_reset: bool = False
    scale_init_position: int | None = None
    scale_init_fill_qty: int | None = None
    scale_random_percent: bool = False
    scale_table: str = ""

    # Hedge orders
    hedge_type: str = ""
    hedge_param: str = ""

    # Clearing
    account: str = ""
    settling_firm: str = ""
    clearing_account: str = ""
    clearing_intent: str = ""

    # Algo orders
    algo_strategy: str = ""
    algo_params: list[TagValue] = []
    algo_id: str = ""

    # Misc
    what_if: bool = False
    not_held: bool = False
    solicited: bool = False
    model_code: str = ""
    order_misc_options: list[TagValue] = []
    randomize_size: bool = False
    randomize_price: bool = False
    ext_operator: str = ""
    soft_dollar_tier: SoftDollarTier = msgspec.field(default_factory=SoftDollarTier)
    cash_qty: float | None = None
    mifid2_decision_maker: str = ""
    mifid2_decision_algo: str = ""
    mifid2_execution_trader: str = ""
    mifid2_execution_algo: str = ""
    dont_use_auto_price_for_hedge: bool = False
    is_oms_container: bool = False
    discretionary_up_to_limit_price: bool = False
    use_price_mgmt_algo: bool | None = None

    # Pegged to benchmark
    reference_contract_id: int = 0
    is_pegged_change_amount_decrease: bool = False
    pegged_change_amount: float = 0.0
    reference_change_amount: float = 0.0
    reference_exchange_id: str = ""

    # Adjusted orders
    adjusted_order_type: str = ""
    trigger_price: float | None = None
    lmt_price_offset: float | None = None
    adjusted_stop_price: float | None = None
    adjusted_stop_limit_price: float | None = None
    adjusted_trailing_amount: float | None = None
    adjustable_trailing_unit: int = 0


class OrderState(msgspec.Struct, frozen=True, gc=False):
    """Order status plus what-if margin and commission figures."""

    status: str = ""
    init_margin_before: str = ""
    maint_margin_before: str = ""
    equity_with_loan_before: str = ""
    init_margin_change: str = ""
    maint_margin_change: str = ""
    equity_with_loan_change: str = ""
    init_margin_after: str = ""
    maint_margin_after: str = ""
    equity_with_loan_after: str = ""
    commission: float | None = None
    min_commission: float | None = None
    max_commission: float | None = None
    commission_currency: str = ""
    warning_text: str = ""


class Execution(msgspec.Struct, frozen=True, gc=False):
    exec_id: str = ""
    time: str = ""
    acct_number: str = ""
    exchange: str = ""
    side: str = ""
    shares: float = 0.0
    price: float = 0.0
    perm_id: int = 0
    client_id: int = 0
    order_id: int = 0
    liquidation: int = 0
    cum_qty: float = 0.0
    avg_price: float = 0.0
    order_ref: str = ""
    ev_rule: str = ""
    ev_multiplier: float | None = None
    model_code: str = ""
    last_liquidity: int = 0


class ExecutionFilter(msgspec.Struct, frozen=True, gc=False):
    """Filter for execution requests; empty fields match everything."""

    client_id: int = 0
    acct_code: str = ""
    time: str = ""  # yyyymmdd hh:mm:ss
    symbol: str = ""
    sec_type: str = ""
    exchange: str = ""
    side: str = ""


class CommissionReport(msgspec.Struct, frozen=True, gc=False):
    exec_id: str = ""
    commission: float = 0.0
    currency: str = ""
    realized_pnl: float | None = None
    yield_: float | None = None
    yield_redemption_date: int = 0  # YYYYMMDD


# =============================================================================
# Market data
# =============================================================================


class TickAttrib(msgspec.Struct, frozen=True, gc=False):
    can_auto_execute: bool = False
    past_limit: bool = False
    pre_open: bool = False


class TickAttribLast(msgspec.Struct, frozen=True, gc=False):
    past_limit: bool = False
    unreported: bool = False


class TickAttribBidAsk(msgspec.Struct, frozen=True, gc=False):
    bid_past_low: bool = False
    ask_past_high: bool = False


class BarData(msgspec.Struct, frozen=True, gc=False):
    date: str = ""
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    close: float = 0.0
    volume: int = 0
    wap: float = 0.0
    bar_count: int = 0


class HistoricalTick(msgspec.Struct, frozen=True, gc=False):
    time: int = 0
    price: float = 0.0
    size: int = 0


class HistoricalTickBidAsk(msgspec.Struct, frozen=True, gc=False):
    time: int = 0
    tick_attrib_bid_ask: TickAttribBidAsk = msgspec.field(default_factory=TickAttribBidAsk)
    price_bid: float = 0.0
    price_ask: float = 0.0
    size_bid: int = 0
    size_ask: int = 0


class HistoricalTickLast(msgspec.Struct, frozen=True, gc=False):
    time: int = 0
    tick_attrib_last: TickAttribLast = msgspec.field(default_factory=TickAttribLast)
    price: float = 0.0
    size: int = 0
    exchange: str = ""
    special_conditions: str = ""


class HistogramEntry(msgspec.Struct, frozen=True, gc=False):
    price: float = 0.0
    size: int = 0


class PriceIncrement(msgspec.Struct, frozen=True, gc=False):
    low_edge: float = 0.0
    increment: float = 0.0


class DepthMktDataDescription(msgspec.Struct, frozen=True, gc=False):
    exchange: str = ""
    sec_type: str = ""
    listing_exch: str = ""
    service_data_type: str = ""
    agg_group: int | None = None


class SmartComponent(msgspec.Struct, frozen=True, gc=False):
    bit_number: int = 0
    exchange: str = ""
    exchange_letter: str = ""


class ScannerSubscription(msgspec.Struct, frozen=True, gc=False):
    """Market scanner query parameters; None leaves a criterion unset."""

    number_of_rows: int | None = None
    instrument: str = ""
    location_code: str = ""
    scan_code: str = ""
    above_price: float | None = None
    below_price: float | None = None
    above_volume: int | None = None
    market_cap_above: float | None = None
    market_cap_below: float | None = None
    moody_rating_above: str = ""
    moody_rating_below: str = ""
    sp_rating_above: str = ""
    sp_rating_below: str = ""
    maturity_date_above: str = ""
    maturity_date_below: str = ""
    coupon_rate_above: float | None = None
    coupon_rate_below: float | None = None
    exclude_convertible: bool = False
    average_option_volume_above: int | None = None
    scanner_setting_pairs: str = ""
    stock_type_filter: str = ""


# =============================================================================
# Account / reference data
# =============================================================================


class FamilyCode(msgspec.Struct, frozen=True, gc=False):
    account_id: str = ""
    family_code: str = ""


class NewsProvider(msgspec.Struct, frozen=True, gc=False):
    code: str = ""
    name: str = ""
