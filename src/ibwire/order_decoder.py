"""
Decoding of the open-order and completed-order records.

Both records carry a contract followed by a long, version-gated run of order
fields. Values are accumulated into keyword dicts and the frozen structs are
built once the record has been read. Anything after the last decoded block is
left unread.
"""

from __future__ import annotations

import logging
from typing import Any

from ibwire.models import (
    ComboLeg,
    Contract,
    DeltaNeutralContract,
    Order,
    OrderState,
    SoftDollarTier,
    TagValue,
)
from ibwire.protocol.constants import ServerVersion
from ibwire.protocol.fields import FieldReader


logger = logging.getLogger(__name__)


class OrderDecoder:
    """
    Reads one order record from a FieldReader.

    Args:
        reader: Reader positioned at the first field after the message version
        version: Message version (the server version for newer records)
        server_version: Negotiated server version
    """

    def __init__(self, reader: FieldReader, version: int, server_version: int) -> None:
        self.r = reader
        self.version = version
        self.server_version = server_version
        self.contract: dict[str, Any] = {}
        self.order: dict[str, Any] = {}
        self.state: dict[str, Any] = {}

    # =========================================================================
    # Records
    # =========================================================================

    def decode_open_order(self) -> tuple[int, Contract, Order, OrderState]:
        r = self.r
        self.order["order_id"] = r.read_int()
        self._contract_fields()
        self._leading_order_fields(open_order=True)
        self._order_body()
        self._what_if_and_commission()
        self._trailing_fields()
        return (
            self.order["order_id"],
            self._build_contract(),
            Order(**self.order),
            OrderState(**self.state),
        )

    def decode_completed_order(self) -> tuple[Contract, Order]:
        self._contract_fields()
        self._leading_order_fields(open_order=False)
        return self._build_contract(), Order(**self.order)

    # =========================================================================
    # Blocks
    # =========================================================================

    def _contract_fields(self) -> None:
        r, c = self.r, self.contract
        c["con_id"] = r.read_int()
        c["symbol"] = r.read_str()
        c["sec_type"] = r.read_str()
        c["last_trade_date_or_contract_month"] = r.read_str()
        c["strike"] = r.read_float()
        c["right"] = r.read_str()
        if self.version >= 32:
            c["multiplier"] = r.read_str()
        c["exchange"] = r.read_str()
        c["currency"] = r.read_str()
        c["local_symbol"] = r.read_str()
        if self.version >= 32:
            c["trading_class"] = r.read_str()

    def _leading_order_fields(self, open_order: bool) -> None:
        r, o = self.r, self.order
        o["action"] = r.read_str()
        o["total_quantity"] = r.read_float()
        o["order_type"] = r.read_str()
        if self.version < 29:
            o["lmt_price"] = r.read_float()
            o["aux_price"] = r.read_float()
        else:
            o["lmt_price"] = r.read_float_unset()
            o["aux_price"] = r.read_float_unset()
        o["tif"] = r.read_str()
        o["oca_group"] = r.read_str()
        o["account"] = r.read_str()
        o["open_close"] = r.read_str()
        o["origin"] = r.read_int()
        o["order_ref"] = r.read_str()
        if open_order:
            o["client_id"] = r.read_int()
        o["perm_id"] = r.read_int()
        o["outside_rth"] = r.read_bool()
        o["hidden"] = r.read_bool()
        o["discretionary_amt"] = r.read_float()
        o["good_after_time"] = r.read_str()
        if open_order:
            r.skip()  # deprecated shares allocation
        o["fa_group"] = r.read_str()
        o["fa_method"] = r.read_str()
        o["fa_percentage"] = r.read_str()
        o["fa_profile"] = r.read_str()
        if self.server_version >= ServerVersion.MODELS_SUPPORT:
            o["model_code"] = r.read_str()
        o["good_till_date"] = r.read_str()
        r.skip()  # rule 80A
        o["percent_offset"] = r.read_float_unset()
        o["settling_firm"] = r.read_str()

    def _order_body(self) -> None:
        r, o = self.r, self.order
        o["short_sale_slot"] = r.read_int()
        o["designated_location"] = r.read_str()
        if self.version >= 23:
            o["exempt_code"] = r.read_int()
        o["auction_strategy"] = r.read_int()
        o["starting_price"] = r.read_float_unset()
        o["stock_ref_price"] = r.read_float_unset()
        o["delta"] = r.read_float_unset()
        o["stock_range_lower"] = r.read_float_unset()
        o["stock_range_upper"] = r.read_float_unset()
        o["display_size"] = r.read_int_unset()
        o["block_order"] = r.read_bool()
        o["sweep_to_fill"] = r.read_bool()
        o["all_or_none"] = r.read_bool()
        o["min_qty"] = r.read_int_unset()
        o["oca_type"] = r.read_int()
        r.skip(3)  # e-trade only, firm quote only, NBBO price cap
        o["parent_id"] = r.read_int()
        o["trigger_method"] = r.read_int()
        self._volatility_params()
        o["trail_stop_price"] = r.read_float_unset()
        if self.version >= 30:
            o["trailing_percent"] = r.read_float_unset()
        o["basis_points"] = r.read_float_unset()
        o["basis_points_type"] = r.read_int_unset()
        self._combo_legs()
        self._smart_combo_routing_params()
        self._scale_params()
        o["hedge_type"] = r.read_str()
        if o["hedge_type"]:
            o["hedge_param"] = r.read_str()
        o["opt_out_smart_routing"] = r.read_bool()
        o["clearing_account"] = r.read_str()
        o["clearing_intent"] = r.read_str()
        o["not_held"] = r.read_bool()
        if r.read_bool():
            self.contract["delta_neutral_contract"] = DeltaNeutralContract(
                con_id=r.read_int(), delta=r.read_float(), price=r.read_float()
            )
        o["algo_strategy"] = r.read_str()
        if o["algo_strategy"]:
            o["algo_params"] = self._tag_values()
        o["solicited"] = r.read_bool()

    def _volatility_params(self) -> None:
        r, o = self.r, self.order
        o["volatility"] = r.read_float_unset()
        o["volatility_type"] = r.read_int_unset()
        o["delta_neutral_order_type"] = r.read_str()
        o["delta_neutral_aux_price"] = r.read_float_unset()
        if self.version >= 27 and o["delta_neutral_order_type"]:
            o["delta_neutral_con_id"] = r.read_int()
            o["delta_neutral_settling_firm"] = r.read_str()
            o["delta_neutral_clearing_account"] = r.read_str()
            o["delta_neutral_clearing_intent"] = r.read_str()
        if self.version >= 31 and o["delta_neutral_order_type"]:
            o["delta_neutral_open_close"] = r.read_str()
            o["delta_neutral_short_sale"] = r.read_bool()
            o["delta_neutral_short_sale_slot"] = r.read_int()
            o["delta_neutral_designated_location"] = r.read_str()
        o["continuous_update"] = r.read_bool()
        o["reference_price_type"] = r.read_int_unset()

    def _combo_legs(self) -> None:
        r = self.r
        self.contract["combo_legs_descrip"] = r.read_str()
        if self.version < 29:
            return
        legs = []
        for _ in range(r.read_int()):
            legs.append(
                ComboLeg(
                    con_id=r.read_int(),
                    ratio=r.read_int(),
                    action=r.read_str(),
                    exchange=r.read_str(),
                    open_close=r.read_int(),
                    short_sale_slot=r.read_int(),
                    designated_location=r.read_str(),
                    exempt_code=r.read_int(),
                )
            )
        self.contract["combo_legs"] = legs
        self.order["order_combo_legs"] = [r.read_float_unset() for _ in range(r.read_int())]

    def _smart_combo_routing_params(self) -> None:
        if self.version >= 26:
            self.order["smart_combo_routing_params"] = self._tag_values()

    def _scale_params(self) -> None:
        r, o = self.r, self.order
        o["scale_init_level_size"] = r.read_int_unset()
        o["scale_subs_level_size"] = r.read_int_unset()
        o["scale_price_increment"] = r.read_float_unset()
        increment = o["scale_price_increment"]
        if self.version >= 28 and increment is not None and increment > 0.0:
            o["scale_price_adjust_value"] = r.read_float_unset()
            o["scale_price_adjust_interval"] = r.read_int_unset()
            o["scale_profit_offset"] = r.read_float_unset()
            o["scale_auto_reset"] = r.read_bool()
            o["scale_init_position"] = r.read_int_unset()
            o["scale_init_fill_qty"] = r.read_int_unset()
            o["scale_random_percent"] = r.read_bool()

    def _what_if_and_commission(self) -> None:
        r, s = self.r, self.state
        self.order["what_if"] = r.read_bool()
        s["status"] = r.read_str()
        if self.server_version >= ServerVersion.WHAT_IF_EXT_FIELDS:
            s["init_margin_before"] = r.read_str()
            s["maint_margin_before"] = r.read_str()
            s["equity_with_loan_before"] = r.read_str()
            s["init_margin_change"] = r.read_str()
            s["maint_margin_change"] = r.read_str()
            s["equity_with_loan_change"] = r.read_str()
        s["init_margin_after"] = r.read_str()
        s["maint_margin_after"] = r.read_str()
        s["equity_with_loan_after"] = r.read_str()
        s["commission"] = r.read_float_unset()
        s["min_commission"] = r.read_float_unset()
        s["max_commission"] = r.read_float_unset()
        s["commission_currency"] = r.read_str()
        s["warning_text"] = r.read_str()

    def _trailing_fields(self) -> None:
        """Fields after the order state; stops early on records we do not model."""
        r, o, sv = self.r, self.order, self.server_version
        if not r.remaining:
            return
        o["randomize_size"] = r.read_bool()
        o["randomize_price"] = r.read_bool()

        if sv >= ServerVersion.PEGGED_TO_BENCHMARK:
            if o["order_type"] == "PEG BENCH":
                o["reference_contract_id"] = r.read_int()
                o["is_pegged_change_amount_decrease"] = r.read_bool()
                o["pegged_change_amount"] = r.read_float()
                o["reference_change_amount"] = r.read_float()
                o["reference_exchange_id"] = r.read_str()
            conditions = r.read_int()
            if conditions > 0:
                logger.debug(
                    "Order %s carries %d conditions, trailing fields not decoded",
                    o["order_id"],
                    conditions,
                )
                return
            o["adjusted_order_type"] = r.read_str()
            o["trigger_price"] = r.read_float_unset()
            o["trail_stop_price"] = r.read_float_unset()
            o["lmt_price_offset"] = r.read_float_unset()
            o["adjusted_stop_price"] = r.read_float_unset()
            o["adjusted_stop_limit_price"] = r.read_float_unset()
            o["adjusted_trailing_amount"] = r.read_float_unset()
            o["adjustable_trailing_unit"] = r.read_int()

        if sv >= ServerVersion.SOFT_DOLLAR_TIER:
            o["soft_dollar_tier"] = SoftDollarTier(
                name=r.read_str(), value=r.read_str(), display_name=r.read_str()
            )
        if sv >= ServerVersion.CASH_QTY:
            o["cash_qty"] = r.read_float_unset()
        if sv >= ServerVersion.AUTO_PRICE_FOR_HEDGE:
            o["dont_use_auto_price_for_hedge"] = r.read_bool()
        if sv >= ServerVersion.ORDER_CONTAINER:
            o["is_oms_container"] = r.read_bool()
        if sv >= ServerVersion.D_PEG_ORDERS:
            o["discretionary_up_to_limit_price"] = r.read_bool()
        if sv >= ServerVersion.PRICE_MGMT_ALGO:
            raw = r.read_int_unset()
            o["use_price_mgmt_algo"] = None if raw is None else raw != 0

    # =========================================================================
    # Helpers
    # =========================================================================

    def _tag_values(self) -> list[TagValue]:
        r = self.r
        return [TagValue(tag=r.read_str(), value=r.read_str()) for _ in range(r.read_int())]

    def _build_contract(self) -> Contract:
        return Contract(**self.contract)


def read_message_version(reader: FieldReader, server_version: int, since: int) -> int:
    """
    Message version for records that dropped their version field.

    From ``since`` onwards the gateway omits the field and the server version
    takes its place.
    """
    if server_version < since:
        return reader.read_int()
    return server_version
