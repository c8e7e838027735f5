"""
The one place where derived trade fields are computed.

Manual entry and bulk import both call annotate_trade() (or close_trade()
for the closing operation), so P&L derivation can be tested without any
storage layer.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Optional, Tuple, Union

import my_utils
from errors import InvalidTradeRecord, UnsupportedSymbol
from instruments import DEFAULT_TABLE, InstrumentTable
from pnl_calculator import compute_forex_pnl
from trade import Direction, TradeRecord, TradeStatus

LOGGER = logging.getLogger(__name__)


def compute_price_pnl(
    entry_price: float,
    exit_price: float,
    quantity: float,
    direction: Union[Direction, str],
) -> Tuple[float, float]:
    """Plain price x quantity P&L for instruments without pip metadata. Returns (pnl, pnl_percent)."""
    if Direction(direction) == Direction.LONG:
        pnl = (exit_price - entry_price) * quantity
    else:
        pnl = (entry_price - exit_price) * quantity
    pnl_percent = my_utils.safe_div(pnl, entry_price * quantity) * 100
    return my_utils.round_money(pnl), my_utils.round_percent(pnl_percent)


def annotate_trade(
    trade: TradeRecord,
    table: InstrumentTable = DEFAULT_TABLE,
    now: Optional[datetime] = None,
) -> TradeRecord:
    """
    Returns a copy of the trade with its derived fields filled in.

    Trades that are not closed, or were already annotated, come back
    unchanged. Forex pairs use pip-based P&L; any other symbol falls back to
    price x quantity and keeps pips empty.
    """
    if not trade.is_closed or trade.exit_price is None:
        return trade
    if trade.pnl is not None:
        return trade
    if not trade.is_well_formed:
        raise InvalidTradeRecord(
            f"{trade.symbol}: entry price and quantity are required to compute P&L"
        )

    pips = None
    try:
        forex = compute_forex_pnl(
            trade.entry_price,
            trade.exit_price,
            trade.quantity,
            trade.lot_type,
            trade.symbol,
            trade.direction,
            table,
        )
        pnl, pips, return_percent = forex.pnl, forex.pips, forex.return_percent
    except UnsupportedSymbol:
        LOGGER.debug("%s has no pip metadata, using price P&L", trade.symbol)
        pnl, return_percent = compute_price_pnl(
            trade.entry_price, trade.exit_price, trade.quantity, trade.direction
        )

    exit_time = trade.exit_time or my_utils.to_naive_utc(now) or datetime.now()

    holding_period_hours = None
    if trade.entry_time is not None:
        holding_period_hours = round((exit_time - trade.entry_time).total_seconds() / 3600)

    risk_reward_ratio = None
    if trade.stop_loss and trade.take_profit:
        risk = abs(trade.entry_price - trade.stop_loss)
        reward = abs(trade.take_profit - trade.entry_price)
        if risk > 0:
            risk_reward_ratio = my_utils.round_to(reward / risk, 2)

    return dataclasses.replace(
        trade,
        exit_time=exit_time,
        pnl=pnl,
        pips=pips,
        return_percent=return_percent,
        holding_period_hours=holding_period_hours,
        risk_reward_ratio=risk_reward_ratio,
    )


def close_trade(
    trade: TradeRecord,
    exit_price: float,
    exit_time: Optional[datetime] = None,
    table: InstrumentTable = DEFAULT_TABLE,
) -> TradeRecord:
    """The closing operation: sets the exit, marks the trade Closed and derives its fields."""
    if trade.pnl is not None:
        raise InvalidTradeRecord(f"{trade.symbol}: trade is already closed")
    if trade.status == TradeStatus.CANCELLED:
        raise InvalidTradeRecord(f"{trade.symbol}: cancelled trades cannot be closed")
    if exit_price is None or exit_price <= 0:
        raise InvalidTradeRecord(f"{trade.symbol}: exit price must be positive")

    closing = dataclasses.replace(
        trade,
        exit_price=float(exit_price),
        exit_time=my_utils.to_naive_utc(exit_time) or trade.exit_time,
        status=TradeStatus.CLOSED,
    )
    return annotate_trade(closing, table, now=exit_time)
