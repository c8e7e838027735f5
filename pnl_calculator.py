"""Forex P&L from entry/exit prices, lot sizing and instrument metadata."""

from dataclasses import dataclass
from typing import Any, Dict, Union

import my_utils
from instruments import DEFAULT_TABLE, InstrumentTable
from trade import Direction, LotType


@dataclass(frozen=True)
class ForexPnL:
    pnl: float
    pips: float
    pip_value: float  # value of one pip for the whole position
    position_units: float
    return_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pnl": self.pnl,
            "pips": self.pips,
            "pipValue": self.pip_value,
            "positionUnits": self.position_units,
            "returnPercent": self.return_percent,
        }


def compute_forex_pnl(
    entry_price: float,
    exit_price: float,
    lot_size: float,
    lot_type: Union[LotType, str],
    symbol: str,
    direction: Union[Direction, str],
    table: InstrumentTable = DEFAULT_TABLE,
) -> ForexPnL:
    """
    Computes pips, P&L and return for a forex position.

    Raises UnsupportedSymbol when the pair is not in the instrument table;
    callers should treat that as "no pip metrics" rather than retry here.
    """
    spec = table.lookup(symbol)
    lot_type = LotType(lot_type or LotType.MICRO)
    direction = Direction(direction)

    position_units = lot_size * lot_type.units
    pips = (exit_price - entry_price) * spec.pip_multiplier
    if direction == Direction.SHORT:
        pips = -pips

    pip_value = spec.pip_value_per_unit * position_units
    pnl = pips * pip_value
    notional = position_units * entry_price
    return_percent = my_utils.safe_div(pnl, notional) * 100

    return ForexPnL(
        pnl=my_utils.round_money(pnl),
        pips=my_utils.round_pips(pips),
        pip_value=pip_value,
        position_units=position_units,
        return_percent=my_utils.round_percent(return_percent),
    )
