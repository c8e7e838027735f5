from dataclasses import dataclass
from typing import Any, Dict

import my_utils
from instruments import DEFAULT_TABLE, InstrumentTable
from trade import LotType


@dataclass(frozen=True)
class PositionSize:
    lot_size: float
    lot_type: LotType
    position_units: float
    risk_amount: float
    stop_loss_pips: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lotSize": self.lot_size,
            "lotType": self.lot_type.value,
            "positionUnits": self.position_units,
            "riskAmount": self.risk_amount,
            "stopLossPips": self.stop_loss_pips,
        }


def select_lot_type(required_units: float) -> LotType:
    """Largest lot whose unit size fits in required_units, nano when none does."""
    for lot_type in LotType:
        if lot_type.units <= required_units:
            return lot_type
    return LotType.NANO


def recommend_position_size(
    account_balance: float,
    risk_percent: float,
    entry_price: float,
    stop_loss: float,
    symbol: str,
    table: InstrumentTable = DEFAULT_TABLE,
) -> PositionSize:
    """
    Derives a lot size that risks risk_percent of account_balance if the
    stop loss is hit.

    Args:
        account_balance (float): Account size; passed explicitly, there is no default.
        risk_percent (float): Percent of the balance to risk, e.g. 1.0 for 1%.
        entry_price (float): Planned entry.
        stop_loss (float): Planned stop; must differ from the entry.
        symbol (str): Forex pair, looked up in the instrument table.

    Raises:
        UnsupportedSymbol: the pair is not in the instrument table.
        ValueError: the stop loss equals the entry price.
    """
    spec = table.lookup(symbol)

    risk_amount = account_balance * risk_percent / 100
    stop_loss_pips = abs(entry_price - stop_loss) * spec.pip_multiplier
    if stop_loss_pips == 0:
        raise ValueError("Stop loss must differ from the entry price")

    # rounded so that 9999.999... units still selects a mini lot
    required_units = my_utils.round_to(risk_amount / (stop_loss_pips * spec.pip_value_per_unit), 6)
    lot_type = select_lot_type(required_units)

    return PositionSize(
        lot_size=my_utils.round_to(required_units / lot_type.units, 2),
        lot_type=lot_type,
        position_units=my_utils.round_to(required_units, 2),
        risk_amount=my_utils.round_money(risk_amount),
        stop_loss_pips=my_utils.round_pips(stop_loss_pips),
    )
