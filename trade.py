import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import jsonschema

import my_utils
from constants import CONST
from errors import InvalidTradeRecord

LOGGER = logging.getLogger(__name__)


class Direction(str, Enum):
    LONG = "Long"
    SHORT = "Short"


class TradeStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"
    CANCELLED = "Cancelled"


class LotType(str, Enum):
    STANDARD = "standard"
    MINI = "mini"
    MICRO = "micro"
    NANO = "nano"

    @property
    def units(self) -> int:
        return CONST.LOT_UNITS[self.value]


TRADE_RECORD_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["symbol", "direction", "entryPrice", "quantity"],
    "properties": {
        "id": {"type": ["string", "integer", "null"]},
        "account": {"type": ["string", "null"]},
        "symbol": {"type": "string", "minLength": 1, "maxLength": 20},
        "direction": {"type": "string", "enum": ["Long", "Short"]},
        "entryPrice": {"type": "number", "exclusiveMinimum": 0},
        "exitPrice": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "quantity": {"type": "number", "exclusiveMinimum": 0},
        "lotType": {"type": ["string", "null"], "enum": ["standard", "mini", "micro", "nano", None]},
        "entryTime": {"type": ["string", "null"]},
        "exitTime": {"type": ["string", "null"]},
        "stopLoss": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "takeProfit": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "commission": {"type": ["number", "null"], "minimum": 0},
        "fees": {"type": ["number", "null"], "minimum": 0},
        "status": {"type": ["string", "null"], "enum": ["Open", "Closed", "Cancelled", None]},
        "strategy": {"type": ["string", "null"]},
        "setup": {"type": ["string", "null"]},
        "timeframe": {"type": ["string", "null"]},
        "marketCondition": {"type": ["string", "null"]},
        "mood": {"type": ["integer", "null"], "minimum": 1, "maximum": 5},
        "notes": {"type": ["string", "null"]},
    },
}


@dataclass(frozen=True)
class TradeRecord:
    """
    One executed position.

    Derived fields (pnl, pips, return_percent, holding_period_hours,
    risk_reward_ratio) are filled in once by trade_annotator when the exit
    price becomes available and are read-only afterwards. Records are
    frozen so the analytics modules cannot alter them.
    """
    symbol: str
    direction: Direction
    entry_price: Optional[float]
    quantity: Optional[float]
    exit_price: Optional[float] = None
    lot_type: LotType = LotType.MICRO
    entry_time: Optional[datetime.datetime] = None
    exit_time: Optional[datetime.datetime] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    commission: float = 0.0
    fees: float = 0.0
    status: TradeStatus = TradeStatus.OPEN
    # derived
    pnl: Optional[float] = None
    pips: Optional[float] = None
    return_percent: Optional[float] = None
    holding_period_hours: Optional[int] = None
    risk_reward_ratio: Optional[float] = None
    # categorical tags
    strategy: Optional[str] = None
    setup: Optional[str] = None
    timeframe: Optional[str] = None
    market_condition: Optional[str] = None
    mood: Optional[int] = None
    notes: Optional[str] = None
    account: Optional[str] = None
    trade_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "symbol", self.symbol.strip().upper())
        object.__setattr__(self, "direction", Direction(self.direction))
        object.__setattr__(self, "lot_type", LotType(self.lot_type or CONST.DEFAULT_LOT_TYPE))
        object.__setattr__(self, "status", TradeStatus(self.status))
        object.__setattr__(self, "entry_time", my_utils.to_naive_utc(self.entry_time))
        object.__setattr__(self, "exit_time", my_utils.to_naive_utc(self.exit_time))

    @property
    def is_closed(self) -> bool:
        """Closed for analytics: status Closed, or still Open but with an exit price."""
        if self.status == TradeStatus.CLOSED:
            return True
        return self.status == TradeStatus.OPEN and self.exit_price is not None

    @property
    def is_well_formed(self) -> bool:
        return (
            self.entry_price is not None
            and self.entry_price > 0
            and self.quantity is not None
            and self.quantity > 0
        )

    @property
    def net_pnl(self) -> Optional[float]:
        if self.pnl is None:
            return None
        return my_utils.round_money(self.pnl - (self.commission or 0) - (self.fees or 0))

    @property
    def outcome(self) -> str:
        if self.pnl is None:
            return "Pending"
        if self.pnl > 0:
            return "Win"
        if self.pnl < 0:
            return "Loss"
        return "Breakeven"

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TradeRecord":
        """Builds a record from a camelCase JSON payload (no validation)."""
        return cls(
            symbol=payload["symbol"],
            direction=payload["direction"],
            entry_price=_optional_float(payload.get("entryPrice")),
            quantity=_optional_float(payload.get("quantity")),
            exit_price=_optional_float(payload.get("exitPrice")),
            lot_type=payload.get("lotType") or CONST.DEFAULT_LOT_TYPE,
            entry_time=my_utils.parse_datetime(payload.get("entryTime")),
            exit_time=my_utils.parse_datetime(payload.get("exitTime")),
            stop_loss=_optional_float(payload.get("stopLoss")),
            take_profit=_optional_float(payload.get("takeProfit")),
            commission=float(payload.get("commission") or 0),
            fees=float(payload.get("fees") or 0),
            status=payload.get("status") or TradeStatus.OPEN,
            pnl=_optional_float(payload.get("pnl")),
            pips=_optional_float(payload.get("pips")),
            return_percent=_optional_float(payload.get("returnPercent")),
            holding_period_hours=payload.get("holdingPeriodHours"),
            risk_reward_ratio=_optional_float(payload.get("riskRewardRatio")),
            strategy=payload.get("strategy"),
            setup=payload.get("setup"),
            timeframe=payload.get("timeframe"),
            market_condition=payload.get("marketCondition"),
            mood=payload.get("mood"),
            notes=payload.get("notes"),
            account=payload.get("account"),
            trade_id=None if payload.get("id") is None else str(payload.get("id")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.trade_id,
            "account": self.account,
            "symbol": self.symbol,
            "direction": self.direction.value,
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "quantity": self.quantity,
            "lotType": self.lot_type.value,
            "entryTime": _isoformat(self.entry_time),
            "exitTime": _isoformat(self.exit_time),
            "stopLoss": self.stop_loss,
            "takeProfit": self.take_profit,
            "commission": self.commission,
            "fees": self.fees,
            "status": self.status.value,
            "pnl": self.pnl,
            "netPnL": self.net_pnl,
            "pips": self.pips,
            "returnPercent": self.return_percent,
            "holdingPeriodHours": self.holding_period_hours,
            "riskRewardRatio": self.risk_reward_ratio,
            "outcome": self.outcome,
            "strategy": self.strategy,
            "setup": self.setup,
            "timeframe": self.timeframe,
            "marketCondition": self.market_condition,
            "mood": self.mood,
            "notes": self.notes,
        }


@dataclass
class TradeSelection:
    """Closed, well-formed trades plus the count of closed records that had to be dropped."""
    closed: List[TradeRecord] = field(default_factory=list)
    excluded: int = 0


def validate_trade_payload(payload: Dict[str, Any]) -> List[str]:
    """Returns the list of schema violations for a raw trade payload (empty when valid)."""
    validator = jsonschema.Draft202012Validator(TRADE_RECORD_SCHEMA)
    messages = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: list(e.path)):
        location = ".".join(str(p) for p in error.path) or "record"
        messages.append(f"{location}: {error.message}")
    return messages


def trade_from_payload(payload: Dict[str, Any]) -> TradeRecord:
    """Validates a raw payload and builds a TradeRecord, raising InvalidTradeRecord on failure."""
    errors = validate_trade_payload(payload)
    if errors:
        raise InvalidTradeRecord(f"Invalid trade record: {errors[0]}", errors)
    try:
        return TradeRecord.from_dict(payload)
    except ValueError as exc:
        raise InvalidTradeRecord(f"Invalid trade record: {exc}") from exc


def select_closed_trades(trades: Iterable[TradeRecord]) -> TradeSelection:
    """
    Filters a snapshot down to the trades the aggregators work on.

    Open and cancelled trades are skipped silently. Closed trades missing an
    entry price, a quantity or a computed pnl are counted as excluded so the
    caller can report them.
    """
    selection = TradeSelection()
    for trade in trades:
        if not trade.is_closed:
            continue
        if not trade.is_well_formed or trade.pnl is None:
            selection.excluded += 1
            continue
        selection.closed.append(trade)
    if selection.excluded:
        LOGGER.warning("Excluded %d malformed closed trade(s) from analytics", selection.excluded)
    return selection


def sort_by_exit_time(trades: Iterable[TradeRecord]) -> List[TradeRecord]:
    """Sorts ascending by exit time; trades without one keep their order at the end."""
    return sorted(
        trades,
        key=lambda t: (t.exit_time is None, t.exit_time or datetime.datetime.min),
    )


def _optional_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _isoformat(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None
