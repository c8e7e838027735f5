import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import my_utils
from trade import TradeRecord, select_closed_trades, sort_by_exit_time


@dataclass
class DrawdownPoint:
    timestamp: Optional[datetime.datetime]
    equity: float
    peak_equity: float
    drawdown_abs: float
    drawdown_pct: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "equity": self.equity,
            "peakEquity": self.peak_equity,
            "drawdownAbs": self.drawdown_abs,
            "drawdownPct": self.drawdown_pct,
        }


@dataclass
class DrawdownReport:
    starting_balance: float
    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    final_equity: float = 0.0
    total_return: float = 0.0
    return_to_drawdown: float = 0.0
    history: List[DrawdownPoint] = field(default_factory=list)
    excluded_trades: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startingBalance": self.starting_balance,
            "maxDrawdown": self.max_drawdown,
            "maxDrawdownPct": self.max_drawdown_pct,
            "finalEquity": self.final_equity,
            "totalReturn": self.total_return,
            "returnToDrawdown": self.return_to_drawdown,
            "history": [point.to_dict() for point in self.history],
            "excludedTrades": self.excluded_trades,
        }


class DrawdownTracker:
    """
    Walks an equity curve one closed trade at a time.

    The peak only ever moves up, so drawdown is always measured from the
    best equity seen so far (the starting balance included).
    """

    def __init__(self, starting_balance: float):
        self.starting_balance = starting_balance
        self.equity = starting_balance
        self.peak = starting_balance
        self.max_drawdown = 0.0
        self.max_drawdown_pct = 0.0
        self.history: List[DrawdownPoint] = []

    def update(self, pnl: float, timestamp: Optional[datetime.datetime] = None) -> DrawdownPoint:
        self.equity += pnl
        self.peak = max(self.peak, self.equity)
        drawdown_abs = self.peak - self.equity
        drawdown_pct = my_utils.safe_div(drawdown_abs, self.peak) * 100 if self.peak > 0 else 0.0

        self.max_drawdown = max(self.max_drawdown, drawdown_abs)
        self.max_drawdown_pct = max(self.max_drawdown_pct, drawdown_pct)

        point = DrawdownPoint(
            timestamp=timestamp,
            equity=my_utils.round_money(self.equity),
            peak_equity=my_utils.round_money(self.peak),
            drawdown_abs=my_utils.round_money(drawdown_abs),
            drawdown_pct=my_utils.round_percent(drawdown_pct),
        )
        self.history.append(point)
        return point

    def report(self, excluded_trades: int = 0) -> DrawdownReport:
        total_return = my_utils.safe_div(self.equity - self.starting_balance, self.starting_balance) * 100
        return DrawdownReport(
            starting_balance=my_utils.round_money(self.starting_balance),
            max_drawdown=my_utils.round_money(self.max_drawdown),
            max_drawdown_pct=my_utils.round_percent(self.max_drawdown_pct),
            final_equity=my_utils.round_money(self.equity),
            total_return=my_utils.round_percent(total_return),
            return_to_drawdown=my_utils.round_to(my_utils.safe_div(total_return, self.max_drawdown_pct), 2),
            history=list(self.history),
            excluded_trades=excluded_trades,
        )


def track_drawdown(trades: Iterable[TradeRecord], starting_balance: float) -> DrawdownReport:
    """Builds the equity curve and maximum drawdown over the closed trades, in exit-time order."""
    selection = select_closed_trades(trades)
    tracker = DrawdownTracker(starting_balance)
    for trade in sort_by_exit_time(selection.closed):
        tracker.update(trade.pnl, trade.exit_time)
    return tracker.report(excluded_trades=selection.excluded)
