from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import my_utils
from trade import TradeRecord, select_closed_trades


@dataclass
class SymbolPerformance:
    symbol: str
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0
    total_volume: float = 0.0
    win_rate: float = 0.0
    average_pnl: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0
    average_hold_time_days: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "totalTrades": self.total_trades,
            "wins": self.wins,
            "losses": self.losses,
            "totalPnL": self.total_pnl,
            "totalVolume": self.total_volume,
            "winRate": self.win_rate,
            "averagePnL": self.average_pnl,
            "bestTrade": self.best_trade,
            "worstTrade": self.worst_trade,
            "averageHoldTimeDays": self.average_hold_time_days,
        }


def compute_symbol_performance(
    trades: Iterable[TradeRecord], limit: Optional[int] = None
) -> List[SymbolPerformance]:
    """Per-symbol statistics over the closed trades, best total P&L first."""
    stats: Dict[str, SymbolPerformance] = {}
    hold_times: Dict[str, list] = {}

    for trade in select_closed_trades(trades).closed:
        entry = stats.setdefault(trade.symbol, SymbolPerformance(symbol=trade.symbol))
        entry.total_trades += 1
        entry.total_pnl += trade.pnl
        entry.total_volume += trade.quantity * trade.entry_price
        if trade.pnl > 0:
            entry.wins += 1
            entry.best_trade = max(entry.best_trade, trade.pnl)
        elif trade.pnl < 0:
            entry.losses += 1
            entry.worst_trade = min(entry.worst_trade, trade.pnl)
        if trade.entry_time and trade.exit_time:
            hold_times.setdefault(trade.symbol, []).append(trade.exit_time - trade.entry_time)

    results = list(stats.values())
    for entry in results:
        entry.win_rate = my_utils.round_percent(my_utils.safe_div(entry.wins, entry.total_trades) * 100)
        entry.average_pnl = my_utils.round_money(my_utils.safe_div(entry.total_pnl, entry.total_trades))
        entry.total_pnl = my_utils.round_money(entry.total_pnl)
        entry.total_volume = my_utils.round_money(entry.total_volume)
        entry.best_trade = my_utils.round_money(entry.best_trade)
        entry.worst_trade = my_utils.round_money(entry.worst_trade)
        average_hold = my_utils.average_timedelta(hold_times.get(entry.symbol, []))
        entry.average_hold_time_days = my_utils.round_to(average_hold.total_seconds() / 86400, 2)

    results.sort(key=lambda s: s.total_pnl, reverse=True)
    return results[:limit] if limit else results
