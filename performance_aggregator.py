import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable

import my_utils
from streak import Streak
from trade import TradeRecord, select_closed_trades, sort_by_exit_time

LOGGER = logging.getLogger(__name__)


@dataclass
class PerformanceSummary:
    """Headline statistics for a trade snapshot. Monetary fields are rounded to cents."""
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    net_pnl: float = 0.0
    total_commission: float = 0.0
    total_fees: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    average_trade: float = 0.0
    profit_factor: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    current_streak: int = 0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    total_return: float = 0.0
    portfolio_value: float = 0.0
    excluded_trades: int = 0

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        return {
            "totalTrades": values["total_trades"],
            "winningTrades": values["winning_trades"],
            "losingTrades": values["losing_trades"],
            "breakevenTrades": values["breakeven_trades"],
            "winRate": values["win_rate"],
            "totalPnL": values["total_pnl"],
            "netPnL": values["net_pnl"],
            "totalCommission": values["total_commission"],
            "totalFees": values["total_fees"],
            "averageWin": values["average_win"],
            "averageLoss": values["average_loss"],
            "averageTrade": values["average_trade"],
            "profitFactor": values["profit_factor"],
            "largestWin": values["largest_win"],
            "largestLoss": values["largest_loss"],
            "currentStreak": values["current_streak"],
            "longestWinStreak": values["longest_win_streak"],
            "longestLossStreak": values["longest_loss_streak"],
            "totalReturn": values["total_return"],
            "portfolioValue": values["portfolio_value"],
            "excludedTrades": values["excluded_trades"],
        }


def compute_performance_summary(
    trades: Iterable[TradeRecord], starting_balance: float
) -> PerformanceSummary:
    """
    Reduces a trade snapshot to a PerformanceSummary.

    Only trades that count as closed are used; malformed closed trades are
    left out and reported in excluded_trades. An empty snapshot gives an
    all-zero summary with portfolio_value equal to starting_balance.
    """
    selection = select_closed_trades(trades)
    closed = sort_by_exit_time(selection.closed)

    wins = [t.pnl for t in closed if t.pnl > 0]
    losses = [t.pnl for t in closed if t.pnl < 0]
    total = len(closed)

    total_pnl = sum(t.pnl for t in closed)
    total_commission = sum(t.commission or 0 for t in closed)
    total_fees = sum(t.fees or 0 for t in closed)

    average_win = my_utils.mean(wins)
    average_loss = my_utils.mean(losses)
    # No losers means no denominator; report 0 rather than infinity.
    profit_factor = my_utils.safe_div(average_win, abs(average_loss))

    streak_tracker = Streak.from_pnls(t.pnl for t in closed)

    portfolio_value = starting_balance + total_pnl
    total_return = my_utils.safe_div(portfolio_value - starting_balance, starting_balance) * 100

    summary = PerformanceSummary(
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=total - len(wins) - len(losses),
        win_rate=my_utils.round_percent(my_utils.safe_div(len(wins), total) * 100),
        total_pnl=my_utils.round_money(total_pnl),
        net_pnl=my_utils.round_money(total_pnl - total_commission - total_fees),
        total_commission=my_utils.round_money(total_commission),
        total_fees=my_utils.round_money(total_fees),
        average_win=my_utils.round_money(average_win),
        average_loss=my_utils.round_money(average_loss),
        average_trade=my_utils.round_money(my_utils.safe_div(total_pnl, total)),
        profit_factor=my_utils.round_to(profit_factor, 2),
        largest_win=my_utils.round_money(max(wins, default=0.0)),
        largest_loss=my_utils.round_money(min(losses, default=0.0)),
        current_streak=streak_tracker.streak,
        longest_win_streak=streak_tracker.longest_win_streak,
        longest_loss_streak=streak_tracker.longest_loss_streak,
        total_return=my_utils.round_percent(total_return),
        portfolio_value=my_utils.round_money(portfolio_value),
        excluded_trades=selection.excluded,
    )
    LOGGER.debug(
        "Summary over %d trade(s): win rate %.2f%%, streak %s",
        total, summary.win_rate, streak_tracker.describe(),
    )
    return summary
