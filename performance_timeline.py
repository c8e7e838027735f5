import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List

import my_utils
from constants import CONST
from trade import TradeRecord, select_closed_trades, sort_by_exit_time


class Interval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass
class TimelinePoint:
    date: str
    trades: int = 0
    pnl: float = 0.0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    portfolio_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "trades": self.trades,
            "pnl": self.pnl,
            "wins": self.wins,
            "losses": self.losses,
            "winRate": self.win_rate,
            "portfolioValue": self.portfolio_value,
        }


def interval_key(exit_time: datetime.datetime, interval: Interval) -> str:
    if interval == Interval.WEEKLY:
        # weeks start on Sunday
        week_start = exit_time.date() - datetime.timedelta(days=(exit_time.weekday() + 1) % 7)
        return week_start.strftime(CONST.DATE_FORMAT)
    if interval == Interval.MONTHLY:
        return exit_time.strftime(CONST.MONTH_FORMAT)
    return exit_time.strftime(CONST.DATE_FORMAT)


def build_performance_timeline(
    trades: Iterable[TradeRecord],
    starting_balance: float,
    interval=Interval.DAILY,
) -> List[TimelinePoint]:
    """
    P&L per day, week or month of exit, with the running account balance
    at the end of each period. Trades without an exit time are skipped.
    """
    interval = Interval(interval)
    points: Dict[str, TimelinePoint] = {}
    balance = starting_balance

    for trade in sort_by_exit_time(select_closed_trades(trades).closed):
        if trade.exit_time is None:
            continue
        key = interval_key(trade.exit_time, interval)
        point = points.setdefault(key, TimelinePoint(date=key))
        point.trades += 1
        point.pnl += trade.pnl
        balance += trade.pnl
        point.portfolio_value = balance
        if trade.pnl > 0:
            point.wins += 1
        elif trade.pnl < 0:
            point.losses += 1

    timeline = list(points.values())
    for point in timeline:
        point.win_rate = my_utils.round_percent(my_utils.safe_div(point.wins, point.trades) * 100)
        point.pnl = my_utils.round_money(point.pnl)
        point.portfolio_value = my_utils.round_money(point.portfolio_value)
    return timeline
