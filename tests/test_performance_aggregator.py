"""
Tests for summary statistics and streaks (performance_aggregator.py, streak.py).
"""

from datetime import datetime

import pytest

from fixtures.test_data import make_series, make_trade
from performance_aggregator import compute_performance_summary
from streak import Streak


class TestPerformanceSummary:

    def test_empty_snapshot(self):
        summary = compute_performance_summary([], 10000)
        assert summary.total_trades == 0
        assert summary.win_rate == 0.0
        assert summary.profit_factor == 0.0
        assert summary.current_streak == 0
        assert summary.portfolio_value == 10000.0
        assert summary.total_return == 0.0

    def test_basic_statistics(self):
        summary = compute_performance_summary(make_series([100, -50, 200, -25, 0]), 10000)
        assert summary.total_trades == 5
        assert summary.winning_trades == 2
        assert summary.losing_trades == 2
        assert summary.breakeven_trades == 1
        assert summary.win_rate == 40.0
        assert summary.total_pnl == 225.0
        assert summary.average_win == 150.0
        assert summary.average_loss == -37.5
        assert summary.average_trade == 45.0
        assert summary.profit_factor == 4.0
        assert summary.largest_win == 200.0
        assert summary.largest_loss == -50.0
        assert summary.portfolio_value == 10225.0
        assert summary.total_return == 2.25

    def test_counts_add_up(self):
        summary = compute_performance_summary(make_series([1, -1, 0, 0, 3]), 1000)
        assert summary.winning_trades + summary.losing_trades + summary.breakeven_trades == summary.total_trades

    def test_no_losers_gives_zero_profit_factor(self):
        summary = compute_performance_summary(make_series([10, 20]), 1000)
        assert summary.profit_factor == 0.0
        assert summary.win_rate == 100.0

    def test_costs_reduce_net_pnl(self):
        trades = [make_trade(100.0, commission=5.0, fees=1.0), make_trade(-40.0, commission=5.0, offset_hours=2)]
        summary = compute_performance_summary(trades, 1000)
        assert summary.total_pnl == 60.0
        assert summary.total_commission == 10.0
        assert summary.total_fees == 1.0
        assert summary.net_pnl == 49.0

    def test_streak_follows_exit_order_not_input_order(self):
        loss_first = make_trade(-10.0, exit_time=datetime(2024, 3, 1))
        win_later = make_trade(10.0, exit_time=datetime(2024, 3, 2))
        summary = compute_performance_summary([win_later, loss_first], 1000)
        assert summary.current_streak == 1

    def test_open_and_malformed_trades_are_left_out(self, quiet_logging):
        trades = make_series([50, -20]) + [make_trade(None), make_trade(30.0, status="Cancelled")]
        summary = compute_performance_summary(trades, 1000)
        assert summary.total_trades == 2
        assert summary.excluded_trades == 1

    def test_to_dict_uses_camel_case(self):
        payload = compute_performance_summary(make_series([10]), 1000).to_dict()
        assert payload["totalPnL"] == 10.0
        assert payload["winRate"] == 100.0
        assert "portfolioValue" in payload


class TestStreak:

    def test_longest_and_current(self):
        tracker = Streak.from_pnls([5, 5, -3, 4, 4, 4])
        assert tracker.longest_win_streak == 3
        assert tracker.longest_loss_streak == 1
        assert tracker.streak == 3
        assert tracker.describe() == "3W"

    def test_losing_run(self):
        tracker = Streak.from_pnls([5, -1, -2])
        assert tracker.streak == -2
        assert tracker.longest_loss_streak == 2
        assert tracker.describe() == "2L"

    @pytest.mark.parametrize(
        "pnls,expected",
        [([5, 0, 5], 2), ([-1, 0, -1], -2), ([0, 0], 0)],
    )
    def test_breakeven_neither_extends_nor_resets(self, pnls, expected):
        assert Streak.from_pnls(pnls).streak == expected

    def test_empty(self):
        tracker = Streak()
        assert tracker.streak == 0
        assert tracker.describe() == "-"

    def test_current_streak_never_exceeds_longest(self):
        tracker = Streak.from_pnls([1, -1, -1, -1, 1, 1])
        assert abs(tracker.streak) <= max(tracker.longest_win_streak, tracker.longest_loss_streak)
