"""
Tests for the P&L timeline (performance_timeline.py).
"""

from datetime import datetime

import pytest

from fixtures.test_data import make_trade
from performance_timeline import Interval, build_performance_timeline, interval_key


class TestPerformanceTimeline:

    def setup_method(self):
        self.trades = [
            make_trade(50.0, exit_time=datetime(2024, 3, 4, 10)),
            make_trade(-20.0, exit_time=datetime(2024, 3, 4, 16)),
            make_trade(30.0, exit_time=datetime(2024, 3, 6, 12)),
            make_trade(10.0, exit_time=datetime(2024, 4, 1, 9)),
        ]

    def test_daily(self):
        timeline = build_performance_timeline(self.trades, 1000)
        assert [p.date for p in timeline] == ["2024-03-04", "2024-03-06", "2024-04-01"]
        first = timeline[0]
        assert first.trades == 2
        assert first.pnl == 30.0
        assert first.win_rate == 50.0
        assert first.portfolio_value == 1030.0
        assert timeline[-1].portfolio_value == 1070.0

    def test_weekly_starts_on_sunday(self):
        timeline = build_performance_timeline(self.trades, 1000, Interval.WEEKLY)
        assert [p.date for p in timeline] == ["2024-03-03", "2024-03-31"]
        assert timeline[0].trades == 3

    def test_monthly(self):
        timeline = build_performance_timeline(self.trades, 1000, "monthly")
        assert [(p.date, p.pnl) for p in timeline] == [("2024-03", 60.0), ("2024-04", 10.0)]

    def test_unknown_interval(self):
        with pytest.raises(ValueError):
            build_performance_timeline(self.trades, 1000, "hourly")


def test_interval_key_on_sunday_is_same_day():
    assert interval_key(datetime(2024, 3, 10, 8), Interval.WEEKLY) == "2024-03-10"
