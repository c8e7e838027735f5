"""
Tests for report assembly (trade_stats_processor.py).
"""

import json
from datetime import datetime, timezone

from config import Config
from constants import CONST
from fixtures.test_data import SAMPLE_CSV, VALID_PAYLOAD, make_trade
from performance_aggregator import compute_performance_summary
from trade_analytics_cli import main
from trade_import import import_trades_csv, import_trades_json
from trade_stats_processor import TradeStatsProcessor


class TestTradeStatsProcessor:

    def setup_method(self):
        self.config = Config()
        self.processor = TradeStatsProcessor(self.config)
        self.now = datetime(2024, 3, 10)
        self.trades = [
            make_trade(100.0, account="Live", entry_time=datetime(2024, 3, 5), exit_time=datetime(2024, 3, 5, 5)),
            make_trade(-40.0, account="Demo", entry_time=datetime(2024, 3, 6), exit_time=datetime(2024, 3, 6, 5)),
            make_trade(25.0, entry_time=datetime(2023, 1, 2), exit_time=datetime(2023, 1, 2, 5)),
        ]

    def test_report_sections(self):
        report = self.processor.build_report(self.trades, period="all", now=self.now)
        assert set(report) == {
            "period", "accountSize", "summary", "drawdown", "analysis", "topSymbols", "timeline", "risk",
        }
        assert report["accountSize"] == self.config.account_size
        assert report["summary"]["totalTrades"] == 3
        assert report["summary"]["totalPnL"] == 85.0
        assert "byStrategy" in report["analysis"]
        json.dumps(report)

    def test_period_filter(self):
        report = self.processor.build_report(self.trades, period="7d", now=self.now)
        assert report["period"] == "7d"
        assert report["summary"]["totalTrades"] == 2

    def test_default_period_from_config(self):
        report = self.processor.build_report(self.trades, now=self.now)
        assert report["period"] == self.config.default_period
        assert report["summary"]["totalTrades"] == 2

    def test_account_size_override(self):
        report = self.processor.build_report(self.trades, period="all", account_size=1000, now=self.now)
        assert report["summary"]["portfolioValue"] == 1085.0
        assert report["drawdown"]["startingBalance"] == 1000.0

    def test_account_reports(self):
        reports = self.processor.build_account_reports(self.trades, period="all", now=self.now)
        assert set(reports) == {"Live", "Demo", CONST.NO_ACCOUNT, CONST.ALL_ACCOUNTS}
        assert reports["Live"]["summary"]["totalPnL"] == 100.0
        assert reports[CONST.ALL_ACCOUNTS]["summary"]["totalTrades"] == 3

    def test_import_trades_uses_configured_lot_type(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text(SAMPLE_CSV)
        result = self.processor.import_trades(path)
        assert result.imported == 2
        assert result.trades[0].pnl == 700.0


def test_extra_instrument_table_from_config(tmp_path):
    table_path = tmp_path / "extra.json"
    table_path.write_text(json.dumps({"USDSGD": {"pipValuePerStandardLot": 7.4, "pipDecimalPlace": 4}}))
    (tmp_path / "config.ini").write_text(f"[instruments]\nextra_table_path = {table_path}\n")
    processor = TradeStatsProcessor(Config(config_dir=str(tmp_path)))
    assert "USDSGD" in processor.table
    assert "EURUSD" in processor.table


class TestMixedTimestampSources:

    def setup_method(self):
        self.processor = TradeStatsProcessor(Config())
        self.json_trades = import_trades_json(json.dumps([VALID_PAYLOAD])).trades
        self.csv_trades = import_trades_csv(SAMPLE_CSV).trades

    def test_json_trades_report_with_default_period(self):
        report = self.processor.build_report(self.json_trades, now=datetime(2024, 3, 10))
        assert report["period"] == "30d"
        assert report["summary"]["totalTrades"] == 1
        assert report["summary"]["totalPnL"] == 7.0

    def test_json_trades_report_against_aware_now(self):
        now = datetime(2024, 3, 10, tzinfo=timezone.utc)
        report = self.processor.build_report(self.json_trades, period="7d", now=now)
        assert report["summary"]["totalTrades"] == 1

    def test_csv_and_json_trades_in_one_snapshot(self):
        mixed = self.csv_trades + self.json_trades
        summary = compute_performance_summary(mixed, 10000)
        assert summary.total_trades == 3
        assert summary.total_pnl == 251.0
        report = self.processor.build_report(mixed, period="all")
        assert len(report["drawdown"]["history"]) == 3
        assert report["timeline"][0]["date"] == "2024-03-04"

    def test_cli_report_on_json_file(self, tmp_path, capsys):
        path = tmp_path / "trades.json"
        path.write_text(json.dumps([VALID_PAYLOAD]))
        assert main(["report", str(path)], config=Config()) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["import"]["imported"] == 1


def test_undated_trades_are_logged_when_filtering(quiet_logging):
    processor = TradeStatsProcessor(Config())
    trades = [
        make_trade(10.0, entry_time=datetime(2024, 3, 5)),
        make_trade(20.0, entry_time=None),
    ]
    report = processor.build_report(trades, period="7d", now=datetime(2024, 3, 10))
    assert report["summary"]["totalTrades"] == 1
    assert "1 trade(s) without an entry time" in quiet_logging.text


def test_configured_strategy_tags(tmp_path):
    (tmp_path / "config.ini").write_text("[tags]\nstrategies = Breakout, Reversal\n")
    processor = TradeStatsProcessor(Config(config_dir=str(tmp_path)))
    trades = [
        make_trade(10.0, strategy="breakout"),
        make_trade(-5.0, strategy="Breakot", offset_hours=2),
    ]
    report = processor.build_report(trades, period="all")
    values = {b["dimensionValue"]: b["trades"] for b in report["analysis"]["byStrategy"]}
    assert values == {"Breakout": 1, "Unknown": 1}
    assert "bySetup" in report["analysis"]
