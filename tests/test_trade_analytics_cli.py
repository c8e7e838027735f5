"""
Tests for the command line entry point (trade_analytics_cli.py).
"""

import json

import pytest

from config import Config
from fixtures.test_data import SAMPLE_CSV
from trade_analytics_cli import build_parser, main


class TestCLICommands:

    def setup_method(self):
        self.config = Config()

    def test_pnl(self, capsys):
        exit_code = main(
            ["pnl", "--symbol", "EURUSD", "--direction", "Long", "--entry", "1.0850",
             "--exit", "1.0920", "--lot-type", "micro"],
            config=self.config,
        )
        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["pips"] == 70.0
        assert payload["pnl"] == 7.0

    def test_pnl_unsupported_symbol(self, capsys):
        exit_code = main(
            ["pnl", "--symbol", "XAUUSD", "--direction", "Long", "--entry", "1", "--exit", "2"],
            config=self.config,
        )
        assert exit_code == 2
        assert "Unsupported currency pair: XAUUSD" in capsys.readouterr().out

    def test_size(self, capsys):
        exit_code = main(
            ["size", "--symbol", "EURUSD", "--entry", "1.1000", "--stop", "1.0950", "--balance", "10000"],
            config=self.config,
        )
        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["lotType"] == "mini"
        assert payload["lotSize"] == 2.0

    def test_size_zero_stop(self, capsys):
        exit_code = main(
            ["size", "--symbol", "EURUSD", "--entry", "1.1", "--stop", "1.1"],
            config=self.config,
        )
        assert exit_code == 2
        assert "Stop loss" in capsys.readouterr().out

    def test_symbols(self, capsys):
        assert main(["symbols"], config=self.config) == 0
        assert "GBPJPY" in json.loads(capsys.readouterr().out)

    def test_report(self, tmp_path, capsys):
        path = tmp_path / "trades.csv"
        path.write_text(SAMPLE_CSV)
        assert main(["report", str(path), "--period", "all"], config=self.config) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["import"]["imported"] == 2
        assert payload["report"]["summary"]["totalPnL"] == 244.0

    def test_report_by_account(self, tmp_path, capsys):
        path = tmp_path / "trades.csv"
        path.write_text(SAMPLE_CSV)
        assert main(["report", str(path), "--period", "all", "--by-account"], config=self.config) == 0
        payload = json.loads(capsys.readouterr().out)
        assert "All Accounts" in payload["report"]

    def test_breakdown(self, tmp_path, capsys):
        path = tmp_path / "trades.csv"
        path.write_text(SAMPLE_CSV)
        assert main(["breakdown", str(path), "-d", "strategy"], config=self.config) == 0
        out = capsys.readouterr().out
        assert "Breakout" in out
        assert "Reversal" in out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["report", str(tmp_path / "missing.csv")], config=self.config) == 1

    def test_unsupported_format(self, tmp_path, capsys):
        path = tmp_path / "trades.txt"
        path.write_text("x")
        assert main(["report", str(path)], config=self.config) == 2


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
