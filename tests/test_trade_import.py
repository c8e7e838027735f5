"""
Tests for CSV/JSON bulk import (trade_import.py).
"""

import json

import pytest

from errors import InvalidTradeRecord
from fixtures.test_data import SAMPLE_CSV, VALID_PAYLOAD
from trade import Direction, LotType
from trade_import import (
    CSV_TEMPLATE_HEADER,
    import_trades_csv,
    import_trades_file,
    import_trades_json,
)


class TestCsvImport:

    def test_sample_export(self):
        result = import_trades_csv(SAMPLE_CSV)
        assert result.success
        assert result.imported == 2
        assert result.errors == []

        eurusd, usdjpy = result.trades
        assert eurusd.lot_type == LotType.STANDARD
        assert eurusd.quantity == 1.0
        assert eurusd.pnl == 700.0
        assert eurusd.pips == 70.0
        assert eurusd.strategy == "Breakout"
        assert eurusd.notes == "first"
        assert usdjpy.direction == Direction.SHORT
        assert usdjpy.pnl == -456.0

    def test_default_lot_type_is_configurable(self):
        result = import_trades_csv(SAMPLE_CSV, default_lot_type="micro")
        assert result.trades[0].pnl == 7.0

    def test_duplicates_against_existing(self):
        first = import_trades_csv(SAMPLE_CSV)
        again = import_trades_csv(SAMPLE_CSV, existing=first.trades)
        assert again.imported == 0
        assert again.duplicates == 2

    def test_duplicate_rows_in_one_file(self):
        lines = SAMPLE_CSV.strip().splitlines()
        text = "\n".join(lines + [lines[1]]) + "\n"
        result = import_trades_csv(text)
        assert result.imported == 2
        assert result.duplicates == 1

    def test_bad_rows_are_reported_with_row_number(self, quiet_logging):
        text = ",".join(CSV_TEMPLATE_HEADER) + "\n" + "EURUSD,Buy,abc,1.1,1,,,,,,\n" + "GBPUSD,Buy,1.25,1.26,1,,,,,,\n"
        result = import_trades_csv(text)
        assert result.imported == 1
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Row 2: entryPrice")
        assert result.success

    def test_row_without_exit_stays_open(self):
        text = ",".join(CSV_TEMPLATE_HEADER) + "\n" + "EURUSD,Buy,1.1,,1,,2024-03-04 09:30:00,,,,\n"
        trade = import_trades_csv(text).trades[0]
        assert trade.pnl is None
        assert not trade.is_closed

    def test_reads_from_file(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text(SAMPLE_CSV, encoding="utf-8")
        assert import_trades_csv(str(path)).imported == 2


class TestJsonImport:

    def test_list_of_records(self, quiet_logging):
        result = import_trades_json(json.dumps([VALID_PAYLOAD, "nope"]))
        assert result.imported == 1
        assert result.errors == ["Record 1: expected an object"]
        assert result.trades[0].pnl == 7.0

    def test_wrapped_records(self):
        result = import_trades_json(json.dumps({"trades": [VALID_PAYLOAD]}))
        assert result.imported == 1

    def test_invalid_json(self):
        result = import_trades_json("{oops")
        assert not result.success
        assert result.errors[0].startswith("Invalid JSON")

    def test_not_a_list(self):
        result = import_trades_json(json.dumps(42))
        assert result.errors == ["Expected a list of trade records"]

    def test_schema_errors(self, quiet_logging):
        bad = dict(VALID_PAYLOAD, direction="Up")
        result = import_trades_json(json.dumps([bad]))
        assert result.imported == 0
        assert result.errors[0].startswith("Record 0: direction")
        assert not result.success


class TestImportFile:

    def test_dispatches_on_extension(self, tmp_path):
        csv_path = tmp_path / "a.csv"
        csv_path.write_text(SAMPLE_CSV)
        json_path = tmp_path / "b.JSON"
        json_path.write_text(json.dumps([VALID_PAYLOAD]))

        assert import_trades_file(csv_path).imported == 2
        assert import_trades_file(json_path, default_lot_type="micro").imported == 1

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(InvalidTradeRecord):
            import_trades_file(tmp_path / "trades.xlsx")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            import_trades_file(tmp_path / "missing.csv")

    def test_result_to_dict(self):
        payload = import_trades_csv(SAMPLE_CSV).to_dict()
        assert payload == {"success": True, "imported": 2, "duplicates": 0, "errors": []}
