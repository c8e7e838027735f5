"""
Bulk import of trade records from broker CSV exports and JSON files.

Every imported row goes through trade_annotator.annotate_trade(), the same
step used for manually entered trades.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from errors import InvalidTradeRecord
from instruments import DEFAULT_TABLE, InstrumentTable
from trade import LotType, TradeRecord, TradeStatus, trade_from_payload
from trade_annotator import annotate_trade

LOGGER = logging.getLogger(__name__)

CSV_TEMPLATE_HEADER = [
    "Symbol", "Type", "Entry Price", "Exit Price", "Quantity", "Lot Size",
    "Entry Time", "Exit Time", "P&L", "Notes", "Strategy",
]

# CSV header -> payload key. "P&L" is informational only; P&L is always derived.
CSV_COLUMNS = {
    "symbol": "symbol",
    "type": "direction",
    "direction": "direction",
    "entry price": "entryPrice",
    "exit price": "exitPrice",
    "quantity": "quantity",
    "lot size": "lotSize",
    "lot type": "lotType",
    "entry time": "entryTime",
    "exit time": "exitTime",
    "stop loss": "stopLoss",
    "take profit": "takeProfit",
    "commission": "commission",
    "fees": "fees",
    "status": "status",
    "notes": "notes",
    "strategy": "strategy",
    "setup": "setup",
    "timeframe": "timeframe",
    "market condition": "marketCondition",
    "account": "account",
}
NUMERIC_FIELDS = {"entryPrice", "exitPrice", "quantity", "lotSize", "stopLoss", "takeProfit", "commission", "fees"}
DIRECTION_ALIASES = {"long": "Long", "buy": "Long", "short": "Short", "sell": "Short"}


@dataclass
class ImportResult:
    imported: int = 0
    duplicates: int = 0
    errors: List[str] = field(default_factory=list)
    trades: List[TradeRecord] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.imported > 0 or not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "imported": self.imported,
            "duplicates": self.duplicates,
            "errors": list(self.errors),
        }


def _dedupe_key(trade: TradeRecord) -> Tuple:
    return (trade.account, trade.symbol, trade.direction, trade.entry_time, trade.entry_price)


def _clean_csv_row(row: Dict[str, str], default_lot_type: LotType) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for header, raw in row.items():
        if header is None:
            continue
        key = CSV_COLUMNS.get(header.strip().lower())
        if key is None:
            continue
        value = (raw or "").strip()
        if value == "":
            continue
        if key in NUMERIC_FIELDS:
            try:
                payload[key] = float(value.replace(",", ""))
            except ValueError:
                payload[key] = value  # left for schema validation to report
        else:
            payload[key] = value

    if "direction" in payload:
        payload["direction"] = DIRECTION_ALIASES.get(str(payload["direction"]).lower(), payload["direction"])
    if "lotType" in payload:
        payload["lotType"] = str(payload["lotType"]).lower()

    # Broker exports quote forex size in lots; that is the quantity used for pip P&L.
    lot_size = payload.pop("lotSize", None)
    if lot_size is not None:
        payload["quantity"] = lot_size
        payload.setdefault("lotType", default_lot_type.value)

    if "status" not in payload:
        payload["status"] = TradeStatus.CLOSED.value if "exitPrice" in payload else TradeStatus.OPEN.value
    return payload


def import_payloads(
    payloads: Iterable[Tuple[str, Dict[str, Any]]],
    table: InstrumentTable = DEFAULT_TABLE,
    existing: Optional[Iterable[TradeRecord]] = None,
) -> ImportResult:
    """
    Validates, annotates and de-duplicates labelled payloads.

    Args:
        payloads: (label, payload) pairs; the label prefixes error messages.
        table (InstrumentTable): Pip metadata for forex P&L.
        existing: Trades already stored; rows matching one of them count as duplicates.
    """
    result = ImportResult()
    seen = {_dedupe_key(t) for t in existing or []}

    for label, payload in payloads:
        try:
            trade = annotate_trade(trade_from_payload(payload), table)
        except InvalidTradeRecord as exc:
            for message in exc.errors:
                result.errors.append(f"{label}: {message}")
            LOGGER.warning("Rejected %s: %s", label, exc)
            continue

        key = _dedupe_key(trade)
        if key in seen:
            result.duplicates += 1
            continue
        seen.add(key)
        result.trades.append(trade)

    result.imported = len(result.trades)
    LOGGER.info(
        "Imported %d trade(s), %d duplicate(s), %d error(s)",
        result.imported, result.duplicates, len(result.errors),
    )
    return result


def import_trades_csv(
    source,
    table: InstrumentTable = DEFAULT_TABLE,
    default_lot_type=LotType.STANDARD,
    existing: Optional[Iterable[TradeRecord]] = None,
) -> ImportResult:
    """
    Imports a broker CSV export.

    Args:
        source: A path to the CSV file, or the CSV text itself.
        default_lot_type: Lot type applied to rows that give a Lot Size
            without a Lot Type column.
    """
    text = _read_source(source)
    reader = csv.DictReader(io.StringIO(text))
    lot_type = LotType(default_lot_type)
    # header is line 1, so data rows start at 2
    rows = (
        (f"Row {index}", _clean_csv_row(row, lot_type))
        for index, row in enumerate(reader, start=2)
    )
    return import_payloads(rows, table, existing)


def import_trades_json(
    source,
    table: InstrumentTable = DEFAULT_TABLE,
    existing: Optional[Iterable[TradeRecord]] = None,
) -> ImportResult:
    """Imports a JSON list of camelCase trade records (or {"trades": [...]})."""
    try:
        data = json.loads(_read_source(source))
    except json.JSONDecodeError as exc:
        return ImportResult(errors=[f"Invalid JSON: {exc}"])

    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        return ImportResult(errors=["Expected a list of trade records"])

    labelled = []
    errors = []
    for index, item in enumerate(data):
        if isinstance(item, dict):
            labelled.append((f"Record {index}", item))
        else:
            errors.append(f"Record {index}: expected an object")
    result = import_payloads(labelled, table, existing)
    result.errors = errors + result.errors
    return result


def import_trades_file(path, table: InstrumentTable = DEFAULT_TABLE, **kwargs) -> ImportResult:
    """Dispatches on the file extension (.csv or .json)."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return import_trades_csv(path, table, **kwargs)
    if suffix == ".json":
        kwargs.pop("default_lot_type", None)
        return import_trades_json(path, table, **kwargs)
    raise InvalidTradeRecord(f"Unsupported import format: {path.suffix or path.name}")


def _read_source(source) -> str:
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8-sig")
    if isinstance(source, str) and "\n" not in source:
        try:
            is_file = Path(source).is_file()
        except OSError:
            is_file = False
        if is_file:
            return Path(source).read_text(encoding="utf-8-sig")
    return source
