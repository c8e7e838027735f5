"""
Instrument metadata for forex pip and lot calculations.

New pairs are added as data, either by extending DEFAULT_INSTRUMENTS or by
loading a JSON file shaped like it through load_instrument_table().
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jsonschema

from constants import CONST
from errors import InstrumentTableError, UnsupportedSymbol

LOGGER = logging.getLogger(__name__)

INSTRUMENT_TABLE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "propertyNames": {"pattern": "^[A-Za-z0-9._]{1,20}$"},
    "additionalProperties": {
        "type": "object",
        "required": ["pipValuePerStandardLot", "pipDecimalPlace"],
        "properties": {
            "base": {"type": "string"},
            "quote": {"type": "string"},
            "pipValuePerStandardLot": {"type": "number", "exclusiveMinimum": 0},
            "pipDecimalPlace": {"type": "integer", "enum": [2, 4]},
        },
        "additionalProperties": False,
    },
}

# USD value of one pip on a 100k position.
DEFAULT_INSTRUMENTS: Dict[str, Dict[str, Any]] = {
    "EURUSD": {"base": "EUR", "quote": "USD", "pipValuePerStandardLot": 10, "pipDecimalPlace": 4},
    "GBPUSD": {"base": "GBP", "quote": "USD", "pipValuePerStandardLot": 10, "pipDecimalPlace": 4},
    "AUDUSD": {"base": "AUD", "quote": "USD", "pipValuePerStandardLot": 10, "pipDecimalPlace": 4},
    "NZDUSD": {"base": "NZD", "quote": "USD", "pipValuePerStandardLot": 10, "pipDecimalPlace": 4},
    "USDCAD": {"base": "USD", "quote": "CAD", "pipValuePerStandardLot": 9.35, "pipDecimalPlace": 4},
    "USDCHF": {"base": "USD", "quote": "CHF", "pipValuePerStandardLot": 10.87, "pipDecimalPlace": 4},
    "USDJPY": {"base": "USD", "quote": "JPY", "pipValuePerStandardLot": 9.12, "pipDecimalPlace": 2},
    "EURJPY": {"base": "EUR", "quote": "JPY", "pipValuePerStandardLot": 9.12, "pipDecimalPlace": 2},
    "GBPJPY": {"base": "GBP", "quote": "JPY", "pipValuePerStandardLot": 9.12, "pipDecimalPlace": 2},
    "AUDJPY": {"base": "AUD", "quote": "JPY", "pipValuePerStandardLot": 9.12, "pipDecimalPlace": 2},
    "EURGBP": {"base": "EUR", "quote": "GBP", "pipValuePerStandardLot": 12.84, "pipDecimalPlace": 4},
    "EURAUD": {"base": "EUR", "quote": "AUD", "pipValuePerStandardLot": 6.57, "pipDecimalPlace": 4},
    "GBPAUD": {"base": "GBP", "quote": "AUD", "pipValuePerStandardLot": 6.57, "pipDecimalPlace": 4},
    "AUDCAD": {"base": "AUD", "quote": "CAD", "pipValuePerStandardLot": 7.35, "pipDecimalPlace": 4},
    "NZDCAD": {"base": "NZD", "quote": "CAD", "pipValuePerStandardLot": 7.35, "pipDecimalPlace": 4},
    "EURCHF": {"base": "EUR", "quote": "CHF", "pipValuePerStandardLot": 10.87, "pipDecimalPlace": 4},
    "GBPCHF": {"base": "GBP", "quote": "CHF", "pipValuePerStandardLot": 10.87, "pipDecimalPlace": 4},
}


@dataclass(frozen=True)
class InstrumentSpec:
    symbol: str
    pip_value_per_standard_lot: float
    pip_decimal_place: int
    base: Optional[str] = None
    quote: Optional[str] = None

    @property
    def pip_multiplier(self) -> int:
        """Price difference to pips: x100 for 2-decimal pairs, x10000 for 4-decimal pairs."""
        return 10 ** self.pip_decimal_place

    @property
    def pip_value_per_unit(self) -> float:
        return self.pip_value_per_standard_lot / CONST.STANDARD_LOT_UNITS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "quote": self.quote,
            "pipValuePerStandardLot": self.pip_value_per_standard_lot,
            "pipDecimalPlace": self.pip_decimal_place,
        }


class InstrumentTable:
    """Immutable uppercase-symbol -> InstrumentSpec mapping."""

    def __init__(self, specs: Mapping[str, InstrumentSpec]):
        self._specs = {symbol.upper(): spec for symbol, spec in specs.items()}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Mapping[str, Any]]) -> "InstrumentTable":
        normalized = {str(symbol).strip().upper(): dict(entry) for symbol, entry in payload.items()}
        try:
            jsonschema.validate(instance=normalized, schema=INSTRUMENT_TABLE_SCHEMA)
        except jsonschema.ValidationError as exc:
            raise InstrumentTableError(f"Instrument table validation failed: {exc.message}") from exc

        specs = {
            symbol: InstrumentSpec(
                symbol=symbol,
                pip_value_per_standard_lot=float(entry["pipValuePerStandardLot"]),
                pip_decimal_place=int(entry["pipDecimalPlace"]),
                base=entry.get("base"),
                quote=entry.get("quote"),
            )
            for symbol, entry in normalized.items()
        }
        return cls(specs)

    def lookup(self, symbol: str) -> InstrumentSpec:
        spec = self._specs.get((symbol or "").strip().upper())
        if spec is None:
            raise UnsupportedSymbol(symbol)
        return spec

    def is_supported(self, symbol: str) -> bool:
        return (symbol or "").strip().upper() in self._specs

    def supported_symbols(self) -> List[str]:
        return list(self._specs)

    def extend(self, payload: Mapping[str, Mapping[str, Any]]) -> "InstrumentTable":
        """Returns a new table with the given entries added or overriding existing ones."""
        additions = InstrumentTable.from_dict(payload)
        merged = dict(self._specs)
        merged.update(additions._specs)
        return InstrumentTable(merged)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {symbol: spec.to_dict() for symbol, spec in self._specs.items()}

    def __contains__(self, symbol: str) -> bool:
        return self.is_supported(symbol)

    def __len__(self) -> int:
        return len(self._specs)


DEFAULT_TABLE = InstrumentTable.from_dict(DEFAULT_INSTRUMENTS)


def load_instrument_table(path, base: InstrumentTable = DEFAULT_TABLE) -> InstrumentTable:
    """Extends the base table with the entries of a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as table_file:
            payload = json.load(table_file)
    except json.JSONDecodeError as exc:
        raise InstrumentTableError(f"Instrument table {path} is not valid JSON: {exc}") from exc

    table = base.extend(payload)
    LOGGER.info("Loaded %d instrument(s) from %s", len(payload), path)
    return table
