from typing import List, Optional


class TradeAnalyticsError(Exception):
    """Base class for errors raised by the analytics engine."""


class UnsupportedSymbol(TradeAnalyticsError, KeyError):
    """The symbol has no entry in the instrument table, so pip metrics are unavailable."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Unsupported currency pair: {symbol}")

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]


class InvalidTradeRecord(TradeAnalyticsError, ValueError):
    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = list(errors) if errors else [message]
        super().__init__(message)


class InstrumentTableError(TradeAnalyticsError, ValueError):
    pass
