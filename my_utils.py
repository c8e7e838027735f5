import logging
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from constants import CONST

LOGGER = logging.getLogger(__name__)


def round_to(value, places):
    """
    Rounds half away from zero to the given number of decimal places.

    The float is converted through its shortest repr so that 0.125 rounds to
    0.13 rather than being subject to binary representation error. Negative
    zero is normalized to 0.0 so that JSON output never shows "-0.0".
    """
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded) + 0.0


def round_money(value):
    return round_to(value, CONST.MONEY_PLACES)


def round_pips(value):
    return round_to(value, CONST.PIP_PLACES)


def round_percent(value):
    return round_to(value, CONST.PERCENT_PLACES)


def safe_div(numerator, denominator, default=0.0):
    if not denominator:
        return default
    return numerator / denominator


def mean(values, default=0.0):
    values = list(values)
    if not values:
        return default
    return sum(values) / len(values)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to UTC and stripped of tzinfo; naive ones pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value) -> Optional[datetime]:
    """
    Parses ISO-8601 strings (with optional trailing Z or offset) and the
    "YYYY-MM-DD HH:MM:SS" form used by broker exports.

    Every result is naive: values carrying an offset are converted to UTC
    first, so parsed times can be compared with each other and with
    datetime.now(). Returns None for empty values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = datetime.strptime(text, CONST.DATE_TIME_FORMAT)
    return to_naive_utc(parsed)


def filter_by_attribute(records, attribute_name, target_value):
    """
    Filters records based on the value of a specific attribute.

    Args:
    records: An iterable of objects (dataclasses or namedtuples).
    attribute_name: The name of the attribute to filter by (as a string).
    target_value: The value to filter for.

    Returns:
    A new list containing only the records where the specified
    attribute's value matches the target_value.
    """
    return [
        item
        for item in records
        if getattr(item, attribute_name) == target_value
    ]


def period_start(period: Optional[str], now: datetime) -> Optional[datetime]:
    """Start of the look-back window for a period code, None for "all"."""
    if period == "all":
        return None
    days = CONST.PERIOD_DAYS.get(period, CONST.DEFAULT_PERIOD_DAYS)
    return now - timedelta(days=days)


def filter_by_period(trades: Iterable, period: Optional[str], now: Optional[datetime] = None) -> List:
    """
    Keeps trades whose entry time falls inside the period window.

    Unknown period codes fall back to 30 days. Trades without an entry
    time are kept only for the "all" period; how many were dropped is
    logged.
    """
    now = to_naive_utc(now) or datetime.now()
    start = period_start(period, now)
    trades = list(trades)
    if start is None:
        return trades
    undated = sum(1 for t in trades if t.entry_time is None)
    if undated:
        LOGGER.warning("%d trade(s) without an entry time left out of the %s period", undated, period)
    return [t for t in trades if t.entry_time is not None and t.entry_time >= start]


def average_timedelta(timedelta_list):
    """Calculates the average of a list of timedelta objects."""

    if not timedelta_list:
        return timedelta(0)  # Return 0 if the list is empty

    total_seconds = sum(map(lambda td: td.total_seconds(), timedelta_list))
    average_seconds = total_seconds / len(timedelta_list)
    return timedelta(seconds=average_seconds)
