import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

import my_utils
from category_bucket import CategoryBucket
from constants import CONST
from trade import TradeRecord, select_closed_trades

TIME_BLOCKS = ("00:00-06:00", "06:00-12:00", "12:00-18:00", "18:00-00:00")
WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
TIMEFRAMES = ("1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w", "1M")
MARKET_CONDITIONS = ("Trending", "Ranging", "Volatile", "Quiet")


class Dimension(str, Enum):
    TIME_OF_DAY = "timeOfDay"
    DAY_OF_WEEK = "dayOfWeek"
    MONTH = "month"
    STRATEGY = "strategy"
    SETUP = "setup"
    TIMEFRAME = "timeframe"
    MARKET_CONDITION = "marketCondition"

    @property
    def report_key(self) -> str:
        return "by" + self.value[0].upper() + self.value[1:]


def time_block(dt: datetime.datetime) -> str:
    """Six-hour block of the day containing dt."""
    return TIME_BLOCKS[dt.hour // 6]


def weekday_name(dt: datetime.datetime) -> str:
    # datetime.weekday() is Monday=0; WEEKDAYS starts on Sunday
    return WEEKDAYS[(dt.weekday() + 1) % 7]


def month_name(dt: datetime.datetime) -> str:
    return MONTHS[dt.month - 1]


class DimensionDomain:
    """
    The closed set of values a dimension may take in one analysis call.

    Raw values are matched after trimming (and case-folding unless the
    domain is case sensitive). Anything outside the domain, or empty,
    resolves to the Unknown bucket instead of opening a new one.
    """

    def __init__(self, values: Iterable[str], case_sensitive: bool = False):
        self.case_sensitive = case_sensitive
        self.values: List[str] = []
        self._lookup: Dict[str, str] = {}
        for value in values:
            key = self._key(value)
            if key and key not in self._lookup:
                self._lookup[key] = value.strip()
                self.values.append(value.strip())

    @classmethod
    def observed(cls, raw_values: Iterable[Optional[str]]) -> "DimensionDomain":
        """Domain built from the tags present in a snapshot; the first spelling seen wins."""
        return cls(v for v in raw_values if v and v.strip())

    def _key(self, value: Optional[str]) -> str:
        if value is None:
            return ""
        key = " ".join(str(value).split())
        return key if self.case_sensitive else key.casefold()

    def resolve(self, raw: Optional[str]) -> str:
        return self._lookup.get(self._key(raw), CONST.UNKNOWN)

    def __contains__(self, raw: Optional[str]) -> bool:
        return self._key(raw) in self._lookup


FIXED_DOMAINS = {
    Dimension.TIME_OF_DAY: DimensionDomain(TIME_BLOCKS, case_sensitive=True),
    Dimension.DAY_OF_WEEK: DimensionDomain(WEEKDAYS),
    Dimension.MONTH: DimensionDomain(MONTHS),
    # "1m" (minute) and "1M" (month) are different timeframes
    Dimension.TIMEFRAME: DimensionDomain(TIMEFRAMES, case_sensitive=True),
    Dimension.MARKET_CONDITION: DimensionDomain(MARKET_CONDITIONS),
}

EXTRACTORS: Dict[Dimension, Callable[[TradeRecord], Optional[str]]] = {
    Dimension.TIME_OF_DAY: lambda t: time_block(t.entry_time) if t.entry_time else None,
    Dimension.DAY_OF_WEEK: lambda t: weekday_name(t.entry_time) if t.entry_time else None,
    Dimension.MONTH: lambda t: month_name(t.entry_time) if t.entry_time else None,
    Dimension.STRATEGY: lambda t: t.strategy,
    Dimension.SETUP: lambda t: t.setup,
    Dimension.TIMEFRAME: lambda t: t.timeframe,
    Dimension.MARKET_CONDITION: lambda t: t.market_condition,
}


class TradeAnalyzer:
    """
    Groups closed trades by a categorical dimension and computes per-bucket
    win/loss statistics.

    Args:
        trades (List[TradeRecord]): The trade snapshot. Only closed,
            well-formed trades are analyzed; the rest are counted in
            excluded_trades.
        domains (Dict[Dimension, DimensionDomain]): Configured value sets
            that override the defaults, e.g. an allowed strategy list.
    """

    def __init__(
        self,
        trades: List[TradeRecord],
        domains: Optional[Dict[Dimension, DimensionDomain]] = None,
    ):
        if not isinstance(trades, list) or not all(isinstance(t, TradeRecord) for t in trades):
            raise TypeError("Input 'trades' must be a list of TradeRecord objects.")
        selection = select_closed_trades(trades)
        self.trades = selection.closed
        self.excluded_trades = selection.excluded
        self.domains = dict(domains or {})

    def domain_for(self, dimension: Dimension) -> DimensionDomain:
        if dimension in self.domains:
            return self.domains[dimension]
        if dimension in FIXED_DOMAINS:
            return FIXED_DOMAINS[dimension]
        extract = EXTRACTORS[dimension]
        return DimensionDomain.observed(extract(t) for t in self.trades)

    def analyze_by(
        self, dimension: Dimension, domain: Optional[DimensionDomain] = None
    ) -> List[CategoryBucket]:
        """
        Buckets the trades by one dimension.

        Args:
            dimension (Dimension): What to group by.
            domain (DimensionDomain): Allowed values. Defaults to the domain configured on the
                analyzer, then the fixed domain of the dimension, and for
                free-form tags (strategy, setup) the tags observed in this
                snapshot.

        Returns:
            List[CategoryBucket]: One bucket per value that has trades,
                sorted by total P&L, best first.
        """
        dimension = Dimension(dimension)
        domain = domain or self.domain_for(dimension)
        extract = EXTRACTORS[dimension]

        accumulator: Dict[str, CategoryBucket] = {}
        for trade in self.trades:
            key = domain.resolve(extract(trade))
            bucket = accumulator.setdefault(key, CategoryBucket(dimension_value=key))
            bucket.trades += 1
            bucket.total_pnl += trade.pnl
            if trade.pnl > 0:
                bucket.wins += 1
            elif trade.pnl < 0:
                bucket.losses += 1

        buckets = list(accumulator.values())
        for bucket in buckets:
            bucket.win_rate = my_utils.round_percent(my_utils.safe_div(bucket.wins, bucket.trades) * 100)
            bucket.average_pnl = my_utils.round_money(my_utils.safe_div(bucket.total_pnl, bucket.trades))
            bucket.total_pnl = my_utils.round_money(bucket.total_pnl)

        return sorted(buckets, key=lambda b: b.total_pnl, reverse=True)

    def analyze_all(self) -> Dict[str, List[CategoryBucket]]:
        return {dimension.report_key: self.analyze_by(dimension) for dimension in Dimension}

    def print_table(self, buckets: List[CategoryBucket], title: str = ""):
        print(f"\n--- Trade Analysis {title} ---")
        if not buckets:
            print("\nNo trades to analyze.")
            return

        headers = ["Value", "Trades", "Win Rate", "W/L", "Total P&L", "Avg P&L"]
        widths = [14, 7, 10, 9, 12, 10]

        header_line = " | ".join(
            f"{h:<{w}}" if i == 0 else f"{h:>{w}}" for i, (h, w) in enumerate(zip(headers, widths))
        )
        separator = '-' * len(header_line)

        print(separator)
        print(header_line)
        print(separator)

        for bucket in buckets:
            cells = [
                bucket.dimension_value,
                str(bucket.trades),
                f"{bucket.win_rate:.2f}%",
                f"{bucket.wins}/{bucket.losses}",
                f"{bucket.total_pnl:,.2f}",
                f"{bucket.average_pnl:,.2f}",
            ]
            print(" | ".join(
                f"{c:<{w}}" if i == 0 else f"{c:>{w}}" for i, (c, w) in enumerate(zip(cells, widths))
            ))

        print(separator)
