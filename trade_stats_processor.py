import dataclasses
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import my_utils
from config import Config
from constants import CONST
from drawdown_tracker import track_drawdown
from instruments import DEFAULT_TABLE, InstrumentTable, load_instrument_table
from performance_aggregator import compute_performance_summary
from performance_timeline import build_performance_timeline
from risk_bucketer import bucket_trades_by_risk
from symbol_performance import compute_symbol_performance
from trade import TradeRecord
from trade_analyzer import Dimension, DimensionDomain, TradeAnalyzer
from trade_import import ImportResult, import_trades_file

LOGGER = logging.getLogger(__name__)


class TradeStatsProcessor:
    """
    Runs every analytics component against one trade snapshot and
    assembles a JSON-serializable report.

    The components share nothing but the (immutable) input list, so the
    report is recomputed from scratch on every call.
    """

    def __init__(self, config: Config, table: Optional[InstrumentTable] = None):
        self.config = config
        self.table = table or self._load_instrument_table()

    def _load_instrument_table(self) -> InstrumentTable:
        path = self.config.extra_table_path
        if not path:
            return DEFAULT_TABLE
        return load_instrument_table(path)

    def import_trades(self, path) -> ImportResult:
        """Loads and annotates trades from a CSV or JSON file with this processor's instrument table."""
        return import_trades_file(path, self.table, default_lot_type=self.config.import_lot_type)

    def dimension_domains(self) -> Dict[Dimension, DimensionDomain]:
        """Configured strategy/setup tag lists; dimensions without one use the observed tags."""
        domains = {}
        if self.config.strategy_tags:
            domains[Dimension.STRATEGY] = DimensionDomain(self.config.strategy_tags)
        if self.config.setup_tags:
            domains[Dimension.SETUP] = DimensionDomain(self.config.setup_tags)
        return domains

    def analyzer_for(self, trades: List[TradeRecord]) -> TradeAnalyzer:
        return TradeAnalyzer(list(trades), self.dimension_domains())

    def build_report(
        self,
        trades: Iterable[TradeRecord],
        period: Optional[str] = None,
        account_size: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Args:
            trades: Annotated trade records.
            period: Look-back window on entry time ("7d", "30d", "90d", "1y", "all").
                Defaults to the configured period.
            account_size: Starting balance; defaults to the configured account size.
            now: Reference time for the period window.
        """
        period = period or self.config.default_period
        account_size = self.config.account_size if account_size is None else account_size
        snapshot = my_utils.filter_by_period(list(trades), period, now)

        summary = compute_performance_summary(snapshot, account_size)
        drawdown = track_drawdown(snapshot, account_size)
        analysis = self.analyzer_for(snapshot).analyze_all()
        symbols = compute_symbol_performance(snapshot, limit=self.config.symbol_limit)
        timeline = build_performance_timeline(snapshot, account_size, self.config.timeline_interval)
        risk = bucket_trades_by_risk(snapshot, account_size)

        if summary.excluded_trades:
            LOGGER.warning(
                "%d malformed trade(s) left out of the %s report", summary.excluded_trades, period
            )

        return {
            "period": period,
            "accountSize": account_size,
            "summary": summary.to_dict(),
            "drawdown": drawdown.to_dict(),
            "analysis": {key: [b.to_dict() for b in buckets] for key, buckets in analysis.items()},
            "topSymbols": [s.to_dict() for s in symbols],
            "timeline": [p.to_dict() for p in timeline],
            "risk": risk.to_dict(),
        }

    def get_account_names(self, trades: Iterable[TradeRecord]) -> List[str]:
        names = {trade.account or CONST.NO_ACCOUNT for trade in trades}
        return sorted(names)

    def build_account_reports(
        self,
        trades: Iterable[TradeRecord],
        period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """One report per account plus a combined report under CONST.ALL_ACCOUNTS."""
        trades = [
            t if t.account else _with_account(t, CONST.NO_ACCOUNT)
            for t in trades
        ]
        reports = {}
        for account_name in self.get_account_names(trades):
            filtered_list = my_utils.filter_by_attribute(trades, "account", account_name)
            reports[account_name] = self.build_report(filtered_list, period=period, now=now)
        reports[CONST.ALL_ACCOUNTS] = self.build_report(trades, period=period, now=now)
        return reports


def _with_account(trade: TradeRecord, account: str) -> TradeRecord:
    return dataclasses.replace(trade, account=account)
