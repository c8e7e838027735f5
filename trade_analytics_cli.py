#!/usr/bin/env python3
"""
Command line access to the trade analytics engine.

Commands:
  report FILE           - Full analytics report for a CSV/JSON trade file.
  breakdown FILE        - Print per-dimension buckets as a table.
  pnl                   - Forex P&L for one entry/exit.
  size                  - Recommended lot size for a risk budget.
  symbols               - List supported forex pairs.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from config import Config
from errors import TradeAnalyticsError
from pnl_calculator import compute_forex_pnl
from position_sizer import recommend_position_size
from trade import Direction, LotType
from trade_analyzer import Dimension
from trade_stats_processor import TradeStatsProcessor

LOGGER = logging.getLogger(__name__)
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _print_json(payload) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def _load_trades(processor: TradeStatsProcessor, path: str):
    result = processor.import_trades(path)
    for error in result.errors:
        LOGGER.warning(error)
    return result


def cmd_report(args: argparse.Namespace, config: Config) -> int:
    processor = TradeStatsProcessor(config)
    result = _load_trades(processor, args.file)
    if args.by_account:
        report = processor.build_account_reports(result.trades, period=args.period)
    else:
        report = processor.build_report(result.trades, period=args.period, account_size=args.account_size)
    report_with_import = {"import": result.to_dict(), "report": report}
    _print_json(report_with_import)
    return 0


def cmd_breakdown(args: argparse.Namespace, config: Config) -> int:
    processor = TradeStatsProcessor(config)
    result = _load_trades(processor, args.file)
    analyzer = processor.analyzer_for(result.trades)
    dimension = Dimension(args.dimension)
    analyzer.print_table(analyzer.analyze_by(dimension), title=f"by {dimension.value}")
    return 0


def cmd_pnl(args: argparse.Namespace, config: Config) -> int:
    processor = TradeStatsProcessor(config)
    pnl = compute_forex_pnl(
        args.entry,
        args.exit,
        args.lot_size,
        args.lot_type or config.default_lot_type,
        args.symbol,
        args.direction,
        processor.table,
    )
    _print_json(pnl.to_dict())
    return 0


def cmd_size(args: argparse.Namespace, config: Config) -> int:
    processor = TradeStatsProcessor(config)
    balance = config.account_size if args.balance is None else args.balance
    risk = config.default_risk_percent if args.risk is None else args.risk
    try:
        size = recommend_position_size(balance, risk, args.entry, args.stop, args.symbol, processor.table)
    except ValueError as exc:
        print(exc)
        return 2
    _print_json(size.to_dict())
    return 0


def cmd_symbols(_args: argparse.Namespace, config: Config) -> int:
    processor = TradeStatsProcessor(config)
    _print_json(processor.table.to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Trading performance analytics: P&L, drawdown, streaks and breakdowns."
    )
    parser.add_argument("--log-level", help="Override the configured log level (DEBUG, INFO, ...).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    report_parser = subparsers.add_parser("report", help="Build the full analytics report.")
    report_parser.add_argument("file", help="CSV or JSON file of trades.")
    report_parser.add_argument("--period", help="7d, 30d, 90d, 1y or all (default from config).")
    report_parser.add_argument("--account-size", type=float, help="Starting balance (default from config).")
    report_parser.add_argument("--by-account", action="store_true", help="One report per account.")

    breakdown_parser = subparsers.add_parser("breakdown", help="Print per-dimension statistics.")
    breakdown_parser.add_argument("file", help="CSV or JSON file of trades.")
    breakdown_parser.add_argument(
        "--dimension",
        "-d",
        default=Dimension.TIME_OF_DAY.value,
        choices=[d.value for d in Dimension],
    )

    pnl_parser = subparsers.add_parser("pnl", help="Forex P&L for one trade.")
    pnl_parser.add_argument("--symbol", required=True)
    pnl_parser.add_argument("--direction", required=True, choices=[d.value for d in Direction])
    pnl_parser.add_argument("--entry", type=float, required=True)
    pnl_parser.add_argument("--exit", type=float, required=True)
    pnl_parser.add_argument("--lot-size", type=float, default=1.0)
    pnl_parser.add_argument("--lot-type", choices=[lt.value for lt in LotType])

    size_parser = subparsers.add_parser("size", help="Recommended position size.")
    size_parser.add_argument("--symbol", required=True)
    size_parser.add_argument("--entry", type=float, required=True)
    size_parser.add_argument("--stop", type=float, required=True)
    size_parser.add_argument("--balance", type=float, help="Account balance (default from config).")
    size_parser.add_argument("--risk", type=float, help="Risk percent (default from config).")

    subparsers.add_parser("symbols", help="List supported forex pairs.")
    return parser


COMMANDS = {
    "report": cmd_report,
    "breakdown": cmd_breakdown,
    "pnl": cmd_pnl,
    "size": cmd_size,
    "symbols": cmd_symbols,
}


def main(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config or Config()
    logging.basicConfig(level=(args.log_level or config.log_level).upper(), format=LOG_FORMAT)

    try:
        return COMMANDS[args.command](args, config)
    except TradeAnalyticsError as exc:
        print(exc)
        return 2
    except FileNotFoundError as exc:
        print(exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
