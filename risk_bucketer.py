import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import my_utils
from trade import TradeRecord, select_closed_trades

LOGGER = logging.getLogger(__name__)


class RiskBand(Enum):
    """Risk-percent bands; each band includes its upper edge."""
    LOW = ("Low (0-1%)", 1.0)
    MEDIUM = ("Medium (1-2%)", 2.0)
    HIGH = ("High (2-3%)", 3.0)
    VERY_HIGH = ("Very High (>3%)", None)

    def __init__(self, label: str, upper_bound: Optional[float]):
        self.label = label
        self.upper_bound = upper_bound


def classify_risk_percent(risk_percent: float) -> RiskBand:
    for band in RiskBand:
        if band.upper_bound is not None and risk_percent <= band.upper_bound:
            return band
    return RiskBand.VERY_HIGH


@dataclass
class TradeRisk:
    symbol: str
    entry_time: Optional[datetime.datetime]
    risk_amount: float
    risk_percent: float
    actual_pnl: float
    band: RiskBand

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "date": self.entry_time.isoformat() if self.entry_time else None,
            "riskAmount": self.risk_amount,
            "riskPercent": self.risk_percent,
            "actualPnL": self.actual_pnl,
            "band": self.band.label,
        }


@dataclass
class RiskBandShare:
    band: RiskBand
    count: int = 0
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"range": self.band.label, "count": self.count, "percentage": self.percentage}


@dataclass
class RiskDistribution:
    account_size: float
    bands: List[RiskBandShare] = field(default_factory=list)
    trades: List[TradeRisk] = field(default_factory=list)
    average_risk: float = 0.0
    max_risk: float = 0.0
    skipped_trades: int = 0
    excluded_trades: int = 0

    def count_for(self, band: RiskBand) -> int:
        return next(share.count for share in self.bands if share.band == band)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountSize": self.account_size,
            "averageRisk": self.average_risk,
            "maxRisk": self.max_risk,
            "riskDistribution": [share.to_dict() for share in self.bands],
            "riskPerTrade": [trade.to_dict() for trade in self.trades],
            "skippedTrades": self.skipped_trades,
            "excludedTrades": self.excluded_trades,
        }


def assess_trade_risk(trade: TradeRecord, account_size: float) -> TradeRisk:
    """Money at risk between entry and stop, as a percent of the account (0 for an empty account)."""
    risk_amount = abs(trade.entry_price - trade.stop_loss) * trade.quantity
    risk_percent = my_utils.safe_div(risk_amount, account_size) * 100 if account_size > 0 else 0.0
    risk_percent = my_utils.round_percent(risk_percent)
    return TradeRisk(
        symbol=trade.symbol,
        entry_time=trade.entry_time,
        risk_amount=my_utils.round_money(risk_amount),
        risk_percent=risk_percent,
        actual_pnl=my_utils.round_money(trade.pnl),
        band=classify_risk_percent(risk_percent),
    )


def bucket_trades_by_risk(trades: Iterable[TradeRecord], account_size: float) -> RiskDistribution:
    """
    Classifies closed trades into risk bands relative to account_size.

    Trades without a stop loss carry no measurable risk and are counted in
    skipped_trades rather than bucketed. Band percentages are shares of the
    bucketed trades.
    """
    selection = select_closed_trades(trades)
    distribution = RiskDistribution(account_size=account_size, excluded_trades=selection.excluded)

    for trade in selection.closed:
        if trade.stop_loss is None:
            distribution.skipped_trades += 1
            continue
        distribution.trades.append(assess_trade_risk(trade, account_size))

    if distribution.skipped_trades:
        LOGGER.info("%d trade(s) without a stop loss left out of risk bands", distribution.skipped_trades)

    total = len(distribution.trades)
    for band in RiskBand:
        count = sum(1 for risk in distribution.trades if risk.band == band)
        distribution.bands.append(
            RiskBandShare(
                band=band,
                count=count,
                percentage=my_utils.round_percent(my_utils.safe_div(count, total) * 100),
            )
        )

    percents = [risk.risk_percent for risk in distribution.trades]
    distribution.average_risk = my_utils.round_percent(my_utils.mean(percents))
    distribution.max_risk = my_utils.round_percent(max(percents, default=0.0))
    return distribution
