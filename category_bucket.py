from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class CategoryBucket:
    """Represents the calculated statistics for one value of an analysis dimension."""
    dimension_value: str
    trades: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0
    win_rate: float = 0.0
    average_pnl: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimensionValue": self.dimension_value,
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "totalPnL": self.total_pnl,
            "winRate": self.win_rate,
            "averagePnL": self.average_pnl,
        }
