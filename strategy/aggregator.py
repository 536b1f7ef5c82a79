"""Signal aggregation: buy filtering, ranking and condition pass rates."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from strategy.models import AnalysisResult


def aggregate(results: Iterable[AnalysisResult], top_n: int) -> List[AnalysisResult]:
    """Return the top ``top_n`` buy signals ordered by score (highest first).

    Sorting is stable, so equal scores keep their input order.
    """
    if top_n <= 0:
        return []
    buys = [r for r in results if r.is_buy]
    buys.sort(key=lambda r: r.score, reverse=True)
    return buys[:top_n]


@dataclass(frozen=True)
class ConditionStats:
    """How many evaluated assets passed each gate, regardless of ``is_buy``.

    Attributes:
        total: Number of evaluated assets.
        trend: Count passing the trend condition.
        volume: Count passing the volume condition.
        breakout: Count passing the breakout gate, or None when the gate
            is not active.
    """

    total: int
    trend: int
    volume: int
    breakout: Optional[int] = None

    def pct(self, count: int) -> float:
        if self.total == 0:
            return 0.0
        return count / self.total * 100.0


def condition_pass_stats(
    results: Iterable[AnalysisResult],
    breakout_gate_active: bool = False,
) -> ConditionStats:
    results = list(results)
    breakout = (
        sum(1 for r in results if r.cond_breakout) if breakout_gate_active else None
    )
    return ConditionStats(
        total=len(results),
        trend=sum(1 for r in results if r.cond_trend),
        volume=sum(1 for r in results if r.cond_volume),
        breakout=breakout,
    )
