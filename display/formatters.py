"""Message formatting for the daily screening report.

This module renders the Telegram watchlist summary and the console
condition pass-rate lines. All output is plain text (no Markdown), so
symbols and numbers are sent without escaping.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, List, Optional, Sequence

from strategy.aggregator import ConditionStats
from strategy.models import AnalysisResult

if TYPE_CHECKING:
    from bot_config import ScreenerConfig

KST = timezone(timedelta(hours=9))

DISCLAIMER_LINES = (
    "※ This message is not trading advice.",
    "※ It lists assets that met the strategy conditions, for reference only.",
    "※ Always decide stop-loss and position sizing yourself.",
)


def report_date(now: Optional[datetime] = None) -> str:
    """Return the report date as YYYY-MM-DD in Korea Standard Time."""
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(KST).strftime("%Y-%m-%d")


def _fmt_price(value: float) -> str:
    return f"{value:.4f}" if math.isfinite(value) else "?"


def _fmt_ratio(value: float) -> str:
    return f"{value:.2f}x" if math.isfinite(value) else "?"


def build_watchlist_entry(rank: int, result: AnalysisResult) -> str:
    """Render one numbered watchlist entry with its reference levels."""
    return (
        f"{rank}) {result.symbol}\n"
        f"   · Last close: {_fmt_price(result.last_close)}\n"
        f"   · Volume multiple: {_fmt_ratio(result.vol_ratio)}\n"
        f"   · EMA level: {_fmt_price(result.ema_last)}\n"
        f"   ▶ Reference levels\n"
        f"   - Stop: {_fmt_price(result.stop)}\n"
        f"   - Target: {_fmt_price(result.take)}"
    )


def build_watchlist_message(
    buys: Sequence[AnalysisResult],
    config: "ScreenerConfig",
    date_str: str,
    universe_size: Optional[int] = None,
) -> str:
    """Render the daily summary sent to Telegram.

    Args:
        buys: Ranked buy signals (already truncated to top N).
        config: Screener configuration, used for the header and footer.
        date_str: Report date (see :func:`report_date`).
        universe_size: Number of assets screened; defaults to the
            configured universe size.

    Returns:
        Plain-text message body.
    """
    size = config.universe_size if universe_size is None else universe_size
    lines: List[str] = [
        f"[Coinone Daily Swing Summary] {date_str}",
        f"Universe: {config.quote_currency} turnover Top {size} | Timeframe: 1D",
        "",
    ]

    if not buys:
        lines.append("✅ Buy Watchlist: (none today)")
    else:
        lines.append(f"✅ Buy Watchlist (Top {len(buys)})")
        for rank, result in enumerate(buys, start=1):
            lines.append(build_watchlist_entry(rank, result))

    lines.append("")
    lines.append("📌 Notes")
    lines.extend(DISCLAIMER_LINES)
    lines.append(config.describe())
    return "\n".join(lines)


def format_condition_stats(stats: ConditionStats) -> List[str]:
    """Return condition pass-rate lines for diagnostic logging."""

    def line(label: str, count: int) -> str:
        return f"- {label}: {count}/{stats.total} ({stats.pct(count):.1f}%)"

    lines = [
        f"[COND STATS] total={stats.total}",
        line("condTrend", stats.trend),
        line("condVolume", stats.volume),
    ]
    if stats.breakout is not None:
        lines.append(line("condBreakout", stats.breakout))
    return lines
