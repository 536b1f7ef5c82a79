"""Display layer for console output and message formatting."""
from display.formatters import (
    build_watchlist_message,
    format_condition_stats,
    report_date,
)

__all__ = [
    "build_watchlist_message",
    "format_condition_stats",
    "report_date",
]
