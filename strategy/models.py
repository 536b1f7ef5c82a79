"""Core data structures for the swing screener.

This module defines the immutable candle and analysis result records that
flow between the indicator library, the strategy evaluator and the signal
aggregator, plus the closed set of supported strategy modes.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict


class ConfigError(ValueError):
    """Raised when the screener configuration cannot be used."""


@dataclass(frozen=True, slots=True)
class Candle:
    """One daily OHLCV bar.

    Attributes:
        timestamp: Bar open time as reported by the exchange (seconds or ms).
        open: Opening price.
        high: Highest traded price.
        low: Lowest traded price.
        close: Closing price (always positive once filtered by the client).
        volume: Traded volume in base currency units.
    """

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Outcome of evaluating one asset on its latest daily bar.

    Attributes:
        symbol: Asset symbol (e.g. "BTC").
        is_buy: Whether the active strategy mode's gate passed.
        score: Ranking key, higher is better. Not a probability.
        last_close: Close of the latest bar.
        ema_last: EMA of closes at the latest bar.
        vol_ratio: Latest volume divided by its SMA, NaN when unavailable.
        breakout_ratio: ``last_close / recent_high - 1``.
        stop: Suggested stop level.
        take: Suggested take-profit level.
        cond_trend: Close above EMA.
        cond_volume: Volume above SMA times the configured multiplier.
        cond_breakout: Breakout gate outcome (True when not evaluated).
    """

    symbol: str
    is_buy: bool
    score: float
    last_close: float
    ema_last: float
    vol_ratio: float
    breakout_ratio: float
    stop: float
    take: float
    cond_trend: bool
    cond_volume: bool
    cond_breakout: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StrategyMode(str, Enum):
    """Supported strategy variants.

    A: trend + volume with an optional breakout gate.
    B: pullback continuation near the EMA.
    """

    A = "A"
    B = "B"

    @classmethod
    def parse(cls, raw: Any) -> "StrategyMode":
        """Resolve a mode from free-form text, failing loudly on unknown values."""
        if isinstance(raw, cls):
            return raw
        normalized = str(raw or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(mode.value for mode in cls)
            raise ConfigError(
                f"Unsupported STRATEGY_MODE '{raw}'; expected one of: {supported}"
            ) from None
