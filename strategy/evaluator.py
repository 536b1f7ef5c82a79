"""Strategy evaluation for a single asset.

Turns one asset's daily candles into an :class:`AnalysisResult` by reading
last-bar indicator values and applying the configured strategy mode:

- Mode A: close above EMA AND volume above SMA * multiplier AND (optionally)
  a breakout above the recent high.
- Mode B: pullback continuation, close just above the EMA within a band,
  enough recent up days and the same volume condition.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional, Sequence

from strategy.indicators import atr, ema, sma
from strategy.models import AnalysisResult, Candle, ConfigError, StrategyMode

if TYPE_CHECKING:
    from bot_config import ScreenerConfig

# ATR period used for risk levels, independent of the configurable periods.
ATR_PERIOD = 14


@dataclass(frozen=True)
class _BarSnapshot:
    """Last-bar values shared by both strategy modes."""

    last_close: float
    last_volume: float
    ema_last: float
    vol_sma_last: float
    atr_last: float
    recent_high: float


def _is_usable(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _take_snapshot(candles: Sequence[Candle], config: "ScreenerConfig") -> _BarSnapshot:
    closes = [c.close for c in candles]
    volumes = [c.volume for c in candles]
    last_idx = len(candles) - 1
    last = candles[last_idx]

    ema_series = ema(closes, config.ema_period)
    vol_sma_series = sma(volumes, config.volume_sma_period)
    atr_series = atr(candles, ATR_PERIOD)

    ema_last = float(ema_series.iloc[-1]) if len(ema_series) else math.nan
    vol_sma_last = float(vol_sma_series.iloc[-1]) if len(vol_sma_series) else math.nan
    atr_last = float(atr_series.iloc[-1]) if len(atr_series) else math.nan

    # Recent high excludes the current bar.
    start = max(0, last_idx - config.breakout_lookback + 1)
    window = [c.high for c in candles[start:last_idx] if math.isfinite(c.high)]
    recent_high = max(window) if window else last.close

    return _BarSnapshot(
        last_close=last.close,
        last_volume=last.volume,
        ema_last=ema_last,
        vol_sma_last=vol_sma_last,
        atr_last=atr_last,
        recent_high=recent_high,
    )


def breakout_ratio(snap: _BarSnapshot) -> float:
    if snap.recent_high > 0:
        return snap.last_close / snap.recent_high - 1
    return 0.0


def risk_levels(snap: _BarSnapshot) -> tuple[float, float]:
    """Return ``(stop, take)`` using ATR, then EMA, then fixed-percent fallbacks."""
    if _is_usable(snap.atr_last):
        stop = snap.last_close - 2 * snap.atr_last
    elif _is_usable(snap.ema_last):
        stop = snap.ema_last * 0.95
    else:
        stop = snap.last_close * 0.90

    if _is_usable(snap.atr_last):
        take = snap.last_close + 3 * snap.atr_last
    else:
        take = snap.last_close * 1.15
    return stop, take


def trend_condition(snap: _BarSnapshot) -> bool:
    return math.isfinite(snap.ema_last) and snap.last_close > snap.ema_last


def volume_condition(snap: _BarSnapshot, multiplier: float) -> bool:
    return _is_usable(snap.vol_sma_last) and snap.last_volume > snap.vol_sma_last * multiplier


def volume_ratio(snap: _BarSnapshot) -> float:
    if _is_usable(snap.vol_sma_last):
        return snap.last_volume / snap.vol_sma_last
    return math.nan


def ranking_score(snap: _BarSnapshot, vol_ratio: float) -> float:
    """Heuristic ranking key: EMA deviation plus excess volume ratio."""
    if not _is_usable(snap.ema_last):
        return 0.0
    score = snap.last_close / snap.ema_last - 1
    if math.isfinite(vol_ratio):
        score += vol_ratio - 1
    return score


def count_up_days(candles: Sequence[Candle], lookback: int) -> int:
    """Count closes higher than the prior close over the last ``lookback`` bars."""
    last_idx = len(candles) - 1
    up_days = 0
    for i in range(max(0, last_idx - lookback + 1), last_idx + 1):
        if i == 0:
            continue
        if candles[i].close > candles[i - 1].close:
            up_days += 1
    return up_days


def _evaluate_mode_a(
    candles: Sequence[Candle],
    snap: _BarSnapshot,
    config: "ScreenerConfig",
) -> tuple[bool, bool]:
    """Return ``(is_buy, cond_breakout)`` for trend + volume (+ breakout)."""
    is_breakout = snap.last_close > snap.recent_high
    cond_breakout = is_breakout if config.use_breakout_gate else True
    is_buy = (
        trend_condition(snap)
        and volume_condition(snap, config.volume_multiplier)
        and cond_breakout
    )
    return is_buy, cond_breakout


def _evaluate_mode_b(
    candles: Sequence[Candle],
    snap: _BarSnapshot,
    config: "ScreenerConfig",
) -> tuple[bool, bool]:
    """Return ``(is_buy, cond_breakout)`` for pullback continuation.

    Breakout is not part of this mode, so ``cond_breakout`` is always True.
    """
    if _is_usable(snap.ema_last):
        ema_distance = abs(snap.last_close - snap.ema_last) / snap.ema_last
    else:
        ema_distance = math.inf

    is_near_ema = ema_distance <= config.pullback_band_pct
    is_above_ema = trend_condition(snap)

    if config.require_upday:
        needed = math.ceil(config.pullback_lookback / 2)
        has_up_days = count_up_days(candles, config.pullback_lookback) >= needed
    else:
        has_up_days = True

    is_buy = (
        is_near_ema
        and is_above_ema
        and has_up_days
        and volume_condition(snap, config.volume_multiplier)
    )
    return is_buy, True


_MODE_EVALUATORS: Dict[
    StrategyMode,
    Callable[[Sequence[Candle], _BarSnapshot, "ScreenerConfig"], tuple[bool, bool]],
] = {
    StrategyMode.A: _evaluate_mode_a,
    StrategyMode.B: _evaluate_mode_b,
}


def evaluate(
    symbol: str,
    candles: Sequence[Candle],
    config: "ScreenerConfig",
) -> Optional[AnalysisResult]:
    """Evaluate the configured strategy on the latest bar of ``candles``.

    Args:
        symbol: Asset symbol used to label the result.
        candles: Daily candles in ascending timestamp order.
        config: Screener configuration (periods, thresholds, mode).

    Returns:
        An AnalysisResult, or None when there is not enough history.

    Raises:
        ConfigError: If ``config.strategy_mode`` is not a supported mode.
    """
    mode_fn = _MODE_EVALUATORS.get(config.strategy_mode)
    if mode_fn is None:
        raise ConfigError(f"Unsupported strategy mode: {config.strategy_mode!r}")

    if len(candles) < config.min_history:
        return None

    snap = _take_snapshot(candles, config)
    stop, take = risk_levels(snap)
    vol_ratio = volume_ratio(snap)
    is_buy, cond_breakout = mode_fn(candles, snap, config)

    return AnalysisResult(
        symbol=symbol,
        is_buy=is_buy,
        score=ranking_score(snap, vol_ratio),
        last_close=snap.last_close,
        ema_last=snap.ema_last,
        vol_ratio=vol_ratio,
        breakout_ratio=breakout_ratio(snap),
        stop=stop,
        take=take,
        cond_trend=trend_condition(snap),
        cond_volume=volume_condition(snap, config.volume_multiplier),
        cond_breakout=cond_breakout,
    )
