"""Technical indicator calculations.

This module provides the smoothing and volatility indicators used by the
strategy evaluator: EMA, SMA, True Range and ATR. Every series function
returns a float ``pd.Series`` positionally aligned with its input, so index
``i`` of the output corresponds to bar ``i`` of the source data.
"""
from __future__ import annotations

from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from strategy.models import Candle

CANDLE_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


def _as_float_array(values: Iterable[Any]) -> np.ndarray:
    """Convert an iterable to a float array, mapping None to NaN."""
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype=float, na_value=np.nan)
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def ema(values: Iterable[Any], period: int) -> pd.Series:
    """Return the exponential moving average of ``values``.

    The first output equals the first input (no warm-up window) and each
    subsequent output is ``k * value + (1 - k) * previous`` with
    ``k = 2 / (period + 1)``. Early values are biased toward the first
    observation until roughly 3-5x ``period`` bars have been seen.

    Args:
        values: Ordered numeric values.
        period: EMA period.

    Returns:
        Series of EMA values, same length as the input.
    """
    series = pd.Series(_as_float_array(values), dtype=float)
    if series.empty:
        return series
    return series.ewm(span=period, adjust=False).mean()


def sma(values: Iterable[Any], period: int) -> pd.Series:
    """Return the simple moving average of ``values`` from a windowed running sum.

    Positions before ``period - 1`` are NaN. A missing (None/NaN) input
    yields NaN at its own position and contributes nothing to the sums of
    the windows that contain it.

    Args:
        values: Ordered numeric values, possibly with holes.
        period: Window length.

    Returns:
        Series of SMA values, same length as the input.
    """
    arr = _as_float_array(values)
    n = len(arr)
    out = np.full(n, np.nan)
    if n < period or period <= 0:
        return pd.Series(out, dtype=float)

    missing = np.isnan(arr)
    cumsum = np.cumsum(np.where(missing, 0.0, arr))
    window_sum = cumsum[period - 1 :] - np.concatenate(([0.0], cumsum[:-period]))
    out[period - 1 :] = window_sum / period
    out[missing] = np.nan
    return pd.Series(out, dtype=float)


def true_range(current: Candle, previous: Candle) -> float:
    """Return the True Range of ``current`` relative to ``previous``."""
    return max(
        current.high - current.low,
        abs(current.high - previous.close),
        abs(current.low - previous.close),
    )


def atr(candles: Sequence[Candle], period: int = 14) -> pd.Series:
    """Return the Average True Range series for ``candles``.

    True Range is computed for each consecutive bar pair, a leading 0 is
    prepended for the first bar (it has no predecessor) and the result is
    smoothed with :func:`ema`. There is no separate warm-up gate, so early
    values are finite but statistically thin.

    Args:
        candles: Candles in ascending timestamp order.
        period: Smoothing period.

    Returns:
        Series of ATR values with one entry per candle, or an empty series
        for fewer than two candles.
    """
    if len(candles) < 2:
        return pd.Series([], dtype=float)

    df = candles_to_frame(candles)
    prev_close = df["close"].shift(1)
    tr_components = pd.concat(
        [
            df["high"] - df["low"],
            (df["high"] - prev_close).abs(),
            (df["low"] - prev_close).abs(),
        ],
        axis=1,
    )
    tr_aligned = tr_components.max(axis=1)
    tr_aligned.iloc[0] = 0.0
    return ema(tr_aligned, period)


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Return a DataFrame view of ``candles`` with one row per bar."""
    rows = [
        (c.timestamp, c.open, c.high, c.low, c.close, c.volume)
        for c in candles
    ]
    df = pd.DataFrame(rows, columns=list(CANDLE_COLUMNS))
    return df.astype({col: float for col in CANDLE_COLUMNS[1:]})
