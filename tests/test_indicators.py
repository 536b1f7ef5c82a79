"""Tests for strategy/indicators.py module."""
import math

import pandas as pd
import pytest

from strategy.indicators import atr, candles_to_frame, ema, sma, true_range
from strategy.models import Candle


def _candle(ts, close, high=None, low=None, volume=1000.0):
    return Candle(
        timestamp=ts,
        open=close,
        high=close if high is None else high,
        low=close if low is None else low,
        close=close,
        volume=volume,
    )


class TestEma:
    """Tests for ema function."""

    def test_empty_input_returns_empty_series(self):
        result = ema([], 20)
        assert isinstance(result, pd.Series)
        assert len(result) == 0

    def test_single_value_is_returned_unchanged(self):
        assert ema([42.5], 10).tolist() == [42.5]

    def test_first_output_equals_first_input(self):
        values = [7.0, 9.0, 3.0, 11.0]
        assert ema(values, 5).iloc[0] == 7.0

    def test_recurrence_uses_two_over_period_plus_one(self):
        # period 3 -> k = 0.5
        result = ema([1.0, 2.0, 3.0], 3)
        assert result.tolist() == pytest.approx([1.0, 1.5, 2.25])

    def test_constant_series_stays_exact(self):
        result = ema([100.0] * 50, 20)
        assert (result == 100.0).all()

    def test_length_matches_input(self):
        values = list(range(1, 31))
        assert len(ema(values, 20)) == 30

    def test_accepts_pandas_series(self):
        result = ema(pd.Series([2.0, 4.0]), 1)
        # period 1 -> k = 1, output tracks the input
        assert result.tolist() == [2.0, 4.0]


class TestSma:
    """Tests for sma function."""

    def test_empty_input_returns_empty_series(self):
        assert len(sma([], 3)) == 0

    def test_nan_before_full_window(self):
        result = sma([1.0, 2.0, 3.0, 4.0, 5.0], 3)
        assert math.isnan(result.iloc[0])
        assert math.isnan(result.iloc[1])
        assert result.iloc[2:].tolist() == pytest.approx([2.0, 3.0, 4.0])

    def test_trailing_mean_after_window(self):
        values = [3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0, 6.0]
        period = 4
        result = sma(values, period)
        for i in range(period - 1, len(values)):
            expected = sum(values[i - period + 1 : i + 1]) / period
            assert result.iloc[i] == pytest.approx(expected)

    def test_missing_value_is_a_hole_not_corruption(self):
        result = sma([1.0, None, 3.0, 4.0, 5.0], 2)
        assert math.isnan(result.iloc[0])
        assert math.isnan(result.iloc[1])
        assert result.iloc[3] == pytest.approx(3.5)
        assert result.iloc[4] == pytest.approx(4.5)

    def test_nan_input_treated_like_missing(self):
        result = sma([2.0, float("nan"), 6.0, 10.0], 2)
        assert math.isnan(result.iloc[1])
        assert result.iloc[3] == pytest.approx(8.0)

    def test_hole_leaves_the_window_cleanly(self):
        result = sma([1.0, 2.0, float("nan"), 4.0, 5.0], 2)
        assert result.iloc[1] == pytest.approx(1.5)
        assert math.isnan(result.iloc[2])
        assert result.iloc[4] == pytest.approx(4.5)

    def test_windows_after_a_hole_match_trailing_mean(self):
        values = [3.0, 8.0, 1.0, None, 7.0, 2.0, 9.0, 4.0, 6.0]
        period = 3
        result = sma(values, period)
        for i in range(period + 3, len(values)):
            expected = sum(values[i - period + 1 : i + 1]) / period
            assert result.iloc[i] == pytest.approx(expected)

    def test_window_longer_than_input_is_all_nan(self):
        result = sma([1.0, 2.0], 5)
        assert len(result) == 2
        assert result.isna().all()


class TestEmaMatchesPandas:
    """The EMA is the adjust=False exponential window with span=period."""

    def test_matches_explicit_recurrence(self):
        values = [10.0, 12.0, 11.0, 15.0, 14.0, 18.0]
        period = 4
        k = 2.0 / (period + 1)
        expected = [values[0]]
        for v in values[1:]:
            expected.append(k * v + (1 - k) * expected[-1])
        assert ema(values, period).tolist() == pytest.approx(expected)


class TestTrueRange:
    """Tests for true_range function."""

    def test_high_low_dominates(self):
        prev = _candle(1, 10.0)
        cur = _candle(2, 10.0, high=12.0, low=9.0)
        assert true_range(cur, prev) == pytest.approx(3.0)

    def test_gap_down_uses_previous_close(self):
        prev = _candle(1, 13.0)
        cur = _candle(2, 10.0, high=12.0, low=9.0)
        assert true_range(cur, prev) == pytest.approx(4.0)

    def test_gap_up_uses_previous_close(self):
        prev = _candle(1, 5.0)
        cur = _candle(2, 10.0, high=12.0, low=9.0)
        assert true_range(cur, prev) == pytest.approx(7.0)


class TestAtr:
    """Tests for atr function."""

    def test_fewer_than_two_candles_is_empty(self):
        assert len(atr([], 14)) == 0
        assert len(atr([_candle(1, 10.0)], 14)) == 0

    def test_length_matches_candles(self):
        candles = [_candle(i, 100.0 + i, high=101.0 + i, low=99.0 + i) for i in range(30)]
        assert len(atr(candles, 14)) == 30

    def test_first_value_is_zero_and_second_is_smoothed_range(self):
        candles = [
            _candle(1, 11.0, high=11.0, low=11.0),
            _candle(2, 11.0, high=12.0, low=10.0),
        ]
        result = atr(candles, 14)
        assert result.iloc[0] == 0.0
        assert result.iloc[1] == pytest.approx(2.0 * 2 / 15)

    def test_values_are_finite_before_period(self):
        candles = [_candle(i, 100.0, high=102.0, low=98.0) for i in range(5)]
        result = atr(candles, 14)
        assert all(math.isfinite(v) for v in result)
        assert result.iloc[-1] > 0

    def test_matches_true_range_ema(self):
        candles = [
            _candle(1, 10.0, high=10.5, low=9.5),
            _candle(2, 11.0, high=11.5, low=10.0),
            _candle(3, 10.0, high=11.2, low=9.8),
        ]
        trs = [0.0] + [true_range(candles[i], candles[i - 1]) for i in (1, 2)]
        assert atr(candles, 3).tolist() == pytest.approx(ema(trs, 3).tolist())


def test_candles_to_frame_columns_and_order():
    candles = [_candle(1, 10.0), _candle(2, 11.0)]
    df = candles_to_frame(candles)
    assert list(df.columns) == ["timestamp", "open", "high", "low", "close", "volume"]
    assert df["close"].tolist() == [10.0, 11.0]
