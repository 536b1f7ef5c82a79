"""Strategy layer: indicators, per-asset evaluation and signal ranking."""
from strategy.models import AnalysisResult, Candle, ConfigError, StrategyMode
from strategy.indicators import atr, candles_to_frame, ema, sma, true_range
from strategy.evaluator import ATR_PERIOD, evaluate
from strategy.aggregator import ConditionStats, aggregate, condition_pass_stats

__all__ = [
    "AnalysisResult",
    "Candle",
    "ConfigError",
    "StrategyMode",
    "atr",
    "candles_to_frame",
    "ema",
    "sma",
    "true_range",
    "ATR_PERIOD",
    "evaluate",
    "ConditionStats",
    "aggregate",
    "condition_pass_stats",
]
