"""Tests for bot_config.py environment loading."""
import logging

import pytest

import bot_config
from bot_config import ScreenerConfig, emit_early_env_warnings, load_screener_config_from_env
from strategy.models import ConfigError, StrategyMode

ENV_KEYS = (
    "STRATEGY_MODE",
    "EMA_PERIOD",
    "VOL_SMA_PERIOD",
    "VOL_MULTIPLIER_A",
    "USE_BREAKOUT_A",
    "BREAKOUT_LOOKBACK",
    "PULLBACK_LOOKBACK_B",
    "PULLBACK_BAND_PCT_B",
    "REQUIRE_UPDAY_B",
    "TOP_N",
    "QUOTE_CURRENCY",
    "UNIVERSE_SIZE",
    "EXCLUDED_SYMBOLS",
    "CANDLE_LIMIT",
    "COINONE_API_BASE_URL",
    "HTTP_TIMEOUT_SECONDS",
    "SCREENER_MAX_WORKERS",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(bot_config, "EARLY_ENV_WARNINGS", [])


class TestLoadScreenerConfig:
    def test_defaults(self):
        config = load_screener_config_from_env()

        assert config.strategy_mode is StrategyMode.A
        assert config.ema_period == 20
        assert config.volume_sma_period == 20
        assert config.volume_multiplier == pytest.approx(1.10)
        assert config.use_breakout_gate is False
        assert config.breakout_lookback == 20
        assert config.pullback_lookback == 5
        assert config.pullback_band_pct == pytest.approx(0.02)
        assert config.require_upday is True
        assert config.top_n == 5
        assert config.quote_currency == "KRW"
        assert config.universe_size == 50
        assert config.excluded_symbols == ("USDT", "USDC")
        assert config.candle_limit == 220
        assert config.telegram_enabled is False

    def test_reads_overrides(self, monkeypatch):
        monkeypatch.setenv("STRATEGY_MODE", "b")
        monkeypatch.setenv("EMA_PERIOD", "50")
        monkeypatch.setenv("USE_BREAKOUT_A", "true")
        monkeypatch.setenv("REQUIRE_UPDAY_B", "false")
        monkeypatch.setenv("PULLBACK_BAND_PCT_B", "0.03")
        monkeypatch.setenv("TOP_N", "0")
        monkeypatch.setenv("EXCLUDED_SYMBOLS", "usdt, dai")
        monkeypatch.setenv("COINONE_API_BASE_URL", "https://example.test/")

        config = load_screener_config_from_env()

        assert config.strategy_mode is StrategyMode.B
        assert config.ema_period == 50
        assert config.use_breakout_gate is True
        assert config.require_upday is False
        assert config.pullback_band_pct == pytest.approx(0.03)
        assert config.top_n == 0
        assert config.excluded_symbols == ("USDT", "DAI")
        assert config.api_base_url == "https://example.test"

    def test_unknown_strategy_mode_fails_fast(self, monkeypatch):
        monkeypatch.setenv("STRATEGY_MODE", "C")
        with pytest.raises(ConfigError, match="STRATEGY_MODE"):
            load_screener_config_from_env()

    def test_malformed_number_falls_back_with_warning(self, monkeypatch, caplog):
        monkeypatch.setenv("EMA_PERIOD", "twenty")
        config = load_screener_config_from_env()
        assert config.ema_period == 20

        with caplog.at_level(logging.WARNING):
            emit_early_env_warnings()
        assert any("twenty" in r.getMessage() for r in caplog.records)
        assert bot_config.EARLY_ENV_WARNINGS == []

    def test_negative_top_n_rejected(self, monkeypatch):
        monkeypatch.setenv("TOP_N", "-1")
        with pytest.raises(ConfigError):
            load_screener_config_from_env()


class TestScreenerConfig:
    def test_min_history(self):
        assert ScreenerConfig().min_history == 25
        assert ScreenerConfig(breakout_lookback=60).min_history == 65

    def test_zero_period_rejected(self):
        with pytest.raises(ConfigError):
            ScreenerConfig(ema_period=0)

    def test_breakout_gate_active_only_in_mode_a(self):
        assert ScreenerConfig(use_breakout_gate=True).breakout_gate_active is True
        assert ScreenerConfig(strategy_mode="B", use_breakout_gate=True).breakout_gate_active is False
        assert ScreenerConfig().breakout_gate_active is False

    def test_require_telegram(self):
        with pytest.raises(ConfigError, match="TELEGRAM_BOT_TOKEN"):
            ScreenerConfig().require_telegram()
        with pytest.raises(ConfigError, match="TELEGRAM_CHAT_ID"):
            ScreenerConfig(telegram_bot_token="t").require_telegram()
        ScreenerConfig(telegram_bot_token="t", telegram_chat_id="1").require_telegram()
