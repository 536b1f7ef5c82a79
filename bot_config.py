from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from strategy.models import ConfigError, StrategyMode

PROJECT_ROOT = Path(__file__).resolve().parent
DOTENV_PATH = PROJECT_ROOT / ".env"

EARLY_ENV_WARNINGS: List[str] = []

DEFAULT_API_BASE_URL = "https://api.coinone.co.kr"
DEFAULT_EXCLUDED_SYMBOLS: Tuple[str, ...] = ("USDT", "USDC")


def _parse_bool_env(value: Optional[str], *, default: bool = False) -> bool:
    """Convert environment string to bool with sensible defaults."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_float_env(value: Optional[str], *, default: float) -> float:
    """Convert environment string to float with fallback and logging."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        EARLY_ENV_WARNINGS.append(
            f"Invalid float environment value '{value}'; using default {default:.2f}"
        )
        return default


def _parse_int_env(value: Optional[str], *, default: int) -> int:
    """Convert environment string to int with fallback and logging."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        EARLY_ENV_WARNINGS.append(
            f"Invalid int environment value '{value}'; using default {default}"
        )
        return default


def _parse_str_env(value: Optional[str], *, default: str) -> str:
    if value is None:
        return default
    stripped = value.strip()
    return stripped or default


def emit_early_env_warnings() -> None:
    """Log and clear any configuration warnings collected during loading."""
    global EARLY_ENV_WARNINGS
    for msg in EARLY_ENV_WARNINGS:
        logging.warning(msg)
    EARLY_ENV_WARNINGS = []


def load_env_file(dotenv_path: Optional[Path] = None) -> bool:
    """Load a .env file next to the project, falling back to the CWD lookup."""
    path = dotenv_path or DOTENV_PATH
    if path.exists():
        return load_dotenv(path, override=False)
    return load_dotenv(override=False)


@dataclass(frozen=True)
class ScreenerConfig:
    # Strategy
    strategy_mode: StrategyMode = StrategyMode.A
    ema_period: int = 20
    volume_sma_period: int = 20
    volume_multiplier: float = 1.10
    use_breakout_gate: bool = False
    breakout_lookback: int = 20
    pullback_lookback: int = 5
    pullback_band_pct: float = 0.02
    require_upday: bool = True
    top_n: int = 5

    # Universe / market data
    quote_currency: str = "KRW"
    universe_size: int = 50
    excluded_symbols: Tuple[str, ...] = DEFAULT_EXCLUDED_SYMBOLS
    candle_limit: int = 220
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 15.0
    max_workers: int = 8

    # Notifications
    telegram_bot_token: Optional[str] = field(default=None, repr=False)
    telegram_chat_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategy_mode", StrategyMode.parse(self.strategy_mode))
        for name in (
            "ema_period",
            "volume_sma_period",
            "breakout_lookback",
            "pullback_lookback",
            "universe_size",
            "candle_limit",
            "max_workers",
        ):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1 (got {getattr(self, name)})")
        if self.top_n < 0:
            raise ConfigError(f"top_n must be >= 0 (got {self.top_n})")

    @property
    def min_history(self) -> int:
        """Bars required before an asset can be evaluated."""
        return max(self.ema_period, self.volume_sma_period, self.breakout_lookback) + 5

    @property
    def breakout_gate_active(self) -> bool:
        return self.strategy_mode is StrategyMode.A and self.use_breakout_gate

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    def require_telegram(self) -> None:
        """Fail fast when a send is requested without credentials."""
        if not self.telegram_bot_token:
            raise ConfigError("Missing env: TELEGRAM_BOT_TOKEN")
        if not self.telegram_chat_id:
            raise ConfigError("Missing env: TELEGRAM_CHAT_ID")

    def describe(self) -> str:
        """One-line parameter summary used in report footers and logs."""
        return (
            f"Mode={self.strategy_mode.value} | EMA={self.ema_period} | "
            f"VOLx(A)={self.volume_multiplier} | Breakout(A)={str(self.use_breakout_gate).lower()} | "
            f"PullbackBand(B)={self.pullback_band_pct}"
        )


def _parse_symbol_list(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if value is None:
        return default
    symbols = [part.strip().upper() for part in value.split(",")]
    return tuple(s for s in symbols if s)


def load_screener_config_from_env() -> ScreenerConfig:
    """Build a ScreenerConfig from the process environment.

    Malformed numeric/bool values fall back to defaults with a warning queued
    in EARLY_ENV_WARNINGS. An unknown STRATEGY_MODE or an out-of-range value
    raises ConfigError.
    """
    return ScreenerConfig(
        strategy_mode=StrategyMode.parse(
            _parse_str_env(os.getenv("STRATEGY_MODE"), default="A")
        ),
        ema_period=_parse_int_env(os.getenv("EMA_PERIOD"), default=20),
        volume_sma_period=_parse_int_env(os.getenv("VOL_SMA_PERIOD"), default=20),
        volume_multiplier=_parse_float_env(os.getenv("VOL_MULTIPLIER_A"), default=1.10),
        use_breakout_gate=_parse_bool_env(os.getenv("USE_BREAKOUT_A"), default=False),
        breakout_lookback=_parse_int_env(os.getenv("BREAKOUT_LOOKBACK"), default=20),
        pullback_lookback=_parse_int_env(os.getenv("PULLBACK_LOOKBACK_B"), default=5),
        pullback_band_pct=_parse_float_env(os.getenv("PULLBACK_BAND_PCT_B"), default=0.02),
        require_upday=_parse_bool_env(os.getenv("REQUIRE_UPDAY_B"), default=True),
        top_n=_parse_int_env(os.getenv("TOP_N"), default=5),
        quote_currency=_parse_str_env(os.getenv("QUOTE_CURRENCY"), default="KRW").upper(),
        universe_size=_parse_int_env(os.getenv("UNIVERSE_SIZE"), default=50),
        excluded_symbols=_parse_symbol_list(
            os.getenv("EXCLUDED_SYMBOLS"), DEFAULT_EXCLUDED_SYMBOLS
        ),
        candle_limit=_parse_int_env(os.getenv("CANDLE_LIMIT"), default=220),
        api_base_url=_parse_str_env(
            os.getenv("COINONE_API_BASE_URL"), default=DEFAULT_API_BASE_URL
        ).rstrip("/"),
        request_timeout=_parse_float_env(os.getenv("HTTP_TIMEOUT_SECONDS"), default=15.0),
        max_workers=_parse_int_env(os.getenv("SCREENER_MAX_WORKERS"), default=8),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID") or None,
    )
