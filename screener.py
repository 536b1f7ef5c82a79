#!/usr/bin/env python3
"""
Coinone KRW Daily Swing Screener

Entry point for one screening pass:
1. Load KRW tickers and select the turnover Top-N universe.
2. Fetch daily candles per asset concurrently and evaluate the strategy.
3. Rank buy signals, log condition pass rates and send the summary to Telegram.

Architecture:
- bot_config.py: Environment-driven configuration
- market/: Coinone REST client and universe selection
- strategy/: Indicators, per-asset evaluation, signal aggregation
- display/: Report formatting
- notifications/: Telegram delivery
"""
from __future__ import annotations

import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from bot_config import (
    ScreenerConfig,
    emit_early_env_warnings,
    load_env_file,
    load_screener_config_from_env,
)
from display.formatters import build_watchlist_message, format_condition_stats, report_date
from market.coinone import CoinoneMarketDataClient
from market.universe import select_universe
from notifications.telegram import notify_error, send_telegram_message
from strategy.aggregator import ConditionStats, aggregate, condition_pass_stats
from strategy.evaluator import evaluate
from strategy.models import AnalysisResult, Candle, ConfigError


class MarketDataSource(Protocol):
    def fetch_tickers(self) -> List[Dict[str, Any]]:
        ...

    def fetch_daily_candles(self, symbol: str, limit: int = 220) -> List[Candle]:
        ...


@dataclass
class ScreeningReport:
    universe: List[str]
    results: List[AnalysisResult]
    buys: List[AnalysisResult]
    stats: ConditionStats
    message: str
    sent: bool = False
    failed: List[str] = field(default_factory=list)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def build_client(config: ScreenerConfig) -> CoinoneMarketDataClient:
    return CoinoneMarketDataClient(
        base_url=config.api_base_url,
        quote_currency=config.quote_currency,
        timeout=config.request_timeout,
    )


def analyze_symbol(
    client: MarketDataSource,
    symbol: str,
    config: ScreenerConfig,
) -> Optional[AnalysisResult]:
    """Fetch one asset's daily candles and evaluate them."""
    candles = client.fetch_daily_candles(symbol, limit=config.candle_limit)
    result = evaluate(symbol, candles, config)
    if result is None:
        logging.debug(
            "%s skipped: %d candles < %d required", symbol, len(candles), config.min_history
        )
    return result


def analyze_universe(
    client: MarketDataSource,
    symbols: Sequence[str],
    config: ScreenerConfig,
    failed: Optional[List[str]] = None,
) -> List[AnalysisResult]:
    """Evaluate ``symbols`` concurrently, isolating per-asset failures.

    Results are returned in ``symbols`` order regardless of completion order.
    Symbols whose retrieval or evaluation raised are logged and appended to
    ``failed`` when provided.
    """
    if not symbols:
        return []

    by_symbol: Dict[str, AnalysisResult] = {}
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        future_to_symbol = {
            executor.submit(analyze_symbol, client, symbol, config): symbol
            for symbol in symbols
        }
        for future in as_completed(future_to_symbol):
            symbol = future_to_symbol[future]
            try:
                result = future.result()
            except ConfigError:
                raise
            except Exception as exc:
                logging.warning("candle fetch failed: %s %s", symbol, exc)
                if failed is not None:
                    failed.append(symbol)
                continue
            if result is not None:
                by_symbol[symbol] = result

    return [by_symbol[s] for s in symbols if s in by_symbol]


def log_condition_stats(stats: ConditionStats) -> None:
    for line in format_condition_stats(stats):
        logging.info(line)


def run_screening_pass(
    config: ScreenerConfig,
    client: Optional[MarketDataSource] = None,
    *,
    send: bool = True,
    now: Optional[datetime] = None,
) -> ScreeningReport:
    """Run one full screening pass and optionally deliver the report.

    Args:
        config: Screener configuration.
        client: Market data source; a Coinone client is built when omitted.
        send: Whether to send the report to Telegram.
        now: Reference time for the report date.

    Returns:
        The screening report.

    Raises:
        ConfigError: If Telegram credentials are missing and ``send`` is set.
        MarketDataError: If the ticker list cannot be loaded.
        NotificationError: If the report cannot be delivered.
    """
    if send:
        config.require_telegram()
    client = client or build_client(config)

    tickers = client.fetch_tickers()
    logging.info("tickers length: %d", len(tickers))

    universe = select_universe(
        tickers,
        quote_currency=config.quote_currency,
        size=config.universe_size,
        exclude=config.excluded_symbols,
    )
    logging.info("universe length: %d (sample: %s)", len(universe), universe[:5])

    failed: List[str] = []
    results = analyze_universe(client, universe, config, failed=failed)
    buys = aggregate(results, config.top_n)
    stats = condition_pass_stats(results, config.breakout_gate_active)
    log_condition_stats(stats)

    message = build_watchlist_message(
        buys, config, report_date(now), universe_size=config.universe_size
    )

    sent = False
    if send:
        sent = send_telegram_message(
            config.telegram_bot_token,
            config.telegram_chat_id,
            message,
            timeout=config.request_timeout,
        )

    return ScreeningReport(
        universe=universe,
        results=results,
        buys=buys,
        stats=stats,
        message=message,
        sent=sent,
        failed=failed,
    )


def main() -> None:
    configure_logging()
    load_env_file()

    try:
        config = load_screener_config_from_env()
        emit_early_env_warnings()
        run_screening_pass(config)
    except Exception as exc:
        logging.error("Screening pass failed: %s", exc, exc_info=True)
        notify_error(os.getenv("TELEGRAM_BOT_TOKEN"), os.getenv("TELEGRAM_CHAT_ID"), str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
