"""Coinone public REST market data client.

Fetches the ticker list for a quote market and daily candles per asset.
Response layouts have varied between API revisions, so list payloads are
looked up under several candidate keys.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests.exceptions import RequestException

from strategy.models import Candle

DEFAULT_BASE_URL = "https://api.coinone.co.kr"


class MarketDataError(RuntimeError):
    """Raised when market data cannot be retrieved or parsed."""


def _safe_float(value: Any, default: float = math.nan) -> float:
    """Safely convert a value to float."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _first_list(payload: Any, keys: Iterable[str]) -> Any:
    if not isinstance(payload, dict):
        return None
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def parse_candle_row(row: Dict[str, Any]) -> Candle:
    """Convert one chart row into a Candle.

    Coinone reports volume as ``target_volume``; ``volume`` is accepted for
    other layouts.
    """
    timestamp = row.get("timestamp")
    if timestamp is None:
        timestamp = row.get("time")
    volume = row.get("target_volume")
    if volume is None:
        volume = row.get("volume")
    ts = _safe_float(timestamp, default=0.0)
    return Candle(
        timestamp=int(ts) if math.isfinite(ts) else 0,
        open=_safe_float(row.get("open")),
        high=_safe_float(row.get("high")),
        low=_safe_float(row.get("low")),
        close=_safe_float(row.get("close")),
        volume=_safe_float(volume, default=0.0),
    )


def normalize_candles(candles: Iterable[Candle], limit: Optional[int] = None) -> List[Candle]:
    """Drop invalid bars, sort ascending, deduplicate timestamps, keep the last ``limit``.

    For duplicate timestamps the bar appearing last in the input wins.
    """
    by_ts: Dict[int, Candle] = {}
    for candle in candles:
        prices = (candle.open, candle.high, candle.low, candle.close)
        if not all(math.isfinite(p) for p in prices) or candle.close <= 0:
            continue
        by_ts[candle.timestamp] = candle
    ordered = [by_ts[ts] for ts in sorted(by_ts)]
    if limit is not None and limit > 0:
        ordered = ordered[-limit:]
    return ordered


class CoinoneMarketDataClient:
    """Read-only client for Coinone public market data."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        quote_currency: str = "KRW",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.quote_currency = quote_currency.upper()
        self.timeout = timeout
        self._session = session or requests.Session()

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except RequestException as exc:
            raise MarketDataError(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise MarketDataError(f"GET {url} returned invalid JSON: {exc}") from exc

    def fetch_tickers(self) -> List[Dict[str, Any]]:
        """Return all tickers of the configured quote market."""
        data = self._get_json(f"/public/v2/ticker_new/{self.quote_currency}")
        tickers = _first_list(data, ("tickers", "result", "data"))
        if tickers is None:
            tickers = []
        if not isinstance(tickers, list):
            raise MarketDataError(
                f"Unexpected ticker response shape: {str(data)[:200]}..."
            )

        filtered = []
        for ticker in tickers:
            if not isinstance(ticker, dict):
                continue
            quote = str(ticker.get("quote_currency") or ticker.get("quote") or "").upper()
            if quote == self.quote_currency:
                filtered.append(ticker)
        logging.debug("Fetched %d %s tickers", len(filtered), self.quote_currency)
        return filtered

    def fetch_daily_candles(self, symbol: str, limit: int = 220) -> List[Candle]:
        """Return up to ``limit`` daily candles for ``symbol`` in ascending order."""
        data = self._get_json(
            f"/public/v2/chart/{self.quote_currency}/{symbol.lower()}",
            params={"interval": "1d"},
        )
        rows = _first_list(data, ("chart", "data", "candles"))
        if not isinstance(rows, list) or not rows:
            return []
        candles = [parse_candle_row(row) for row in rows if isinstance(row, dict)]
        return normalize_candles(candles, limit=limit)
