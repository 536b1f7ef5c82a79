"""Turnover-based universe selection.

Exchange ticker records carry provider-dependent field names for the same
economic quantity, so the turnover score is resolved through an ordered
table of extraction rules: the first finite, positive value wins, with
``volume * last price`` as the final fallback.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

Ticker = Dict[str, Any]


def _to_float(value: Any) -> float:
    """Convert loosely-typed ticker values to float, NaN when impossible."""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _first_present(ticker: Ticker, *keys: str) -> Any:
    for key in keys:
        value = ticker.get(key)
        if value is not None:
            return value
    return None


def _field(key: str) -> Callable[[Ticker], float]:
    def extract(ticker: Ticker) -> float:
        return _to_float(ticker.get(key))

    return extract


def _volume_24h_times_last(ticker: Ticker) -> float:
    if not ticker.get("volume_24h"):
        return math.nan
    last = _to_float(_first_present(ticker, "last", "close"))
    return _to_float(ticker["volume_24h"]) * (0.0 if math.isnan(last) else last)


TURNOVER_EXTRACTORS: Tuple[Tuple[str, Callable[[Ticker], float]], ...] = (
    ("quote_volume", _field("quote_volume")),
    ("quoteVolume", _field("quoteVolume")),
    ("acc_quote_volume", _field("acc_quote_volume")),
    ("accQuoteVolume", _field("accQuoteVolume")),
    ("value", _field("value")),
    ("acc_trade_price_24h", _field("acc_trade_price_24h")),
    ("volume_24h*last", _volume_24h_times_last),
)


def _approx_turnover(ticker: Ticker) -> float:
    volume = _to_float(_first_present(ticker, "volume", "base_volume", "baseVolume"))
    last = _to_float(_first_present(ticker, "last", "close", "price"))
    volume = 0.0 if math.isnan(volume) else volume
    last = 0.0 if math.isnan(last) else last
    approx = volume * last
    return approx if math.isfinite(approx) else 0.0


def turnover_score(
    ticker: Ticker,
    extractors: Sequence[Tuple[str, Callable[[Ticker], float]]] = TURNOVER_EXTRACTORS,
) -> float:
    """Return a 24h turnover estimate for ``ticker``.

    Args:
        ticker: Raw ticker record from the exchange.
        extractors: Ordered ``(name, fn)`` rules; the first finite positive
            result is returned.

    Returns:
        Turnover estimate, 0.0 when nothing usable is present.
    """
    for _name, extract in extractors:
        value = extract(ticker)
        if math.isfinite(value) and value > 0:
            return value
    return _approx_turnover(ticker)


def ticker_symbol(ticker: Ticker) -> str:
    return str(ticker.get("target_currency") or "").strip().upper()


def select_universe(
    tickers: Iterable[Ticker],
    quote_currency: str = "KRW",
    size: int = 50,
    exclude: Optional[Iterable[str]] = ("USDT", "USDC"),
) -> List[str]:
    """Return the ``size`` most traded symbols, highest turnover first.

    Tickers quoting the quote currency against itself and excluded symbols
    (stablecoins by default) are dropped; ties keep exchange order.
    """
    quote = quote_currency.upper()
    excluded = {s.upper() for s in (exclude or ())}

    ranked = sorted(
        (t for t in tickers if ticker_symbol(t) != quote),
        key=turnover_score,
        reverse=True,
    )

    universe: List[str] = []
    for ticker in ranked:
        symbol = ticker_symbol(ticker)
        if not symbol or symbol in excluded or symbol in universe:
            continue
        universe.append(symbol)
        if len(universe) >= size:
            break
    return universe
