"""Market data access and universe selection."""
from market.coinone import CoinoneMarketDataClient, MarketDataError
from market.universe import TURNOVER_EXTRACTORS, select_universe, turnover_score

__all__ = [
    "CoinoneMarketDataClient",
    "MarketDataError",
    "TURNOVER_EXTRACTORS",
    "select_universe",
    "turnover_score",
]
