"""Upstream price feeds."""
from .coingecko import CoinGeckoOracle
from .numia import NumiaOracle

__all__ = ["CoinGeckoOracle", "NumiaOracle"]
