"""CoinGecko price feed — batched current prices and day-granular history."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

from .. import net
from ..config import PricesConfig
from ..errors import MalformedResponseError, PriceNotFoundError

logger = logging.getLogger(__name__)


class CoinGeckoOracle:
    """Fetch USD prices from CoinGecko."""

    def __init__(self, config: PricesConfig) -> None:
        self.base_url = config.coingecko_url.rstrip("/")
        self.timeout = config.request_timeout

    async def fetch_prices(self, ids: Iterable[str]) -> dict[str, float]:
        """Fetch USD prices for every id in one request.

        Ids CoinGecko does not know are simply absent from the result.
        """
        id_list = sorted(set(ids))
        if not id_list:
            return {}

        logger.debug("Fetching CoinGecko prices for %d ids", len(id_list))
        data = await net.get_json(
            f"{self.base_url}/simple/price",
            params={"ids": ",".join(id_list), "vs_currencies": "usd"},
            timeout=self.timeout,
        )
        if not isinstance(data, dict):
            raise MalformedResponseError("simple/price", "expected an object")

        prices: dict[str, float] = {}
        for coin_id, price_data in data.items():
            if isinstance(price_data, dict) and "usd" in price_data:
                try:
                    prices[coin_id] = float(price_data["usd"])
                except (TypeError, ValueError):
                    logger.warning("Ignoring non-numeric price for %s", coin_id)
        return prices

    async def fetch_price_on(self, coin_id: str, day: date) -> float:
        """Fetch the USD price of ``coin_id`` for one calendar day."""
        data: Any = await net.get_json(
            f"{self.base_url}/coins/{coin_id}/history",
            params={"date": day.strftime("%d-%m-%Y"), "localization": "false"},
            timeout=self.timeout,
        )
        try:
            return float(data["market_data"]["current_price"]["usd"])
        except (KeyError, TypeError) as e:
            raise PriceNotFoundError(coin_id, f"no history for {day.isoformat()}") from e
        except ValueError as e:
            raise MalformedResponseError("market_data.current_price.usd", str(e)) from e
