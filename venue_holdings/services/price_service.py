"""USD price resolution backed by a TTL snapshot and a permanent history cache."""
from __future__ import annotations

import logging
import time
from datetime import date, datetime, timezone
from typing import Callable, Iterable

from ..errors import PriceNotFoundError, ValuationError
from ..oracles import CoinGeckoOracle, NumiaOracle
from ..oracles.numia import select_nearest
from ..registries import SkipAssetRegistry

logger = logging.getLogger(__name__)


class PriceCache:
    """Snapshot of current USD prices keyed by price-source id."""

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._prices: dict[str, float] = {}
        self._fetched_at: float | None = None

    @property
    def is_fresh(self) -> bool:
        return (
            self._fetched_at is not None
            and self._clock() - self._fetched_at < self.ttl_seconds
        )

    def get(self, price_source_id: str) -> float | None:
        return self._prices.get(price_source_id)

    def replace(self, prices: dict[str, float]) -> None:
        self._prices = dict(prices)
        self._fetched_at = self._clock()

    def __len__(self) -> int:
        return len(self._prices)


class HistoricalPriceCache:
    """Append-only price-source id -> {day -> USD price}."""

    def __init__(self) -> None:
        self._prices: dict[str, dict[date, float]] = {}

    def get(self, price_source_id: str, day: date) -> float | None:
        return self._prices.get(price_source_id, {}).get(day)

    def put(self, price_source_id: str, day: date, price: float) -> float:
        """Store a price unless the pair is already cached; return the cached value."""
        return self._prices.setdefault(price_source_id, {}).setdefault(day, price)


def to_day(timestamp: int) -> date:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


class PriceResolver:
    """Resolve current and historical USD prices.

    Current prices come from one batched CoinGecko request covering every
    price-source id the Skip registry knows about; the snapshot is trusted for
    the cache TTL. Concurrent callers that see a stale snapshot may refresh
    redundantly; the last write wins.
    """

    def __init__(
        self,
        coingecko: CoinGeckoOracle,
        numia: NumiaOracle,
        skip_registry: SkipAssetRegistry,
        cache: PriceCache,
        history: HistoricalPriceCache,
        reference_price_id: str = "cosmos",
        reference_denom: str = "",
    ) -> None:
        self._coingecko = coingecko
        self._numia = numia
        self._skip = skip_registry
        self._cache = cache
        self._history = history
        self.reference_price_id = reference_price_id
        self.reference_denom = reference_denom

    # ------------------------------------------------------------------
    # Current prices
    # ------------------------------------------------------------------

    async def refresh(self, extra_ids: Iterable[str] = ()) -> None:
        """Replace the price snapshot with one batched upstream request."""
        try:
            await self._skip.refresh_if_stale()
        except ValuationError as e:
            logger.warning("Failed to refresh skip assets, using known ids: %s", e)

        ids = self._skip.price_source_ids()
        ids.add(self.reference_price_id)
        ids.update(i for i in extra_ids if i)

        prices = await self._coingecko.fetch_prices(ids)
        self._cache.replace(prices)
        logger.debug("Price cache refreshed: %d prices cached", len(prices))

    async def current_price(self, price_source_id: str) -> float:
        """Current USD price of ``price_source_id``.

        Raises:
            PriceNotFoundError: the id has no price in the (fresh) snapshot.
            UpstreamUnavailableError: the refresh request failed.
        """
        if not price_source_id:
            raise PriceNotFoundError(price_source_id, "token has no price source id")

        if not self._cache.is_fresh:
            await self.refresh(extra_ids=[price_source_id])

        price = self._cache.get(price_source_id)
        if price is None:
            raise PriceNotFoundError(price_source_id)
        return price

    async def reference_price(self) -> float:
        return _checked_reference(await self.current_price(self.reference_price_id))

    async def realtime_price(self, denom: str) -> float:
        """Uncached real-time USD price of a denom from Numia."""
        return await self._numia.fetch_price(denom)

    async def realtime_reference_price(self) -> float:
        return _checked_reference(await self.realtime_price(self.reference_denom))

    # ------------------------------------------------------------------
    # Historical prices
    # ------------------------------------------------------------------

    async def historical_price(self, price_source_id: str, timestamp: int) -> float:
        """USD price on the UTC calendar day containing ``timestamp``."""
        day = to_day(timestamp)
        cached = self._history.get(price_source_id, day)
        if cached is not None:
            return cached

        price = await self._coingecko.fetch_price_on(price_source_id, day)
        return self._history.put(price_source_id, day, price)

    async def reference_price_at(self, timestamp: int) -> float:
        return _checked_reference(
            await self.historical_price(self.reference_price_id, timestamp)
        )

    async def nearest_historical_price(self, denom: str, timestamp: int) -> float:
        """Close of the time-series point nearest to ``timestamp`` (not cached)."""
        point = select_nearest(await self._numia.fetch_chart(denom), timestamp)
        if point is None:
            raise PriceNotFoundError(
                denom, f"no historical price data for timestamp {timestamp}"
            )
        return point.close

    async def nearest_reference_price(self, timestamp: int) -> float:
        return _checked_reference(
            await self.nearest_historical_price(self.reference_denom, timestamp)
        )


def _checked_reference(price: float) -> float:
    if not price > 0:
        raise ValuationError(f"invalid reference asset price: {price!r}")
    return price
