"""Valuation orchestration — bids x venues x (TVL, principal, rewards)."""
from __future__ import annotations

import logging
import time
from typing import Callable

from cachetools import TTLCache

from ..chains.cosmos import CosmosClient
from ..config import AppConfig, ExperimentalDeploymentConfig, VenuePositionConfig
from ..errors import (
    BidNotFoundError,
    ExperimentalNotFoundError,
    NotFoundError,
    ValuationError,
)
from ..interfaces.protocol_adapter import ProtocolAdapter
from ..models import (
    Asset,
    BidHoldings,
    ExperimentalHoldings,
    Holdings,
    TokenCatalog,
    VenueHoldings,
)
from ..oracles import CoinGeckoOracle, NumiaOracle
from ..protocols import create_adapter
from ..protocols.missing import MissingPositionAdapter
from ..registries import SkipAssetRegistry
from .catalog_service import CatalogService
from .price_service import HistoricalPriceCache, PriceCache, PriceResolver

logger = logging.getLogger(__name__)


class ValuationService:
    """Computes venue and bid holdings.

    A single venue propagates its errors. Bid listings record a failed venue
    on its entry and move on; the all-bids listing nulls out a failed bid.
    Bid results are memoized for the result-cache TTL.
    """

    def __init__(
        self,
        config: AppConfig,
        catalogs: CatalogService,
        prices: PriceResolver,
        result_cache: TTLCache | None = None,
    ) -> None:
        self._config = config
        self._catalogs = catalogs
        self._prices = prices
        self._results: TTLCache = (
            result_cache
            if result_cache is not None
            else TTLCache(
                maxsize=config.cache.max_entries,
                ttl=config.cache.result_ttl_minutes * 60,
            )
        )

        # Build chain clients
        self._clients: dict[str, CosmosClient] = {
            name: CosmosClient(proto_cfg)
            for name, proto_cfg in config.protocols.items()
        }

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def adapter_for(self, venue: VenuePositionConfig) -> ProtocolAdapter:
        return create_adapter(
            venue,
            self._clients.get(venue.protocol),
            self._config.protocols.get(venue.protocol),
            self._prices,
        )

    async def _catalog(
        self, protocol: str, cache: dict[str, TokenCatalog] | None
    ) -> TokenCatalog:
        url = self._config.protocols[protocol].asset_list_url
        if cache is not None and url in cache:
            return cache[url]
        catalog = await self._catalogs.resolve(url)
        if cache is not None:
            cache[url] = catalog
        return catalog

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def compute_venue_holdings(
        self,
        venue: VenuePositionConfig,
        catalogs: dict[str, TokenCatalog] | None = None,
    ) -> VenueHoldings:
        """Value one venue: its TVL plus the configured address's principal and rewards.

        Args:
            venue: The venue position to value.
            catalogs: Optional asset-list URL -> catalog cache shared across
                the venues of one request.
        """
        adapter = self.adapter_for(venue)
        if isinstance(adapter, MissingPositionAdapter):
            return VenueHoldings.missing(venue.protocol)

        catalog = await self._catalog(venue.protocol, catalogs)
        address = venue.address

        tvl = await adapter.compute_tvl(catalog)
        principal = await adapter.compute_address_principal_holdings(catalog, address)
        rewards = await adapter.compute_address_reward_holdings(catalog, address)

        logger.info(
            "Venue %s: TVL $%.2f, principal $%.2f, rewards $%.2f",
            venue.protocol, tvl.total_usd, principal.total_usd, rewards.total_usd,
        )
        return VenueHoldings(
            protocol=venue.protocol,
            venue_total=tvl,
            address_principal=principal,
            address_rewards=rewards,
        )

    async def compute_bid_holdings(self, bid_id: int) -> tuple[VenueHoldings, ...]:
        """Value every venue of a bid, memoized per bid id.

        Raises:
            BidNotFoundError: no bid with this id is configured.
        """
        bid = self._config.bids.get(bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)

        cached = self._results.get(bid_id)
        if cached is not None:
            logger.debug("Bid %d served from result cache", bid_id)
            return cached

        catalogs: dict[str, TokenCatalog] = {}
        holdings: list[VenueHoldings] = []
        for venue in bid.venues:
            try:
                holdings.append(await self.compute_venue_holdings(venue, catalogs))
            except ValuationError as e:
                logger.error("Bid %d: %s venue failed: %s", bid_id, venue.protocol, e)
                holdings.append(VenueHoldings.failed(venue.protocol, str(e)))

        result = tuple(holdings)
        self._results[bid_id] = result
        return result

    async def compute_all_bids(self) -> list[BidHoldings]:
        """Value every configured bid; a bid that fails entirely has no holdings."""
        results: list[BidHoldings] = []
        for bid_id, bid in sorted(self._config.bids.items()):
            try:
                holdings: tuple[VenueHoldings, ...] | None = (
                    await self.compute_bid_holdings(bid_id)
                )
            except ValuationError as e:
                logger.error("Error computing holdings for bid %d: %s", bid_id, e)
                holdings = None
            results.append(
                BidHoldings(
                    bid_id=bid_id,
                    initial_atom_allocation=bid.initial_atom_allocation,
                    holdings=holdings,
                )
            )
        return results

    async def compute_initial_holdings(
        self, holdings: Holdings, catalog: TokenCatalog, timestamp: int
    ) -> Holdings:
        """Reprice ``holdings`` at ``timestamp`` with nearest-point historical prices.

        The reference price is resolved first, so its absence fails the call
        even when no asset could be priced. Denoms outside ``catalog`` and
        assets with no historical price are dropped.
        """
        reference = await self._prices.nearest_reference_price(timestamp)

        assets: list[Asset] = []
        for asset in holdings.balances:
            token = catalog.tokens.get(asset.denom)
            if token is None:
                logger.debug("Skipping %s: not in the asset list", asset.denom)
                continue
            try:
                price = await self._prices.nearest_historical_price(asset.denom, timestamp)
            except NotFoundError as e:
                logger.warning("No historical price for %s, skipping: %s", asset.denom, e)
                continue
            assets.append(
                Asset(
                    denom=asset.denom,
                    amount=asset.amount,
                    usd_value=asset.amount * price,
                    display_name=token.display_name,
                )
            )

        return Holdings.from_assets(assets, reference)

    # ------------------------------------------------------------------
    # Experimental deployments
    # ------------------------------------------------------------------

    async def _experimental_parts(
        self,
        deployment: ExperimentalDeploymentConfig,
        catalogs: dict[str, TokenCatalog],
    ) -> tuple[Holdings, Holdings]:
        venue = deployment.venue
        catalog = await self._catalog(venue.protocol, catalogs)
        initial = Holdings(
            balances=tuple(
                Asset(denom=b.denom, amount=b.amount, usd_value=0.0)
                for b in deployment.initial_balances
            )
        )
        initial_holdings = await self.compute_initial_holdings(
            initial, catalog, deployment.start_timestamp
        )
        current_holdings = await self.adapter_for(venue).compute_address_principal_holdings(
            catalog, venue.address
        )
        return initial_holdings, current_holdings

    async def compute_experimental(self, experimental_id: int) -> ExperimentalHoldings:
        """Value one experimental deployment now and at its start timestamp.

        Raises:
            ExperimentalNotFoundError: no deployment with this id is configured.
            ValuationError: either side could not be valued.
        """
        deployment = self._config.experimental.get(experimental_id)
        if deployment is None:
            raise ExperimentalNotFoundError(experimental_id)

        initial, current = await self._experimental_parts(deployment, {})
        return _experimental_holdings(deployment, initial, current)

    async def compute_all_experimental(self) -> list[ExperimentalHoldings]:
        """List every deployment; both holdings are ``None`` for one that fails."""
        catalogs: dict[str, TokenCatalog] = {}
        results: list[ExperimentalHoldings] = []
        for experimental_id, deployment in sorted(self._config.experimental.items()):
            initial: Holdings | None
            current: Holdings | None
            try:
                initial, current = await self._experimental_parts(deployment, catalogs)
            except ValuationError as e:
                logger.error(
                    "Error computing holdings for experimental deployment %d: %s",
                    experimental_id, e,
                )
                initial = current = None
            results.append(_experimental_holdings(deployment, initial, current))
        return results


def _experimental_holdings(
    deployment: ExperimentalDeploymentConfig,
    initial: Holdings | None,
    current: Holdings | None,
) -> ExperimentalHoldings:
    return ExperimentalHoldings(
        experimental_id=deployment.experimental_id,
        name=deployment.name,
        description=deployment.description,
        logo=deployment.logo,
        start_timestamp=deployment.start_timestamp,
        end_timestamp=deployment.end_timestamp,
        initial_address_holdings=initial,
        current_address_holdings=current,
    )


def build_service(
    config: AppConfig, clock: Callable[[], float] = time.monotonic
) -> ValuationService:
    """Wire the shared registries, caches and price feeds into a ValuationService."""
    prices_cfg = config.prices
    ttl_seconds = prices_cfg.cache_ttl_minutes * 60

    skip_registry = SkipAssetRegistry(
        prices_cfg.skip_assets_url,
        ttl_seconds=ttl_seconds,
        timeout=prices_cfg.request_timeout,
        clock=clock,
    )
    resolver = PriceResolver(
        coingecko=CoinGeckoOracle(prices_cfg),
        numia=NumiaOracle(prices_cfg),
        skip_registry=skip_registry,
        cache=PriceCache(ttl_seconds, clock=clock),
        history=HistoricalPriceCache(),
        reference_price_id=prices_cfg.reference_price_id,
        reference_denom=prices_cfg.reference_denom,
    )
    catalogs = CatalogService(skip_registry, timeout=prices_cfg.request_timeout)
    return ValuationService(config, catalogs, resolver)
