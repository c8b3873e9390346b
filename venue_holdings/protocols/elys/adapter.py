"""Elys protocol adapter — stablestake single-asset vaults."""
from __future__ import annotations

import logging

from ...config import ElysVenuePositionConfig, ProtocolConfig
from ...errors import PositionNotFoundError, ValuationError
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Asset, Holdings, TokenCatalog
from ..base import build_holdings, price_asset, value_amounts
from . import parser

logger = logging.getLogger(__name__)

_API = "elys-network/elys"


class ElysAdapter:
    """Value an Elys stablestake position.

    Principal failures propagate; a reward denom that cannot be fetched or
    priced is skipped.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: ElysVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices

    @property
    def protocol_name(self) -> str:
        return "elys"

    async def _pool(self) -> parser.StableStakePool:
        data = await self._client.get(f"{_API}/stablestake/pool/{self._venue.pool}")
        return parser.parse_pool(data)

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        pool = await self._pool()
        return await value_amounts(
            self._prices, catalog, [(pool.deposit_denom, pool.net_amount)]
        )

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        try:
            pool_id = int(self._venue.pool)
        except ValueError as e:
            raise ValuationError(f"invalid Elys pool id {self._venue.pool!r}") from e
        shares_denom = parser.share_denom(pool_id)

        data = await self._client.get(
            f"{_API}/commitment/committed_tokens_locked/{address}"
        )
        shares = parser.parse_committed_amount(data, shares_denom)
        if shares == 0:
            raise PositionNotFoundError(
                f"no {shares_denom} committed by {address}"
            )

        pool = await self._pool()
        token = catalog.lookup(pool.deposit_denom)
        amount = token.adjust(shares) * pool.redemption_rate
        asset = await price_asset(self._prices, token, amount, denom=shares_denom)
        return await build_holdings(self._prices, [asset])

    async def _reward_asset(
        self, catalog: TokenCatalog, address: str, query_denom: str
    ) -> Asset:
        # The denom is pre-encoded, so the query string is built by hand
        data = await self._client.get(
            f"{_API}/masterchef/user_reward_info"
            f"?user={address}&pool_id={self._venue.pool}&reward_denom={query_denom}"
        )
        denom, pending = parser.parse_user_reward(data)
        token = catalog.lookup(denom)
        return await price_asset(self._prices, token, token.adjust(pending))

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        assets: list[Asset] = []
        for query_denom in parser.REWARD_DENOMS:
            try:
                assets.append(await self._reward_asset(catalog, address, query_denom))
            except ValuationError as e:
                logger.warning("Skipping Elys reward %s: %s", query_denom, e)
        return await build_holdings(self._prices, assets)
