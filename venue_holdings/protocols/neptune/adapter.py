"""Neptune protocol adapter — lending market receipt tokens."""
from __future__ import annotations

import logging

from ...config import NeptuneVenuePositionConfig, ProtocolConfig
from ...errors import PositionNotFoundError
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import build_holdings, price_asset, value_amounts
from . import parser

logger = logging.getLogger(__name__)

MARKET_MAKER_ADDRESS = "inj1nc7gjkf2mhp34a6gquhurg8qahnw5kxs5u3s4u"


class NeptuneAdapter:
    """Value a Neptune lending position.

    The bid's receipt tokens (``active_shares``) are converted to underlying
    with the pool-wide ratio lending principal / receipt total supply.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: NeptuneVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices
        self._market_maker = config.contracts.get("market_maker", MARKET_MAKER_ADDRESS)

    @property
    def protocol_name(self) -> str:
        return "neptune"

    async def _market(self) -> parser.LendingMarket:
        data = await self._client.query_contract(self._market_maker, {"get_all_markets": {}})
        market = parser.find_market(data, self._venue.denom)
        if market is None:
            raise PositionNotFoundError(
                f"no matching pool found for denom: {self._venue.denom}"
            )
        return market

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        market = await self._market()
        return await value_amounts(
            self._prices, catalog, [(market.denom, market.lending_principal)]
        )

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        shares = self._venue.active_shares
        if shares == 0:
            logger.debug("Neptune %s: no active shares", self._venue.denom)
            return Holdings.empty()

        market = await self._market()
        supply = parser.parse_total_supply(
            await self._client.query_contract(market.receipt_address, {"token_info": {}})
        )
        redemption_rate = market.lending_principal / supply

        token = catalog.lookup(market.denom)
        asset = await price_asset(
            self._prices, token, token.adjust(shares) * redemption_rate
        )
        return await build_holdings(self._prices, [asset])

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        # Interest accrues into the receipt token exchange rate
        return Holdings.empty()
