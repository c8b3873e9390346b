"""Duality protocol adapter — two-sided liquidity pool vault."""
from __future__ import annotations

import logging

from ...config import DualityVenuePositionConfig, ProtocolConfig
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import value_amounts
from . import parser

logger = logging.getLogger(__name__)


class DualityAdapter:
    """Value a Duality pool position.

    The position is tracked by ``active_shares`` in the venue config rather
    than read from a wallet. Denoms that cannot be resolved or priced are
    skipped.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: DualityVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices

    @property
    def protocol_name(self) -> str:
        return "duality"

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        data = await self._client.query_contract(
            self._venue.pool_address, {"get_balance": {}}
        )
        return await value_amounts(
            self._prices, catalog, parser.parse_balances(data), skip_unresolved=True
        )

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        shares = self._venue.active_shares
        if shares == 0:
            logger.debug("Duality pool %s: no active shares", self._venue.pool_address)
            return Holdings.empty()

        data = await self._client.query_contract(
            self._venue.pool_address,
            {"simulate_withdraw_liquidity": {"amount": str(shares)}},
        )
        amounts = parser.parse_withdraw_amounts(data)

        # Withdrawal amounts follow the pool's token_0/token_1 ordering
        config = await self._client.query_contract(
            self._venue.pool_address, {"get_config": {}}
        )
        denoms = parser.parse_pair_denoms(config)

        return await value_amounts(
            self._prices, catalog, zip(denoms, amounts), skip_unresolved=True
        )

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        # Yield accrues into the pool shares
        return Holdings.empty()
