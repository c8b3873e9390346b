"""Astroport protocol adapter — constant-product pairs with incentives staking."""
from __future__ import annotations

import logging

from ...config import AstroportVenuePositionConfig, ProtocolConfig
from ...errors import UpstreamUnavailableError
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import value_amounts
from . import parser

logger = logging.getLogger(__name__)


class AstroportAdapter:
    """Value an Astroport pair position.

    Principal is the holder's LP balance (wallet + incentives deposit) run
    through the pair's ``simulate_withdraw``. Any lookup failure propagates.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: AstroportVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices

    @property
    def protocol_name(self) -> str:
        return "astroport"

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        data = await self._client.query_contract(self._venue.pool_address, {"pool": {}})
        return await value_amounts(self._prices, catalog, parser.parse_pool_assets(data))

    async def _lp_balance(self, address: str) -> int:
        pair = await self._client.query_contract(self._venue.pool_address, {"pair": {}})
        lp_denom = parser.parse_liquidity_token(pair)

        wallet = (await self._client.get_bank_balances(address)).get(lp_denom, 0)
        deposit = await self._client.query_contract(
            self._venue.incentive_address,
            {"deposit": {"lp_token": lp_denom, "user": address}},
        )
        staked = parser.parse_staked_amount(deposit)
        logger.debug(
            "Astroport LP %s for %s: wallet=%d staked=%d",
            lp_denom, address, wallet, staked,
        )
        return wallet + staked

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        lp_amount = await self._lp_balance(address)
        if lp_amount == 0:
            return Holdings.empty()

        data = await self._client.query_contract(
            self._venue.pool_address,
            {"simulate_withdraw": {"lp_amount": str(lp_amount)}},
        )
        return await value_amounts(
            self._prices, catalog, parser.parse_withdraw_assets(data)
        )

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        try:
            data = await self._client.query_contract(
                self._venue.incentive_address, {"rewards": {"address": address}}
            )
        except UpstreamUnavailableError as e:
            if parser.is_no_rewards_error(e.message):
                logger.debug("No Astroport rewards for %s", address)
                return Holdings.empty()
            raise
        return await value_amounts(self._prices, catalog, parser.parse_rewards(data))
