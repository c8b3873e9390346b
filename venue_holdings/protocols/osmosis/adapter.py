"""Osmosis protocol adapter — concentrated-liquidity pool positions."""
from __future__ import annotations

import logging
from typing import Any

from ...config import OsmosisVenuePositionConfig, ProtocolConfig
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import value_amounts
from . import parser

logger = logging.getLogger(__name__)

SQS_URL = "https://sqs.osmosis.zone"


class OsmosisAdapter:
    """Value an Osmosis CL position.

    Pool reserves come from the sidecar query server (SQS), positions from
    the chain's LCD.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: OsmosisVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices
        self._pool_api_url = config.pool_api_url or SQS_URL

    @property
    def protocol_name(self) -> str:
        return "osmosis"

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        data = await self._client.get(
            f"{self._pool_api_url}/pools", params={"IDs": self._venue.pool}
        )
        return await value_amounts(
            self._prices, catalog, parser.parse_pool_balances(data)
        )

    async def _positions(self, address: str) -> Any:
        return await self._client.get(
            f"osmosis/concentratedliquidity/v1beta1/positions/{address}"
        )

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        data = await self._positions(address)
        return await value_amounts(
            self._prices,
            catalog,
            parser.parse_position_balances(data, self._venue.pool),
        )

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        data = await self._positions(address)
        return await value_amounts(
            self._prices,
            catalog,
            parser.parse_position_rewards(data, self._venue.pool),
        )
