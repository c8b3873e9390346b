"""Nolus protocol adapter — liquidity provider pool (LPP) shares."""
from __future__ import annotations

import logging
from typing import Any, Callable

from ...config import NolusVenuePositionConfig, ProtocolConfig
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import build_holdings, price_asset
from . import parser

logger = logging.getLogger(__name__)


class NolusAdapter:
    """Value an LPP position: nLPN shares times the pool's current share price."""

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: NolusVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices

    @property
    def protocol_name(self) -> str:
        return "nolus"

    async def _query(self, query: dict[str, Any]) -> Any:
        return await self._client.query_contract(self._venue.pool_contract_address, query)

    async def _holdings(
        self,
        catalog: TokenCatalog,
        query: dict[str, Any],
        parse_shares: Callable[[Any], int],
    ) -> Holdings:
        token = catalog.lookup(self._venue.pool_contract_token)
        shares = parse_shares(await self._query(query))
        ratio = parser.parse_share_price(await self._query({"price": []}))

        amount = token.adjust(shares * ratio)
        asset = await price_asset(self._prices, token, amount)
        return await build_holdings(self._prices, [asset])

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        return await self._holdings(catalog, {"lpp_balance": []}, parser.parse_pool_shares)

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        return await self._holdings(
            catalog, {"balance": {"address": address}}, parser.parse_balance_shares
        )

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        return await self._holdings(
            catalog, {"rewards": {"address": address}}, parser.parse_reward_shares
        )
