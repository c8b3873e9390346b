"""Magma protocol adapter — two-asset concentrated-liquidity vaults on Osmosis.

Magma assets are priced by denom from the Numia real-time feed, and the
reference total uses Numia's ATOM price as well.
"""
from __future__ import annotations

import logging

from ...config import MagmaVenuePositionConfig, ProtocolConfig
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Asset, Holdings, TokenCatalog
from . import parser

logger = logging.getLogger(__name__)


class MagmaAdapter:
    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: MagmaVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices

    @property
    def protocol_name(self) -> str:
        return "magma"

    async def _vault_balances(self) -> tuple[float, float]:
        data = await self._client.query_contract(
            self._venue.vault_address, {"vault_balances": {}}
        )
        return parser.parse_vault_balances(data)

    async def _holdings(
        self, catalog: TokenCatalog, raw_amounts: tuple[float, float]
    ) -> Holdings:
        assets: list[Asset] = []
        for denom, raw in zip(
            (self._venue.token0_denom, self._venue.token1_denom), raw_amounts
        ):
            token = catalog.lookup(denom)
            amount = token.adjust(raw)
            price = await self._prices.realtime_price(denom)
            assets.append(
                Asset(
                    denom=denom,
                    amount=amount,
                    usd_value=amount * price,
                    display_name=token.display_name,
                )
            )
        return Holdings.from_assets(
            assets, await self._prices.realtime_reference_price()
        )

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        return await self._holdings(catalog, await self._vault_balances())

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        vault = self._venue.vault_address
        balance = parser.parse_share_balance(
            await self._client.query_contract(vault, {"balance": {"address": address}})
        )
        supply = parser.parse_total_supply(
            await self._client.query_contract(vault, {"token_info": {}})
        )
        ratio = parser.share_ratio(balance, supply)
        logger.debug("Magma vault %s share ratio for %s: %f", vault, address, ratio)

        bal0, bal1 = await self._vault_balances()
        return await self._holdings(catalog, (bal0 * ratio, bal1 * ratio))

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        # Fees compound into the vault balances
        return Holdings.empty()
