"""UX protocol adapter — leverage module supply positions."""
from __future__ import annotations

from ...config import ProtocolConfig, UxVenuePositionConfig
from ...errors import PositionNotFoundError
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import value_amounts
from . import parser

_API = "umee/leverage/v1"


class UxAdapter:
    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: UxVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices

    @property
    def protocol_name(self) -> str:
        return "ux"

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        denom = self._venue.denom
        data = await self._client.get(f"{_API}/market_summary", params={"denom": denom})
        return await value_amounts(
            self._prices, catalog, [(denom, parser.parse_market_supplied(data))]
        )

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        denom = self._venue.denom
        data = await self._client.get(
            f"{_API}/account_balances", params={"address": address}
        )
        amount = parser.parse_account_supplied(data, denom)
        if amount == 0:
            raise PositionNotFoundError(
                f"no matching supplied amount found for denom {denom}"
            )
        return await value_amounts(self._prices, catalog, [(denom, amount)])

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        return Holdings.empty()
