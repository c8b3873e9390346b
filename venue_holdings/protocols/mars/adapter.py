"""Mars protocol adapter — Red Bank lending through a credit account."""
from __future__ import annotations

import logging

from ...config import MarsVenuePositionConfig, ProtocolConfig
from ...errors import PositionNotFoundError
from ...interfaces.chain import ChainClient
from ...interfaces.price_oracle import PriceOracle
from ...models import Holdings, TokenCatalog
from ..base import value_amounts
from . import parser

logger = logging.getLogger(__name__)

CREDIT_MANAGER_ADDRESS = (
    "neutron1qdzn3l4kn7gsjna2tfpg3g3mwd6kunx4p50lfya59k02846xas6qslgs3r"
)
PARAMS_ADDRESS = "neutron1x4rgd7ry23v2n49y7xdzje0743c5tgrnqrqsvwyya2h6m48tz4jqqex06x"


class MarsAdapter:
    """Value a Mars credit-account lend position."""

    def __init__(
        self,
        chain_client: ChainClient,
        config: ProtocolConfig,
        venue: MarsVenuePositionConfig,
        prices: PriceOracle,
    ) -> None:
        self._client = chain_client
        self._config = config
        self._venue = venue
        self._prices = prices
        self._credit_manager = config.contracts.get("credit_manager", CREDIT_MANAGER_ADDRESS)
        self._params = config.contracts.get("params", PARAMS_ADDRESS)

    @property
    def protocol_name(self) -> str:
        return "mars"

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        denom = self._venue.deposited_denom
        data = await self._client.query_contract(
            self._params, {"total_deposit": {"denom": denom}}
        )
        return await value_amounts(
            self._prices, catalog, [(denom, parser.parse_total_deposit(data))]
        )

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        denom = self._venue.deposited_denom
        data = await self._client.query_contract(
            self._credit_manager, {"positions": {"account_id": address}}
        )
        amount = parser.parse_lend_amount(data, denom)
        if amount is None:
            raise PositionNotFoundError(
                f"no position found for credit account ID: {address} and denom: {denom}"
            )
        return await value_amounts(self._prices, catalog, [(denom, amount)])

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        # Interest is folded into the lend amount
        return Holdings.empty()
