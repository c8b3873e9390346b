"""Protocol adapter — per-protocol position valuation."""
from typing import Protocol

from ..models import Holdings, TokenCatalog


class ProtocolAdapter(Protocol):
    """Abstract interface turning one venue's on-chain state into Holdings."""

    @property
    def protocol_name(self) -> str: ...

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings: ...

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings: ...

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings: ...
