"""Placeholder adapter for protocols without an integration."""
from __future__ import annotations

from ..models import Holdings, TokenCatalog


class MissingPositionAdapter:
    """Every computation yields empty Holdings; the venue is flagged ``info_missing``."""

    def __init__(self, protocol: str) -> None:
        self._protocol = protocol

    @property
    def protocol_name(self) -> str:
        return self._protocol

    async def compute_tvl(self, catalog: TokenCatalog) -> Holdings:
        return Holdings.empty()

    async def compute_address_principal_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        return Holdings.empty()

    async def compute_address_reward_holdings(
        self, catalog: TokenCatalog, address: str
    ) -> Holdings:
        return Holdings.empty()
