"""Token catalog resolution — primary chain registry merged with Skip."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ..errors import ValuationError
from ..models import TokenCatalog, TokenInfo
from ..registries import SkipAssetRegistry, fetch_chain_assets

logger = logging.getLogger(__name__)


def merge_token_sources(
    sources: Iterable[Mapping[str, TokenInfo]],
) -> dict[str, TokenInfo]:
    """Merge token tables in precedence order; the first source to define a denom wins."""
    merged: dict[str, TokenInfo] = {}
    for source in sources:
        for denom, info in source.items():
            merged.setdefault(denom, info)
    return merged


class CatalogService:
    """Build per-chain token catalogs."""

    def __init__(self, skip_registry: SkipAssetRegistry, timeout: int = 30) -> None:
        self._skip = skip_registry
        self._timeout = timeout

    async def _secondary_tokens(self, chain_id: str) -> dict[str, TokenInfo]:
        try:
            await self._skip.refresh_if_stale()
        except ValuationError as e:
            logger.warning("Failed to fetch skip assets, using primary registry only: %s", e)
        return self._skip.chain_tokens(chain_id)

    async def resolve(self, asset_list_url: str) -> TokenCatalog:
        """Resolve the catalog for the chain whose asset list lives at ``asset_list_url``.

        Raises:
            RegistryUnavailableError: the primary registry could not be fetched.
        """
        chain_id, primary = await fetch_chain_assets(asset_list_url, self._timeout)
        secondary = await self._secondary_tokens(chain_id)

        tokens = merge_token_sources([primary, secondary])
        logger.debug(
            "Catalog for %s: %d primary, %d secondary-only tokens",
            chain_id, len(primary), len(tokens) - len(primary),
        )
        return TokenCatalog(chain_id=chain_id, tokens=tokens)
