"""Secondary asset registry — cross-chain Skip fungible asset list, TTL cached."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

from .. import net
from ..errors import MalformedResponseError
from ..models import TokenInfo

logger = logging.getLogger(__name__)


def parse_skip_assets(data: Any) -> dict[str, dict[str, TokenInfo]]:
    """Decode ``{chain_to_assets_map: {chain_id: {assets: [...]}}}``.

    The display name prefers ``recommended_symbol`` over ``symbol``.
    """
    chains = data.get("chain_to_assets_map") if isinstance(data, dict) else None
    if not isinstance(chains, dict):
        raise MalformedResponseError("chain_to_assets_map")

    assets: dict[str, dict[str, TokenInfo]] = {}
    for chain_id, chain_assets in chains.items():
        entries = chain_assets.get("assets") if isinstance(chain_assets, dict) else None
        if not isinstance(entries, list):
            raise MalformedResponseError(f"chain_to_assets_map.{chain_id}.assets")

        tokens: dict[str, TokenInfo] = {}
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("denom"), str):
                continue
            try:
                decimals = int(entry.get("decimals") or 0)
            except (TypeError, ValueError):
                logger.debug("Skipping %s with bad decimals", entry.get("denom"))
                continue
            tokens[entry["denom"]] = TokenInfo(
                denom=entry["denom"],
                display_name=str(
                    entry.get("recommended_symbol") or entry.get("symbol") or ""
                ),
                decimals=decimals,
                price_source_id=str(entry.get("coingecko_id") or ""),
            )
        assets[chain_id] = tokens
    return assets


class SkipAssetRegistry:
    """Shared, TTL-cached view of the Skip asset list.

    Constructed once and injected into both the catalog service and the price
    resolver; the snapshot is replaced wholesale on refresh.
    """

    def __init__(
        self,
        url: str,
        ttl_seconds: float,
        timeout: int = net.DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._clock = clock
        self._assets: dict[str, dict[str, TokenInfo]] = {}
        self._fetched_at: float | None = None

    @property
    def is_fresh(self) -> bool:
        return (
            self._fetched_at is not None
            and self._clock() - self._fetched_at < self.ttl_seconds
        )

    async def refresh_if_stale(self) -> None:
        """Re-fetch the registry when the snapshot is older than the TTL.

        Raises whatever the fetch raises; callers decide whether it is fatal.
        """
        if self.is_fresh:
            return

        data = await net.get_json(self.url, timeout=self.timeout)
        assets = parse_skip_assets(data)
        self._assets = assets
        self._fetched_at = self._clock()
        logger.debug(
            "Skip asset registry refreshed: %d chains", len(assets)
        )

    def chain_tokens(self, chain_id: str) -> dict[str, TokenInfo]:
        return dict(self._assets.get(chain_id, {}))

    def price_source_ids(self) -> set[str]:
        return {
            token.price_source_id
            for tokens in self._assets.values()
            for token in tokens.values()
            if token.price_source_id
        }
