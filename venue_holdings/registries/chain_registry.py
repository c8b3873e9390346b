"""Primary asset registry — one chain's asset list (cosmos.directory schema)."""
from __future__ import annotations

import logging
from typing import Any

from .. import net
from ..errors import (
    MalformedResponseError,
    RegistryUnavailableError,
    UpstreamUnavailableError,
)
from ..models import TokenInfo

logger = logging.getLogger(__name__)


def parse_chain_assets(data: Any) -> tuple[str, dict[str, TokenInfo]]:
    """Decode ``{chain: {chain_id, assets: [...]}}`` into (chain_id, tokens).

    Entries without a denom are skipped; missing decimals default to 0.
    """
    chain = data.get("chain") if isinstance(data, dict) else None
    if not isinstance(chain, dict):
        raise MalformedResponseError("chain", "invalid asset data structure")

    chain_id = chain.get("chain_id")
    if not isinstance(chain_id, str):
        raise MalformedResponseError("chain.chain_id")

    assets = chain.get("assets")
    if not isinstance(assets, list):
        raise MalformedResponseError("chain.assets")

    tokens: dict[str, TokenInfo] = {}
    for asset in assets:
        if not isinstance(asset, dict) or not isinstance(asset.get("denom"), str):
            continue
        denom = asset["denom"]
        try:
            decimals = int(asset.get("decimals") or 0)
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(f"chain.assets[{denom}].decimals", str(e)) from e
        tokens[denom] = TokenInfo(
            denom=denom,
            display_name=str(asset.get("symbol") or ""),
            decimals=decimals,
            price_source_id=str(asset.get("coingecko_id") or ""),
        )
    return chain_id, tokens


async def fetch_chain_assets(
    asset_list_url: str, timeout: int = net.DEFAULT_TIMEOUT
) -> tuple[str, dict[str, TokenInfo]]:
    """Fetch and decode a chain's asset list.

    Raises:
        RegistryUnavailableError: the registry could not be fetched.
    """
    logger.debug("Fetching asset list %s", asset_list_url)
    try:
        data = await net.get_json(asset_list_url, timeout=timeout)
    except UpstreamUnavailableError as e:
        raise RegistryUnavailableError(
            asset_list_url, f"registry unavailable: {e.message}", e.status
        ) from e
    return parse_chain_assets(data)
