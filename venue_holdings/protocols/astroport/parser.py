"""Pure parsing functions for Astroport pair/incentives responses — no I/O."""
from __future__ import annotations

from typing import Any

from ...errors import MalformedResponseError
from ..base import parse_amount, require


def asset_denom(info: Any) -> str:
    """Denom of an ``AssetInfo`` — native denom or CW20 contract address."""
    if isinstance(info, dict):
        native = info.get("native_token")
        if isinstance(native, dict) and isinstance(native.get("denom"), str):
            return native["denom"]
        token = info.get("token")
        if isinstance(token, dict) and isinstance(token.get("contract_addr"), str):
            return token["contract_addr"]
    raise MalformedResponseError("info", "unknown asset info")


def parse_asset_list(assets: Any, field: str) -> list[tuple[str, int]]:
    """``[{info, amount}, ...]`` -> [(denom, raw amount), ...] in pool order."""
    if not isinstance(assets, list):
        raise MalformedResponseError(field, "expected a list of assets")
    return [
        (asset_denom(a.get("info") if isinstance(a, dict) else None),
         parse_amount(a.get("amount"), f"{field}.amount"))
        for a in assets
    ]


def parse_pool_assets(data: Any) -> list[tuple[str, int]]:
    return parse_asset_list(require(data, "assets", list), "assets")


def parse_liquidity_token(data: Any) -> str:
    return require(data, "liquidity_token", str)


def parse_staked_amount(data: Any) -> int:
    """The incentives ``deposit`` query answers with a bare amount string."""
    return parse_amount(data, "deposit")


def parse_withdraw_assets(data: Any) -> list[tuple[str, int]]:
    return parse_asset_list(data, "simulate_withdraw")


def parse_rewards(data: Any) -> list[tuple[str, int]]:
    """Accept both ``{rewards: [...]}`` and a bare asset list."""
    if isinstance(data, dict):
        return parse_asset_list(data.get("rewards"), "rewards")
    return parse_asset_list(data, "rewards")


def is_no_rewards_error(message: str) -> bool:
    """The incentives contract reports an address without rewards as an error."""
    return "no rewards" in message.lower()
