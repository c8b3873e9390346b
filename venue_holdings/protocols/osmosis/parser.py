"""Pure parsing functions for Osmosis SQS and concentrated-liquidity responses."""
from __future__ import annotations

from typing import Any, Iterable

from ...errors import MalformedResponseError
from ..base import parse_amount, require


def _accumulate(totals: dict[str, int], coins: Iterable[Any], field: str) -> None:
    for coin in coins:
        denom = require(coin, "denom", str, f"{field}.denom")
        totals[denom] = totals.get(denom, 0) + parse_amount(
            coin.get("amount"), f"{field}.amount"
        )


def parse_pool_balances(data: Any) -> list[tuple[str, int]]:
    """SQS ``/pools?IDs=<id>`` -> the first pool's [(denom, raw amount), ...]."""
    if not isinstance(data, list) or not data:
        raise MalformedResponseError("pools", "no pool data returned")
    balances: dict[str, int] = {}
    _accumulate(balances, require(data[0], "balances", list), "balances")
    return list(balances.items())


def _pool_positions(data: Any, pool_id: str) -> list[dict[str, Any]]:
    matched = []
    for entry in require(data, "positions", list):
        position = entry.get("position") if isinstance(entry, dict) else None
        if isinstance(position, dict) and str(position.get("pool_id")) == pool_id:
            matched.append(entry)
    return matched


def parse_position_balances(data: Any, pool_id: str) -> list[tuple[str, int]]:
    """Sum ``asset0`` + ``asset1`` over the address's positions in ``pool_id``."""
    totals: dict[str, int] = {}
    for entry in _pool_positions(data, pool_id):
        _accumulate(
            totals,
            [require(entry, "asset0", dict), require(entry, "asset1", dict)],
            "positions.asset",
        )
    return list(totals.items())


def parse_position_rewards(data: Any, pool_id: str) -> list[tuple[str, int]]:
    """Sum claimable spread rewards and incentives over positions in ``pool_id``."""
    totals: dict[str, int] = {}
    for entry in _pool_positions(data, pool_id):
        for key in ("claimable_spread_rewards", "claimable_incentives"):
            coins = entry.get(key)
            if isinstance(coins, list):
                _accumulate(totals, coins, f"positions.{key}")
    return list(totals.items())
