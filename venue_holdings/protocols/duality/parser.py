"""Pure parsing functions for Duality pool contract responses — no I/O."""
from __future__ import annotations

import logging
from typing import Any

from ...errors import MalformedResponseError
from ..base import parse_amount, require

logger = logging.getLogger(__name__)


def parse_balances(data: Any) -> list[tuple[str, int]]:
    """``get_balance`` -> [(denom, raw amount), ...].

    Entries without a denom or with an unparseable amount are dropped.
    """
    if not isinstance(data, list):
        raise MalformedResponseError("get_balance", "expected a list of coins")

    balances: list[tuple[str, int]] = []
    for entry in data:
        denom = entry.get("denom") if isinstance(entry, dict) else None
        if not isinstance(denom, str):
            logger.debug("Invalid entry in pool data: %r", entry)
            continue
        try:
            balances.append((denom, parse_amount(entry.get("amount"), "amount")))
        except MalformedResponseError:
            logger.debug("Error parsing amount for %s", denom)
    return balances


def parse_withdraw_amounts(data: Any) -> list[int]:
    """``simulate_withdraw_liquidity`` -> exactly two raw amounts."""
    if not isinstance(data, list) or len(data) != 2:
        raise MalformedResponseError(
            "simulate_withdraw_liquidity", "expected 2 token amounts"
        )
    return [
        parse_amount(a, f"simulate_withdraw_liquidity[{i}]")
        for i, a in enumerate(data)
    ]


def parse_pair_denoms(data: Any) -> tuple[str, str]:
    """``get_config`` -> (token_0 denom, token_1 denom) in the pool's own order."""
    pair = require(data, "pair_data", dict)
    token_0 = require(pair, "token_0", dict, "pair_data.token_0")
    token_1 = require(pair, "token_1", dict, "pair_data.token_1")
    return (
        require(token_0, "denom", str, "pair_data.token_0.denom"),
        require(token_1, "denom", str, "pair_data.token_1.denom"),
    )
