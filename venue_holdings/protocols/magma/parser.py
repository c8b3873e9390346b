"""Pure parsing functions for Magma vault responses — no I/O."""
from __future__ import annotations

from typing import Any

from ...errors import MalformedResponseError
from ..base import parse_decimal, require


def parse_share_balance(data: Any) -> float:
    return parse_decimal(require(data, "balance", str), "balance")


def parse_total_supply(data: Any) -> float:
    return parse_decimal(require(data, "total_supply", str), "total_supply")


def parse_vault_balances(data: Any) -> tuple[float, float]:
    return (
        parse_decimal(require(data, "bal0", str), "bal0"),
        parse_decimal(require(data, "bal1", str), "bal1"),
    )


def share_ratio(balance: float, total_supply: float) -> float:
    if total_supply <= 0:
        raise MalformedResponseError("total_supply", "vault has no shares")
    return balance / total_supply
