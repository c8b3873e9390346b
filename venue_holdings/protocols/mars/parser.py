"""Pure parsing functions for Mars params / credit-manager responses — no I/O."""
from __future__ import annotations

from typing import Any

from ..base import parse_amount, require


def parse_total_deposit(data: Any) -> int:
    return parse_amount(require(data, "amount", (str, int)), "amount")


def parse_lend_amount(data: Any, denom: str) -> int | None:
    """Amount lent in ``denom`` by the credit account, or None without a position."""
    for lend in require(data, "lends", list):
        if isinstance(lend, dict) and lend.get("denom") == denom:
            return parse_amount(lend.get("amount"), "lends.amount")
    return None
