"""Pure parsing functions for UX (Umee) leverage module responses — no I/O."""
from __future__ import annotations

from typing import Any

from ..base import parse_amount, require


def parse_market_supplied(data: Any) -> int:
    return parse_amount(require(data, "supplied", str), "supplied")


def parse_account_supplied(data: Any, denom: str) -> int:
    """Supplied amount of ``denom`` in ``account_balances`` (0 when absent)."""
    for entry in require(data, "supplied", list):
        if isinstance(entry, dict) and entry.get("denom") == denom:
            return parse_amount(entry.get("amount"), "supplied.amount")
    return 0
