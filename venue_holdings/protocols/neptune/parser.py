"""Pure parsing functions for Neptune market-maker responses — no I/O."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...errors import MalformedResponseError
from ..base import parse_decimal, require


@dataclass(frozen=True)
class LendingMarket:
    denom: str
    lending_principal: float
    receipt_address: str


def _market_denom(asset: Any) -> str | None:
    native = asset.get("native_token") if isinstance(asset, dict) else None
    if isinstance(native, dict) and isinstance(native.get("denom"), str):
        return native["denom"]
    return None


def find_market(data: Any, denom: str) -> LendingMarket | None:
    """Pick ``denom``'s market out of ``get_all_markets``' [[asset, state], ...]."""
    if not isinstance(data, list):
        raise MalformedResponseError("get_all_markets", "expected an array")

    for market in data:
        if not isinstance(market, list) or len(market) != 2:
            continue
        asset, state = market
        if _market_denom(asset) != denom:
            continue
        details = require(state, "market_asset_details", dict)
        return LendingMarket(
            denom=denom,
            lending_principal=parse_decimal(
                require(state, "lending_principal", str), "lending_principal"
            ),
            receipt_address=require(
                details, "receipt_addr", str, "market_asset_details.receipt_addr"
            ),
        )
    return None


def parse_total_supply(data: Any) -> float:
    supply = parse_decimal(require(data, "total_supply", str), "total_supply")
    if supply <= 0:
        raise MalformedResponseError("total_supply", "receipt token has no supply")
    return supply
