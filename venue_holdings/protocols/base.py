"""Valuation steps shared by every protocol adapter.

raw amount -> TokenInfo -> decimal-adjust -> price -> Asset -> Holdings
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from ..errors import MalformedResponseError, NotFoundError
from ..interfaces.price_oracle import PriceOracle
from ..models import Asset, Holdings, TokenCatalog, TokenInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field coercion used by the per-protocol parsers
# ---------------------------------------------------------------------------


def parse_amount(value: Any, field: str) -> int:
    """Parse a raw on-chain integer amount (sent as a decimal string)."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedResponseError(field, f"expected an integer string, got {value!r}")
    try:
        return int(value)
    except ValueError as e:
        raise MalformedResponseError(field, str(e)) from e


def parse_decimal(value: Any, field: str) -> float:
    """Parse a fractional number such as a rate or a decimal-string balance."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise MalformedResponseError(field, f"expected a number, got {value!r}")
    try:
        return float(value)
    except ValueError as e:
        raise MalformedResponseError(field, str(e)) from e


def require(
    data: Any, key: str, kind: type | tuple[type, ...], field: str | None = None
) -> Any:
    """Return ``data[key]`` if ``data`` is a dict and the value has type ``kind``."""
    value = data.get(key) if isinstance(data, dict) else None
    if not isinstance(value, kind):
        raise MalformedResponseError(field or key)
    return value


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


async def price_asset(
    prices: PriceOracle,
    token: TokenInfo,
    amount: float,
    denom: str | None = None,
) -> Asset:
    """Value ``amount`` (human units) of ``token`` at its current USD price."""
    price = await prices.current_price(token.price_source_id)
    return Asset(
        denom=denom or token.denom,
        amount=amount,
        usd_value=amount * price,
        display_name=token.display_name,
    )


async def build_holdings(prices: PriceOracle, assets: Iterable[Asset]) -> Holdings:
    assets = list(assets)
    if not assets:
        return Holdings.empty()
    return Holdings.from_assets(assets, await prices.reference_price())


async def value_amounts(
    prices: PriceOracle,
    catalog: TokenCatalog,
    amounts: Iterable[tuple[str, int | float]],
    *,
    skip_unresolved: bool = False,
) -> Holdings:
    """Value raw (denom, amount) pairs and aggregate them into Holdings.

    With ``skip_unresolved`` a denom whose metadata or price cannot be found is
    dropped (and logged) instead of failing the whole computation; if every
    denom is dropped the first failure is raised.
    """
    assets: list[Asset] = []
    failures: list[NotFoundError] = []

    for denom, raw_amount in amounts:
        try:
            token = catalog.lookup(denom)
            asset = await price_asset(prices, token, token.adjust(raw_amount))
        except NotFoundError as e:
            if not skip_unresolved:
                raise
            logger.warning("Skipping %s: %s", denom, e)
            failures.append(e)
            continue
        assets.append(asset)

    if failures and not assets:
        raise failures[0]
    return await build_holdings(prices, assets)
