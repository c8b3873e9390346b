"""Data models — all frozen (immutable)."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .errors import TokenNotFoundError, ValuationError


def adjust_amount(raw_amount: int | float, decimals: int) -> float:
    """Convert a raw on-chain integer amount into human units."""
    return raw_amount / (10**decimals)


@dataclass(frozen=True)
class TokenInfo:
    """Metadata for a single denom on a chain."""

    denom: str
    display_name: str
    decimals: int
    price_source_id: str = ""

    def adjust(self, raw_amount: int | float) -> float:
        return adjust_amount(raw_amount, self.decimals)


@dataclass(frozen=True)
class TokenCatalog:
    """Per-chain denom -> TokenInfo table."""

    chain_id: str
    tokens: Mapping[str, TokenInfo] = field(default_factory=dict)

    def __contains__(self, denom: object) -> bool:
        return denom in self.tokens

    def __len__(self) -> int:
        return len(self.tokens)

    def lookup(self, denom: str) -> TokenInfo:
        """Return the token's metadata.

        Raises:
            TokenNotFoundError: the denom is in neither registry.
        """
        try:
            return self.tokens[denom]
        except KeyError:
            raise TokenNotFoundError(denom, self.chain_id) from None

    def price_source_ids(self) -> set[str]:
        return {t.price_source_id for t in self.tokens.values() if t.price_source_id}


@dataclass(frozen=True)
class Asset:
    """Single valued balance. ``amount`` is always in human units."""

    denom: str
    amount: float
    usd_value: float
    display_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "denom": self.denom,
            "amount": self.amount,
            "usd_value": self.usd_value,
            "display_name": self.display_name,
        }


@dataclass(frozen=True)
class Holdings:
    """A list of valued assets and their USD / reference-asset totals."""

    balances: tuple[Asset, ...] = ()
    total_usd: float = 0.0
    total_reference_asset: float = 0.0

    @classmethod
    def empty(cls) -> Holdings:
        return cls()

    @classmethod
    def from_assets(
        cls, assets: Iterable[Asset], reference_price: float
    ) -> Holdings:
        """Build a Holdings whose totals are derived from ``assets``.

        Raises:
            ValuationError: if the reference price is zero, negative or NaN.
        """
        balances = tuple(assets)
        if not balances:
            return cls.empty()
        if not reference_price > 0 or math.isinf(reference_price):
            raise ValuationError(
                f"invalid reference asset price: {reference_price!r}"
            )
        total_usd = sum(a.usd_value for a in balances)
        return cls(
            balances=balances,
            total_usd=total_usd,
            total_reference_asset=total_usd / reference_price,
        )

    @property
    def is_empty(self) -> bool:
        return not self.balances

    def to_dict(self) -> dict[str, Any]:
        return {
            "balances": [a.to_dict() for a in self.balances],
            "total_usdc": self.total_usd,
            "total_atom": self.total_reference_asset,
        }


@dataclass(frozen=True)
class VenueHoldings:
    """Venue-wide total plus one address's principal and rewards.

    ``info_missing`` marks a protocol that is not integrated yet; ``error``
    records a failure when the venue was valued as part of a bid listing.
    """

    protocol: str
    venue_total: Holdings | None = None
    address_principal: Holdings | None = None
    address_rewards: Holdings | None = None
    info_missing: bool = False
    error: str | None = None

    @classmethod
    def missing(cls, protocol: str) -> VenueHoldings:
        return cls(protocol=protocol, info_missing=True)

    @classmethod
    def failed(cls, protocol: str, error: str) -> VenueHoldings:
        return cls(protocol=protocol, error=error)

    def to_dict(self) -> dict[str, Any]:
        def _dump(h: Holdings | None) -> dict[str, Any] | None:
            return h.to_dict() if h is not None else None

        out: dict[str, Any] = {
            "info_missing": self.info_missing,
            "protocol": self.protocol,
            "venue_total": _dump(self.venue_total),
            "address_holdings": _dump(self.address_principal),
            "address_rewards": _dump(self.address_rewards),
        }
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class BidHoldings:
    """Holdings of every venue of one bid (``None`` when the bid failed)."""

    bid_id: int
    initial_atom_allocation: float
    holdings: tuple[VenueHoldings, ...] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "bid_id": self.bid_id,
            "initial_atom_allocation": self.initial_atom_allocation,
            "holdings": (
                [v.to_dict() for v in self.holdings]
                if self.holdings is not None
                else None
            ),
        }


@dataclass(frozen=True)
class ExperimentalHoldings:
    """An experimental deployment's holdings now and at its start.

    Either side is ``None`` when it could not be valued in a listing.
    """

    experimental_id: int
    name: str
    start_timestamp: int
    end_timestamp: int
    initial_address_holdings: Holdings | None
    current_address_holdings: Holdings | None
    description: str = ""
    logo: str = ""

    def to_dict(self) -> dict[str, Any]:
        def _dump(h: Holdings | None) -> dict[str, Any] | None:
            return h.to_dict() if h is not None else None

        return {
            "experimental_id": self.experimental_id,
            "name": self.name,
            "description": self.description,
            "logo": self.logo,
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "initial_address_holdings": _dump(self.initial_address_holdings),
            "current_address_holdings": _dump(self.current_address_holdings),
        }
