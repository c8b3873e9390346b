"""Exception taxonomy for the valuation pipeline.

Leaf operations raise these untouched; composite operations decide whether to
propagate (single venue) or record and continue (bid / all-bids listings).
Nothing is retried.
"""
from __future__ import annotations


class ValuationError(Exception):
    """Base class for every error raised while valuing a position."""


# ---------------------------------------------------------------------------
# NotFound: usually recoverable by dropping the item
# ---------------------------------------------------------------------------


class NotFoundError(ValuationError):
    """Something was absent from a source."""


class TokenNotFoundError(NotFoundError):
    def __init__(self, denom: str, chain_id: str = "") -> None:
        self.denom = denom
        self.chain_id = chain_id
        where = f" on {chain_id}" if chain_id else ""
        super().__init__(f"token info not found for {denom}{where}")


class PriceNotFoundError(NotFoundError):
    def __init__(self, price_source_id: str, detail: str = "") -> None:
        self.price_source_id = price_source_id
        suffix = f" ({detail})" if detail else ""
        super().__init__(f"no price found for token: {price_source_id}{suffix}")


class PositionNotFoundError(NotFoundError):
    """The configured holder has no position in the venue."""


class BidNotFoundError(NotFoundError):
    def __init__(self, bid_id: int) -> None:
        self.bid_id = bid_id
        super().__init__(f"bid not found: {bid_id}")


class ExperimentalNotFoundError(NotFoundError):
    def __init__(self, experimental_id: int) -> None:
        self.experimental_id = experimental_id
        super().__init__(f"experimental deployment not found: {experimental_id}")


# ---------------------------------------------------------------------------
# Upstream / decode failures, fatal to the current operation
# ---------------------------------------------------------------------------


class UpstreamUnavailableError(ValuationError):
    """Network error or non-200 response from an external dependency."""

    def __init__(
        self, url: str, message: str, status: int | None = None
    ) -> None:
        self.url = url
        self.status = status
        self.message = message
        super().__init__(message)


class RegistryUnavailableError(UpstreamUnavailableError):
    """The primary asset registry for a chain could not be fetched."""


class MalformedResponseError(ValuationError):
    """A decoded payload did not match the expected shape."""

    def __init__(self, field: str, detail: str = "") -> None:
        self.field = field
        suffix = f": {detail}" if detail else ""
        super().__init__(f"missing or invalid '{field}'{suffix}")


class UnsupportedProtocolError(ValuationError):
    """No adapter exists for the protocol (resolved to MissingPosition)."""

    def __init__(self, protocol: str) -> None:
        self.protocol = protocol
        super().__init__(f"unsupported protocol: {protocol}")
