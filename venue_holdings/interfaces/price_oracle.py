"""Price oracle protocol — USD price resolution abstraction."""
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for resolving USD prices."""

    async def current_price(self, price_source_id: str) -> float: ...

    async def reference_price(self) -> float: ...

    async def realtime_price(self, denom: str) -> float: ...

    async def realtime_reference_price(self) -> float: ...

    async def historical_price(self, price_source_id: str, timestamp: int) -> float: ...

    async def reference_price_at(self, timestamp: int) -> float: ...

    async def nearest_historical_price(self, denom: str, timestamp: int) -> float: ...

    async def nearest_reference_price(self, timestamp: int) -> float: ...
