"""Chain client protocol — read-only LCD / CosmWasm abstraction."""
from typing import Any, Protocol


class ChainClient(Protocol):
    """Abstract interface for on-chain reads."""

    async def get(self, path: str, params: dict[str, str] | None = None) -> Any: ...

    async def query_contract(self, contract_address: str, query: dict[str, Any]) -> Any: ...

    async def get_bank_balances(self, address: str) -> dict[str, int]: ...
