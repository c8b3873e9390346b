"""Cosmos LCD client — CosmWasm smart queries and plain REST reads."""
from __future__ import annotations

import base64
import json
import logging
from typing import Any

from ... import net
from ...config import ProtocolConfig
from ...errors import MalformedResponseError

logger = logging.getLogger(__name__)


def encode_query(query: dict[str, Any]) -> str:
    """Base64-encode a smart query the way the LCD gateway expects it."""
    raw = json.dumps(query, separators=(",", ":")).encode()
    return base64.b64encode(raw).decode()


class CosmosClient:
    """Read-only client bound to one chain's LCD endpoint."""

    def __init__(self, config: ProtocolConfig) -> None:
        self.lcd_url = config.lcd_url.rstrip("/")
        self.timeout = config.request_timeout

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.lcd_url}/{path.lstrip('/')}"

    async def get(
        self, path: str, params: dict[str, str] | None = None
    ) -> Any:
        """GET an LCD path (or an absolute URL) and decode the JSON body."""
        return await net.get_json(self._url(path), params=params, timeout=self.timeout)

    async def query_contract(
        self, contract_address: str, query: dict[str, Any]
    ) -> Any:
        """Run a smart query and return its ``data`` payload."""
        logger.debug("Querying contract %s: %s", contract_address, query)
        url = self._url(
            f"cosmwasm/wasm/v1/contract/{contract_address}/smart/{encode_query(query)}"
        )
        response = await net.get_json(url, timeout=self.timeout)

        if not isinstance(response, dict) or response.get("data") is None:
            raise MalformedResponseError("data", "smart contract returned no data")
        return response["data"]

    async def get_bank_balances(self, address: str) -> dict[str, int]:
        """Return the address's bank balances as denom -> raw amount."""
        response = await self.get(f"cosmos/bank/v1beta1/balances/{address}")
        if not isinstance(response, dict) or not isinstance(
            response.get("balances"), list
        ):
            raise MalformedResponseError("balances")

        balances: dict[str, int] = {}
        for coin in response["balances"]:
            try:
                balances[coin["denom"]] = int(coin["amount"])
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedResponseError("balances.amount", str(e)) from e
        return balances
