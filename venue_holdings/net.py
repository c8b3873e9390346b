"""HTTP plumbing shared by the chain client, registries and price feeds."""
from __future__ import annotations

import json
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from .errors import MalformedResponseError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def _ssl_context() -> ssl.SSLContext:
    return ssl.create_default_context(cafile=certifi.where())


def parse_error_message(body: str) -> str | None:
    """Extract ``message`` from a ``{code, message, details}`` error body."""
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return None


async def get_json(
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Any:
    """GET ``url`` and decode its JSON body.

    Raises:
        UpstreamUnavailableError: network failure or non-200 status.
        MalformedResponseError: the body is not valid UTF-8 JSON.
    """
    logger.debug("Fetching JSON data from %s", url)

    connector = aiohttp.TCPConnector(ssl=_ssl_context())
    try:
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                body = await response.read()
                if response.status != 200:
                    text = body.decode(errors="replace")
                    logger.debug(
                        "Unexpected status %s from %s: %s",
                        response.status, url, text,
                    )
                    detail = parse_error_message(text)
                    message = (
                        f"upstream error response: {detail}"
                        if detail
                        else f"unexpected status code: {response.status}"
                    )
                    raise UpstreamUnavailableError(url, message, response.status)
    except (aiohttp.ClientError, TimeoutError) as e:
        raise UpstreamUnavailableError(url, f"fetching {url} failed: {e}") from e

    # json.loads on bytes also raises UnicodeDecodeError, a ValueError
    try:
        return json.loads(body)
    except ValueError as e:
        raise MalformedResponseError("body", f"decoding JSON from {url}: {e}") from e
