"""Numia token API — real-time and time-series prices keyed by denom."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .. import net
from ..config import PricesConfig
from ..errors import MalformedResponseError, PriceNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricePoint:
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float


def encode_denom(denom: str) -> str:
    """Percent-encode the IBC slash so the denom fits in one path segment."""
    return denom.replace("ibc/", "ibc%2F", 1)


def parse_price_points(data: Any) -> list[PricePoint]:
    if not isinstance(data, list):
        raise MalformedResponseError("chart", "expected an array of price points")
    points: list[PricePoint] = []
    for item in data:
        try:
            points.append(
                PricePoint(
                    time=int(item["time"]),
                    open=float(item.get("open", 0.0)),
                    high=float(item.get("high", 0.0)),
                    low=float(item.get("low", 0.0)),
                    close=float(item["close"]),
                    volume=float(item.get("volume", 0.0)),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError("chart.time/close", str(e)) from e
    return points


def select_nearest(points: list[PricePoint], timestamp: int) -> PricePoint | None:
    """Point with the smallest |time - timestamp|; ties go to the first seen."""
    nearest: PricePoint | None = None
    smallest_diff: int | None = None
    for point in points:
        diff = abs(point.time - timestamp)
        if smallest_diff is None or diff < smallest_diff:
            smallest_diff = diff
            nearest = point
    return nearest


class NumiaOracle:
    """Fetch denom-keyed prices from Numia."""

    def __init__(self, config: PricesConfig) -> None:
        self.base_url = config.numia_url.rstrip("/")
        self.timeout = config.request_timeout
        self._headers = {"Authorization": f"Bearer {config.numia_api_token}"}
        if not config.numia_api_token:
            logger.warning("NUMIA_API_TOKEN is not set; Numia requests will be unauthenticated")

    async def fetch_price(self, denom: str) -> float:
        data = await net.get_json(
            f"{self.base_url}/real-time/{encode_denom(denom)}/price",
            headers=self._headers,
            timeout=self.timeout,
        )
        try:
            return float(data["usd_price"])
        except (KeyError, TypeError) as e:
            raise PriceNotFoundError(denom, "no real-time price") from e
        except ValueError as e:
            raise MalformedResponseError("usd_price", str(e)) from e

    async def fetch_chart(self, denom: str) -> list[PricePoint]:
        data = await net.get_json(
            f"{self.base_url}/historical/{encode_denom(denom)}/chart",
            headers=self._headers,
            timeout=self.timeout,
        )
        return parse_price_points(data)
