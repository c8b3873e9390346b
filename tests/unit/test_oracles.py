"""Unit tests for the CoinGecko and Numia price feeds."""
from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from venue_holdings.config import PricesConfig
from venue_holdings.errors import MalformedResponseError, PriceNotFoundError
from venue_holdings.oracles import CoinGeckoOracle, NumiaOracle
from venue_holdings.oracles.numia import (
    PricePoint,
    encode_denom,
    parse_price_points,
    select_nearest,
)


def _point(t: int, close: float) -> PricePoint:
    return PricePoint(time=t, open=close, high=close, low=close, close=close, volume=0.0)


class TestCoinGeckoOracle:
    @pytest.mark.asyncio
    async def test_fetch_prices_single_batched_call(
        self, sample_prices_config: PricesConfig
    ) -> None:
        oracle = CoinGeckoOracle(sample_prices_config)
        get_json = AsyncMock(
            return_value={"cosmos": {"usd": 10.5}, "usd-coin": {"usd": 1}, "junk": {}}
        )

        with patch("venue_holdings.oracles.coingecko.net.get_json", get_json):
            prices = await oracle.fetch_prices(["usd-coin", "cosmos", "cosmos", "junk"])

        assert prices == {"cosmos": 10.5, "usd-coin": 1.0}
        get_json.assert_awaited_once()
        args, kwargs = get_json.call_args
        assert args[0] == "https://coingecko.example.com/api/v3/simple/price"
        assert kwargs["params"] == {"ids": "cosmos,junk,usd-coin", "vs_currencies": "usd"}

    @pytest.mark.asyncio
    async def test_fetch_prices_no_ids(self, sample_prices_config: PricesConfig) -> None:
        oracle = CoinGeckoOracle(sample_prices_config)
        get_json = AsyncMock()

        with patch("venue_holdings.oracles.coingecko.net.get_json", get_json):
            assert await oracle.fetch_prices([]) == {}

        get_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_price_on_formats_date(
        self, sample_prices_config: PricesConfig
    ) -> None:
        oracle = CoinGeckoOracle(sample_prices_config)
        get_json = AsyncMock(
            return_value={"market_data": {"current_price": {"usd": 8.25}}}
        )

        with patch("venue_holdings.oracles.coingecko.net.get_json", get_json):
            price = await oracle.fetch_price_on("cosmos", date(2024, 3, 5))

        assert price == 8.25
        args, kwargs = get_json.call_args
        assert args[0].endswith("/coins/cosmos/history")
        assert kwargs["params"]["date"] == "05-03-2024"

    @pytest.mark.asyncio
    async def test_fetch_price_on_without_market_data(
        self, sample_prices_config: PricesConfig
    ) -> None:
        oracle = CoinGeckoOracle(sample_prices_config)

        with patch(
            "venue_holdings.oracles.coingecko.net.get_json",
            AsyncMock(return_value={"id": "cosmos"}),
        ):
            with pytest.raises(PriceNotFoundError, match="cosmos"):
                await oracle.fetch_price_on("cosmos", date(2024, 3, 5))


class TestNumiaHelpers:
    def test_encode_ibc_denom(self) -> None:
        assert encode_denom("ibc/ABC") == "ibc%2FABC"

    def test_encode_native_denom(self) -> None:
        assert encode_denom("uosmo") == "uosmo"

    def test_parse_price_points(self) -> None:
        points = parse_price_points(
            [{"time": 100, "open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 10}]
        )
        assert points == [PricePoint(100, 1.0, 2.0, 0.5, 1.5, 10.0)]

    def test_parse_price_points_rejects_object(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_price_points({"time": 100})

    def test_select_nearest(self) -> None:
        points = [_point(100, 1.0), _point(200, 2.0), _point(400, 4.0)]
        assert select_nearest(points, 250).time == 200

    def test_select_nearest_tie_keeps_first(self) -> None:
        points = [_point(100, 1.0), _point(300, 3.0)]
        assert select_nearest(points, 200).close == 1.0

    def test_select_nearest_empty(self) -> None:
        assert select_nearest([], 250) is None


class TestNumiaOracle:
    @pytest.mark.asyncio
    async def test_fetch_price_encodes_denom_and_authenticates(
        self, sample_prices_config: PricesConfig
    ) -> None:
        oracle = NumiaOracle(sample_prices_config)
        get_json = AsyncMock(return_value={"usd_price": "9.75"})

        with patch("venue_holdings.oracles.numia.net.get_json", get_json):
            price = await oracle.fetch_price("ibc/27394FB0")

        assert price == 9.75
        args, kwargs = get_json.call_args
        assert args[0] == "https://numia.example.com/tokens/v2/real-time/ibc%2F27394FB0/price"
        assert kwargs["headers"] == {"Authorization": "Bearer numia-token"}

    @pytest.mark.asyncio
    async def test_fetch_price_missing(self, sample_prices_config: PricesConfig) -> None:
        oracle = NumiaOracle(sample_prices_config)

        with patch(
            "venue_holdings.oracles.numia.net.get_json", AsyncMock(return_value={})
        ):
            with pytest.raises(PriceNotFoundError):
                await oracle.fetch_price("uosmo")

    @pytest.mark.asyncio
    async def test_fetch_chart(self, sample_prices_config: PricesConfig) -> None:
        oracle = NumiaOracle(sample_prices_config)
        get_json = AsyncMock(return_value=[{"time": 1, "close": 2.0}])

        with patch("venue_holdings.oracles.numia.net.get_json", get_json):
            points = await oracle.fetch_chart("uosmo")

        assert points[0].close == 2.0
        assert get_json.call_args[0][0].endswith("/historical/uosmo/chart")
