"""Integration tests for ValuationService with mocked chain and price layers."""
from __future__ import annotations

from dataclasses import replace
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from cachetools import TTLCache

from venue_holdings.config import (
    AppConfig,
    BidConfig,
    ExperimentalDeploymentConfig,
    InitialBalance,
    MagmaVenuePositionConfig,
    MarsVenuePositionConfig,
    ProtocolConfig,
)
from venue_holdings.errors import (
    BidNotFoundError,
    ExperimentalNotFoundError,
    MalformedResponseError,
    PositionNotFoundError,
    PriceNotFoundError,
    RegistryUnavailableError,
    UpstreamUnavailableError,
)
from venue_holdings.models import Asset, Holdings, TokenCatalog
from venue_holdings.protocols.mars import MarsAdapter
from venue_holdings.services import (
    CatalogService,
    PriceResolver,
    ValuationService,
    build_service,
)

ATOM = "ibc/C4CFF46FD6DE35CA4CF4CE031E643C8FDC9BA4B99AE598E9B0ED98FE3A2319F9"
USDC = "ibc/B559A80D62249C8AA07A380E2A2BEA6E5CA9A6F079C912C3A9E9B494105E4F81"

MARS_VENUE = MarsVenuePositionConfig(credit_account_id="42", deposited_denom=ATOM)


def _chain_responses(lends: list[dict[str, str]]):
    responses: dict[str, Any] = {
        "total_deposit": {"denom": ATOM, "amount": "5000000"},
        "positions": {"account_id": "42", "lends": lends},
        "get_balance": [{"denom": USDC, "amount": "20000000"}],
    }

    def answer(contract_address: str, query: dict[str, Any]) -> Any:
        return responses[next(iter(query))]

    return answer


@pytest.fixture()
def catalogs(sample_catalog: TokenCatalog) -> AsyncMock:
    service = AsyncMock()
    service.resolve = AsyncMock(return_value=sample_catalog)
    return service


@pytest.fixture()
def service(
    sample_app_config: AppConfig,
    catalogs: AsyncMock,
    mock_prices: AsyncMock,
    mock_chain_client: AsyncMock,
) -> ValuationService:
    svc = ValuationService(sample_app_config, catalogs, mock_prices)
    svc._clients = {"mars": mock_chain_client, "duality": mock_chain_client}
    return svc


class TestComputeVenueHoldings:
    @pytest.mark.asyncio
    async def test_values_tvl_principal_and_rewards(
        self, service: ValuationService, mock_chain_client: AsyncMock
    ) -> None:
        mock_chain_client.query_contract.side_effect = _chain_responses(
            [{"denom": ATOM, "amount": "1000000"}]
        )

        venue = await service.compute_venue_holdings(MARS_VENUE)

        assert venue.protocol == "mars"
        assert not venue.info_missing
        # 5_000_000 raw at 6 decimals is 5 ATOM, $50 at $10
        assert venue.venue_total.balances[0].amount == pytest.approx(5.0)
        assert venue.venue_total.total_usd == pytest.approx(50.0)
        assert venue.venue_total.total_reference_asset == pytest.approx(5.0)
        assert venue.address_principal.total_usd == pytest.approx(10.0)
        assert venue.address_rewards.is_empty

    @pytest.mark.asyncio
    async def test_single_venue_propagates_errors(
        self, service: ValuationService, mock_chain_client: AsyncMock
    ) -> None:
        mock_chain_client.query_contract.side_effect = _chain_responses([])
        with pytest.raises(PositionNotFoundError):
            await service.compute_venue_holdings(MARS_VENUE)

    @pytest.mark.asyncio
    async def test_unsupported_protocol_is_flagged_missing(
        self, service: ValuationService, sample_app_config: AppConfig, catalogs: AsyncMock
    ) -> None:
        stride = sample_app_config.bids[7].venues[2]

        venue = await service.compute_venue_holdings(stride)

        assert venue.info_missing
        assert venue.to_dict()["venue_total"] is None
        catalogs.resolve.assert_not_awaited()


class TestComputeBidHoldings:
    @pytest.mark.asyncio
    async def test_values_every_venue_with_one_catalog_fetch(
        self,
        service: ValuationService,
        mock_chain_client: AsyncMock,
        catalogs: AsyncMock,
    ) -> None:
        mock_chain_client.query_contract.side_effect = _chain_responses(
            [{"denom": ATOM, "amount": "1000000"}]
        )

        mars, duality, stride = await service.compute_bid_holdings(7)

        assert mars.venue_total.total_usd == pytest.approx(50.0)
        assert duality.venue_total.total_usd == pytest.approx(20.0)
        assert duality.address_principal.is_empty
        assert stride.info_missing
        # Mars and Duality share an asset list
        catalogs.resolve.assert_awaited_once_with("https://chains.example.com/neutron")

    @pytest.mark.asyncio
    async def test_failed_venue_is_recorded_and_others_continue(
        self, service: ValuationService, mock_chain_client: AsyncMock
    ) -> None:
        mock_chain_client.query_contract.side_effect = _chain_responses([])

        mars, duality, stride = await service.compute_bid_holdings(7)

        assert mars.error is not None
        assert "credit account ID: 42" in mars.error
        assert mars.venue_total is None
        assert mars.to_dict()["error"] == mars.error
        assert duality.error is None
        assert duality.venue_total.total_usd == pytest.approx(20.0)
        assert stride.info_missing

    @pytest.mark.asyncio
    async def test_catalog_failure_is_recorded_per_venue(
        self, service: ValuationService, catalogs: AsyncMock
    ) -> None:
        catalogs.resolve.side_effect = RegistryUnavailableError(
            "https://chains.example.com/neutron", "unexpected status code: 503", 503
        )

        mars, duality, stride = await service.compute_bid_holdings(7)

        assert mars.error == duality.error == "unexpected status code: 503"
        assert stride.info_missing

    @pytest.mark.asyncio
    async def test_results_are_cached(
        self,
        service: ValuationService,
        mock_chain_client: AsyncMock,
        catalogs: AsyncMock,
    ) -> None:
        mock_chain_client.query_contract.side_effect = _chain_responses(
            [{"denom": ATOM, "amount": "1000000"}]
        )

        first = await service.compute_bid_holdings(7)
        calls = mock_chain_client.query_contract.await_count
        second = await service.compute_bid_holdings(7)

        assert second is first
        assert mock_chain_client.query_contract.await_count == calls
        assert catalogs.resolve.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_results_are_recomputed(
        self,
        sample_app_config: AppConfig,
        catalogs: AsyncMock,
        mock_prices: AsyncMock,
        mock_chain_client: AsyncMock,
    ) -> None:
        now = [0.0]
        cache = TTLCache(maxsize=4, ttl=60, timer=lambda: now[0])
        service = ValuationService(sample_app_config, catalogs, mock_prices, cache)
        service._clients = {"mars": mock_chain_client, "duality": mock_chain_client}
        mock_chain_client.query_contract.side_effect = _chain_responses(
            [{"denom": ATOM, "amount": "1000000"}]
        )

        await service.compute_bid_holdings(7)
        now[0] = 61.0
        await service.compute_bid_holdings(7)

        assert catalogs.resolve.await_count == 2

    @pytest.mark.asyncio
    async def test_unknown_bid(self, service: ValuationService) -> None:
        with pytest.raises(BidNotFoundError, match="bid not found: 99"):
            await service.compute_bid_holdings(99)


class TestComputeAllBids:
    @pytest.mark.asyncio
    async def test_failed_bid_has_no_holdings(
        self,
        sample_app_config: AppConfig,
        catalogs: AsyncMock,
        mock_prices: AsyncMock,
    ) -> None:
        config = replace(
            sample_app_config,
            bids={
                **sample_app_config.bids,
                3: BidConfig(bid_id=3, initial_atom_allocation=50.0),
            },
        )
        service = ValuationService(config, catalogs, mock_prices)
        ok = (AsyncMock(),)

        async def compute(bid_id: int):
            if bid_id == 7:
                raise BidNotFoundError(bid_id)
            return ok

        with patch.object(service, "compute_bid_holdings", side_effect=compute):
            results = await service.compute_all_bids()

        assert [r.bid_id for r in results] == [3, 7]
        assert results[0].holdings is ok
        assert results[0].initial_atom_allocation == 50.0
        assert results[1].holdings is None
        assert results[1].to_dict()["holdings"] is None


class TestComputeInitialHoldings:
    HOLDINGS = Holdings(
        balances=(
            Asset(ATOM, 5.0, 50.0, "ATOM"),
            Asset(USDC, 3.0, 3.0, "USDC"),
            Asset("ibc/RETIRED", 1.0, 1.0, "OLD"),
        ),
        total_usd=54.0,
        total_reference_asset=5.4,
    )

    @pytest.mark.asyncio
    async def test_reprices_with_nearest_historical_prices(
        self,
        service: ValuationService,
        mock_prices: AsyncMock,
        sample_catalog: TokenCatalog,
    ) -> None:
        historical = {ATOM: 8.0, USDC: 1.0}

        def nearest(denom: str, timestamp: int) -> float:
            if denom not in historical:
                raise PriceNotFoundError(denom, "no historical price data for timestamp")
            return historical[denom]

        mock_prices.nearest_historical_price.side_effect = nearest

        initial = await service.compute_initial_holdings(
            self.HOLDINGS, sample_catalog, 1_709_640_000
        )

        assert [a.denom for a in initial.balances] == [ATOM, USDC]
        assert initial.balances[0].usd_value == pytest.approx(40.0)
        assert initial.total_usd == pytest.approx(43.0)
        assert initial.total_reference_asset == pytest.approx(4.3)
        mock_prices.nearest_reference_price.assert_awaited_once_with(1_709_640_000)

    @pytest.mark.asyncio
    async def test_nothing_priced_is_empty(
        self,
        service: ValuationService,
        mock_prices: AsyncMock,
        sample_catalog: TokenCatalog,
    ) -> None:
        mock_prices.nearest_historical_price.side_effect = PriceNotFoundError("x")

        initial = await service.compute_initial_holdings(
            self.HOLDINGS, sample_catalog, 1_709_640_000
        )
        assert initial.is_empty

    @pytest.mark.asyncio
    async def test_reference_price_is_resolved_first(
        self,
        service: ValuationService,
        mock_prices: AsyncMock,
        sample_catalog: TokenCatalog,
    ) -> None:
        mock_prices.nearest_reference_price.side_effect = PriceNotFoundError(
            "cosmos", "no historical price data for timestamp"
        )
        mock_prices.nearest_historical_price.side_effect = PriceNotFoundError("x")

        with pytest.raises(PriceNotFoundError, match="cosmos"):
            await service.compute_initial_holdings(
                self.HOLDINGS, sample_catalog, 1_709_640_000
            )
        mock_prices.nearest_historical_price.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_denoms_outside_catalog_are_not_priced(
        self,
        service: ValuationService,
        mock_prices: AsyncMock,
        sample_catalog: TokenCatalog,
    ) -> None:
        mock_prices.nearest_historical_price.return_value = 1.0

        initial = await service.compute_initial_holdings(
            self.HOLDINGS, sample_catalog, 1_709_640_000
        )

        assert [a.display_name for a in initial.balances] == ["ATOM", "USDC"]
        queried = [c.args[0] for c in mock_prices.nearest_historical_price.await_args_list]
        assert queried == [ATOM, USDC]


# ---------------------------------------------------------------------------
# Experimental deployments
# ---------------------------------------------------------------------------


MAGMA_VENUE = MagmaVenuePositionConfig(
    vault_address="osmo1vault",
    holder_address="osmo1holder",
    token0_denom=ATOM,
    token1_denom=USDC,
)

DEPLOYMENT = ExperimentalDeploymentConfig(
    experimental_id=3,
    name="ATOM/USDC vault",
    venue=MAGMA_VENUE,
    start_timestamp=1_709_640_000,
    initial_balances=(
        InitialBalance(ATOM, 2.0),
        InitialBalance("ibc/RETIRED", 7.0),
    ),
)

MAGMA_RESPONSES = {
    "balance": {"balance": "250"},
    "token_info": {"total_supply": "1000"},
    "vault_balances": {"bal0": "4000000", "bal1": "20000000"},
}


def _by_query(responses: dict[str, Any]):
    def answer(contract_address: str, query: dict[str, Any]) -> Any:
        return responses[next(iter(query))]

    return answer


def _historical(denom: str, timestamp: int) -> float:
    if denom != ATOM:
        raise PriceNotFoundError(denom, "no historical price data for timestamp")
    return 8.0


@pytest.fixture()
def experimental_service(
    sample_app_config: AppConfig,
    sample_protocol_config: ProtocolConfig,
    catalogs: AsyncMock,
    mock_prices: AsyncMock,
    mock_chain_client: AsyncMock,
) -> ValuationService:
    config = replace(
        sample_app_config,
        protocols={**sample_app_config.protocols, "magma": sample_protocol_config},
        experimental={
            3: DEPLOYMENT,
            9: replace(DEPLOYMENT, experimental_id=9, name="second"),
        },
    )
    mock_prices.realtime_price.side_effect = {ATOM: 10.0, USDC: 1.0}.__getitem__
    mock_prices.nearest_historical_price.side_effect = _historical
    svc = ValuationService(config, catalogs, mock_prices)
    svc._clients = {"magma": mock_chain_client}
    return svc


class TestComputeExperimental:
    @pytest.mark.asyncio
    async def test_current_and_initial_holdings(
        self,
        experimental_service: ValuationService,
        mock_chain_client: AsyncMock,
        mock_prices: AsyncMock,
    ) -> None:
        mock_chain_client.query_contract.side_effect = _by_query(MAGMA_RESPONSES)

        result = await experimental_service.compute_experimental(3)

        assert result.experimental_id == 3
        assert result.name == "ATOM/USDC vault"
        # A quarter of 4 ATOM and 20 USDC at realtime prices
        current = result.current_address_holdings
        assert [(a.denom, a.amount) for a in current.balances] == [
            (ATOM, pytest.approx(1.0)),
            (USDC, pytest.approx(5.0)),
        ]
        assert current.total_usd == pytest.approx(15.0)
        # 2 ATOM at the historical $8, the retired denom dropped
        initial = result.initial_address_holdings
        assert [a.denom for a in initial.balances] == [ATOM]
        assert initial.total_usd == pytest.approx(16.0)
        assert initial.total_reference_asset == pytest.approx(1.6)
        mock_prices.nearest_reference_price.assert_awaited_once_with(1_709_640_000)

    @pytest.mark.asyncio
    async def test_unknown_deployment(
        self, experimental_service: ValuationService
    ) -> None:
        with pytest.raises(ExperimentalNotFoundError, match="not found: 99"):
            await experimental_service.compute_experimental(99)

    @pytest.mark.asyncio
    async def test_single_deployment_propagates_errors(
        self,
        experimental_service: ValuationService,
        mock_chain_client: AsyncMock,
    ) -> None:
        mock_chain_client.query_contract.side_effect = _by_query(
            {**MAGMA_RESPONSES, "token_info": {"total_supply": "0"}}
        )

        with pytest.raises(MalformedResponseError, match="total_supply"):
            await experimental_service.compute_experimental(3)

    @pytest.mark.asyncio
    async def test_listing_nulls_failed_deployments(
        self,
        experimental_service: ValuationService,
        mock_chain_client: AsyncMock,
        catalogs: AsyncMock,
    ) -> None:
        mock_chain_client.query_contract.side_effect = [
            MAGMA_RESPONSES["balance"],
            MAGMA_RESPONSES["token_info"],
            MAGMA_RESPONSES["vault_balances"],
            UpstreamUnavailableError("https://lcd.example.com", "timeout"),
        ]

        first, second = await experimental_service.compute_all_experimental()

        assert first.experimental_id == 3
        assert first.current_address_holdings.total_usd == pytest.approx(15.0)
        assert second.experimental_id == 9
        assert second.current_address_holdings is None
        assert second.initial_address_holdings is None
        assert second.to_dict()["current_address_holdings"] is None
        catalogs.resolve.assert_awaited_once()


class TestMalformedRegistryBody:
    @pytest.mark.asyncio
    async def test_undecodable_asset_list_is_recorded_per_venue(
        self, sample_app_config: AppConfig, mock_prices: AsyncMock
    ) -> None:
        svc = ValuationService(sample_app_config, CatalogService(AsyncMock()), mock_prices)
        error = MalformedResponseError(
            "body", "decoding JSON from https://chains.example.com/neutron: invalid utf-8"
        )
        with patch("venue_holdings.net.get_json", AsyncMock(side_effect=error)):
            mars, duality, stride = await svc.compute_bid_holdings(7)

        assert mars.error == duality.error == str(error)
        assert stride.info_missing


def test_build_service_wires_shared_layers(sample_app_config: AppConfig) -> None:
    service = build_service(sample_app_config, clock=lambda: 0.0)

    assert isinstance(service, ValuationService)
    assert isinstance(service._prices, PriceResolver)
    assert isinstance(service.adapter_for(MARS_VENUE), MarsAdapter)
