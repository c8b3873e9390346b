"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from venue_holdings.config import (
    AppConfig,
    BidConfig,
    CacheConfig,
    DualityVenuePositionConfig,
    MarsVenuePositionConfig,
    MissingVenuePositionConfig,
    PricesConfig,
    ProtocolConfig,
)
from venue_holdings.errors import PriceNotFoundError
from venue_holdings.models import TokenCatalog, TokenInfo

ATOM = "ibc/C4CFF46FD6DE35CA4CF4CE031E643C8FDC9BA4B99AE598E9B0ED98FE3A2319F9"
USDC = "ibc/B559A80D62249C8AA07A380E2A2BEA6E5CA9A6F079C912C3A9E9B494105E4F81"
NTRN = "untrn"

SAMPLE_PRICES = {"cosmos": 10.0, "usd-coin": 1.0, "neutron-3": 0.5}


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_prices_config() -> PricesConfig:
    return PricesConfig(
        coingecko_url="https://coingecko.example.com/api/v3",
        skip_assets_url="https://skip.example.com/v2/fungible/assets",
        numia_url="https://numia.example.com/tokens/v2",
        numia_api_token="numia-token",
    )


@pytest.fixture()
def sample_protocol_config() -> ProtocolConfig:
    return ProtocolConfig(
        chain_id="neutron-1",
        lcd_url="https://lcd.example.com",
        asset_list_url="https://chains.example.com/neutron",
        request_timeout=5,
    )


@pytest.fixture()
def sample_app_config(
    sample_prices_config: PricesConfig,
    sample_protocol_config: ProtocolConfig,
) -> AppConfig:
    return AppConfig(
        prices=sample_prices_config,
        cache=CacheConfig(result_ttl_minutes=30, max_entries=16),
        protocols={
            "duality": sample_protocol_config,
            "mars": sample_protocol_config,
        },
        bids={
            7: BidConfig(
                bid_id=7,
                initial_atom_allocation=1000.0,
                venues=(
                    MarsVenuePositionConfig(
                        credit_account_id="42", deposited_denom=ATOM
                    ),
                    DualityVenuePositionConfig(
                        pool_address="neutron1pool", holder_address="neutron1holder"
                    ),
                    MissingVenuePositionConfig(protocol_name="stride"),
                ),
            ),
        },
    )


# ---------------------------------------------------------------------------
# Catalog / price fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_catalog() -> TokenCatalog:
    return TokenCatalog(
        chain_id="neutron-1",
        tokens={
            ATOM: TokenInfo(ATOM, "ATOM", 6, "cosmos"),
            USDC: TokenInfo(USDC, "USDC", 6, "usd-coin"),
            NTRN: TokenInfo(NTRN, "NTRN", 6, "neutron-3"),
        },
    )


def _lookup_price(price_source_id: str) -> float:
    try:
        return SAMPLE_PRICES[price_source_id]
    except KeyError:
        raise PriceNotFoundError(price_source_id) from None


@pytest.fixture()
def mock_prices() -> AsyncMock:
    """Price oracle with ATOM at $10 and a few fixed prices."""
    prices = AsyncMock()
    prices.current_price = AsyncMock(side_effect=_lookup_price)
    prices.reference_price = AsyncMock(return_value=10.0)
    prices.realtime_price = AsyncMock(return_value=1.0)
    prices.realtime_reference_price = AsyncMock(return_value=10.0)
    prices.nearest_reference_price = AsyncMock(return_value=10.0)
    return prices


@pytest.fixture()
def mock_chain_client() -> AsyncMock:
    client = AsyncMock()
    client.query_contract = AsyncMock()
    client.get = AsyncMock()
    client.get_bank_balances = AsyncMock(return_value={})
    return client


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    prices:
      coingecko_url: "https://coingecko.example.com/api/v3"
      numia_api_token: "tok"
      cache_ttl_minutes: 15
    cache:
      result_ttl_minutes: 10
    protocols:
      mars:
        chain_id: neutron-1
        lcd_url: "https://lcd.example.com/"
        asset_list_url: "https://chains.example.com/neutron"
        contracts:
          credit_manager: "neutron1cm"
      duality:
        chain_id: neutron-1
        lcd_url: "https://lcd.example.com"
        asset_list_url: "https://chains.example.com/neutron"
    bids:
      - id: 7
        initial_atom_allocation: 1000
        venues:
          - protocol: mars
            credit_account_id: "42"
            deposited_denom: "ibc/ATOM"
          - protocol: duality
            pool_address: neutron1pool
            holder_address: neutron1holder
            active_shares: "150"
          - protocol: stride
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
