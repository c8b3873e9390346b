"""Configuration: config.yaml plus .env, env-var interpolation, validation."""
from __future__ import annotations

import dataclasses
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricesConfig:
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    skip_assets_url: str = "https://api.skip.build/v2/fungible/assets"
    numia_url: str = "https://osmosis.numia.xyz/tokens/v2"
    numia_api_token: str = ""
    reference_price_id: str = "cosmos"
    # ATOM as seen by the Numia (Osmosis) feed
    reference_denom: str = (
        "ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2"
    )
    cache_ttl_minutes: int = 30
    request_timeout: int = 30


@dataclass(frozen=True)
class CacheConfig:
    result_ttl_minutes: int = 30
    max_entries: int = 256


@dataclass(frozen=True)
class ProtocolConfig:
    chain_id: str = ""
    lcd_url: str = ""
    asset_list_url: str = ""
    pool_api_url: str = ""
    contracts: dict[str, str] = field(default_factory=dict)
    request_timeout: int = 30


# ---------------------------------------------------------------------------
# Venue position configs, one variant per protocol
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VenuePositionConfig:
    """Identifies one concrete position in one venue."""

    @property
    def protocol(self) -> str:
        raise NotImplementedError

    @property
    def pool_id(self) -> str:
        return ""

    @property
    def address(self) -> str:
        return ""


@dataclass(frozen=True)
class AstroportVenuePositionConfig(VenuePositionConfig):
    pool_address: str
    incentive_address: str
    holder_address: str

    @property
    def protocol(self) -> str:
        return "astroport"

    @property
    def pool_id(self) -> str:
        return self.pool_address

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class DualityVenuePositionConfig(VenuePositionConfig):
    pool_address: str
    holder_address: str
    # LP amount deployed for this bid
    active_shares: int = 0

    @property
    def protocol(self) -> str:
        return "duality"

    @property
    def pool_id(self) -> str:
        return self.pool_address

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class ElysVenuePositionConfig(VenuePositionConfig):
    pool: str
    holder_address: str

    @property
    def protocol(self) -> str:
        return "elys"

    @property
    def pool_id(self) -> str:
        return self.pool

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class MarsVenuePositionConfig(VenuePositionConfig):
    credit_account_id: str
    deposited_denom: str

    @property
    def protocol(self) -> str:
        return "mars"

    @property
    def address(self) -> str:
        return self.credit_account_id


@dataclass(frozen=True)
class NeptuneVenuePositionConfig(VenuePositionConfig):
    denom: str
    holder_address: str
    # receipt token amount deployed for this bid
    active_shares: int = 0

    @property
    def protocol(self) -> str:
        return "neptune"

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class NolusVenuePositionConfig(VenuePositionConfig):
    pool_contract_address: str
    pool_contract_token: str
    holder_address: str

    @property
    def protocol(self) -> str:
        return "nolus"

    @property
    def pool_id(self) -> str:
        return self.pool_contract_address

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class OsmosisVenuePositionConfig(VenuePositionConfig):
    pool: str
    holder_address: str

    @property
    def protocol(self) -> str:
        return "osmosis"

    @property
    def pool_id(self) -> str:
        return self.pool

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class UxVenuePositionConfig(VenuePositionConfig):
    denom: str
    holder_address: str

    @property
    def protocol(self) -> str:
        return "ux"

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class MagmaVenuePositionConfig(VenuePositionConfig):
    vault_address: str
    holder_address: str
    token0_denom: str
    token1_denom: str

    @property
    def protocol(self) -> str:
        return "magma"

    @property
    def pool_id(self) -> str:
        return self.vault_address

    @property
    def address(self) -> str:
        return self.holder_address


@dataclass(frozen=True)
class MissingVenuePositionConfig(VenuePositionConfig):
    """Placeholder for a protocol that has no adapter yet."""

    protocol_name: str

    @property
    def protocol(self) -> str:
        return self.protocol_name


VENUE_CONFIG_TYPES: dict[str, type[VenuePositionConfig]] = {
    "astroport": AstroportVenuePositionConfig,
    "duality": DualityVenuePositionConfig,
    "elys": ElysVenuePositionConfig,
    "magma": MagmaVenuePositionConfig,
    "mars": MarsVenuePositionConfig,
    "neptune": NeptuneVenuePositionConfig,
    "nolus": NolusVenuePositionConfig,
    "osmosis": OsmosisVenuePositionConfig,
    "ux": UxVenuePositionConfig,
}


@dataclass(frozen=True)
class BidConfig:
    bid_id: int
    initial_atom_allocation: float = 0.0
    venues: tuple[VenuePositionConfig, ...] = ()


@dataclass(frozen=True)
class InitialBalance:
    denom: str
    # human units
    amount: float


@dataclass(frozen=True)
class ExperimentalDeploymentConfig:
    """A single-venue deployment tracked against its starting balances."""

    experimental_id: int
    name: str
    venue: VenuePositionConfig
    start_timestamp: int
    end_timestamp: int = 0
    description: str = ""
    logo: str = ""
    initial_balances: tuple[InitialBalance, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    prices: PricesConfig = field(default_factory=PricesConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    protocols: dict[str, ProtocolConfig] = field(default_factory=dict)
    bids: dict[int, BidConfig] = field(default_factory=dict)
    experimental: dict[int, ExperimentalDeploymentConfig] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_prices(raw: dict[str, Any]) -> PricesConfig:
    defaults = PricesConfig()
    return PricesConfig(
        coingecko_url=raw.get("coingecko_url", defaults.coingecko_url),
        skip_assets_url=raw.get("skip_assets_url", defaults.skip_assets_url),
        numia_url=raw.get("numia_url", defaults.numia_url),
        numia_api_token=raw.get("numia_api_token", ""),
        reference_price_id=raw.get("reference_price_id", defaults.reference_price_id),
        reference_denom=raw.get("reference_denom", defaults.reference_denom),
        cache_ttl_minutes=int(raw.get("cache_ttl_minutes", 30)),
        request_timeout=int(raw.get("request_timeout", 30)),
    )


def _build_cache(raw: dict[str, Any]) -> CacheConfig:
    return CacheConfig(
        result_ttl_minutes=int(raw.get("result_ttl_minutes", 30)),
        max_entries=int(raw.get("max_entries", 256)),
    )


def _build_protocols(raw: dict[str, Any]) -> dict[str, ProtocolConfig]:
    protocols: dict[str, ProtocolConfig] = {}
    for name, cfg in raw.items():
        protocols[name] = ProtocolConfig(
            chain_id=cfg.get("chain_id", ""),
            lcd_url=cfg.get("lcd_url", "").rstrip("/"),
            asset_list_url=cfg.get("asset_list_url", ""),
            pool_api_url=cfg.get("pool_api_url", "").rstrip("/"),
            contracts=dict(cfg.get("contracts", {})),
            request_timeout=int(cfg.get("request_timeout", 30)),
        )
    return protocols


def build_venue(raw: dict[str, Any]) -> VenuePositionConfig:
    """Build the venue config variant named by the ``protocol`` key.

    Unknown protocols become a :class:`MissingVenuePositionConfig`.
    """
    fields_raw = dict(raw)
    protocol = fields_raw.pop("protocol", "")
    if not protocol:
        raise ValueError(f"Venue {raw!r} has no protocol")

    venue_type = VENUE_CONFIG_TYPES.get(protocol)
    if venue_type is None:
        return MissingVenuePositionConfig(protocol_name=protocol)

    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(venue_type):
        if f.name not in fields_raw:
            continue
        value = fields_raw.pop(f.name)
        kwargs[f.name] = int(value) if f.type == "int" else str(value)

    if fields_raw:
        raise ValueError(
            f"Unknown fields for {protocol} venue: {', '.join(sorted(fields_raw))}"
        )
    try:
        return venue_type(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid {protocol} venue {raw!r}: {e}") from e


def _build_bids(raw: list[dict[str, Any]]) -> dict[int, BidConfig]:
    bids: dict[int, BidConfig] = {}
    for b in raw:
        bid_id = int(b["id"])
        if bid_id in bids:
            raise ValueError(f"Duplicate bid id {bid_id}")
        bids[bid_id] = BidConfig(
            bid_id=bid_id,
            initial_atom_allocation=float(b.get("initial_atom_allocation", 0.0)),
            venues=tuple(build_venue(v) for v in b.get("venues", [])),
        )
    return bids


def _build_experimental(raw: list[dict[str, Any]]) -> dict[int, ExperimentalDeploymentConfig]:
    deployments: dict[int, ExperimentalDeploymentConfig] = {}
    for d in raw:
        experimental_id = int(d["id"])
        if experimental_id in deployments:
            raise ValueError(f"Duplicate experimental deployment id {experimental_id}")
        if "venue" not in d or "start_timestamp" not in d:
            raise ValueError(
                f"Experimental deployment {experimental_id} needs a venue and start_timestamp"
            )
        deployments[experimental_id] = ExperimentalDeploymentConfig(
            experimental_id=experimental_id,
            name=str(d.get("name", "")),
            venue=build_venue(d["venue"]),
            start_timestamp=int(d["start_timestamp"]),
            end_timestamp=int(d.get("end_timestamp", 0)),
            description=str(d.get("description", "")),
            logo=str(d.get("logo", "")),
            initial_balances=tuple(
                InitialBalance(denom=str(b["denom"]), amount=float(b["amount"]))
                for b in d.get("initial_balances", [])
            ),
        )
    return deployments


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        prices=_build_prices(raw.get("prices", {})),
        cache=_build_cache(raw.get("cache", {})),
        protocols=_build_protocols(raw.get("protocols", {})),
        bids=_build_bids(raw.get("bids", [])),
        experimental=_build_experimental(raw.get("experimental", [])),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.bids:
        raise ValueError("At least one bid must be configured")

    for name, proto in cfg.protocols.items():
        if not proto.asset_list_url:
            raise ValueError(f"Protocol '{name}' has no asset_list_url")

    for bid in cfg.bids.values():
        for venue in bid.venues:
            if isinstance(venue, MissingVenuePositionConfig):
                continue
            if venue.protocol not in cfg.protocols:
                raise ValueError(
                    f"Bid {bid.bid_id} references unknown protocol '{venue.protocol}'"
                )

    for deployment in cfg.experimental.values():
        venue = deployment.venue
        if isinstance(venue, MissingVenuePositionConfig):
            raise ValueError(
                f"Experimental deployment {deployment.experimental_id} uses "
                f"unsupported protocol '{venue.protocol}'"
            )
        if venue.protocol not in cfg.protocols:
            raise ValueError(
                f"Experimental deployment {deployment.experimental_id} references "
                f"unknown protocol '{venue.protocol}'"
            )
