"""Protocol adapter factory."""
from __future__ import annotations

import logging
from typing import Any, Callable

from ..config import VENUE_CONFIG_TYPES, ProtocolConfig, VenuePositionConfig
from ..errors import UnsupportedProtocolError
from ..interfaces.chain import ChainClient
from ..interfaces.protocol_adapter import ProtocolAdapter
from ..interfaces.price_oracle import PriceOracle
from .astroport import AstroportAdapter
from .duality import DualityAdapter
from .elys import ElysAdapter
from .magma import MagmaAdapter
from .mars import MarsAdapter
from .missing import MissingPositionAdapter
from .neptune import NeptuneAdapter
from .nolus import NolusAdapter
from .osmosis import OsmosisAdapter
from .ux import UxAdapter

logger = logging.getLogger(__name__)

# Registry of protocol adapter factories keyed by protocol name.
_PROTOCOL_FACTORIES: dict[str, Callable[..., Any]] = {
    "astroport": AstroportAdapter,
    "duality": DualityAdapter,
    "elys": ElysAdapter,
    "magma": MagmaAdapter,
    "mars": MarsAdapter,
    "neptune": NeptuneAdapter,
    "nolus": NolusAdapter,
    "osmosis": OsmosisAdapter,
    "ux": UxAdapter,
}


def supported_protocols() -> list[str]:
    return sorted(_PROTOCOL_FACTORIES)


def _factory_for(venue: VenuePositionConfig) -> Callable[..., Any]:
    factory = _PROTOCOL_FACTORIES.get(venue.protocol)
    if factory is None or not isinstance(venue, VENUE_CONFIG_TYPES[venue.protocol]):
        raise UnsupportedProtocolError(venue.protocol)
    return factory


def create_adapter(
    venue: VenuePositionConfig,
    chain_client: ChainClient | None,
    config: ProtocolConfig | None,
    prices: PriceOracle,
) -> ProtocolAdapter:
    """Build the adapter for ``venue``; unsupported protocols get a placeholder."""
    try:
        factory = _factory_for(venue)
    except UnsupportedProtocolError as e:
        logger.info("%s, using missing-position placeholder", e)
        return MissingPositionAdapter(venue.protocol)

    if chain_client is None or config is None:
        raise ValueError(f"Protocol '{venue.protocol}' is not configured")
    return factory(chain_client, config, venue, prices)
