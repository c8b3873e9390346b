"""Token metadata registries."""
from .chain_registry import fetch_chain_assets, parse_chain_assets
from .skip import SkipAssetRegistry, parse_skip_assets

__all__ = [
    "SkipAssetRegistry",
    "fetch_chain_assets",
    "parse_chain_assets",
    "parse_skip_assets",
]
