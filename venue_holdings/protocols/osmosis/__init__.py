from .adapter import OsmosisAdapter

__all__ = ["OsmosisAdapter"]
