from .client import CosmosClient

__all__ = ["CosmosClient"]
