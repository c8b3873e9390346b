from .adapter import MarsAdapter

__all__ = ["MarsAdapter"]
