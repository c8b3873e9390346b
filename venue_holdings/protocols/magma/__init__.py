from .adapter import MagmaAdapter

__all__ = ["MagmaAdapter"]
