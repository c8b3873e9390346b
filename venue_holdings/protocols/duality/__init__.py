from .adapter import DualityAdapter

__all__ = ["DualityAdapter"]
