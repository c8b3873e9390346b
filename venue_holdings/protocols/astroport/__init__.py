from .adapter import AstroportAdapter

__all__ = ["AstroportAdapter"]
