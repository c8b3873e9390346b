from .adapter import NolusAdapter

__all__ = ["NolusAdapter"]
