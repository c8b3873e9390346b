from .adapter import ElysAdapter

__all__ = ["ElysAdapter"]
