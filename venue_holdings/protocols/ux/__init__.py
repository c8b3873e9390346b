from .adapter import UxAdapter

__all__ = ["UxAdapter"]
