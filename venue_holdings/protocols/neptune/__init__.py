from .adapter import NeptuneAdapter

__all__ = ["NeptuneAdapter"]
