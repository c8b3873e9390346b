"""Protocol adapters — one package per DeFi venue."""
from .registry import create_adapter, supported_protocols

__all__ = ["create_adapter", "supported_protocols"]
