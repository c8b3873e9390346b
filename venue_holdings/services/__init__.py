"""Service modules"""
from .catalog_service import CatalogService
from .price_service import HistoricalPriceCache, PriceCache, PriceResolver
from .valuation import ValuationService, build_service

__all__ = [
    "CatalogService",
    "HistoricalPriceCache",
    "PriceCache",
    "PriceResolver",
    "ValuationService",
    "build_service",
]
