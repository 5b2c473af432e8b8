"""Dagster resources for the automation matching pipeline."""

from automation_matching.resources.catalog import CatalogCacheResource
from automation_matching.resources.openrouter import OpenRouterResource
from automation_matching.resources.providers import CatalogProviderResource

__all__ = [
    "CatalogCacheResource",
    "CatalogProviderResource",
    "OpenRouterResource",
]
