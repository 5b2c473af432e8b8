"""Catalog assets.

1. catalog_source_snapshots: one refreshed workflow_cache row per provider source
2. catalog_union: the deduplicated `all` row built from the per-source rows
"""

import asyncio
from dataclasses import asdict
from typing import Any

from dagster import AssetExecutionContext, AssetIn, asset

from automation_matching.catalog.cache import CACHE_VERSION
from automation_matching.catalog.normalize import KNOWN_SOURCES, compute_stats


def _build_cache(context: AssetExecutionContext):
    return context.resources.catalog_cache.build_cache(context.resources.catalog_provider)


@asset(
    description="Per-source catalog snapshots fetched from the providers and normalized",
    group_name="catalog",
    required_resource_keys={"catalog_cache", "catalog_provider"},
    code_version=CACHE_VERSION,
    op_tags={"dagster/concurrency_key": "catalog_providers"},
    metadata={"table": "workflow_cache", "sources": list(KNOWN_SOURCES)},
)
def catalog_source_snapshots(context: AssetExecutionContext) -> dict[str, Any]:
    """Refresh every provider source, five at a time; failed sources keep their last snapshot."""
    cache = _build_cache(context)
    results = asyncio.run(cache.refresh_sources(list(KNOWN_SOURCES)))

    metadata: dict[str, Any] = {}
    for result in results:
        if result.success:
            context.log.info(f"{result.source}: {result.count} artifacts")
        else:
            context.log.warning(f"{result.source}: refresh failed ({result.error})")
        metadata[f"{result.source}/count"] = result.count
        metadata[f"{result.source}/success"] = result.success

    metadata["sources_refreshed"] = sum(1 for r in results if r.success)
    context.add_output_metadata(metadata)
    return {result.source: asdict(result) for result in results}


@asset(
    ins={"catalog_source_snapshots": AssetIn()},
    description="Union of all source snapshots, deduplicated by (source, id)",
    group_name="catalog",
    required_resource_keys={"catalog_cache", "catalog_provider"},
    code_version=CACHE_VERSION,
    metadata={"table": "workflow_cache", "source_key": "all"},
)
def catalog_union(
    context: AssetExecutionContext,
    catalog_source_snapshots: dict[str, Any],
) -> dict[str, Any]:
    """Rebuild the `all` snapshot and report its stats."""
    cache = _build_cache(context)
    artifacts = asyncio.run(cache.get_snapshot())
    stats = compute_stats(artifacts)

    context.log.info(
        f"Catalog union: {stats['total']} artifacts from {len(catalog_source_snapshots)} sources, "
        f"{stats['uniqueIntegrations']} unique integrations"
    )
    context.add_output_metadata(
        {
            "total": stats["total"],
            "active": stats["active"],
            "unique_integrations": stats["uniqueIntegrations"],
        }
    )
    return stats
