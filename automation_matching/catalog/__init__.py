"""Catalog of automation artifacts: normalization, snapshots, cache and search."""

from automation_matching.catalog.cache import (
    CACHE_VERSION,
    CacheStatus,
    CatalogCache,
    RefreshResult,
    union_artifacts,
)
from automation_matching.catalog.normalize import (
    ALL_SOURCES,
    KNOWN_SOURCES,
    CatalogArtifact,
    compute_stats,
    normalize_agent,
    normalize_source_key,
    normalize_workflow,
)
from automation_matching.catalog.placeholders import placeholder_artifacts
from automation_matching.catalog.search import (
    SearchPage,
    SearchParams,
    filter_artifacts,
    rank_artifacts,
    semantic_search,
)
from automation_matching.catalog.store import (
    InMemorySnapshotStore,
    SnapshotStore,
    SqlSnapshotStore,
)

__all__ = [
    # Records
    "CatalogArtifact",
    "ALL_SOURCES",
    "KNOWN_SOURCES",
    "normalize_source_key",
    "normalize_workflow",
    "normalize_agent",
    "compute_stats",
    "placeholder_artifacts",
    # Persistence
    "SnapshotStore",
    "SqlSnapshotStore",
    "InMemorySnapshotStore",
    # Cache
    "CACHE_VERSION",
    "CatalogCache",
    "CacheStatus",
    "RefreshResult",
    "union_artifacts",
    # Search
    "SearchParams",
    "SearchPage",
    "filter_artifacts",
    "rank_artifacts",
    "semantic_search",
]
