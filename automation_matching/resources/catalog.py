"""Catalog cache resource: builds a CatalogCache over the configured store."""

from dagster import ConfigurableResource
from pydantic import Field, PrivateAttr

from automation_matching.catalog.cache import CACHE_VERSION, CatalogCache, CatalogFetcher
from automation_matching.catalog.store import InMemorySnapshotStore, SnapshotStore, SqlSnapshotStore


class CatalogCacheResource(ConfigurableResource):
    """Hands assets a CatalogCache bound to PostgreSQL or to process memory.

    The in-memory store lives as long as the resource instance. Under the
    in-process executor (`materialize`, tests) that spans the whole run, so
    later steps reuse earlier snapshots. Under the default multiprocess
    executor every step gets its own instance and empty store; a miss then
    refetches from the provider, which in mock mode returns the same
    deterministic records. Use the database store to share snapshots across
    steps and runs.
    """

    use_database: bool = Field(
        default=True,
        description="Persist snapshots in the workflow_cache table; False keeps them in memory",
    )
    cache_version: str = Field(
        default=CACHE_VERSION,
        description="Snapshot schema version; rows of other versions are ignored",
    )
    _memory_store: InMemorySnapshotStore = PrivateAttr(default_factory=InMemorySnapshotStore)

    def get_store(self) -> SnapshotStore:
        return SqlSnapshotStore() if self.use_database else self._memory_store

    def build_cache(self, fetcher: CatalogFetcher) -> CatalogCache:
        return CatalogCache(store=self.get_store(), fetcher=fetcher, version=self.cache_version)
