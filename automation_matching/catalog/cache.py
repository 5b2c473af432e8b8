"""Multi-source catalog cache.

Holds one normalized artifact list per source key, persisted as
`workflow_cache` rows, plus the materialized `all` union. There is no TTL:
a snapshot is served until it is explicitly refreshed or invalidated, and
a source without any snapshot triggers a fetch on first read.

The union is rebuilt from the per-source rows in `KNOWN_SOURCES` order,
first artifact per identity wins, and is written back only when it has
grown past the stored `all` row.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError

from automation_matching.catalog.normalize import (
    ALL_SOURCES,
    KNOWN_SOURCES,
    CatalogArtifact,
    compute_stats,
    normalize_record,
    normalize_source_key,
)
from automation_matching.catalog.placeholders import placeholder_artifacts
from automation_matching.catalog.search import (
    DEFAULT_SIMILARITY_THRESHOLD,
    SearchPage,
    SearchParams,
    rank_artifacts,
    search_artifacts,
)
from automation_matching.catalog.store import SnapshotRecord, SnapshotStore

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0.0"
MAX_CONCURRENT_REFRESHES = 5


class CatalogFetcher(Protocol):
    async def fetch(self, source: str) -> list[dict[str, Any]]: ...


@dataclass
class RefreshResult:
    source: str
    success: bool
    count: int = 0
    error: str | None = None


@dataclass
class CacheStatus:
    has_cache: bool
    last_fetch: datetime | None
    workflow_count: int


def union_artifacts(batches: list[list[CatalogArtifact]]) -> list[CatalogArtifact]:
    """Concatenate batches keeping the first artifact per (source, id)."""
    seen: set[tuple[str, str]] = set()
    merged: list[CatalogArtifact] = []
    for batch in batches:
        for artifact in batch:
            if artifact.identity in seen:
                continue
            seen.add(artifact.identity)
            merged.append(artifact)
    return merged


def normalize_batch(records: list[dict[str, Any]], source: str) -> list[CatalogArtifact]:
    """Normalize raw records, skipping (and logging) any that cannot be coerced."""
    artifacts: list[CatalogArtifact] = []
    for record in records:
        try:
            artifacts.append(normalize_record(record, source))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            record_id = record.get("id") if isinstance(record, dict) else record
            logger.warning("Skipping malformed %s record %r: %s", source, record_id, e)
    return artifacts


class CatalogCache:
    """Injected catalog cache shared by search and the recommendation service.

    Args:
        store: Snapshot persistence (SQL or in-memory)
        fetcher: Provider adapter with `async fetch(source)`
        version: Cache schema version; rows of other versions are ignored
        sources: Source keys that make up the union, in precedence order
    """

    def __init__(
        self,
        store: SnapshotStore,
        fetcher: CatalogFetcher,
        version: str = CACHE_VERSION,
        sources: tuple[str, ...] = KNOWN_SOURCES,
    ):
        self._store = store
        self._fetcher = fetcher
        self._version = version
        self._sources = sources
        self._views: dict[str, list[CatalogArtifact]] = {}

    # ═══════════════════════════════════════════════════════════════════
    # STORE ACCESS
    # ═══════════════════════════════════════════════════════════════════

    async def _load_records(self, source_key: str) -> list[SnapshotRecord]:
        try:
            return await asyncio.to_thread(self._store.load, self._version, source_key)
        except SQLAlchemyError as e:
            logger.error("Snapshot read failed for %s: %s", source_key, e)
            return []

    async def _load_stored(self, source_key: str) -> list[CatalogArtifact]:
        records = await self._load_records(source_key)
        artifacts: list[CatalogArtifact] = []
        for record in records:
            artifacts.extend(CatalogArtifact.from_dict(item) for item in record.workflows)
        return artifacts

    async def _persist(self, source_key: str, artifacts: list[CatalogArtifact]) -> None:
        await asyncio.to_thread(
            self._store.upsert,
            self._version,
            source_key,
            [artifact.to_dict() for artifact in artifacts],
            compute_stats(artifacts),
            datetime.now(timezone.utc),
        )

    # ═══════════════════════════════════════════════════════════════════
    # READ PATH
    # ═══════════════════════════════════════════════════════════════════

    async def get_snapshot(self, source: str | None = None) -> list[CatalogArtifact]:
        """Artifacts for a source key, loading or fetching on a miss."""
        key = normalize_source_key(source)
        if key in self._views:
            logger.debug("Cache hit for %s (%d artifacts)", key, len(self._views[key]))
            return self._views[key]

        if key == ALL_SOURCES:
            artifacts = await self.rebuild_union()
            if not artifacts:
                logger.info("No per-source snapshots yet, refreshing all sources")
                await self.refresh_sources(self._sources)
                artifacts = await self.rebuild_union()
        else:
            artifacts = await self._load_stored(key)
            if not artifacts:
                logger.info("Cache miss for %s, fetching", key)
                await self.refresh(key)
                artifacts = await self._load_stored(key)

        if artifacts:
            logger.info("Loaded %d artifacts for %s", len(artifacts), key)
            self._views[key] = artifacts
        return artifacts

    async def rebuild_union(self) -> list[CatalogArtifact]:
        """Recompute `all` and persist it when it grew past the stored row."""
        batches = [await self._load_stored(source) for source in self._sources]
        union = union_artifacts(batches)
        stored = await self._load_stored(ALL_SOURCES)

        if len(union) > len(stored):
            logger.info("Union grew from %d to %d artifacts, rewriting '%s'", len(stored), len(union), ALL_SOURCES)
            try:
                await self._persist(ALL_SOURCES, union)
            except SQLAlchemyError as e:
                logger.error("Failed to persist union: %s", e)
            self._views.pop(ALL_SOURCES, None)
            return union
        return stored

    async def get_cache_status(self, source: str | None = None) -> CacheStatus:
        records = await self._load_records(normalize_source_key(source))
        fetch_times = [r.last_fetch_time for r in records if r.last_fetch_time is not None]
        return CacheStatus(
            has_cache=bool(records),
            last_fetch=max(fetch_times) if fetch_times else None,
            workflow_count=sum(len(r.workflows) for r in records),
        )

    def invalidate(self, source: str | None = None) -> None:
        """Drop in-memory views so the next read goes back to the store."""
        if source is None:
            self._views.clear()
            return
        key = normalize_source_key(source)
        self._views.pop(key, None)
        self._views.pop(ALL_SOURCES, None)

    async def search(self, params: SearchParams) -> SearchPage:
        """Filtered, paginated search; placeholders when nothing is available."""
        artifacts = await self.get_snapshot(params.source)
        if not artifacts:
            logger.warning("No catalog data for %s, serving placeholders", params.source or ALL_SOURCES)
            artifacts = placeholder_artifacts()
            # Only the ai-enhanced filter has placeholders of its own
            if normalize_source_key(params.source) != "ai-enhanced":
                params = replace(params, source=None)
        return search_artifacts(artifacts, params)

    async def semantic_search(
        self,
        query: str,
        source: str | None = None,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        domain: str | None = None,
    ) -> list[CatalogArtifact]:
        """Artifacts of a source key ranked by TF-IDF similarity to free text."""
        artifacts = await self.get_snapshot(source)
        ranked = rank_artifacts(query, artifacts, threshold, domain)
        logger.debug("Semantic search for %r kept %d of %d artifacts", query, len(ranked), len(artifacts))
        return ranked

    # ═══════════════════════════════════════════════════════════════════
    # WRITE PATH
    # ═══════════════════════════════════════════════════════════════════

    async def refresh(self, source: str | None = None) -> RefreshResult:
        """Fetch and persist one source, or every source when none is given.

        A fetch that comes back empty keeps the previous snapshot.
        """
        key = normalize_source_key(source)
        if key == ALL_SOURCES:
            results = await self.refresh_sources(self._sources)
            union = await self.rebuild_union()
            errors = [f"{r.source}: {r.error}" for r in results if r.error]
            return RefreshResult(
                source=ALL_SOURCES,
                success=any(r.success for r in results),
                count=len(union),
                error="; ".join(errors) or None,
            )

        try:
            records = await self._fetcher.fetch(key)
        except Exception as e:
            logger.error("Fetch of %s failed, keeping previous snapshot: %s: %s", key, type(e).__name__, e)
            return RefreshResult(source=key, success=False, error=f"{type(e).__name__}: {e}")
        if not isinstance(records, list):
            logger.error("Fetch of %s returned %s instead of a list", key, type(records).__name__)
            return RefreshResult(source=key, success=False, error="fetcher returned no record list")

        artifacts = normalize_batch(records, key)
        if not artifacts:
            logger.warning("Refresh of %s returned no artifacts, keeping previous snapshot", key)
            return RefreshResult(source=key, success=False, error="no artifacts fetched")

        try:
            await self._persist(key, artifacts)
        except SQLAlchemyError as e:
            logger.error("Failed to persist %s snapshot: %s", key, e)
            return RefreshResult(source=key, success=False, error=str(e))

        self.invalidate(key)
        logger.info("Refreshed %s with %d artifacts", key, len(artifacts))
        return RefreshResult(source=key, success=True, count=len(artifacts))

    async def refresh_sources(self, sources: tuple[str, ...] | list[str]) -> list[RefreshResult]:
        """Refresh several sources concurrently, at most five at a time."""
        semaphore = asyncio.Semaphore(MAX_CONCURRENT_REFRESHES)

        async def refresh_one(source: str) -> RefreshResult:
            async with semaphore:
                return await self.refresh(source)

        return list(await asyncio.gather(*(refresh_one(source) for source in sources)))
