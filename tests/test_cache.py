"""Tests for the multi-source catalog cache.

This module tests:
- Refresh, persistence and read-through on a miss
- Union construction and dedup across sources
- Keeping the previous snapshot on empty fetches
- Shard rows, status and invalidation
- Placeholder fallback for search
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from automation_matching.catalog.cache import CACHE_VERSION, CatalogCache, union_artifacts
from automation_matching.catalog.normalize import normalize_workflow
from automation_matching.catalog.placeholders import placeholder_artifacts
from automation_matching.catalog.search import SearchParams
from automation_matching.catalog.store import InMemorySnapshotStore


class FakeFetcher:
    """Returns canned records per source key and records every call.

    Sources listed in `errors` raise the given exception instead.
    """

    def __init__(self, records: dict[str, list[dict]] | None = None):
        self.records = records or {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []

    async def fetch(self, source: str) -> list[dict]:
        self.calls.append(source)
        if source in self.errors:
            raise self.errors[source]
        return list(self.records.get(source, []))


def workflow(workflow_id: str, name: str, integrations: list[str] | None = None) -> dict:
    return {"id": workflow_id, "name": name, "integrations": integrations or ["Slack"]}


@pytest.fixture
def store():
    return InMemorySnapshotStore()


@pytest.fixture
def fetcher():
    return FakeFetcher(
        {
            "github": [workflow("1", "Slack Alerts"), workflow("2", "Sheets Export", ["Google Sheets"])],
            "n8n.io": [workflow("1", "Invoice Mailer", ["Gmail"])],
        }
    )


@pytest.fixture
def cache(store, fetcher):
    return CatalogCache(store=store, fetcher=fetcher)


class TestRefresh:
    """Tests for refresh and read-through."""

    def test_refresh_persists_source(self, cache, store):
        """Test that a refresh writes one snapshot row for the source."""
        result = asyncio.run(cache.refresh("github"))

        assert result.success is True
        assert result.count == 2
        records = store.load(CACHE_VERSION, "github")
        assert len(records) == 1
        assert records[0].stats["total"] == 2

    def test_miss_triggers_fetch(self, cache, fetcher):
        """Test that reading an unknown source fetches it once."""
        artifacts = asyncio.run(cache.get_snapshot("github"))
        again = asyncio.run(cache.get_snapshot("github"))

        assert [a.id for a in artifacts] == ["1", "2"]
        assert again == artifacts
        assert fetcher.calls == ["github"]

    def test_empty_fetch_keeps_previous_snapshot(self, cache, fetcher):
        """Test that an empty refresh does not wipe the stored snapshot."""
        asyncio.run(cache.refresh("github"))
        fetcher.records["github"] = []

        result = asyncio.run(cache.refresh("github"))
        cache.invalidate()
        artifacts = asyncio.run(cache.get_snapshot("github"))

        assert result.success is False
        assert result.error == "no artifacts fetched"
        assert len(artifacts) == 2

    def test_malformed_records_are_skipped(self, store):
        """Test that records that cannot be normalized are dropped."""
        fetcher = FakeFetcher(
            {"github": [workflow("1", "Slack Alerts"), {"kind": "agent", "id": "2", "automationPotential": float("nan")}]}
        )
        cache = CatalogCache(store=store, fetcher=fetcher)

        result = asyncio.run(cache.refresh("github"))

        assert result.success is True
        assert result.count == 1

    def test_non_dict_records_are_skipped(self, store):
        """Test that a stray non-dict record is dropped without aborting the batch."""
        fetcher = FakeFetcher({"github": ["not-a-record", 42, workflow("1", "Slack Alerts")]})
        cache = CatalogCache(store=store, fetcher=fetcher)

        result = asyncio.run(cache.refresh("github"))

        assert result.success is True
        assert result.count == 1

    def test_fetcher_exception_is_contained(self, cache, fetcher, store):
        """Test that a fetcher raising a non-HTTP error yields a failed result."""
        asyncio.run(cache.refresh("github"))
        fetcher.errors["github"] = json.JSONDecodeError("Expecting value", "<html>", 0)

        result = asyncio.run(cache.refresh("github"))

        assert result.success is False
        assert "JSONDecodeError" in result.error
        assert len(store.load(CACHE_VERSION, "github")[0].workflows) == 2

    def test_one_failing_source_does_not_abort_refresh_all(self, cache, fetcher):
        """Test that the fan-out survives a source whose fetch raises."""
        fetcher.errors["awesome-n8n-templates"] = AttributeError("'list' object has no attribute 'get'")

        result = asyncio.run(cache.refresh())

        assert result.success is True
        assert result.count == 3
        assert "awesome-n8n-templates: AttributeError" in result.error

    def test_refresh_all(self, cache, fetcher):
        """Test refreshing every source and rebuilding the union."""
        result = asyncio.run(cache.refresh())

        assert result.source == "all"
        assert result.success is True
        assert result.count == 3
        assert sorted(fetcher.calls) == sorted(["github", "awesome-n8n-templates", "n8n.io", "ai-enhanced"])


class TestUnion:
    """Tests for the `all` union."""

    def test_union_keeps_same_id_from_different_sources(self, cache):
        """Test that identity is (source, id), not id alone."""
        artifacts = asyncio.run(cache.get_snapshot())

        assert [(a.source, a.id) for a in artifacts] == [("github", "1"), ("github", "2"), ("n8n.io", "1")]

    def test_union_first_wins(self):
        """Test that the first artifact per identity is kept."""
        first = normalize_workflow(workflow("1", "First"), "github")
        second = normalize_workflow(workflow("1", "Second"), "github")
        other = normalize_workflow(workflow("2", "Other"), "github")

        merged = union_artifacts([[first], [second, other]])

        assert [a.title for a in merged] == ["First", "Other"]

    def test_union_is_persisted(self, cache, store):
        """Test that the rebuilt union is written as the `all` row."""
        asyncio.run(cache.get_snapshot())

        records = store.load(CACHE_VERSION, "all")
        assert len(records) == 1
        assert len(records[0].workflows) == 3

    def test_union_not_rewritten_when_not_grown(self, cache, store):
        """Test that the `all` row is only rewritten when the union grows."""
        asyncio.run(cache.get_snapshot())
        first_fetch = store.load(CACHE_VERSION, "all")[0].last_fetch_time

        asyncio.run(cache.rebuild_union())

        assert store.load(CACHE_VERSION, "all")[0].last_fetch_time == first_fetch


class TestShardsAndStatus:
    """Tests for shard rows, status and invalidation."""

    def test_shard_rows_are_combined(self, store, fetcher):
        """Test that `key#n` rows are read together with their key."""
        now = datetime.now(timezone.utc)
        store.upsert(CACHE_VERSION, "github", [normalize_workflow(workflow("1", "A"), "github").to_dict()], None, now)
        store.upsert(CACHE_VERSION, "github#1", [normalize_workflow(workflow("2", "B"), "github").to_dict()], None, now)
        cache = CatalogCache(store=store, fetcher=fetcher)

        artifacts = asyncio.run(cache.get_snapshot("github"))

        assert [a.title for a in artifacts] == ["A", "B"]
        assert fetcher.calls == []

    def test_other_versions_are_ignored(self, store, fetcher):
        """Test that rows of another cache version are not served."""
        now = datetime.now(timezone.utc)
        store.upsert("0.9.0", "github", [normalize_workflow(workflow("9", "Old"), "github").to_dict()], None, now)
        cache = CatalogCache(store=store, fetcher=fetcher)

        artifacts = asyncio.run(cache.get_snapshot("github"))

        assert "Old" not in [a.title for a in artifacts]

    def test_cache_status(self, cache):
        """Test status before and after a refresh."""
        before = asyncio.run(cache.get_cache_status("github"))
        asyncio.run(cache.refresh("github"))
        after = asyncio.run(cache.get_cache_status("github"))

        assert before.has_cache is False
        assert before.last_fetch is None
        assert after.has_cache is True
        assert after.workflow_count == 2
        assert after.last_fetch is not None

    def test_invalidate_reloads_from_store(self, cache, store):
        """Test that invalidation drops the in-memory view."""
        asyncio.run(cache.get_snapshot("github"))
        now = datetime.now(timezone.utc)
        store.upsert(CACHE_VERSION, "github", [normalize_workflow(workflow("7", "Fresh"), "github").to_dict()], None, now)

        stale = asyncio.run(cache.get_snapshot("github"))
        cache.invalidate("github")
        fresh = asyncio.run(cache.get_snapshot("github"))

        assert [a.id for a in stale] == ["1", "2"]
        assert [a.id for a in fresh] == ["7"]


class TestSearch:
    """Tests for CatalogCache.search."""

    def test_search_filters_union(self, cache):
        """Test search over the union with a query."""
        page = asyncio.run(cache.search(SearchParams(q="invoice")))

        assert [a.title for a in page.artifacts] == ["Invoice Mailer"]

    def test_placeholders_when_catalog_empty(self, store):
        """Test that an empty catalog serves the placeholder set."""
        cache = CatalogCache(store=store, fetcher=FakeFetcher())

        page = asyncio.run(cache.search(SearchParams(q="datev")))
        unfiltered = asyncio.run(cache.search(SearchParams(source="github")))

        assert [a.id for a in page.artifacts] == ["placeholder-datev-invoices"]
        assert page.artifacts[0].source == "placeholder"
        assert unfiltered.total == len(placeholder_artifacts())

    def test_placeholders_when_every_fetch_raises(self, store):
        """Test that search degrades to placeholders when all providers blow up."""
        fetcher = FakeFetcher()
        for source in ("github", "awesome-n8n-templates", "n8n.io", "ai-enhanced"):
            fetcher.errors[source] = ValueError("Expecting value: line 1 column 1 (char 0)")
        cache = CatalogCache(store=store, fetcher=fetcher)

        page = asyncio.run(cache.search(SearchParams(q="slack")))

        assert page.artifacts
        assert all(a.source == "placeholder" for a in page.artifacts)

    def test_semantic_search_ranks_union(self, cache):
        """Test TF-IDF ranking over the union snapshot."""
        ranked = asyncio.run(cache.semantic_search("invoice mailer gmail", threshold=0.1))

        assert [a.title for a in ranked] == ["Invoice Mailer"]

    def test_semantic_search_single_source(self, cache, fetcher):
        """Test that a source key limits ranking to that source."""
        ranked = asyncio.run(cache.semantic_search("slack alerts", source="github", threshold=0.1))

        assert [a.title for a in ranked] == ["Slack Alerts"]
        assert fetcher.calls == ["github"]
