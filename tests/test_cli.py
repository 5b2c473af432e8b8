"""Tests for the refresh report printed by the refresh-catalog command."""

import asyncio

from automation_matching.catalog.cache import CatalogCache
from automation_matching.catalog.store import InMemorySnapshotStore
from automation_matching.cli import refresh_report


class StaticFetcher:
    def __init__(self, records: dict[str, list[dict]]):
        self.records = records

    async def fetch(self, source: str) -> list[dict]:
        return list(self.records.get(source, []))


def make_cache() -> CatalogCache:
    return CatalogCache(
        store=InMemorySnapshotStore(),
        fetcher=StaticFetcher({"github": [{"id": "1", "name": "Slack Alerts", "integrations": ["Slack"]}]}),
    )


class TestRefreshReport:
    """Tests for refresh_report."""

    def test_single_source(self):
        """Test that one source reports its own stored status."""
        report = asyncio.run(refresh_report(make_cache(), "github"))

        assert report["result"]["success"] is True
        assert list(report["status"]) == ["github"]
        assert report["status"]["github"]["has_cache"] is True
        assert report["status"]["github"]["workflow_count"] == 1

    def test_all_sources(self):
        """Test that a full refresh reports every source plus the union."""
        report = asyncio.run(refresh_report(make_cache()))

        assert report["result"]["source"] == "all"
        assert list(report["status"]) == ["github", "awesome-n8n-templates", "n8n.io", "ai-enhanced", "all"]
        assert report["status"]["n8n.io"]["has_cache"] is False
        assert report["status"]["all"]["workflow_count"] == 1
