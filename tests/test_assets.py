"""Smoke tests for the Dagster assets using offline resources.

Providers run in mock mode and snapshots stay in memory, so materializing
needs neither network nor database.
"""

import asyncio

import pytest
from dagster import materialize

from automation_matching.assets.analysis import job_recommendations, job_task_analysis
from automation_matching.assets.catalog import catalog_source_snapshots, catalog_union
from automation_matching.catalog.normalize import KNOWN_SOURCES
from automation_matching.resources import (
    CatalogCacheResource,
    CatalogProviderResource,
    OpenRouterResource,
)

JOB_TEXT = "- Rechnungen prüfen und freigeben\n- Zahlungsläufe planen und durchführen\n- Mahnungen versenden"


@pytest.fixture
def offline_resources():
    return {
        "catalog_provider": CatalogProviderResource(mock_mode=True, mock_record_count=4),
        "catalog_cache": CatalogCacheResource(use_database=False),
        "openrouter": OpenRouterResource(api_key="", persist_costs=False),
    }


def job_config(node: str) -> dict:
    return {"ops": {node: {"config": {"job_text": JOB_TEXT, "job_title": "Buchhalter (m/w/d)"}}}}


class TestCatalogCacheResource:
    """Tests for how the in-memory store is shared."""

    def test_caches_of_one_instance_share_the_store(self):
        """Test that caches built from the same resource instance see the same snapshots."""
        resource = CatalogCacheResource(use_database=False)
        provider = CatalogProviderResource(mock_mode=True, mock_record_count=3)

        asyncio.run(resource.build_cache(provider).refresh("github"))
        status = asyncio.run(resource.build_cache(provider).get_cache_status("github"))

        assert resource.get_store() is resource.get_store()
        assert status.workflow_count == 3

    def test_separate_instances_start_empty(self):
        """Test that a fresh resource instance, as each step process gets, has no snapshots."""
        provider = CatalogProviderResource(mock_mode=True, mock_record_count=3)
        asyncio.run(CatalogCacheResource(use_database=False).build_cache(provider).refresh("github"))

        status = asyncio.run(CatalogCacheResource(use_database=False).build_cache(provider).get_cache_status("github"))

        assert status.has_cache is False


class TestCatalogAssets:
    """Tests for catalog_source_snapshots and catalog_union."""

    def test_refresh_and_union(self, offline_resources):
        """Test that every source refreshes and the union holds their artifacts."""
        result = materialize([catalog_source_snapshots, catalog_union], resources=offline_resources)

        assert result.success
        snapshots = result.output_for_node("catalog_source_snapshots")
        assert set(snapshots) == set(KNOWN_SOURCES)
        stats = result.output_for_node("catalog_union")
        assert 0 < stats["total"] <= 4 * len(KNOWN_SOURCES)


class TestAnalysisAssets:
    """Tests for job_task_analysis and job_recommendations without the LLM."""

    def test_job_task_analysis(self, offline_resources):
        """Test that the configured job text is scored into a report."""
        result = materialize(
            [job_task_analysis],
            resources=offline_resources,
            run_config=job_config("job_task_analysis"),
        )

        assert result.success
        report = result.output_for_node("job_task_analysis")
        assert len(report["tasks"]) == 3
        assert 0 <= report["total_score"] <= 100

    def test_job_recommendations_get_fallback_steps(self, offline_resources):
        """Test that every recommended task carries implementation steps."""
        result = materialize(
            [catalog_source_snapshots, catalog_union, job_recommendations],
            resources=offline_resources,
            run_config=job_config("job_recommendations"),
        )

        assert result.success
        payload = result.output_for_node("job_recommendations")
        assert len(payload["tasks"]) == 3
        for task in payload["tasks"]:
            assert task["implementation_steps"]
