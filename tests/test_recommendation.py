"""Tests for the recommendation service.

Uses a CatalogCache over the in-memory store, filled from a canned fetcher.
"""

import pytest

from automation_matching.analysis.scorer import score_task
from automation_matching.analysis.subtasks import Subtask
from automation_matching.catalog.cache import CatalogCache
from automation_matching.catalog.store import InMemorySnapshotStore
from automation_matching.matching.engine import MatchOptions, MatchTask
from automation_matching.models.enums import MatchStatusEnum
from automation_matching.services.recommendation import (
    FALLBACK_SCORE,
    RecommendationService,
    detect_systems,
    subtask_description,
    synthesize_fallback,
)


class StaticFetcher:
    def __init__(self, records: dict[str, list[dict]]):
        self.records = records

    async def fetch(self, source: str) -> list[dict]:
        return list(self.records.get(source, []))


DATEV_WORKFLOW = {
    "id": "datev-1",
    "name": "DATEV Rechnungsverarbeitung",
    "description": "Rechnungen per E-Mail empfangen, per OCR auslesen, kontieren und in DATEV verbuchen",
    "integrations": ["Gmail", "OCR", "DATEV"],
    "complexity": "Medium",
}

DISCORD_WORKFLOW = {
    "id": "discord-1",
    "name": "Discord Bot",
    "integrations": ["Discord"],
    "complexity": "High",
}


@pytest.fixture
def service():
    cache = CatalogCache(
        store=InMemorySnapshotStore(),
        fetcher=StaticFetcher({"github": [DATEV_WORKFLOW, DISCORD_WORKFLOW]}),
    )
    return RecommendationService(cache, MatchOptions(min_score=30))


class TestDetectSystems:
    """Tests for detect_systems."""

    def test_known_systems(self):
        """Test that named systems are detected in table order."""
        assert detect_systems("Belege aus Outlook in DATEV und Excel übernehmen") == ["DATEV", "Excel", "Outlook"]

    def test_no_systems(self):
        """Test that plain text mentions no systems."""
        assert detect_systems("Boden fegen") == []


class TestSubtaskDescription:
    """Tests for the description handed to the matcher for subtasks."""

    def test_systems_are_appended(self):
        """Test the '<title> mit A und B' form."""
        subtask = Subtask(
            id="s1", title="Belege erfassen", systems=["DATEV", "Excel"], manual_hours_share=0.25, automation_potential=0.8
        )

        assert subtask_description(subtask) == "Belege erfassen mit DATEV und Excel"

    def test_no_systems_no_description(self):
        """Test that a subtask without systems adds no description."""
        subtask = Subtask(id="s1", title="Belege erfassen", systems=[], manual_hours_share=0.25, automation_potential=0.8)

        assert subtask_description(subtask) is None


class TestSynthesizeFallback:
    """Tests for fallback workflow synthesis."""

    def test_fallback_shape(self):
        """Test the generated placeholder workflow."""
        task = MatchTask(title="Boden fegen", systems=["Excel"])

        result = synthesize_fallback(task)

        assert result.match_score == FALLBACK_SCORE
        assert result.status == MatchStatusEnum.GENERATED
        assert result.is_ai_generated is True
        assert result.artifact.source == "ai"
        assert result.artifact.title == "Generated workflow for: Boden fegen"
        assert result.artifact.integrations == ["Excel"]

    def test_fallback_id_is_stable(self):
        """Test that the same task always gets the same fallback id."""
        first = synthesize_fallback(MatchTask(title="Boden fegen"))
        second = synthesize_fallback(MatchTask(title="Boden fegen"))

        assert first.artifact.id == second.artifact.id
        assert first.artifact.id.startswith("ai-generated-")


class TestRecommend:
    """End-to-end tests for RecommendationService."""

    def test_datev_task_gets_datev_workflow(self, service):
        """Test that a DATEV bookkeeping task is matched to the DATEV workflow."""
        recommendation = service.recommend("Aufgabe: Rechnungen kontieren und in DATEV verbuchen")

        assert len(recommendation.tasks) == 1
        task = recommendation.tasks[0]
        assert task.used_fallback is False
        assert task.best_match.artifact.id == "datev-1"
        assert task.best_match.status == MatchStatusEnum.VERIFIED
        assert task.best_match.match_score > 30
        assert task.subtasks[0].systems[0] == "DATEV"
        assert recommendation.confidence == task.best_match.match_score

    def test_unmatched_task_gets_fallback(self, service):
        """Test that a task nothing matches gets a synthesized workflow."""
        recommendation = service.recommend("Aufgabe: Boden fegen und wischen")

        task = recommendation.tasks[0]
        assert task.used_fallback is True
        assert task.best_match.artifact.is_ai_generated is True
        assert task.matches == [task.best_match]
        assert recommendation.confidence == FALLBACK_SCORE

    def test_text_without_tasks_is_one_task(self, service):
        """Test that text without recognizable tasks is treated as a single task."""
        recommendation = service.recommend("Rechnungen in DATEV")

        assert [t.task.text for t in recommendation.tasks] == ["Rechnungen in DATEV"]

    def test_empty_text(self, service):
        """Test that empty input yields an empty recommendation."""
        recommendation = service.recommend("")

        assert recommendation.tasks == []
        assert recommendation.confidence == 0
        assert recommendation.report.total_score == 0

    def test_report_covers_all_tasks(self, service):
        """Test that the report aggregates every scored task."""
        text = "- Rechnungen kontieren und verbuchen\n- Zahlungsläufe planen und durchführen\n- Boden fegen und wischen"

        recommendation = service.recommend(text, job_title="Buchhalter (m/w/d)")

        assert len(recommendation.report.tasks) == 3
        assert len(recommendation.tasks) == 3

    def test_recommend_task_directly(self, service):
        """Test recommend_task with explicit candidates."""
        result = service.recommend_task(score_task("Boden fegen"), [])

        assert result.used_fallback is True
        assert len(result.subtasks) == 4


class RecordingCache(CatalogCache):
    """CatalogCache that remembers every semantic_search call."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.semantic_calls: list[tuple[str, str | None, list[str]]] = []

    async def semantic_search(self, query, source=None, threshold=0.3, domain=None):
        ranked = await super().semantic_search(query, source, threshold, domain)
        self.semantic_calls.append((query, domain, [a.id for a in ranked]))
        return ranked


class TestSemanticPrefilter:
    """Tests for narrowing candidates by TF-IDF before matching."""

    @pytest.fixture
    def cache(self):
        return RecordingCache(
            store=InMemorySnapshotStore(),
            fetcher=StaticFetcher({"github": [DATEV_WORKFLOW, DISCORD_WORKFLOW]}),
        )

    def test_disabled_by_default(self, cache):
        """Test that the plain service never ranks by TF-IDF."""
        RecommendationService(cache).recommend("Aufgabe: Rechnungen kontieren und in DATEV verbuchen")

        assert cache.semantic_calls == []

    def test_task_domain_boosts_the_query(self, cache):
        """Test that candidates are narrowed with the task's domain and the match survives."""
        service = RecommendationService(cache, MatchOptions(min_score=30), semantic_prefilter=True)

        recommendation = service.recommend("Aufgabe: Rechnungen kontieren und in DATEV verbuchen")

        query, domain, ranked = cache.semantic_calls[0]
        assert query == "Rechnungen kontieren und in DATEV verbuchen"
        assert domain == "finance-accounting"
        assert ranked == ["datev-1"]
        assert recommendation.tasks[0].best_match.artifact.id == "datev-1"

    def test_no_similar_artifacts_uses_full_catalog(self, cache):
        """Test that an empty ranking falls back to matching every candidate."""
        service = RecommendationService(
            cache, MatchOptions(min_score=30), semantic_prefilter=True, semantic_threshold=0.99
        )

        recommendation = service.recommend("Aufgabe: Rechnungen kontieren und in DATEV verbuchen")

        assert cache.semantic_calls[0][2] == []
        assert recommendation.tasks[0].best_match.artifact.id == "datev-1"
