"""Job text to workflow recommendations.

Chains the local pipeline end to end: extract tasks, score them, break each
into subtasks, then rank catalog artifacts for the task and its subtasks.
A task nothing in the catalog clears the score floor for gets a synthesized
placeholder workflow instead of an empty result.
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass, field

from automation_matching.analysis.extractor import clean_text, extract_tasks, shorten
from automation_matching.analysis.report import AnalysisReport, build_report
from automation_matching.analysis.scorer import ScoredTask, score_task
from automation_matching.analysis.subtasks import Subtask, decompose_task, get_task_domain
from automation_matching.catalog.cache import CatalogCache
from automation_matching.catalog.normalize import CatalogArtifact
from automation_matching.matching.engine import (
    MatchOptions,
    MatchResult,
    MatchTask,
    estimate_setup_cost,
    estimate_time_savings,
    find_best_overall_workflow,
    match_workflows,
    match_workflows_to_subtasks,
)
from automation_matching.models.enums import (
    ArtifactComplexityEnum,
    ArtifactKindEnum,
    MatchStatusEnum,
)
from automation_matching.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

WEEKLY_HOURS = 40
FALLBACK_SCORE = 50
FALLBACK_REASON = "AI-generated fallback workflow"
SEMANTIC_PREFILTER_THRESHOLD = 0.1

# Lowercase needle -> display name of the system
KNOWN_SYSTEMS: dict[str, str] = {
    "datev": "DATEV",
    "sap": "SAP",
    "excel": "Excel",
    "outlook": "Outlook",
    "gmail": "Gmail",
    "google sheets": "Google Sheets",
    "slack": "Slack",
    "teams": "Microsoft Teams",
    "salesforce": "Salesforce",
    "hubspot": "HubSpot",
    "jira": "Jira",
    "confluence": "Confluence",
    "notion": "Notion",
    "trello": "Trello",
    "shopify": "Shopify",
    "stripe": "Stripe",
    "lexoffice": "Lexoffice",
    "personio": "Personio",
    "zendesk": "Zendesk",
}


@dataclass
class TaskRecommendation:
    task: ScoredTask
    subtasks: list[Subtask] = field(default_factory=list)
    matches: list[MatchResult] = field(default_factory=list)
    best_match: MatchResult | None = None
    used_fallback: bool = False


@dataclass
class JobRecommendation:
    """Everything the job analysis produces, in task order."""

    report: AnalysisReport
    tasks: list[TaskRecommendation]
    confidence: int


def detect_systems(text: str) -> list[str]:
    """Named business systems mentioned in a task text, in table order."""
    lowered = (text or "").lower()
    return [name for needle, name in KNOWN_SYSTEMS.items() if needle in lowered]


def synthesize_fallback(task: MatchTask) -> MatchResult:
    """Placeholder workflow for a task without any catalog match."""
    artifact = CatalogArtifact(
        id=f"ai-generated-{hashlib.sha1(task.title.encode('utf-8')).hexdigest()[:12]}",
        source="ai",
        kind=ArtifactKindEnum.WORKFLOW,
        title=f"Generated workflow for: {task.title}",
        summary=task.description or task.title,
        link="#",
        category="Generated",
        integrations=list(task.systems),
        complexity=ArtifactComplexityEnum.MEDIUM,
        is_ai_generated=True,
    )
    return MatchResult(
        artifact=artifact,
        match_score=FALLBACK_SCORE,
        match_reasons=[FALLBACK_REASON],
        relevant_integrations=list(task.systems),
        estimated_time_savings_hours=estimate_time_savings(task, artifact),
        status=MatchStatusEnum.GENERATED,
        is_ai_generated=True,
        setup_cost=estimate_setup_cost(artifact.complexity),
    )


def subtask_description(subtask: Subtask) -> str | None:
    """'<title> mit A und B' for a subtask with systems; None when it names none."""
    if not subtask.systems:
        return None
    return f"{subtask.title} mit {' und '.join(subtask.systems)}"


def _subtask_match_task(subtask: Subtask, complexity: str) -> MatchTask:
    return MatchTask(
        id=subtask.id,
        title=subtask.title,
        description=subtask_description(subtask),
        systems=list(subtask.systems),
        complexity=complexity,
        automation_potential=subtask.automation_potential,
        estimated_time=subtask.manual_hours_share * WEEKLY_HOURS,
    )


class RecommendationService:
    """Recommends catalog workflows for the tasks of a job posting.

    Args:
        cache: Catalog cache the candidates are read from (the `all` union)
        options: Matcher options applied to every task and subtask
        semantic_prefilter: Narrow each task's candidates to the artifacts
            TF-IDF ranks as similar to the task text (boosted by its domain)
            before matching; the full catalog is used when nothing is similar
        semantic_threshold: Minimum TF-IDF similarity for the prefilter
    """

    def __init__(
        self,
        cache: CatalogCache,
        options: MatchOptions | None = None,
        semantic_prefilter: bool = False,
        semantic_threshold: float = SEMANTIC_PREFILTER_THRESHOLD,
    ):
        self._cache = cache
        self._options = options or MatchOptions()
        self._semantic_prefilter = semantic_prefilter
        self._semantic_threshold = semantic_threshold

    def _task_texts(self, job_text: str) -> list[str]:
        texts = [task.text for task in extract_tasks(job_text)]
        if texts:
            return texts
        # A posting without recognizable tasks is treated as one task
        cleaned = shorten(clean_text(" ".join((job_text or "").split())))
        return [cleaned] if cleaned else []

    async def _task_candidates(self, text: str, candidates: list[CatalogArtifact]) -> list[CatalogArtifact]:
        if not self._semantic_prefilter or not candidates:
            return candidates
        ranked = await self._cache.semantic_search(
            text, threshold=self._semantic_threshold, domain=get_task_domain(text)
        )
        if not ranked:
            logger.info("No TF-IDF neighbours for %r, matching against the full catalog", text)
            return candidates
        return ranked

    def recommend_task(self, task: ScoredTask, candidates: list[CatalogArtifact]) -> TaskRecommendation:
        """Rank candidates for one scored task and its subtasks."""
        systems = detect_systems(task.text)
        subtasks = decompose_task(task.text, systems)
        match_task = MatchTask(
            title=task.text,
            systems=systems,
            complexity=task.complexity.value,
            automation_potential=task.automation_potential,
        )

        matches = match_workflows(match_task, candidates, self._options)
        subtask_matches = match_workflows_to_subtasks(
            [_subtask_match_task(subtask, task.complexity.value) for subtask in subtasks],
            candidates,
            self._options,
        )

        best_match = matches[0] if matches else None
        best_subtask_match = find_best_overall_workflow(subtask_matches)
        if best_subtask_match and (best_match is None or best_subtask_match.match_score > best_match.match_score):
            best_match = best_subtask_match

        if best_match is None:
            logger.info("No catalog match for %r, synthesizing fallback workflow", task.text)
            fallback = synthesize_fallback(match_task)
            return TaskRecommendation(
                task=task, subtasks=subtasks, matches=[fallback], best_match=fallback, used_fallback=True
            )
        return TaskRecommendation(task=task, subtasks=subtasks, matches=matches, best_match=best_match)

    async def recommend_async(self, job_text: str, job_title: str | None = None) -> JobRecommendation:
        """Analyze a job posting and recommend workflows for each of its tasks."""
        scored = [score_task(text, job_title) for text in self._task_texts(job_text)]
        candidates = await self._cache.get_snapshot() if scored else []
        logger.info("Matching %d tasks against %d catalog artifacts", len(scored), len(candidates))

        recommendations = [
            self.recommend_task(task, await self._task_candidates(task.text, candidates)) for task in scored
        ]
        best_scores = [r.best_match.match_score for r in recommendations if r.best_match]
        confidence = round_half_up(sum(best_scores) / len(best_scores)) if best_scores else 0

        return JobRecommendation(report=build_report(scored), tasks=recommendations, confidence=confidence)

    def recommend(self, job_text: str, job_title: str | None = None) -> JobRecommendation:
        return asyncio.run(self.recommend_async(job_text, job_title))
