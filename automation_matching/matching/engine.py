"""Multi-factor ranking of catalog artifacts against a task.

Points per candidate (before rounding and clamping to 0..100):

| Factor               | Points                                   |
|----------------------|------------------------------------------|
| Title similarity     | Jaccard x 30, when Jaccard > 0.05        |
| Description          | Jaccard x 25, when Jaccard > 0.05        |
| Domain keywords      | table below, capped at 30                |
| Integration overlap  | 15 per matching pair, capped at 25       |
| Complexity           | 10 exact tier, 5 adjacent tier           |
| Automation potential | potential (0..1) x 10, always            |

Description similarity only counts for tasks that carry a description; a
title-only task is not compared against the summary a second time. The
ranking is a stable sort, so equal scores keep candidate order.
"""

import re
from dataclasses import dataclass, field

from automation_matching.catalog.normalize import KNOWN_SOURCES, CatalogArtifact
from automation_matching.models.enums import (
    ArtifactComplexityEnum,
    MatchStatusEnum,
    complexity_distance,
)
from automation_matching.utils.numbers import clamp, round_half_up

DEFAULT_MAX_RESULTS = 5
DEFAULT_MIN_SCORE = 30
DEFAULT_ESTIMATED_HOURS = 8.0
SIMILARITY_THRESHOLD = 0.05
TITLE_WEIGHT = 30
DESCRIPTION_WEIGHT = 25
KEYWORD_CAP = 30
INTEGRATION_POINTS = 15
INTEGRATION_CAP = 25
PREFERRED_COMPLEXITY_BONUS = 10

TRUSTED_SOURCES = frozenset({"library", *KNOWN_SOURCES})

DOMAIN_KEYWORDS: dict[str, int] = {
    # Finance and accounting
    "rechnung": 15, "invoice": 15, "buchhal": 15, "accounting": 15, "datev": 20,
    "steuer": 15, "tax": 15, "zahlung": 12, "payment": 12, "bilanz": 15, "balance": 15,
    "abschluss": 12,
    # Data and analysis
    "daten": 10, "data": 10, "analyse": 12, "analysis": 12, "report": 12, "bericht": 12,
    "aggregat": 10, "aggregate": 10, "visuali": 10, "chart": 10, "dashboard": 12,
    # Development
    "code": 10, "develop": 10, "deploy": 12, "build": 10, "test": 10, "api": 12,
    "database": 12, "datenbank": 12, "frontend": 10, "backend": 10,
    # Communication
    "email": 12, "mail": 12, "kalender": 10, "calendar": 10, "meeting": 10, "termin": 10,
    # Automation
    "automat": 15, "workflow": 12, "process": 10, "prozess": 10,
}

STOP_WORDS = frozenset({
    "der", "die", "das", "und", "oder", "für", "von", "mit", "zu", "im", "am",
    "the", "and", "or", "for", "of", "with", "to", "in", "on", "at", "is", "are",
    "eine", "ein", "einer", "einem", "einen", "a", "an", "this", "that", "these",
})

COMPLEXITY_ALIASES: dict[str, ArtifactComplexityEnum] = {
    "low": ArtifactComplexityEnum.LOW,
    "easy": ArtifactComplexityEnum.LOW,
    "simple": ArtifactComplexityEnum.LOW,
    "medium": ArtifactComplexityEnum.MEDIUM,
    "moderate": ArtifactComplexityEnum.MEDIUM,
    "high": ArtifactComplexityEnum.HIGH,
    "hard": ArtifactComplexityEnum.HIGH,
    "complex": ArtifactComplexityEnum.HIGH,
}

TIME_SAVINGS_FACTORS: dict[ArtifactComplexityEnum, float] = {
    ArtifactComplexityEnum.LOW: 1.2,
    ArtifactComplexityEnum.MEDIUM: 1.0,
    ArtifactComplexityEnum.HIGH: 0.8,
}

SETUP_COSTS: dict[ArtifactComplexityEnum, int] = {
    ArtifactComplexityEnum.LOW: 200,
    ArtifactComplexityEnum.MEDIUM: 500,
    ArtifactComplexityEnum.HIGH: 1000,
}


@dataclass
class MatchTask:
    """What the engine needs to know about a task or subtask."""

    title: str
    description: str | None = None
    systems: list[str] = field(default_factory=list)
    complexity: str = "medium"
    automation_potential: float = 0.5
    estimated_time: float | None = None
    id: str | None = None


@dataclass
class MatchOptions:
    max_results: int = DEFAULT_MAX_RESULTS
    min_score: int = DEFAULT_MIN_SCORE
    preferred_complexity: ArtifactComplexityEnum | None = None
    require_integration_match: bool = False


@dataclass
class MatchResult:
    artifact: CatalogArtifact
    match_score: int
    match_reasons: list[str] = field(default_factory=list)
    relevant_integrations: list[str] = field(default_factory=list)
    estimated_time_savings_hours: float = 0.0
    status: MatchStatusEnum = MatchStatusEnum.FALLBACK
    is_ai_generated: bool = False
    setup_cost: int = SETUP_COSTS[ArtifactComplexityEnum.MEDIUM]


# ═══════════════════════════════════════════════════════════════════
# TEXT SIMILARITY
# ═══════════════════════════════════════════════════════════════════


def tokenize(text: str) -> list[str]:
    cleaned = re.sub(r"[^\w\säöüß]", " ", (text or "").lower())
    return [word for word in cleaned.split() if len(word) > 2 and word not in STOP_WORDS]


def jaccard(text_a: str, text_b: str) -> float:
    """Jaccard similarity of the token sets of two texts (0 when either is empty)."""
    tokens_a, tokens_b = set(tokenize(text_a)), set(tokenize(text_b))
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def keyword_points(task_title: str, artifact: CatalogArtifact) -> int:
    title = (task_title or "").lower()
    artifact_text = f"{artifact.title} {artifact.summary} {artifact.category}".lower()
    points = sum(p for keyword, p in DOMAIN_KEYWORDS.items() if keyword in title and keyword in artifact_text)
    return min(KEYWORD_CAP, points)


def integration_overlap(systems: list[str], integrations: list[str]) -> tuple[int, list[str]]:
    """Points and matched integrations for every (system, integration) pair that overlaps."""
    if not systems or not integrations:
        return 0, []
    points = 0
    matched: list[str] = []
    for system in (s.lower() for s in systems):
        for integration in (i.lower() for i in integrations):
            if system == integration or system in integration or integration in system:
                points += INTEGRATION_POINTS
                matched.append(integration)
    return min(INTEGRATION_CAP, points), matched


# ═══════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════


def normalize_complexity(value: str | ArtifactComplexityEnum | None) -> ArtifactComplexityEnum:
    if isinstance(value, ArtifactComplexityEnum):
        return value
    return COMPLEXITY_ALIASES.get((value or "").strip().lower(), ArtifactComplexityEnum.MEDIUM)


def complexity_points(task_complexity: str, artifact_complexity: ArtifactComplexityEnum) -> int:
    distance = complexity_distance(normalize_complexity(task_complexity), artifact_complexity)
    if distance == 0:
        return 10
    if distance == 1:
        return 5
    return 0


def estimate_time_savings(task: MatchTask, artifact: CatalogArtifact) -> float:
    """Hours saved: estimated time x automation potential x complexity factor."""
    base = task.estimated_time or DEFAULT_ESTIMATED_HOURS
    factor = TIME_SAVINGS_FACTORS[normalize_complexity(artifact.complexity)]
    return round(base * task.automation_potential * factor, 1)


def estimate_setup_cost(complexity: str | ArtifactComplexityEnum | None) -> int:
    return SETUP_COSTS[normalize_complexity(complexity)]


def determine_status(artifact: CatalogArtifact) -> MatchStatusEnum:
    if artifact.source in TRUSTED_SOURCES:
        return MatchStatusEnum.VERIFIED
    if artifact.is_ai_generated:
        return MatchStatusEnum.GENERATED
    return MatchStatusEnum.FALLBACK


# ═══════════════════════════════════════════════════════════════════
# SCORING
# ═══════════════════════════════════════════════════════════════════


def score_candidate(task: MatchTask, artifact: CatalogArtifact) -> MatchResult:
    """Score one candidate with reasons; no filtering applied."""
    score = 0.0
    reasons: list[str] = []

    title_similarity = jaccard(task.title, artifact.title)
    if title_similarity > SIMILARITY_THRESHOLD:
        points = title_similarity * TITLE_WEIGHT
        score += points
        reasons.append(f"Title: {round_half_up(title_similarity * 100)}% (+{round_half_up(points)})")

    desc_similarity = jaccard(task.description, artifact.summary) if task.description else 0.0
    if desc_similarity > SIMILARITY_THRESHOLD:
        points = desc_similarity * DESCRIPTION_WEIGHT
        score += points
        reasons.append(f"Desc: {round_half_up(desc_similarity * 100)}% (+{round_half_up(points)})")

    keywords = keyword_points(task.title, artifact)
    if keywords > 0:
        score += keywords
        reasons.append(f"Keywords: +{keywords}")

    overlap, matched = integration_overlap(task.systems or [], artifact.integrations or [])
    if overlap > 0:
        score += overlap
        reasons.append(f"Integration match: {', '.join(matched)}")

    tier = complexity_points(task.complexity, artifact.complexity)
    if tier > 0:
        score += tier
        reasons.append(f"Complexity: {artifact.complexity.value}")

    score += clamp(task.automation_potential, 0.0, 1.0) * 10

    return MatchResult(
        artifact=artifact,
        match_score=int(clamp(round_half_up(score), 0, 100)),
        match_reasons=reasons,
        relevant_integrations=matched,
        estimated_time_savings_hours=estimate_time_savings(task, artifact),
        status=determine_status(artifact),
        is_ai_generated=artifact.is_ai_generated or artifact.source == "ai",
        setup_cost=estimate_setup_cost(artifact.complexity),
    )


def match_workflows(
    task: MatchTask,
    candidates: list[CatalogArtifact],
    options: MatchOptions | None = None,
) -> list[MatchResult]:
    """Rank candidates for a task.

    Args:
        task: Task (or subtask) to match
        candidates: Catalog artifacts, in the order ties should keep
        options: Result count, score floor, complexity preference and
            integration requirement

    Returns:
        At most `max_results` matches scoring at least `min_score`, best first
    """
    options = options or MatchOptions()
    matches = []
    for artifact in candidates or []:
        result = score_candidate(task, artifact)
        if result.match_score < options.min_score:
            continue
        if options.require_integration_match and not result.relevant_integrations:
            continue
        matches.append(result)

    matches.sort(key=lambda m: m.match_score, reverse=True)

    if options.preferred_complexity is not None:
        preferred = normalize_complexity(options.preferred_complexity)
        for match in matches:
            if match.artifact.complexity == preferred:
                match.match_score = min(100, match.match_score + PREFERRED_COMPLEXITY_BONUS)
        matches.sort(key=lambda m: m.match_score, reverse=True)

    return matches[: options.max_results]


def match_workflows_to_subtasks(
    subtasks: list[MatchTask],
    candidates: list[CatalogArtifact],
    options: MatchOptions | None = None,
) -> dict[str, list[MatchResult]]:
    return {
        subtask.id or subtask.title: match_workflows(subtask, candidates, options)
        for subtask in subtasks
    }


def find_best_overall_workflow(subtask_matches: dict[str, list[MatchResult]]) -> MatchResult | None:
    """Highest-scoring match across all subtasks; first subtask wins ties."""
    best: MatchResult | None = None
    for matches in subtask_matches.values():
        if matches and (best is None or matches[0].match_score > best.match_score):
            best = matches[0]
    return best
