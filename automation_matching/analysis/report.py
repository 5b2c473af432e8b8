"""Aggregate a job's scored tasks into a single German-language report."""

from collections import Counter
from dataclasses import dataclass, field

from automation_matching.analysis.scorer import ScoredTask
from automation_matching.models.enums import (
    AutomationLabelEnum,
    AutomationTrendEnum,
    TaskComplexityEnum,
)
from automation_matching.utils.numbers import round_half_up

TREND_LIST_LIMIT = 5
DEFAULT_RECOMMENDATION = "Individuelle Prozessanalyse für maßgeschneiderte Automatisierungsstrategie durchführen"

# (category, message); fires when at least two automatable tasks share the category
CATEGORY_RECOMMENDATIONS: tuple[tuple[str, str], ...] = (
    ("documentation", "OCR und intelligente Datenerfassung für Dokumentenverarbeitung einsetzen"),
    ("data-analysis", "Business Intelligence Tools und automatisierte Reporting-Pipelines implementieren"),
    ("software-development", "API-First Architektur und Microservices für Systemintegration entwickeln"),
    ("monitoring", "Predictive Analytics und proaktive Monitoring-Systeme einführen"),
)


@dataclass
class AutomationRatio:
    automatable: int = 0
    human: int = 0


@dataclass
class AutomationTrends:
    high_potential: list[str] = field(default_factory=list)
    medium_potential: list[str] = field(default_factory=list)
    low_potential: list[str] = field(default_factory=list)


@dataclass
class AnalysisReport:
    """Job-level view over all scored tasks."""

    total_score: int
    ratio: AutomationRatio
    tasks: list[ScoredTask]
    summary: str
    recommendations: list[str]
    automation_trends: AutomationTrends


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def _score_level(total_score: float) -> str:
    if total_score >= 70:
        return "hoch"
    if total_score >= 50:
        return "mittel"
    return "niedrig"


def build_summary(total_score: int, ratio: AutomationRatio, tasks: list[ScoredTask]) -> str:
    increasing = sum(1 for t in tasks if t.automation_trend == AutomationTrendEnum.INCREASING)
    if increasing > len(tasks) * 0.5:
        trend_text = "mit steigendem Automatisierungspotenzial"
    else:
        trend_text = "mit stabiler Automatisierungsentwicklung"
    return (
        f"Analyse von {len(tasks)} identifizierten Aufgaben ergab ein {_score_level(total_score)}es "
        f"Automatisierungspotenzial von {total_score}% {trend_text}. "
        f"{ratio.automatable}% der Aufgaben sind potentiell automatisierbar, "
        f"{ratio.human}% erfordern menschliche Fähigkeiten."
    )


def build_recommendations(tasks: list[ScoredTask], total_score: float) -> list[str]:
    automatable = [t for t in tasks if t.label == AutomationLabelEnum.AUTOMATABLE]
    categories = Counter(t.category for t in automatable)
    increasing = [t for t in tasks if t.automation_trend == AutomationTrendEnum.INCREASING]
    high_complexity = [t for t in tasks if t.complexity == TaskComplexityEnum.HIGH]

    recommendations: list[str] = []
    if total_score >= 70:
        recommendations.append(
            "Hohe Automatisierungseignung - Implementierung von RPA und Workflow-Automatisierung empfohlen"
        )
    for category, message in CATEGORY_RECOMMENDATIONS:
        if categories[category] >= 2:
            recommendations.append(message)
    if len(increasing) >= 3:
        recommendations.append(
            "KI-gestützte Automatisierung für Aufgaben mit steigendem Automatisierungspotenzial prüfen"
        )
    if 40 <= total_score < 70:
        recommendations.append(
            "Selektive Automatisierung - Fokus auf Routineaufgaben und unterstützende Prozesse"
        )
    elif total_score < 40:
        recommendations.append(
            "Fokus auf menschliche Stärken - Automatisierung nur für administrative Unterstützung"
        )
    if len(high_complexity) >= 3:
        recommendations.append(
            "Hybrid-Ansatz: Automatisierung für Routineaufgaben, menschliche Expertise für komplexe Entscheidungen"
        )
    return recommendations or [DEFAULT_RECOMMENDATION]


def build_trends(tasks: list[ScoredTask]) -> AutomationTrends:
    automatable = [t for t in tasks if t.label == AutomationLabelEnum.AUTOMATABLE]
    return AutomationTrends(
        high_potential=[
            t.text for t in automatable if t.automation_trend == AutomationTrendEnum.INCREASING
        ][:TREND_LIST_LIMIT],
        medium_potential=[
            t.text for t in automatable if t.automation_trend == AutomationTrendEnum.STABLE
        ][:TREND_LIST_LIMIT],
        low_potential=[
            t.text
            for t in tasks
            if t.automation_trend == AutomationTrendEnum.DECREASING or t.label == AutomationLabelEnum.HUMAN
        ][:TREND_LIST_LIMIT],
    )


def build_report(scored_tasks: list[ScoredTask]) -> AnalysisReport:
    """Aggregate scored tasks into mean score, ratio, summary and recommendations.

    An empty task list yields a zero report.
    """
    count = len(scored_tasks)
    mean_score = sum(t.score for t in scored_tasks) / count if count else 0.0
    total_score = round_half_up(mean_score)
    ratio = AutomationRatio(
        automatable=_percent(
            sum(1 for t in scored_tasks if t.label == AutomationLabelEnum.AUTOMATABLE), count
        ),
        human=_percent(sum(1 for t in scored_tasks if t.label == AutomationLabelEnum.HUMAN), count),
    )
    return AnalysisReport(
        total_score=total_score,
        ratio=ratio,
        tasks=list(scored_tasks),
        summary=build_summary(total_score, ratio, scored_tasks),
        recommendations=build_recommendations(scored_tasks, mean_score),
        automation_trends=build_trends(scored_tasks),
    )
