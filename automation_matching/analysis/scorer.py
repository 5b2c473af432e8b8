"""Heuristic automation scorer for single job tasks.

Each task text is checked against a table of weighted keyword signal groups.
Every group that fires adds its weight to both the score and the weight
total; the normalized ratio is scaled to 85, damped by the number of
signals, then capped by the most human-centric category present.

Confidence is reported as the rounded score. That is a placeholder, not a
calibrated probability; keep it until a proper confidence model exists.
"""

from dataclasses import dataclass, field

from automation_matching.models.enums import (
    AutomationLabelEnum,
    AutomationTrendEnum,
    TaskComplexityEnum,
)
from automation_matching.utils.numbers import round_half_up

MAX_SCORE = 85
INDUSTRY_BONUS = 5
SINGLE_SIGNAL_DAMPING = 0.7
MULTI_SIGNAL_BOOST = 1.05
AUTOMATABLE_THRESHOLD = 60
PARTIAL_THRESHOLD = 20


@dataclass(frozen=True)
class SignalGroup:
    name: str
    keywords: tuple[str, ...]
    weight: int
    capabilities: tuple[str, ...] = ()


SIGNAL_GROUPS: tuple[SignalGroup, ...] = (
    SignalGroup(
        "software-development",
        (
            "software", "programmier", "programming", "coding", "quellcode", "source code",
            "api", "deploy", "frontend", "backend", "datenbank", "database", "sql", "debug",
            "testautomatisierung", "test automation",
        ),
        4,
        ("code_generation", "api_integration"),
    ),
    SignalGroup(
        "data-analysis",
        (
            "daten", "data", "analyse", "analysis", "analyz", "auswertung", "statistik",
            "statistic", "kennzahlen", "kpi", "dashboard", "report", "bericht", "metrics",
            "excel", "tabelle", "spreadsheet",
        ),
        5,
        ("data_analysis", "reporting"),
    ),
    SignalGroup(
        "healthcare",
        (
            "patient", "pflege", "medizin", "medical", "klinik", "clinic", "therapie",
            "therapy", "diagnose", "diagnos", "behandlung", "treatment", "arzt", "physician",
        ),
        2,
        ("document_processing", "scheduling"),
    ),
    SignalGroup(
        "finance",
        (
            "rechnung", "invoice", "buchhalt", "buchung", "verbuch", "kontier", "accounting",
            "bookkeeping", "steuer", "tax", "zahlung", "payment", "bilanz", "datev",
            "mahnwesen", "budget", "controlling", "finanz", "financ",
        ),
        5,
        ("document_processing", "data_analysis"),
    ),
    SignalGroup(
        "marketing",
        (
            "marketing", "kampagne", "campaign", "seo", "social media", "content", "newsletter",
            "brand", "marke", "werbung", "advertising",
        ),
        3,
        ("text_generation", "scheduling"),
    ),
    SignalGroup(
        "hr",
        (
            "recruiting", "recruitment", "bewerb", "onboarding", "personalakte", "payroll",
            "lohnabrechnung", "gehaltsabrechnung", "hiring", "candidate", "kandidat",
            "urlaubsantr",
        ),
        3,
        ("document_processing", "email_send"),
    ),
    SignalGroup(
        "production",
        (
            "produktion", "production", "fertigung", "manufacturing", "lager", "warehouse",
            "logistik", "logistics", "qualitätskontrolle", "quality control", "montage",
            "assembly", "inventur", "inventory",
        ),
        3,
        ("monitoring", "scheduling"),
    ),
    SignalGroup(
        "education",
        (
            "schulung", "training", "unterricht", "teaching", "lehrplan", "curriculum",
            "kurs", "course", "weiterbildung", "workshop", "e-learning",
        ),
        2,
        ("text_generation",),
    ),
    SignalGroup(
        "legal",
        (
            "vertrag", "contract", "rechtlich", "legal", "compliance",
            "datenschutz", "gdpr", "dsgvo", "klausel", "clause",
        ),
        2,
        ("document_processing",),
    ),
    SignalGroup(
        "documentation",
        (
            "dokumentation", "dokumentier", "documentation", "document", "protokoll",
            "ablage", "archiv", "filing", "record keeping", "erfassung", "data entry",
        ),
        4,
        ("document_processing", "file_io"),
    ),
    SignalGroup(
        "monitoring",
        (
            "überwach", "monitor", "kontrolle", "prüfung", "tracking", "alert",
            "inspektion", "inspection", "verification",
        ),
        4,
        ("monitoring",),
    ),
    SignalGroup(
        "creative-strategy",
        (
            "strategie", "strategy", "strategi", "kreativ", "creative", "konzept", "concept",
            "vision", "innovation",
        ),
        4,
        ("text_generation", "web_search"),
    ),
    SignalGroup(
        "human-interaction",
        (
            "beratung", "berät", "beraten", "consult", "kunde", "customer", "verhandl",
            "negotiat", "empathie", "empathy", "präsentation", "presentation", "gespräch",
            "betreuung", "betreuen", "conversation",
        ),
        4,
        ("email_send",),
    ),
    SignalGroup(
        "management",
        (
            "führung", "leitung", "leiten", "management", "leadership", "team lead",
            "mentoring", "supervision", "koordination", "coordination", "koordinier",
        ),
        3,
        ("reporting", "scheduling"),
    ),
    SignalGroup(
        "ai-assisted",
        (
            "künstliche intelligenz", "machine learning", "chatgpt", "llm", "automatisier",
            "automat", "workflow", "chatbot", " ki ", " ai ",
        ),
        5,
        ("text_generation", "workflow_automation"),
    ),
)

# Score ceilings, most restrictive first
CATEGORY_CAPS: tuple[tuple[frozenset[str], int], ...] = (
    (frozenset({"human-interaction", "creative-strategy"}), 40),
    (frozenset({"management"}), 60),
    (frozenset({"documentation", "data-analysis"}), 80),
)

# Priority order matters: first industry with a keyword hit wins
INDUSTRY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "finance",
        (
            "financial", "accounting", "tax", "budget", "invoice", "payment", "controller",
            "accountant", "bookkeeper", "audit", "bilanz", "buchhaltung", "buchhalter",
            "buchführung", "steuer", "rechnungswesen", "finanzen", "controlling",
            "kostenrechnung", "liquidität", "cashflow", "abrechnung", "kassenbuch", "rechnung",
            "datev",
        ),
    ),
    (
        "marketing",
        (
            "marketing", "campaign", "kampagne", "brand", "content", "social media",
            "advertising", "werbung", "seo", "sem", "newsletter", "lead generation",
            "influencer", "public relations", "copywriting",
        ),
    ),
    (
        "tech",
        (
            "software", "development", "programming", "code", "api", "engineer", "developer",
            "frontend", "backend", "fullstack", "javascript", "typescript", "python",
            "database", "sql", "docker", "kubernetes", "cloud", "devops", "github",
        ),
    ),
    (
        "healthcare",
        (
            "medical", "patient", "healthcare", "clinical", "nursing", "hospital", "clinic",
            "therapy", "medizinisch", "pflege", "krankenhaus", "praxis", "therapie",
            "gesundheit", "diagnose", "behandlung",
        ),
    ),
    (
        "hr",
        (
            "hr manager", "hr director", "hr specialist", "human resources", "personalmanager",
            "personalreferent", "recruiter", "recruiting", "talent acquisition", "recruitment",
            "onboarding", "offboarding",
        ),
    ),
    (
        "production",
        (
            "production", "manufacturing", "factory", "assembly", "lean", "six sigma",
            "produktion", "fertigung", "fabrik", "montage", "logistik", "supply chain",
            "warehouse",
        ),
    ),
    (
        "education",
        (
            "teacher", "lehrer", "schule", "school", "university", "hochschule", "student",
            "unterricht", "teaching", "lehrplan", "curriculum", "e-learning",
        ),
    ),
    (
        "legal",
        (
            "legal", "lawyer", "anwalt", "jurist", "rechtsanwalt", "kanzlei", "contract",
            "vertrag", "compliance", "litigation",
        ),
    ),
)


@dataclass(frozen=True)
class ScoredTask:
    """Automation verdict for one task text."""

    text: str
    score: int
    label: AutomationLabelEnum
    category: str
    industry: str
    complexity: TaskComplexityEnum
    automation_trend: AutomationTrendEnum
    confidence: int
    signals: list[str] = field(default_factory=list)
    recommended_capabilities: list[str] = field(default_factory=list)

    @property
    def automation_potential(self) -> float:
        """Score as a 0..1 fraction, the form the matcher expects."""
        return self.score / 100


def detect_industry(text: str) -> str:
    """Return the dominant industry for a text, or 'general'."""
    lowered = text.lower()
    for industry, keywords in INDUSTRY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return industry
    return "general"


def detect_signals(text: str) -> list[SignalGroup]:
    """Signal groups with at least one keyword hit, in table order."""
    lowered = f" {text.lower()} "
    return [group for group in SIGNAL_GROUPS if any(k in lowered for k in group.keywords)]


def label_for_score(score: int) -> AutomationLabelEnum:
    if score >= AUTOMATABLE_THRESHOLD:
        return AutomationLabelEnum.AUTOMATABLE
    if score >= PARTIAL_THRESHOLD:
        return AutomationLabelEnum.PARTIALLY_AUTOMATABLE
    return AutomationLabelEnum.HUMAN


def _apply_caps(score: int, names: set[str]) -> int:
    for groups, ceiling in CATEGORY_CAPS:
        if names & groups:
            return min(score, ceiling)
    return score


def _complexity(names: set[str]) -> TaskComplexityEnum:
    if names & {"human-interaction", "creative-strategy"}:
        return TaskComplexityEnum.HIGH
    if names & {"data-analysis", "documentation"}:
        return TaskComplexityEnum.LOW
    return TaskComplexityEnum.MEDIUM


def _trend(names: set[str], score: int) -> AutomationTrendEnum:
    if names & {"software-development", "finance"} and score >= 70:
        return AutomationTrendEnum.INCREASING
    if names & {"healthcare", "legal"} and score <= 25:
        return AutomationTrendEnum.DECREASING
    return AutomationTrendEnum.STABLE


def score_task(text: str, job_title: str | None = None) -> ScoredTask:
    """Score how automatable a task is.

    Args:
        text: Task text (one extracted line)
        job_title: Optional job title used for industry detection

    Returns:
        ScoredTask with score in [0, 85] and derived label, complexity and trend
    """
    text = text or ""
    groups = detect_signals(text)
    names = {group.name for group in groups}
    industry = detect_industry(f"{job_title} {text}" if job_title else text)

    total_score = sum(group.weight for group in groups)
    total_weight = total_score
    if industry != "general":
        total_score += INDUSTRY_BONUS

    score = min(MAX_SCORE, round_half_up(total_score / total_weight * MAX_SCORE)) if total_weight > 0 else 0

    if len(groups) == 1:
        score = round_half_up(score * SINGLE_SIGNAL_DAMPING)
    elif len(groups) >= 3:
        score = min(MAX_SCORE, round_half_up(score * MULTI_SIGNAL_BOOST))

    score = max(0, min(MAX_SCORE, _apply_caps(score, names)))

    category = max(groups, key=lambda g: g.weight).name if groups else "general"
    capabilities: list[str] = []
    for group in groups:
        for capability in group.capabilities:
            if capability not in capabilities:
                capabilities.append(capability)

    return ScoredTask(
        text=text,
        score=score,
        label=label_for_score(score),
        category=category,
        industry=industry,
        complexity=_complexity(names),
        automation_trend=_trend(names, score),
        confidence=score,
        signals=[group.name for group in groups],
        recommended_capabilities=capabilities,
    )
