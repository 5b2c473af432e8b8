"""Decomposition of a job task into domain-specific subtasks.

Each domain pattern carries a keyword list and four template subtasks. The
pattern with the most keyword hits wins; with no hit at all a universal
plan/execute/coordinate/evaluate breakdown is used. Subtask systems are
personalized by putting the task's own systems first.
"""

from dataclasses import dataclass, field, replace

GENERAL_DOMAIN = "general"


@dataclass(frozen=True)
class Subtask:
    id: str
    title: str
    systems: list[str]
    manual_hours_share: float
    automation_potential: float
    risks: list[str] = field(default_factory=list)
    assumptions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TaskPattern:
    keywords: tuple[str, ...]
    subtasks: tuple[Subtask, ...]


TASK_PATTERNS: dict[str, TaskPattern] = {
    "customer-service": TaskPattern(
        keywords=(
            "customer service", "customer support", "helpdesk", "support ticket", "inquiry",
            "complaint", "customer care", "phone support", "email support", "chat support",
            "customer assistance", "customer relations", "kundenservice", "kundensupport",
            "kundenbetreuung", "kundenberatung", "telefonische beratung", "hotline",
            "kundenanfragen", "kundenbeschwerden", "telefon", "beratung", "support", "anfragen",
            "beschwerden", "kundendienst",
        ),
        subtasks=(
            Subtask(
                "inquiry-processing",
                "Kundenanfragen erfassen und kategorisieren",
                ["CRM", "Helpdesk", "Email", "Phone System", "Chat Platform"],
                0.25,
                0.80,
                ["Unvollständige Informationen", "Falsche Kategorisierung"],
                ["Strukturierte Anfragen", "CRM-System verfügbar"],
            ),
            Subtask(
                "response-generation",
                "Standardantworten und Lösungen generieren",
                ["Knowledge Base", "AI Assistant", "CRM", "Template System"],
                0.30,
                0.85,
                ["Falsche Antworten", "Unvollständige Lösungen"],
                ["Aktuelle Wissensbasis", "Vollständige FAQ"],
            ),
            Subtask(
                "escalation-handling",
                "Komplexe Anfragen eskalieren und verfolgen",
                ["CRM", "Slack", "Email", "Escalation System"],
                0.20,
                0.60,
                ["Verzögerte Eskalation", "Verlorene Anfragen"],
                ["Klare Eskalationsregeln", "Experten verfügbar"],
            ),
            Subtask(
                "follow-up",
                "Nachverfolgung und Kundenzufriedenheit",
                ["CRM", "Survey Tool", "Email", "Feedback System"],
                0.25,
                0.75,
                ["Fehlendes Feedback", "Unzufriedene Kunden"],
                ["Kundenbereitschaft", "Feedback-System"],
            ),
        ),
    ),
    "data-analysis": TaskPattern(
        keywords=(
            "data analysis", "data processing", "reporting", "analytics", "business intelligence",
            "data insights", "data extraction", "data cleaning", "data visualization", "dashboard",
            "metrics", "kpi", "data mining", "statistical analysis", "performance analysis",
            "trend analysis", "datenanalyse", "datenverarbeitung", "berichterstattung", "analytik",
            "datenauswertung", "datenexport", "datenbereinigung", "datenvisualisierung",
            "kennzahlen", "statistische analyse", "leistungsanalyse", "trendanalyse", "export",
            "konsolidierung", "visualisierung", "berichte", "auswertung",
        ),
        subtasks=(
            Subtask(
                "data-collection",
                "Daten aus verschiedenen Quellen sammeln",
                ["Database", "API", "Excel", "CSV", "Web Scraping", "ETL Tools"],
                0.20,
                0.90,
                ["Datenzugriff verweigert", "API-Limits", "Datenqualität"],
                ["Verfügbare Datenquellen", "API-Zugang", "Konsistente Formate"],
            ),
            Subtask(
                "data-preparation",
                "Daten bereinigen und für Analyse vorbereiten",
                ["Excel", "Python", "R", "Data Cleaning Tools", "ETL"],
                0.25,
                0.85,
                ["Datenverlust", "Falsche Bereinigung", "Schema-Drift"],
                ["Datenqualitätsstandards", "Bereinigungsregeln definiert"],
            ),
            Subtask(
                "data-analysis",
                "Analyse durchführen und Insights generieren",
                ["Python", "R", "SQL", "BI Tools", "Analytics Platform"],
                0.30,
                0.70,
                ["Falsche Interpretation", "Statistische Fehler", "Voreingenommenheit"],
                ["Klare Analyseziele", "Statistische Kenntnisse"],
            ),
            Subtask(
                "data-presentation",
                "Ergebnisse visualisieren und präsentieren",
                ["Power BI", "Tableau", "Excel", "Presentation Tools", "Dashboard"],
                0.25,
                0.75,
                ["Falsche Darstellung", "Unverständliche Visualisierung"],
                ["Design-Vorlagen", "Präsentationsstandards"],
            ),
        ),
    ),
    "marketing": TaskPattern(
        keywords=(
            "marketing", "campaign", "advertising", "social media", "content marketing",
            "email marketing", "digital marketing", "seo", "sem", "ppc", "branding",
            "lead generation", "conversion", "marketing automation", "customer acquisition",
            "market research", "competitive analysis", "kampagne", "werbung",
            "digitales marketing", "konversion", "kundengewinnung", "marktforschung",
            "wettbewerbsanalyse", "content", "email",
        ),
        subtasks=(
            Subtask(
                "campaign-planning",
                "Marketing-Kampagne planen und strategieren",
                ["Marketing Platform", "Analytics", "Research Tools", "Planning Tools"],
                0.20,
                0.60,
                ["Falsche Zielgruppe", "Unrealistische Ziele", "Budget-Überschreitung"],
                ["Marktkenntnis", "Budget verfügbar", "Klare Ziele"],
            ),
            Subtask(
                "content-creation",
                "Marketing-Content erstellen und optimieren",
                ["Design Tools", "AI Tools", "Content Management", "SEO Tools"],
                0.35,
                0.80,
                ["Qualitätsverlust", "SEO-Fehler", "Brand-Violations"],
                ["Brand-Guidelines", "Content-Strategie", "Kreative Tools"],
            ),
            Subtask(
                "campaign-execution",
                "Kampagne ausführen und überwachen",
                ["Marketing Automation", "Analytics", "Social Media", "Email Platform"],
                0.25,
                0.85,
                ["Technische Fehler", "Performance-Probleme", "Timing-Fehler"],
                ["Automatisierungstools", "Performance-Monitoring"],
            ),
            Subtask(
                "performance-analysis",
                "Kampagnen-Performance analysieren und optimieren",
                ["Analytics", "Reporting Tools", "A/B Testing", "Optimization Tools"],
                0.20,
                0.90,
                ["Falsche Interpretation", "Verpasste Optimierungen"],
                ["Performance-Daten", "Optimierungsregeln"],
            ),
        ),
    ),
    "sales": TaskPattern(
        keywords=(
            "sales", "lead generation", "prospecting", "pipeline", "deal", "opportunity", "quota",
            "sales process", "customer acquisition", "account management", "sales forecasting",
            "sales reporting", "commission", "sales training", "sales enablement", "vertrieb",
            "akquise", "quote", "vertriebsprozess", "kundengewinnung", "vertriebsprognose",
            "vertriebsberichte", "provision", "vertriebstraining", "prognose",
        ),
        subtasks=(
            Subtask(
                "lead-generation",
                "Leads generieren und qualifizieren",
                ["CRM", "Lead Generation Tools", "LinkedIn", "Email", "Phone"],
                0.25,
                0.80,
                ["Schlechte Lead-Qualität", "Spam-Filter", "Datenschutz"],
                ["Lead-Quellen", "Qualifizierungskriterien", "Datenschutz-Compliance"],
            ),
            Subtask(
                "prospecting",
                "Prospekte recherchieren und kontaktieren",
                ["CRM", "Research Tools", "LinkedIn", "Email", "Phone", "Social Media"],
                0.30,
                0.70,
                ["Falsche Kontaktdaten", "Keine Antwort", "Spam-Filter"],
                ["Prospekt-Datenbank", "Kontaktstrategie", "Follow-up-Prozess"],
            ),
            Subtask(
                "deal-management",
                "Deals verwalten und durch Pipeline führen",
                ["CRM", "Pipeline Tools", "Proposal Tools", "Contract Management"],
                0.25,
                0.75,
                ["Deal-Stagnation", "Verlorene Deals", "Falsche Prognosen"],
                ["Pipeline-Prozess", "Qualifizierungskriterien", "Follow-up-System"],
            ),
            Subtask(
                "sales-reporting",
                "Vertriebsberichte erstellen und analysieren",
                ["CRM", "Analytics", "Reporting Tools", "Excel", "BI Tools"],
                0.20,
                0.85,
                ["Falsche Daten", "Verzögerte Berichte", "Fehlende Insights"],
                ["Datenqualität", "Reporting-Standards", "Analytics-Tools"],
            ),
        ),
    ),
    "finance-accounting": TaskPattern(
        keywords=(
            "finance", "accounting", "invoice", "payment", "billing", "expense", "bookkeeping",
            "financial reporting", "budget", "forecasting", "reconciliation", "audit", "tax",
            "compliance", "financial analysis", "cost analysis", "finanzen", "buchhaltung",
            "rechnung", "zahlung", "abrechnung", "ausgaben", "buchführung", "finanzberichte",
            "prognose", "abstimmung", "prüfung", "steuern", "finanzanalyse", "kostenanalyse",
            "kontier", "verbuch", "datev",
        ),
        subtasks=(
            Subtask(
                "invoice-processing",
                "Rechnungen verarbeiten und buchen",
                ["Accounting Software", "OCR", "Email", "Invoice Management"],
                0.30,
                0.85,
                ["OCR-Fehler", "Falsche Buchung", "Doppelte Rechnungen"],
                ["Digitale Rechnungen", "Buchungsregeln", "OCR-System"],
            ),
            Subtask(
                "payment-tracking",
                "Zahlungen verfolgen und abstimmen",
                ["Banking System", "Accounting", "CRM", "Payment Platform"],
                0.25,
                0.80,
                ["Verzögerte Zahlungen", "Fehlende Zahlungen", "Abstimmungsfehler"],
                ["Bank-API-Zugang", "Zahlungsprozess", "Abstimmungsregeln"],
            ),
            Subtask(
                "expense-management",
                "Ausgaben verwalten und genehmigen",
                ["Expense Tool", "Receipt Scanner", "Approval System", "Accounting"],
                0.25,
                0.90,
                ["Fehlende Belege", "Genehmigungsverzögerungen", "Policy-Violations"],
                ["Expense-Policy", "Digitale Belege", "Genehmigungsprozess"],
            ),
            Subtask(
                "financial-reporting",
                "Finanzberichte erstellen und analysieren",
                ["Accounting", "BI Tools", "Excel", "Reporting Platform"],
                0.20,
                0.75,
                ["Falsche Daten", "Verzögerte Berichte", "Compliance-Fehler"],
                ["Buchungsqualität", "Reporting-Standards", "Compliance-Regeln"],
            ),
        ),
    ),
    "hr-recruitment": TaskPattern(
        keywords=(
            "recruitment", "hiring", "talent acquisition", "onboarding", "employee", "candidate",
            "interview", "job posting", "resume", "application", "screening",
            "performance management", "training", "compensation", "benefits", "recruiting",
            "einstellung", "mitarbeiter", "kandidat", "stellenanzeige", "lebenslauf",
            "bewerbung", "leistungsmanagement", "vergütung",
        ),
        subtasks=(
            Subtask(
                "job-posting",
                "Stellenanzeigen erstellen und veröffentlichen",
                ["ATS", "Job Boards", "Social Media", "Company Website"],
                0.20,
                0.80,
                ["Falsche Anzeigen", "Schlechte Reichweite", "Diskriminierung"],
                ["Job-Description", "Budget für Job Boards", "Compliance-Regeln"],
            ),
            Subtask(
                "candidate-screening",
                "Bewerber vorsortieren und qualifizieren",
                ["ATS", "AI Screening", "Email", "Assessment Tools"],
                0.30,
                0.85,
                ["Gute Kandidaten übersehen", "Bias in Screening", "Schlechte Kandidaten"],
                ["Klare Kriterien", "Screening-Tools", "Bias-Training"],
            ),
            Subtask(
                "interview-process",
                "Interviews koordinieren und durchführen",
                ["Calendar", "Video Platform", "Interview Tools", "Feedback System"],
                0.25,
                0.90,
                ["Termin-Konflikte", "Technische Probleme", "Schlechte Interviews"],
                ["Interviewer verfügbar", "Technische Ausstattung", "Interview-Guide"],
            ),
            Subtask(
                "onboarding",
                "Onboarding-Prozess durchführen",
                ["HR System", "Training Platform", "Documentation", "Communication Tools"],
                0.25,
                0.75,
                ["Unvollständiges Onboarding", "Überforderung", "Frühe Kündigung"],
                ["Onboarding-Plan", "Training-Material", "Mentor-System"],
            ),
        ),
    ),
    "operations": TaskPattern(
        keywords=(
            "operations", "process", "workflow", "efficiency", "optimization", "automation",
            "supply chain", "inventory", "logistics", "quality control", "production",
            "maintenance", "scheduling", "resource management", "performance monitoring",
            "operationen", "prozess", "effizienz", "optimierung", "automatisierung",
            "lieferkette", "inventar", "logistik", "qualitätskontrolle", "produktion", "wartung",
            "planung", "ressourcenmanagement", "leistungsüberwachung",
        ),
        subtasks=(
            Subtask(
                "process-analysis",
                "Prozesse analysieren und optimieren",
                ["Process Mining", "Analytics", "Documentation", "Mapping Tools"],
                0.25,
                0.70,
                ["Unvollständige Analyse", "Falsche Optimierung", "Widerstand gegen Änderungen"],
                ["Prozess-Dokumentation", "Analytics-Tools", "Change Management"],
            ),
            Subtask(
                "workflow-automation",
                "Workflows automatisieren und implementieren",
                ["RPA", "Workflow Tools", "Integration Platform", "Testing Tools"],
                0.30,
                0.90,
                ["Technische Fehler", "Prozess-Ausfälle", "Schlechte Performance"],
                ["Stabile Prozesse", "Technische Expertise", "Testing-Umgebung"],
            ),
            Subtask(
                "performance-monitoring",
                "Performance überwachen und optimieren",
                ["Monitoring Tools", "Analytics", "Dashboard", "Alert System"],
                0.20,
                0.85,
                ["Späte Erkennung", "Falsche Alerts", "Performance-Probleme"],
                ["Monitoring-Setup", "Performance-Baseline", "Optimierungsregeln"],
            ),
            Subtask(
                "continuous-improvement",
                "Kontinuierliche Verbesserung implementieren",
                ["Feedback System", "Analytics", "Collaboration Tools", "Documentation"],
                0.25,
                0.75,
                ["Fehlende Verbesserungen", "Widerstand", "Ressourcenmangel"],
                ["Improvement-Kultur", "Feedback-Prozess", "Ressourcen"],
            ),
        ),
    ),
}

UNIVERSAL_SUBTASKS: tuple[Subtask, ...] = (
    Subtask(
        "planning",
        "Aufgabe planen und strukturieren",
        ["Planning Tools", "Documentation", "Requirements"],
        0.20,
        0.60,
        ["Unvollständige Planung"],
        ["Klare Anforderungen"],
    ),
    Subtask(
        "execution",
        "Aufgabe ausführen",
        ["Execution Tools", "Workflow", "Automation"],
        0.40,
        0.80,
        ["Ausführungsfehler"],
        ["Verfügbare Tools"],
    ),
    Subtask(
        "coordination",
        "Koordination und Kommunikation",
        ["Communication Tools", "Collaboration", "Calendar"],
        0.25,
        0.75,
        ["Kommunikationslücken"],
        ["Team-Zugang"],
    ),
    Subtask(
        "evaluation",
        "Ergebnisse evaluieren und dokumentieren",
        ["Analytics", "Documentation", "Reporting"],
        0.15,
        0.85,
        ["Fehlende Dokumentation"],
        ["Performance-Daten"],
    ),
)

# Lighter keyword sets used only for domain tagging
DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "customer-service": (
        "customer", "support", "beratung", "telefon", "phone", "call", "hotline", "kundenservice",
    ),
    "data-analysis": (
        "data", "analysis", "report", "analytics", "daten", "analyse", "export", "konsolidierung",
    ),
    "marketing": ("marketing", "campaign", "werbung", "social media", "content", "seo", "sem"),
    "sales": ("sales", "vertrieb", "akquise", "pipeline", "deal", "kundengewinnung"),
    "finance-accounting": (
        "finance", "accounting", "buchhaltung", "rechnung", "zahlung", "ausgaben", "datev",
    ),
    "hr-recruitment": ("recruitment", "recruiting", "einstellung", "kandidat", "interview"),
    "operations": ("operations", "prozess", "workflow", "effizienz", "optimierung", "automatisierung"),
}


def _best_match(text: str, table: dict[str, tuple[str, ...]]) -> str:
    lowered = text.lower()
    best, best_hits = GENERAL_DOMAIN, 0
    for name, keywords in table.items():
        hits = sum(1 for keyword in keywords if keyword in lowered)
        if hits > best_hits:
            best, best_hits = name, hits
    return best


def match_pattern(text: str) -> str:
    """Name of the task pattern with the most keyword hits, or 'general'."""
    return _best_match(text, {name: pattern.keywords for name, pattern in TASK_PATTERNS.items()})


def get_task_domain(text: str) -> str:
    """Domain tag for a task text, used to boost TF-IDF queries."""
    return _best_match(text, DOMAIN_KEYWORDS)


def personalize_systems(default_systems: list[str], task_systems: list[str]) -> list[str]:
    """Task systems first, then template systems not already present."""
    merged = list(dict.fromkeys(task_systems))
    merged.extend(system for system in default_systems if system not in merged)
    return merged


def decompose_task(text: str, systems: list[str] | None = None) -> list[Subtask]:
    """Break a task into four template subtasks for its best matching domain."""
    systems = systems or []
    pattern_name = match_pattern(text or "")
    pattern = TASK_PATTERNS.get(pattern_name)
    templates = pattern.subtasks if pattern is not None else UNIVERSAL_SUBTASKS
    return [
        replace(subtask, systems=personalize_systems(subtask.systems, systems))
        for subtask in templates
    ]
