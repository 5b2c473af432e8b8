"""Catalog search: attribute filters with pagination, plus TF-IDF ranking.

`search_artifacts` backs `CatalogCache.search`. `rank_artifacts` orders
catalog artifacts by TF-IDF similarity to free text; the recommendation
service can use it to narrow the candidates of each task before matching.
"""

from dataclasses import dataclass, field

from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from automation_matching.catalog.normalize import (
    ALL_SOURCES,
    CatalogArtifact,
    normalize_source_key,
)

DEFAULT_PAGE_SIZE = 20
DEFAULT_SIMILARITY_THRESHOLD = 0.3

INTEGRATION_SYNONYMS: dict[str, tuple[str, ...]] = {
    "http request": ("http", "http-request", "request", "api", "fetch"),
    "webhook": ("webhook", "hook", "callback"),
    "gmail": ("gmail", "google mail", "email", "mail"),
    "google sheets": ("google sheets", "sheets", "spreadsheet"),
    "google drive": ("google drive", "drive"),
    "openai": ("openai", "gpt", "chatgpt", "ai"),
    "slack": ("slack",),
}

DOMAIN_BOOSTS: dict[str, tuple[str, ...]] = {
    "customer-service": ("customer", "support", "service", "help", "assist"),
    "content-creation": ("content", "create", "generate", "publish", "media"),
    "seo-marketing": ("seo", "marketing", "optimize", "rank", "traffic"),
    "marketing": ("seo", "marketing", "optimize", "rank", "traffic"),
    "data-analysis": ("data", "analyze", "report", "insights", "metrics"),
    "crm-sales": ("crm", "sales", "lead", "customer", "pipeline"),
    "sales": ("crm", "sales", "lead", "customer", "pipeline"),
    "finance": ("finance", "invoice", "payment", "billing", "accounting"),
    "finance-accounting": ("finance", "invoice", "payment", "billing", "accounting"),
    "hr-recruitment": ("hr", "recruit", "hiring", "employee", "candidate"),
    "project-management": ("project", "manage", "task", "plan", "timeline"),
    "operations": ("project", "manage", "task", "plan", "timeline"),
    "ecommerce": ("ecommerce", "shop", "store", "product", "order"),
    "general": ("automation", "workflow", "integrate", "connect", "sync"),
}


@dataclass
class SearchParams:
    q: str | None = None
    trigger: str | None = None
    complexity: str | None = None
    category: str | None = None
    active: bool | None = None
    source: str | None = None
    integrations: list[str] = field(default_factory=list)
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0


@dataclass
class SearchPage:
    artifacts: list[CatalogArtifact]
    total: int
    has_more: bool


@dataclass(frozen=True)
class SemanticHit:
    id: str
    similarity: float
    text: str


def expand_integrations(names: list[str]) -> set[str]:
    """Add the canonical name and every synonym for each known alias."""
    expanded: set[str] = set()
    for name in (n.lower().strip() for n in names):
        expanded.add(name)
        for canonical, synonyms in INTEGRATION_SYNONYMS.items():
            if name == canonical or name in synonyms:
                expanded.add(canonical)
                expanded.update(synonyms)
    return expanded


def _matches_query(artifact: CatalogArtifact, query: str) -> bool:
    return (
        query in artifact.title.lower()
        or query in artifact.summary.lower()
        or any(query in integration.lower() for integration in artifact.integrations)
        or any(query in tag.lower() for tag in artifact.tags)
    )


def matches_source(artifact: CatalogArtifact, source: str) -> bool:
    """Source filter with per-provider heuristics for records from mixed feeds."""
    target = normalize_source_key(source)
    if target == ALL_SOURCES:
        return True
    artifact_key = normalize_source_key(artifact.source)
    if artifact_key == target:
        return True

    filename = (artifact.filename or "").lower()
    title = artifact.title.lower()
    raw_source = artifact.source.lower()

    if target == "n8n.io":
        return (
            filename.startswith("n8n-")
            or "n8n_official" in filename
            or "n8n" in raw_source
            or "n8n official" in title
        )
    if target == "github":
        return (not filename.startswith("n8n-") and "workflow" in filename) or "github" in raw_source
    if target == "awesome-n8n-templates":
        return "awesome-n8n" in raw_source or "community_" in filename or "community" in title
    if target == "ai-enhanced":
        return artifact.category == "ai_ml" or any(
            word in integration.lower()
            for integration in artifact.integrations
            for word in ("openai", "ai", "llm")
        )
    needle = source.lower()
    return needle in filename or needle in title


def filter_artifacts(artifacts: list[CatalogArtifact], params: SearchParams) -> list[CatalogArtifact]:
    """Apply every set filter in `params`, preserving input order."""
    filtered = list(artifacts)

    if params.q:
        query = params.q.lower().strip()
        filtered = [a for a in filtered if _matches_query(a, query)]

    if params.integrations:
        wanted = expand_integrations(params.integrations)
        filtered = [a for a in filtered if wanted & expand_integrations(a.integrations)]

    if params.trigger and params.trigger.lower() != "all":
        trigger = params.trigger.lower()
        filtered = [a for a in filtered if a.trigger_type and a.trigger_type.value.lower() == trigger]

    if params.complexity:
        complexity = params.complexity.lower()
        filtered = [a for a in filtered if a.complexity.value.lower() == complexity]

    if params.category:
        category = params.category.lower()
        filtered = [a for a in filtered if a.category.lower() == category]

    if params.active is not None:
        filtered = [a for a in filtered if a.active == params.active]

    if params.source:
        filtered = [a for a in filtered if matches_source(a, params.source)]

    return filtered


def paginate(artifacts: list[CatalogArtifact], limit: int, offset: int) -> SearchPage:
    limit = limit if limit and limit > 0 else DEFAULT_PAGE_SIZE
    offset = max(0, offset or 0)
    total = len(artifacts)
    return SearchPage(
        artifacts=artifacts[offset : offset + limit],
        total=total,
        has_more=offset + limit < total,
    )


def search_artifacts(artifacts: list[CatalogArtifact], params: SearchParams) -> SearchPage:
    return paginate(filter_artifacts(artifacts, params), params.limit, params.offset)


def artifact_search_text(artifact: CatalogArtifact) -> str:
    return " ".join([artifact.title, artifact.summary, *artifact.tags, *artifact.integrations])


def semantic_search(
    query: str,
    documents: list[tuple[str, str]],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    domain: str | None = None,
) -> list[SemanticHit]:
    """Rank (id, text) documents by TF-IDF cosine similarity to a query.

    Args:
        query: Free-text query
        documents: (id, text) pairs
        threshold: Minimum similarity to keep a hit
        domain: Optional domain whose boost terms are appended to the query

    Returns:
        Hits with similarity >= threshold, most similar first
    """
    if domain:
        query = " ".join([query, *DOMAIN_BOOSTS.get(domain, ())])
    if not query.strip() or not documents:
        return []

    texts = [text for _, text in documents]
    vectorizer = TfidfVectorizer(lowercase=True, sublinear_tf=True)
    try:
        matrix = vectorizer.fit_transform([query, *texts])
    except ValueError:
        # Empty vocabulary: nothing but stop words or punctuation
        return []

    similarities = cosine_similarity(matrix[0:1], matrix[1:])[0]
    hits = [
        SemanticHit(id=doc_id, similarity=float(score), text=text)
        for (doc_id, text), score in zip(documents, similarities)
        if score >= threshold
    ]
    return sorted(hits, key=lambda hit: hit.similarity, reverse=True)


def rank_artifacts(
    query: str,
    artifacts: list[CatalogArtifact],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    domain: str | None = None,
) -> list[CatalogArtifact]:
    """Artifacts similar to the query, most similar first; ties keep input order."""
    # Positions as document ids, since (source, id) is the identity, not id alone
    documents = [(str(index), artifact_search_text(artifact)) for index, artifact in enumerate(artifacts)]
    return [artifacts[int(hit.id)] for hit in semantic_search(query, documents, threshold, domain)]
