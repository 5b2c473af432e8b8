"""Normalization of provider records into the canonical CatalogArtifact.

Providers disagree on field names (`name` vs `title`, `description` vs
`summary`, nested `user` vs flat `authorName`, ...). Everything is coerced
here, once, with deterministic defaults, so the cache, search and matcher
only ever see one shape.
"""

import hashlib
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from automation_matching.models.enums import (
    ArtifactComplexityEnum,
    ArtifactKindEnum,
    TriggerTypeEnum,
)

ALL_SOURCES = "all"
N8N_AVATAR_BASE = "https://api.n8n.io"
DEFAULT_REPO_LINK = "https://github.com/Zie619/n8n-workflows/blob/main/workflows/{filename}"

# Order defines union precedence: first seen wins
KNOWN_SOURCES = ("github", "awesome-n8n-templates", "n8n.io", "ai-enhanced")

UPPERCASE_WORDS = {"ai", "llm", "api", "http", "https", "sql", "crm", "erp", "saas", "n8n", "gpt"}

INTEGRATION_ALIASES: dict[str, str] = {
    "telegram": "Telegram",
    "discord": "Discord",
    "slack": "Slack",
    "openai": "OpenAI",
    "google": "Google",
    "sheets": "Google Sheets",
    "drive": "Google Drive",
    "gmail": "Gmail",
    "github": "GitHub",
    "webhook": "Webhook",
    "http": "HTTP Request",
    "schedule": "Schedule Trigger",
    "manual": "Manual Trigger",
}

CATEGORY_MAP: dict[str, str] = {
    "messaging": "messaging",
    "communication": "messaging",
    "ai": "ai_ml",
    "automation": "development",
    "data": "database",
    "storage": "cloud_storage",
    "social": "social_media",
    "marketing": "social_media",
    "crm": "social_media",
    "analytics": "analytics",
    "forms": "forms",
    "calendar": "calendar_tasks",
    "project": "project_management",
}

CATEGORY_LABELS: dict[str, str] = {
    "general": "General",
    "business": "Business",
    "hr": "HR & Recruitment",
    "finance": "Finance & Accounting",
    "marketing": "Marketing & Sales",
    "customer support": "Customer Support",
    "data analysis": "Data Analysis",
    "content creation": "Content Creation",
    "automation": "Automation",
    "integration": "Integration",
    "ai analyzed": "AI Analyzed",
}

TAG_KEYWORDS = (
    "automation", "webhook", "scheduled", "manual", "ai", "data", "notification",
    "integration", "api", "workflow", "process", "trigger", "export", "import",
)

LICENSE_MAP: dict[str, str] = {
    "mit": "MIT",
    "apache-2.0": "Apache-2.0",
    "apache 2.0": "Apache-2.0",
    "apache license": "Apache-2.0",
    "gpl-3.0": "GPL-3.0",
    "gpl 3.0": "GPL-3.0",
    "gpl v3": "GPL-3.0",
    "gpl-2.0": "GPL-2.0",
    "gpl 2.0": "GPL-2.0",
    "gpl v2": "GPL-2.0",
    "bsd-3-clause": "BSD-3-Clause",
    "bsd 3-clause": "BSD-3-Clause",
    "bsd-2-clause": "BSD-2-Clause",
    "bsd 2-clause": "BSD-2-Clause",
    "mpl-2.0": "MPL-2.0",
    "mpl 2.0": "MPL-2.0",
    "epl-1.0": "EPL-1.0",
    "epl 1.0": "EPL-1.0",
    "cc-by": "CC-BY",
    "cc by": "CC-BY",
    "unlicense": "Unlicense",
    "public domain": "Unlicense",
    "unknown": "Unknown",
}

VALID_CAPABILITIES = (
    "web_search", "data_analysis", "file_io", "email_send", "api_integration",
    "text_generation", "image_processing", "code_generation", "document_processing",
    "database_query", "workflow_automation", "scheduling", "monitoring", "reporting",
)


# ═══════════════════════════════════════════════════════════════════
# CANONICAL RECORD
# ═══════════════════════════════════════════════════════════════════


@dataclass
class ArtifactAuthor:
    name: str | None = None
    username: str | None = None
    avatar: str | None = None
    verified: bool = False
    email: str | None = None


@dataclass
class CatalogArtifact:
    """A workflow or agent as stored in catalog snapshots.

    Identity is (source, id). Workflow-only and agent-only fields are left
    at their defaults for the other kind.
    """

    id: str
    source: str
    kind: ArtifactKindEnum
    title: str
    summary: str
    link: str
    category: str = "development"
    tags: list[str] = field(default_factory=list)
    integrations: list[str] = field(default_factory=list)
    complexity: ArtifactComplexityEnum = ArtifactComplexityEnum.MEDIUM
    license: str = "Unknown"
    author: ArtifactAuthor | None = None
    content_hash: str = ""
    analyzed_at: str = ""
    is_ai_generated: bool = False

    # Workflow fields
    trigger_type: TriggerTypeEnum | None = None
    filename: str | None = None
    node_count: int = 0
    active: bool = True

    # Agent fields
    capabilities: list[str] = field(default_factory=list)
    model: str | None = None
    provider: str | None = None
    pricing: str | None = None
    difficulty: str | None = None
    setup_time: str | None = None
    deployment: str | None = None
    requirements: list[str] = field(default_factory=list)
    use_cases: list[str] = field(default_factory=list)
    automation_potential: int | None = None
    likes: int = 0
    downloads: int = 0

    @property
    def identity(self) -> tuple[str, str]:
        return (self.source, self.id or self.filename or self.title)

    def to_dict(self) -> dict[str, Any]:
        """JSONB-ready dict with enum members flattened to their values."""
        data = asdict(self)
        data["kind"] = self.kind.value
        data["complexity"] = self.complexity.value
        data["trigger_type"] = self.trigger_type.value if self.trigger_type else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogArtifact":
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        values["kind"] = ArtifactKindEnum(values.get("kind") or ArtifactKindEnum.WORKFLOW.value)
        values["complexity"] = ArtifactComplexityEnum(
            values.get("complexity") or ArtifactComplexityEnum.MEDIUM.value
        )
        if values.get("trigger_type"):
            values["trigger_type"] = TriggerTypeEnum(values["trigger_type"])
        if isinstance(values.get("author"), dict):
            values["author"] = ArtifactAuthor(**values["author"])
        return cls(**values)


# ═══════════════════════════════════════════════════════════════════
# FIELD HELPERS
# ═══════════════════════════════════════════════════════════════════


def normalize_source_key(source: str | None) -> str:
    """Map display names and shard keys to a stable cache key."""
    if not source:
        return ALL_SOURCES
    lowered = source.lower().split("#", 1)[0]
    if "n8n.io" in lowered or "official" in lowered:
        return "n8n.io"
    if "github" in lowered or "community" in lowered:
        return "github"
    if "ai-enhanced" in lowered or "free templates" in lowered:
        return "ai-enhanced"
    if "awesome-n8n-templates" in lowered or "awesome n8n" in lowered:
        return "awesome-n8n-templates"
    return re.sub(r"\s+", "-", lowered)


def humanize_title(raw: str | None) -> str:
    """'slack_gpt-notify.json' -> 'Slack GPT Notify'."""
    if not raw:
        return "Untitled Workflow"
    cleaned = re.sub(r"\.json$", "", raw, flags=re.IGNORECASE)
    cleaned = re.sub(r"[_-]+", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if not cleaned:
        return "Untitled Workflow"
    words = []
    for word in cleaned.split(" "):
        lower = word.lower()
        if lower == "nn":
            words.append("n8n")
        elif lower in UPPERCASE_WORDS:
            words.append(lower.upper())
        else:
            words.append(lower[:1].upper() + lower[1:])
    return " ".join(words)


def determine_trigger_type(text: str) -> TriggerTypeEnum:
    lower = text.lower()
    if "webhook" in lower:
        return TriggerTypeEnum.WEBHOOK
    if "scheduled" in lower or "cron" in lower:
        return TriggerTypeEnum.SCHEDULED
    if "manual" in lower:
        return TriggerTypeEnum.MANUAL
    return TriggerTypeEnum.COMPLEX


def determine_complexity(text: str) -> ArtifactComplexityEnum:
    lower = text.lower()
    if "simple" in lower or "basic" in lower:
        return ArtifactComplexityEnum.LOW
    if "complex" in lower or "advanced" in lower:
        return ArtifactComplexityEnum.HIGH
    return ArtifactComplexityEnum.MEDIUM


def extract_integrations(filename: str) -> list[str]:
    lower = filename.lower()
    found = [name for alias, name in INTEGRATION_ALIASES.items() if alias in lower]
    return found or ["HTTP Request"]


def map_category(name: str) -> str:
    lower = name.lower()
    for key, category in CATEGORY_MAP.items():
        if key in lower:
            return category
    return "development"


def normalize_category_label(category: str) -> str:
    stripped = category.strip()
    return CATEGORY_LABELS.get(stripped.lower(), stripped)


def generate_tags(filename: str) -> list[str]:
    lower = filename.lower()
    return [tag for tag in TAG_KEYWORDS if tag in lower] or ["automation"]


def normalize_license(license_name: Any) -> str:
    if not license_name or not isinstance(license_name, str):
        return "Unknown"
    stripped = license_name.strip()
    return LICENSE_MAP.get(stripped.lower(), stripped)


def normalize_capabilities(capabilities: Any) -> list[str]:
    """Keep only known capability tags, lowercased and deduplicated."""
    if not isinstance(capabilities, list):
        return []
    cleaned = (str(cap).strip().lower() for cap in capabilities)
    return list(dict.fromkeys(cap for cap in cleaned if cap in VALID_CAPABILITIES))


def normalize_string_list(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    cleaned = (str(value).strip() for value in values if value is not None)
    return list(dict.fromkeys(value for value in cleaned if value))


def normalize_difficulty(value: str) -> str:
    lower = value.strip().lower()
    if any(word in lower for word in ("beginner", "easy", "basic")):
        return "Beginner"
    if any(word in lower for word in ("advanced", "expert", "complex")):
        return "Advanced"
    return "Intermediate"


def normalize_setup_time(value: str) -> str:
    lower = value.strip().lower()
    if any(word in lower for word in ("quick", "fast", "5 min")):
        return "Quick"
    if any(word in lower for word in ("long", "slow", "30 min")):
        return "Long"
    return "Medium"


def normalize_deployment(value: str) -> str:
    lower = value.strip().lower()
    if "local" in lower or "on-premise" in lower:
        return "Local"
    if "hybrid" in lower or "mixed" in lower:
        return "Hybrid"
    return "Cloud"


def normalize_pricing(value: str) -> str:
    lower = value.strip().lower()
    if "freemium" in lower or "free tier" in lower:
        return "Freemium"
    if "free" in lower:
        return "Free"
    if "enterprise" in lower or "custom" in lower:
        return "Enterprise"
    return "Paid"


def _absolute_avatar(url: str | None) -> str | None:
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return f"{N8N_AVATAR_BASE}{url}"
    return url


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?d=identicon&s=64"


def _normalize_author(raw: dict[str, Any]) -> ArtifactAuthor | None:
    user = raw.get("user") if isinstance(raw.get("user"), dict) else {}
    nested = raw.get("author") if isinstance(raw.get("author"), dict) else {}
    flat_author = raw.get("author") if isinstance(raw.get("author"), str) else None

    name = raw.get("authorName") or flat_author or nested.get("name") or user.get("name") or user.get("username")
    username = raw.get("authorUsername") or nested.get("username") or user.get("username")
    email = raw.get("authorEmail") or nested.get("email") or user.get("email") or raw.get("email")
    avatar = _absolute_avatar(
        raw.get("authorAvatar")
        or raw.get("avatar")
        or nested.get("avatar")
        or user.get("avatar")
        or user.get("avatar_url")
        or user.get("avatarUrl")
        or user.get("image")
    )
    if not avatar:
        candidate = (email or username or "").strip().lower()
        if "@" in candidate:
            avatar = gravatar_url(candidate)
    verified = raw.get("authorVerified")
    if not isinstance(verified, bool):
        verified = user.get("verified") is True

    if not any((name, username, avatar, email)):
        return None
    return ArtifactAuthor(name=name, username=username, avatar=avatar, verified=verified, email=email)


def _stable_id(*parts: Any) -> str:
    joined = "|".join(str(part or "") for part in parts)
    return hashlib.sha1(joined.encode("utf-8")).hexdigest()[:16]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ═══════════════════════════════════════════════════════════════════
# NORMALIZERS
# ═══════════════════════════════════════════════════════════════════


def normalize_workflow(raw: dict[str, Any], source: str) -> CatalogArtifact:
    """Coerce one raw workflow record into a CatalogArtifact.

    Args:
        raw: Provider payload (any of the known shapes)
        source: Source key the record was fetched from; a record carrying
            its own `source` keeps it

    Returns:
        CatalogArtifact of kind workflow
    """
    source = str(raw.get("source") or source)
    filename_raw = str(raw.get("filename") or raw.get("name") or raw.get("id") or "workflow")
    filename = filename_raw if filename_raw.endswith(".json") else f"{filename_raw}.json"
    artifact_id = str(raw.get("id") or _stable_id(filename, raw.get("name"), source))
    title = humanize_title(str(raw.get("title") or raw.get("name") or filename))

    trigger_raw = str(raw.get("triggerType") or raw.get("trigger_type") or "")
    if trigger_raw in TriggerTypeEnum._value2member_map_:
        trigger_type = TriggerTypeEnum(trigger_raw)
    else:
        trigger_type = determine_trigger_type(f"{filename} {raw.get('name') or ''}")

    complexity_raw = str(raw.get("complexity") or "")
    if complexity_raw in ArtifactComplexityEnum._value2member_map_:
        complexity = ArtifactComplexityEnum(complexity_raw)
    else:
        complexity = determine_complexity(filename)

    integrations = normalize_string_list(raw.get("integrations")) or extract_integrations(filename)
    summary = str(
        raw.get("summary")
        or raw.get("description")
        or f"{title} workflow using {', '.join(integrations)} for automation and data processing"
    )
    category = str(raw.get("category") or map_category(integrations[0] if integrations else "development"))
    tags = normalize_string_list(raw.get("tags")) or generate_tags(filename)
    active = raw.get("active") if isinstance(raw.get("active"), bool) else True
    node_count = raw.get("nodeCount", raw.get("node_count"))

    content_hash = str(
        raw.get("fileHash")
        or raw.get("content_hash")
        or _stable_id(artifact_id, source, title, summary, ",".join(integrations))
    )

    return CatalogArtifact(
        id=artifact_id,
        source=source,
        kind=ArtifactKindEnum.WORKFLOW,
        title=title,
        summary=summary,
        link=str(raw.get("link") or DEFAULT_REPO_LINK.format(filename=filename)),
        category=category,
        tags=tags,
        integrations=integrations,
        complexity=complexity,
        license=normalize_license(raw.get("license")),
        author=_normalize_author(raw),
        content_hash=content_hash,
        analyzed_at=str(raw.get("analyzedAt") or raw.get("analyzed_at") or _now_iso()),
        is_ai_generated=bool(raw.get("isAIGenerated") or raw.get("is_ai_generated")),
        trigger_type=trigger_type,
        filename=filename,
        node_count=int(node_count) if isinstance(node_count, (int, float)) else 0,
        active=active,
    )


def normalize_agent(raw: dict[str, Any], source: str) -> CatalogArtifact:
    """Coerce one raw agent record into a CatalogArtifact of kind agent."""
    source = str(raw.get("source") or source)
    title = str(raw.get("title") or raw.get("name") or "")
    artifact_id = str(raw.get("id") or _stable_id(title, source))
    title = title or f"Agent {artifact_id}"
    summary = str(raw.get("summary") or raw.get("description") or "AI agent for automation tasks")

    potential = raw.get("automationPotential", raw.get("automation_potential"))
    automation_potential = max(0, min(100, int(potential))) if isinstance(potential, (int, float)) else 70
    likes = raw.get("likes")
    downloads = raw.get("downloads")

    return CatalogArtifact(
        id=artifact_id,
        source=source,
        kind=ArtifactKindEnum.AGENT,
        title=title,
        summary=summary,
        link=str(raw.get("link") or "#"),
        category=normalize_category_label(str(raw.get("category") or "General Business")),
        tags=normalize_string_list(raw.get("tags")),
        integrations=normalize_string_list(raw.get("integrations")),
        complexity=determine_complexity(str(raw.get("complexity") or raw.get("difficulty") or "")),
        license=normalize_license(raw.get("license")),
        author=_normalize_author(raw),
        content_hash=str(raw.get("content_hash") or _stable_id(artifact_id, source, title, summary)),
        analyzed_at=str(raw.get("analyzedAt") or raw.get("lastModified") or _now_iso()),
        is_ai_generated=bool(raw.get("isAIGenerated") or raw.get("is_ai_generated")),
        capabilities=normalize_capabilities(raw.get("capabilities")),
        model=str(raw.get("model") or "Unknown"),
        provider=str(raw.get("provider") or "Unknown"),
        pricing=normalize_pricing(str(raw["pricing"])) if raw.get("pricing") else "Free",
        difficulty=normalize_difficulty(str(raw["difficulty"])) if raw.get("difficulty") else "Beginner",
        setup_time=normalize_setup_time(str(raw["setupTime"])) if raw.get("setupTime") else "Quick",
        deployment=normalize_deployment(str(raw["deployment"])) if raw.get("deployment") else "Cloud",
        requirements=normalize_string_list(raw.get("requirements")),
        use_cases=normalize_string_list(raw.get("useCases") or raw.get("use_cases")),
        automation_potential=automation_potential,
        likes=max(0, int(likes)) if isinstance(likes, (int, float)) else 0,
        downloads=max(0, int(downloads)) if isinstance(downloads, (int, float)) else 0,
    )


def normalize_record(raw: dict[str, Any], source: str) -> CatalogArtifact:
    """Dispatch on shape: agent records carry a model/provider/capabilities trio."""
    if raw.get("kind") == ArtifactKindEnum.AGENT.value or (
        "model" in raw and "provider" in raw and "capabilities" in raw
    ):
        return normalize_agent(raw, source)
    return normalize_workflow(raw, source)


def compute_stats(artifacts: list[CatalogArtifact]) -> dict[str, Any]:
    """Totals, trigger distribution, node count and unique integration count."""
    triggers = {trigger.value: 0 for trigger in TriggerTypeEnum}
    integrations: set[str] = set()
    active = 0
    total_nodes = 0
    for artifact in artifacts:
        if artifact.active:
            active += 1
        total_nodes += artifact.node_count or 0
        integrations.update(artifact.integrations)
        if artifact.trigger_type is not None:
            triggers[artifact.trigger_type.value] += 1
    return {
        "total": len(artifacts),
        "active": active,
        "inactive": len(artifacts) - active,
        "triggers": triggers,
        "totalNodes": total_nodes,
        "uniqueIntegrations": len(integrations),
    }
