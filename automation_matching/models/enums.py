"""Enums shared by the analysis, catalog and matching layers."""

import enum


class TaskSourceEnum(str, enum.Enum):
    """Where an extracted task line came from."""

    BULLET = "bullet"
    VERBLINE = "verbline"  # Verb-led line, only used when bullets are scarce


class AutomationLabelEnum(str, enum.Enum):
    """Automation verdict for a scored task."""

    AUTOMATABLE = "Automatable"
    PARTIALLY_AUTOMATABLE = "PartiallyAutomatable"
    HUMAN = "Human"


class TaskComplexityEnum(str, enum.Enum):
    """Complexity of a job task as judged by the scorer."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AutomationTrendEnum(str, enum.Enum):
    """Expected direction of automation potential for a task."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class ArtifactComplexityEnum(str, enum.Enum):
    """Complexity tier of a catalog artifact."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TriggerTypeEnum(str, enum.Enum):
    """How a catalog workflow is started."""

    WEBHOOK = "Webhook"
    SCHEDULED = "Scheduled"
    MANUAL = "Manual"
    COMPLEX = "Complex"


class ArtifactKindEnum(str, enum.Enum):
    """Kind of catalog artifact."""

    WORKFLOW = "workflow"
    AGENT = "agent"


class MatchStatusEnum(str, enum.Enum):
    """Provenance of a match result."""

    VERIFIED = "verified"  # Trusted catalog source
    GENERATED = "generated"  # Produced by the AI blueprint path
    FALLBACK = "fallback"  # Synthesized placeholder


class StepCategoryEnum(str, enum.Enum):
    """Phase of an implementation step."""

    SETUP = "setup"
    CONFIGURATION = "configuration"
    TESTING = "testing"
    DEPLOYMENT = "deployment"
    MONITORING = "monitoring"
    MAINTENANCE = "maintenance"


class DifficultyLevelEnum(str, enum.Enum):
    """Difficulty of an implementation step."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# Adjacent tiers earn partial credit in the matcher
COMPLEXITY_ORDER = [
    ArtifactComplexityEnum.LOW,
    ArtifactComplexityEnum.MEDIUM,
    ArtifactComplexityEnum.HIGH,
]


def complexity_distance(a: ArtifactComplexityEnum, b: ArtifactComplexityEnum) -> int:
    """Number of tiers between two complexity values (0, 1 or 2)."""
    return abs(COMPLEXITY_ORDER.index(a) - COMPLEXITY_ORDER.index(b))
