"""SQLAlchemy models and shared enums for the automation matching database."""

from automation_matching.models.base import Base
from automation_matching.models.catalog import CatalogSnapshot
from automation_matching.models.enums import (
    ArtifactComplexityEnum,
    ArtifactKindEnum,
    AutomationLabelEnum,
    AutomationTrendEnum,
    DifficultyLevelEnum,
    MatchStatusEnum,
    StepCategoryEnum,
    TaskComplexityEnum,
    TaskSourceEnum,
    TriggerTypeEnum,
)
from automation_matching.models.llm_costs import LLMCost

__all__ = [
    # Base
    "Base",
    # Enums
    "TaskSourceEnum",
    "AutomationLabelEnum",
    "TaskComplexityEnum",
    "AutomationTrendEnum",
    "ArtifactComplexityEnum",
    "ArtifactKindEnum",
    "TriggerTypeEnum",
    "MatchStatusEnum",
    "StepCategoryEnum",
    "DifficultyLevelEnum",
    # Tables
    "CatalogSnapshot",
    "LLMCost",
]
