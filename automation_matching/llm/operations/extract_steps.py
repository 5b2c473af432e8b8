"""Implementation step extraction LLM operation.

Asks the model for 3-5 ordered implementation steps for a workflow or agent
solution. The response is validated field by field. Anything unusable
(bad JSON, too few steps, HTTP failure) yields the fixed fallback steps for
the solution type, flagged with used_fallback.

Bump PROMPT_VERSION when changing the prompt to trigger asset staleness.
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import httpx

from automation_matching.models.enums import DifficultyLevelEnum, StepCategoryEnum

if TYPE_CHECKING:
    from automation_matching.resources.openrouter import OpenRouterResource

logger = logging.getLogger(__name__)

# Bump this version when the prompt changes
# Format: MAJOR.MINOR.PATCH
PROMPT_VERSION = "1.1.0"

DEFAULT_MODEL = "openai/gpt-4o-mini"

MAX_STEPS = 5
MIN_STEPS = 3
DEFAULT_CONFIDENCE = 0.7

SYSTEM_PROMPT = """You are an expert technical implementation specialist. Your task is to extract clear, actionable implementation steps from solution descriptions.

Guidelines:
1. Extract 3-5 steps maximum, focusing on the most important implementation tasks
2. Each step should be specific and actionable
3. Order steps logically from initial setup to final deployment/monitoring
4. Include realistic time estimates and difficulty levels
5. Mention specific tools, prerequisites, and requirements
6. Use appropriate categories: setup, configuration, testing, deployment, monitoring, maintenance
7. Be practical and consider real-world implementation challenges
8. Provide a confidence score (0-1) for the extraction quality

Focus on steps that a developer or implementer would actually need to follow to get the solution working.

Return a single JSON object:
{
  "steps": [
    {
      "step_number": 1,
      "step_title": "Brief title",
      "step_description": "Detailed description of what to do",
      "step_category": "setup|configuration|testing|deployment|monitoring|maintenance",
      "estimated_time": "e.g., 15 minutes, 1 hour, 2-3 hours",
      "difficulty_level": "beginner|intermediate|advanced",
      "prerequisites": ["prerequisite1"],
      "tools_required": ["tool1"]
    }
  ],
  "confidence_score": 0.85
}"""

CATEGORY_ALIASES: dict[str, StepCategoryEnum] = {
    "install": StepCategoryEnum.SETUP,
    "configure": StepCategoryEnum.CONFIGURATION,
    "config": StepCategoryEnum.CONFIGURATION,
    "test": StepCategoryEnum.TESTING,
    "deploy": StepCategoryEnum.DEPLOYMENT,
    "monitor": StepCategoryEnum.MONITORING,
    "maintain": StepCategoryEnum.MAINTENANCE,
}

DIFFICULTY_ALIASES: dict[str, DifficultyLevelEnum] = {
    "easy": DifficultyLevelEnum.BEGINNER,
    "simple": DifficultyLevelEnum.BEGINNER,
    "basic": DifficultyLevelEnum.BEGINNER,
    "medium": DifficultyLevelEnum.INTERMEDIATE,
    "moderate": DifficultyLevelEnum.INTERMEDIATE,
    "hard": DifficultyLevelEnum.ADVANCED,
    "complex": DifficultyLevelEnum.ADVANCED,
    "expert": DifficultyLevelEnum.ADVANCED,
}


@dataclass
class ImplementationStep:
    step_number: int
    step_title: str
    step_description: str
    step_category: StepCategoryEnum
    estimated_time: str | None = None
    difficulty_level: DifficultyLevelEnum | None = None
    prerequisites: list[str] = field(default_factory=list)
    tools_required: list[str] = field(default_factory=list)


@dataclass
class StepContext:
    """What the caller knows about the solution besides title and description."""

    solution_type: str = "workflow"
    category: str | None = None
    integrations: list[str] = field(default_factory=list)
    capabilities: list[str] = field(default_factory=list)
    additional_context: str | None = None


def _step(number, title, description, category, time, difficulty) -> ImplementationStep:
    return ImplementationStep(number, title, description, category, time, difficulty)


FALLBACK_STEPS: dict[str, list[ImplementationStep]] = {
    "workflow": [
        _step(1, "Review Requirements",
              "Review the workflow requirements and ensure all necessary integrations are available",
              StepCategoryEnum.SETUP, "15 minutes", DifficultyLevelEnum.BEGINNER),
        _step(2, "Configure Integrations",
              "Set up and configure the required integrations and API connections",
              StepCategoryEnum.CONFIGURATION, "30-60 minutes", DifficultyLevelEnum.INTERMEDIATE),
        _step(3, "Test Workflow",
              "Test the workflow with sample data to ensure it works correctly",
              StepCategoryEnum.TESTING, "20-30 minutes", DifficultyLevelEnum.INTERMEDIATE),
        _step(4, "Deploy to Production",
              "Deploy the workflow to production environment and activate it",
              StepCategoryEnum.DEPLOYMENT, "15-30 minutes", DifficultyLevelEnum.INTERMEDIATE),
        _step(5, "Monitor and Maintain",
              "Monitor workflow performance and maintain it as needed",
              StepCategoryEnum.MONITORING, "Ongoing", DifficultyLevelEnum.BEGINNER),
    ],
    "agent": [
        _step(1, "Set Up AI Environment",
              "Set up the AI agent environment and required dependencies",
              StepCategoryEnum.SETUP, "30-45 minutes", DifficultyLevelEnum.INTERMEDIATE),
        _step(2, "Configure Agent Parameters",
              "Configure the AI agent parameters, prompts, and capabilities",
              StepCategoryEnum.CONFIGURATION, "45-60 minutes", DifficultyLevelEnum.ADVANCED),
        _step(3, "Train and Test Agent",
              "Train the agent with sample data and test its responses",
              StepCategoryEnum.TESTING, "60-90 minutes", DifficultyLevelEnum.ADVANCED),
        _step(4, "Deploy Agent",
              "Deploy the AI agent to production and integrate with systems",
              StepCategoryEnum.DEPLOYMENT, "30-45 minutes", DifficultyLevelEnum.INTERMEDIATE),
        _step(5, "Monitor Performance",
              "Monitor agent performance and fine-tune as needed",
              StepCategoryEnum.MONITORING, "Ongoing", DifficultyLevelEnum.INTERMEDIATE),
    ],
}


class ExtractStepsResult:
    """Result of step extraction with usage stats for Dagster metadata."""

    def __init__(
        self,
        steps: list[ImplementationStep],
        confidence: float,
        usage: dict[str, Any],
        model: str,
        used_fallback: bool = False,
    ):
        self.steps = steps
        self.confidence = confidence
        self.usage = usage
        self.model = model
        self.used_fallback = used_fallback

    @property
    def input_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0)

    @property
    def output_tokens(self) -> int:
        return self.usage.get("completion_tokens", 0)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def cost_usd(self) -> float:
        return float(self.usage.get("cost", 0))


def get_fallback_steps(solution_type: str) -> list[ImplementationStep]:
    template = FALLBACK_STEPS["agent" if solution_type == "agent" else "workflow"]
    return [
        replace(step, prerequisites=list(step.prerequisites), tools_required=list(step.tools_required))
        for step in template
    ]


def fallback_result(solution_type: str, usage: dict[str, Any] | None = None) -> ExtractStepsResult:
    return ExtractStepsResult(
        steps=get_fallback_steps(solution_type),
        confidence=DEFAULT_CONFIDENCE,
        usage=usage or {},
        model=DEFAULT_MODEL,
        used_fallback=True,
    )


def content_hash(title: str, description: str, solution_type: str, additional_context: str = "") -> str:
    """Cache key for an extraction request (sha256 over the lowercased inputs)."""
    content = f"{title}|{description}|{solution_type}|{additional_context}".lower().strip()
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def validate_category(value: Any) -> StepCategoryEnum:
    normalized = str(value or "").lower().strip()
    if normalized in StepCategoryEnum._value2member_map_:
        return StepCategoryEnum(normalized)
    return CATEGORY_ALIASES.get(normalized, StepCategoryEnum.SETUP)


def validate_difficulty(value: Any) -> DifficultyLevelEnum:
    normalized = str(value or "").lower().strip()
    if normalized in DifficultyLevelEnum._value2member_map_:
        return DifficultyLevelEnum(normalized)
    return DIFFICULTY_ALIASES.get(normalized, DifficultyLevelEnum.INTERMEDIATE)


def _clean_list(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [str(value).strip() for value in values if str(value or "").strip()]


def extract_json_object(content: str) -> dict[str, Any]:
    """Parse the text between the first '{' and the last '}'.

    Raises:
        ValueError: When the content holds no JSON object
    """
    start, end = content.find("{"), content.rfind("}")
    if start < 0 or end <= start:
        raise ValueError("No JSON object in LLM response")
    return json.loads(content[start : end + 1])


def parse_steps(content: str) -> tuple[list[ImplementationStep], float]:
    """Validate an LLM response into steps and a clamped confidence.

    Raises:
        ValueError: On missing steps or fewer than MIN_STEPS usable steps
    """
    parsed = extract_json_object(content)
    raw_steps = parsed.get("steps")
    if not isinstance(raw_steps, list):
        raise ValueError("Invalid steps format in LLM response")

    steps = []
    for index, raw in enumerate(raw_steps[:MAX_STEPS]):
        if not isinstance(raw, dict):
            continue
        steps.append(
            ImplementationStep(
                step_number=int(raw.get("step_number") or index + 1),
                step_title=str(raw.get("step_title") or f"Step {index + 1}").strip(),
                step_description=str(raw.get("step_description") or "").strip(),
                step_category=validate_category(raw.get("step_category")),
                estimated_time=str(raw["estimated_time"]).strip() if raw.get("estimated_time") else None,
                difficulty_level=validate_difficulty(raw["difficulty_level"]) if raw.get("difficulty_level") else None,
                prerequisites=_clean_list(raw.get("prerequisites")),
                tools_required=_clean_list(raw.get("tools_required")),
            )
        )
    if len(steps) < MIN_STEPS:
        raise ValueError(f"Insufficient steps extracted: {len(steps)} < {MIN_STEPS}")

    confidence = parsed.get("confidence_score") or DEFAULT_CONFIDENCE
    return steps, max(0.0, min(1.0, float(confidence)))


def _build_user_prompt(title: str, description: str, context: StepContext) -> str:
    parts = [
        f"Extract 3-5 implementation steps for the following {context.solution_type} solution:",
        "",
        f"Title: {title}",
        f"Description: {description}",
    ]
    if context.category:
        parts.append(f"Category: {context.category}")
    if context.integrations:
        parts.append(f"Integrations: {', '.join(context.integrations)}")
    if context.capabilities:
        parts.append(f"Capabilities: {', '.join(context.capabilities)}")
    if context.additional_context:
        parts.append(f"Additional Context: {context.additional_context}")
    parts.append(
        f"\nSteps must be specific, ordered from setup to deployment, include time and difficulty, "
        f"and fit the solution type ({context.solution_type})."
    )
    return "\n".join(parts)


async def extract_steps(
    openrouter: "OpenRouterResource",
    title: str,
    description: str,
    context: StepContext | None = None,
) -> ExtractStepsResult:
    """Extract implementation steps for a solution using the LLM.

    Args:
        openrouter: OpenRouterResource instance for API calls
        title: Solution title
        description: Solution summary
        context: Solution type, category, integrations, capabilities

    Returns:
        ExtractStepsResult; used_fallback is set when the response was unusable
    """
    context = context or StepContext()
    model = DEFAULT_MODEL
    usage: dict[str, Any] = {}
    try:
        response = await openrouter.complete(
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_prompt(title, description, context)},
            ],
            model=model,
            operation="extract_steps",
            response_format={"type": "json_object"},
            temperature=0.0,
        )
        usage = response.get("usage", {})
        steps, confidence = parse_steps(response["choices"][0]["message"]["content"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, httpx.HTTPError) as e:
        logger.warning("Step extraction failed for %r, using fallback steps: %s", title, e)
        return fallback_result(context.solution_type, usage)

    return ExtractStepsResult(steps=steps, confidence=confidence, usage=usage, model=model)
