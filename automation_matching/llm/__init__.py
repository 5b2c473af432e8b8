"""LLM operations for the automation matching pipeline.

Each operation module exports:
- PROMPT_VERSION: String version to track prompt changes
- The operation function that uses OpenRouterResource

Operations never raise on a bad model response; they return a result with
used_fallback set and deterministic local data instead.
"""

from automation_matching.llm.operations.analyze_job import (
    PROMPT_VERSION as ANALYZE_JOB_PROMPT_VERSION,
)
from automation_matching.llm.operations.analyze_job import (
    AnalyzeJobResult,
    analyze_job,
)
from automation_matching.llm.operations.extract_steps import (
    PROMPT_VERSION as EXTRACT_STEPS_PROMPT_VERSION,
)
from automation_matching.llm.operations.extract_steps import (
    ExtractStepsResult,
    ImplementationStep,
    StepContext,
    content_hash,
    extract_steps,
)

__all__ = [
    # Job analysis
    "ANALYZE_JOB_PROMPT_VERSION",
    "AnalyzeJobResult",
    "analyze_job",
    # Step extraction
    "EXTRACT_STEPS_PROMPT_VERSION",
    "ExtractStepsResult",
    "ImplementationStep",
    "StepContext",
    "content_hash",
    "extract_steps",
]
