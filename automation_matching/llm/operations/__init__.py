"""LLM operation modules.

Each module contains:
- PROMPT_VERSION: Bump when prompt changes (triggers asset staleness)
- SYSTEM_PROMPT: The prompt template
- An async function that performs the operation
"""

from automation_matching.llm.operations.analyze_job import (
    PROMPT_VERSION as ANALYZE_JOB_PROMPT_VERSION,
)
from automation_matching.llm.operations.analyze_job import (
    analyze_job,
)
from automation_matching.llm.operations.extract_steps import (
    PROMPT_VERSION as EXTRACT_STEPS_PROMPT_VERSION,
)
from automation_matching.llm.operations.extract_steps import (
    content_hash,
    extract_steps,
)

__all__ = [
    "ANALYZE_JOB_PROMPT_VERSION",
    "analyze_job",
    "EXTRACT_STEPS_PROMPT_VERSION",
    "extract_steps",
    "content_hash",
]
