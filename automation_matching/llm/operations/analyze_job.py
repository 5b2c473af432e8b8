"""Job posting analysis LLM operation.

The model only picks out the concrete tasks of a posting and writes a short
summary. Every task it returns is scored locally by the heuristic scorer so
scores stay comparable with the offline path. When the model call or its
JSON is unusable, the local extractor, scorer and report take over.

Bump PROMPT_VERSION when changing the prompt to trigger asset staleness.
"""

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from automation_matching.analysis.extractor import MAX_TASKS, extract_tasks
from automation_matching.analysis.report import build_report
from automation_matching.analysis.scorer import ScoredTask, score_task
from automation_matching.llm.operations.extract_steps import extract_json_object

if TYPE_CHECKING:
    from automation_matching.resources.openrouter import OpenRouterResource

logger = logging.getLogger(__name__)

# Bump this version when the prompt changes
# Format: MAJOR.MINOR.PATCH
PROMPT_VERSION = "1.0.0"

DEFAULT_MODEL = "openai/gpt-4o-mini"

SYSTEM_PROMPT = """You analyze job postings, usually written in German, for automation potential.

Extract the concrete day-to-day tasks (Aufgaben) of the role. Ignore qualifications,
benefits, company descriptions and headings. Keep each task short (one sentence,
at most 140 characters) and in the language of the posting.

Return a single JSON object:
{
  "tasks": ["task 1", "task 2"],
  "summary": "Two sentences on how automatable the role is, in the posting's language"
}

Return at most 20 tasks. If the posting contains no tasks, return an empty list."""


class AnalyzeJobResult:
    """Scored tasks and summary for a job posting, with usage stats."""

    def __init__(
        self,
        tasks: list[ScoredTask],
        summary: str,
        usage: dict[str, Any],
        model: str,
        used_fallback: bool = False,
    ):
        self.tasks = tasks
        self.summary = summary
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


def analyze_locally(text: str, job_title: str | None = None) -> tuple[list[ScoredTask], str]:
    scored = [score_task(task.text, job_title) for task in extract_tasks(text)]
    return scored, build_report(scored).summary


def parse_analysis(content: str, job_title: str | None = None) -> tuple[list[ScoredTask], str]:
    """Turn the model's JSON into locally scored tasks and its summary.

    Raises:
        ValueError: When tasks are not a list or no usable task remains
    """
    parsed = extract_json_object(content)
    raw_tasks = parsed.get("tasks")
    if not isinstance(raw_tasks, list):
        raise ValueError("Invalid tasks format in LLM response")

    texts: list[str] = []
    for raw in raw_tasks:
        # Some models return {"text": ...} objects instead of plain strings
        text = raw.get("text") if isinstance(raw, dict) else raw
        text = str(text or "").strip()
        if text and text.lower() not in {t.lower() for t in texts}:
            texts.append(text)
    if not texts:
        raise ValueError("No tasks in LLM response")

    scored = [score_task(text, job_title) for text in texts[:MAX_TASKS]]
    summary = str(parsed.get("summary") or "").strip() or build_report(scored).summary
    return scored, summary


async def analyze_job(
    openrouter: "OpenRouterResource",
    text: str,
    job_title: str | None = None,
) -> AnalyzeJobResult:
    """Extract and score the tasks of a job posting using the LLM.

    Args:
        openrouter: OpenRouterResource instance for API calls
        text: Raw job posting text
        job_title: Optional title, used for industry detection when scoring

    Returns:
        AnalyzeJobResult; used_fallback is set when the local pipeline was used
    """
    model = DEFAULT_MODEL
    if not (text or "").strip():
        return AnalyzeJobResult(tasks=[], summary=build_report([]).summary, usage={}, model=model)

    usage: dict[str, Any] = {}
    user_prompt = f"Job title: {job_title}\n\n{text}" if job_title else text
    try:
        response = await openrouter.complete(
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            model=model,
            operation="analyze_job",
            response_format={"type": "json_object"},
            temperature=0.0,
        )
        usage = response.get("usage", {})
        tasks, summary = parse_analysis(response["choices"][0]["message"]["content"], job_title)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, httpx.HTTPError) as e:
        logger.warning("Job analysis via LLM failed, using local extractor: %s", e)
        tasks, summary = analyze_locally(text, job_title)
        return AnalyzeJobResult(tasks=tasks, summary=summary, usage=usage, model=model, used_fallback=True)

    return AnalyzeJobResult(tasks=tasks, summary=summary, usage=usage, model=model)
