"""Job analysis assets.

1. job_task_analysis: tasks, scores and the German report for the configured job text
2. job_recommendations: catalog workflows per task, with implementation steps

Both read the job text from run config, e.g.:

    ops:
      job_task_analysis:
        config: {job_text: "...", job_title: "Buchhalter (m/w/d)"}
"""

import asyncio
from dataclasses import asdict
from typing import Any

from dagster import AssetExecutionContext, AssetIn, Config, asset

from automation_matching.analysis.extractor import extract_tasks
from automation_matching.analysis.report import build_report
from automation_matching.analysis.scorer import score_task
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
    StepContext,
    extract_steps,
    fallback_result,
)
from automation_matching.matching.engine import MatchOptions
from automation_matching.services.recommendation import RecommendationService


class JobAnalysisConfig(Config):
    """Run config for the job analysis assets."""

    job_text: str = ""
    job_title: str | None = None
    use_llm: bool = False
    min_score: int = 30
    max_results: int = 5
    semantic_prefilter: bool = False


def _llm_metadata(results: list) -> dict[str, Any]:
    return {
        "llm_cost_usd": sum(r.cost_usd for r in results),
        "llm_tokens_input": sum(r.input_tokens for r in results),
        "llm_tokens_output": sum(r.output_tokens for r in results),
        "llm_fallbacks": sum(1 for r in results if r.used_fallback),
    }


@asset(
    description="Tasks extracted from the job text, scored for automation potential, with report",
    group_name="analysis",
    required_resource_keys={"openrouter"},
    code_version=ANALYZE_JOB_PROMPT_VERSION,
    metadata={"llm_operation": "analyze_job"},
    op_tags={"dagster/concurrency_key": "openrouter_api"},
)
def job_task_analysis(context: AssetExecutionContext, config: JobAnalysisConfig) -> dict[str, Any]:
    """Score the job's tasks locally, or via the LLM when use_llm is set."""
    if not config.job_text.strip():
        context.log.warning("No job text configured; producing an empty analysis")

    metadata: dict[str, Any] = {}
    if config.use_llm and config.job_text.strip():
        openrouter = context.resources.openrouter
        openrouter.set_context(
            run_id=context.run_id,
            asset_key="job_task_analysis",
            code_version=ANALYZE_JOB_PROMPT_VERSION,
        )
        result = asyncio.run(analyze_job(openrouter, config.job_text, config.job_title))
        scored = result.tasks
        summary = result.summary
        metadata.update(_llm_metadata([result]))
        metadata["llm_model"] = result.model
    else:
        scored = [score_task(task.text, config.job_title) for task in extract_tasks(config.job_text)]
        summary = None

    report = build_report(scored)
    if summary:
        report.summary = summary
    context.log.info(f"Analyzed {len(scored)} tasks: total score {report.total_score}%")
    metadata.update(
        {
            "task_count": len(scored),
            "total_score": report.total_score,
            "automatable_pct": report.ratio.automatable,
            "human_pct": report.ratio.human,
        }
    )
    context.add_output_metadata(metadata)
    return asdict(report)


@asset(
    ins={"catalog_union": AssetIn()},
    description="Best catalog workflows per job task, with implementation steps for each best match",
    group_name="analysis",
    required_resource_keys={"catalog_cache", "catalog_provider", "openrouter"},
    code_version=EXTRACT_STEPS_PROMPT_VERSION,
    metadata={"llm_operation": "extract_steps"},
    op_tags={"dagster/concurrency_key": "openrouter_api"},
)
def job_recommendations(
    context: AssetExecutionContext,
    config: JobAnalysisConfig,
    catalog_union: dict[str, Any],
) -> dict[str, Any]:
    """Run the recommendation service over the union catalog.

    Steps are extracted by the LLM when use_llm is set; otherwise every best
    match gets the fixed fallback steps for its kind.
    """
    cache = context.resources.catalog_cache.build_cache(context.resources.catalog_provider)
    service = RecommendationService(
        cache,
        MatchOptions(max_results=config.max_results, min_score=config.min_score),
        semantic_prefilter=config.semantic_prefilter,
    )
    recommendation = service.recommend(config.job_text, config.job_title)
    context.log.info(
        f"Recommended workflows for {len(recommendation.tasks)} tasks "
        f"against {catalog_union.get('total', 0)} catalog artifacts"
    )

    openrouter = context.resources.openrouter
    openrouter.set_context(
        run_id=context.run_id,
        asset_key="job_recommendations",
        code_version=EXTRACT_STEPS_PROMPT_VERSION,
    )

    contexts = [
        StepContext(
            solution_type=task.best_match.artifact.kind.value,
            category=task.best_match.artifact.category,
            integrations=task.best_match.artifact.integrations,
            capabilities=task.best_match.artifact.capabilities,
            additional_context=task.task.text,
        )
        for task in recommendation.tasks
    ]
    if config.use_llm:

        async def steps_for_best_matches():
            return await asyncio.gather(
                *(
                    extract_steps(openrouter, task.best_match.artifact.title, task.best_match.artifact.summary, ctx)
                    for task, ctx in zip(recommendation.tasks, contexts)
                )
            )

        step_results = asyncio.run(steps_for_best_matches())
    else:
        step_results = [fallback_result(ctx.solution_type) for ctx in contexts]

    payload = asdict(recommendation)
    for task_payload, steps in zip(payload["tasks"], step_results):
        task_payload["implementation_steps"] = [asdict(step) for step in steps.steps]
        task_payload["steps_confidence"] = steps.confidence

    context.add_output_metadata(
        {
            "task_count": len(recommendation.tasks),
            "confidence": recommendation.confidence,
            "fallback_tasks": sum(1 for t in recommendation.tasks if t.used_fallback),
            **(_llm_metadata(step_results) if config.use_llm else {}),
        }
    )
    return payload

