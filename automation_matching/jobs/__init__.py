"""Dagster jobs for the automation matching pipeline.

Jobs available in the Dagster dashboard:

- catalog_refresh: Fetch every provider source and rebuild the `all` union
- job_analysis: Score a job posting's tasks and recommend catalog workflows

USAGE:
1. Run catalog_refresh once (or on demand) to fill workflow_cache
2. Launch job_analysis with run config for both analysis assets:

    ops:
      job_task_analysis:
        config: {job_text: "...", job_title: "..."}
      job_recommendations:
        config: {job_text: "...", job_title: "..."}
"""

from dagster import (
    Backoff,
    Jitter,
    RetryPolicy,
    define_asset_job,
)

from automation_matching.assets.analysis import job_recommendations, job_task_analysis
from automation_matching.assets.catalog import catalog_source_snapshots, catalog_union

# Retry policy for provider and LLM calls (rate limits, transient errors)
# Uses exponential backoff: 1s, 2s, 4s between retries
provider_retry_policy = RetryPolicy(
    max_retries=3,
    delay=1,  # 1 second base delay
    backoff=Backoff.EXPONENTIAL,
    jitter=Jitter.PLUS_MINUS,  # Add randomness to avoid thundering herd
)

catalog_refresh_job = define_asset_job(
    name="catalog_refresh",
    description=(
        "Refresh every catalog source (GitHub repositories, n8n.io) into workflow_cache "
        "and rebuild the deduplicated union."
    ),
    selection=[catalog_source_snapshots, catalog_union],
    op_retry_policy=provider_retry_policy,
    tags={"pipeline": "catalog"},
)

job_analysis_job = define_asset_job(
    name="job_analysis",
    description=(
        "Extract and score the tasks of a job posting, then match them against the catalog "
        "union. Reads an existing catalog_union materialization."
    ),
    selection=[job_task_analysis, job_recommendations],
    op_retry_policy=provider_retry_policy,
    tags={"pipeline": "analysis"},
)

__all__ = [
    "provider_retry_policy",
    "catalog_refresh_job",
    "job_analysis_job",
]
