"""Dagster assets for the automation matching pipeline."""

from automation_matching.assets.analysis import (
    job_recommendations,
    job_task_analysis,
)
from automation_matching.assets.catalog import (
    catalog_source_snapshots,
    catalog_union,
)

__all__ = [
    # Catalog assets
    "catalog_source_snapshots",
    "catalog_union",
    # Job analysis assets
    "job_task_analysis",
    "job_recommendations",
]
