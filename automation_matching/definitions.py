"""Dagster definitions for the Automation Matching system.

Code location entry point. Wires the catalog assets (per-source snapshots
and their union) and the analysis assets (task scoring, recommendations)
to the refresh and analysis jobs. ENVIRONMENT picks the resource set:
development runs fully offline, staging and production hit the live
providers and PostgreSQL.
"""

import os

from dagster import (
    Definitions,
    EnvVar,
    load_assets_from_modules,
)
from dotenv import load_dotenv

from automation_matching.assets import analysis, catalog
from automation_matching.jobs import catalog_refresh_job, job_analysis_job
from automation_matching.resources import (
    CatalogCacheResource,
    CatalogProviderResource,
    OpenRouterResource,
)

# .env must be loaded before the resources below read os.environ
load_dotenv()

all_assets = load_assets_from_modules([catalog, analysis])


def get_environment() -> str:
    """ENVIRONMENT, defaulting to development."""
    return os.getenv("ENVIRONMENT", "development")


# Mock providers, in-memory snapshots, no cost rows
dev_resources = {
    "catalog_provider": CatalogProviderResource(mock_mode=True),
    "catalog_cache": CatalogCacheResource(use_database=False),
    "openrouter": OpenRouterResource(
        api_key=os.getenv("OPENROUTER_API_KEY", ""),
        persist_costs=False,
    ),
}

# Live providers, PostgreSQL workflow_cache and llm_costs
prod_resources = {
    "catalog_provider": CatalogProviderResource(
        github_token=EnvVar("GITHUB_TOKEN"),
        timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "8")),
    ),
    "catalog_cache": CatalogCacheResource(use_database=True),
    "openrouter": OpenRouterResource(
        api_key=EnvVar("OPENROUTER_API_KEY"),
        default_model=os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini"),
    ),
}


def get_resources() -> dict:
    if get_environment() in ("production", "staging"):
        return prod_resources
    return dev_resources


defs = Definitions(
    assets=all_assets,
    resources=get_resources(),
    jobs=[catalog_refresh_job, job_analysis_job],
)
