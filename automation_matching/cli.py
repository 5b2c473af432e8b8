import argparse
import asyncio
import json
import os
import sys
from dataclasses import asdict
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def local_dev():
    os.chdir(PROJECT_ROOT)
    os.environ.setdefault("DAGSTER_HOME", str(PROJECT_ROOT))
    os.execvp(
        sys.executable,
        [sys.executable, "-m", "dagster", "dev", "-m", "automation_matching.definitions"]
        + sys.argv[1:],
    )


def _build_cache(live: bool):
    from automation_matching.catalog.cache import CatalogCache
    from automation_matching.catalog.store import InMemorySnapshotStore, SqlSnapshotStore
    from automation_matching.resources.providers import CatalogProviderResource

    if live:
        provider = CatalogProviderResource(github_token=os.getenv("GITHUB_TOKEN", ""))
        return CatalogCache(store=SqlSnapshotStore(), fetcher=provider)
    return CatalogCache(store=InMemorySnapshotStore(), fetcher=CatalogProviderResource(mock_mode=True))


def analyze():
    """Print task scores and workflow recommendations for a job posting as JSON."""
    from dotenv import load_dotenv

    from automation_matching.matching.engine import MatchOptions
    from automation_matching.services.recommendation import RecommendationService

    parser = argparse.ArgumentParser(description="Analyze a job posting for automation potential")
    parser.add_argument("path", nargs="?", help="Job posting text file (reads stdin when omitted)")
    parser.add_argument("--title", help="Job title, used for industry detection")
    parser.add_argument("--min-score", type=int, default=30)
    parser.add_argument("--max-results", type=int, default=5)
    parser.add_argument(
        "--live",
        action="store_true",
        help="Use PostgreSQL snapshots and live providers instead of mock data",
    )
    parser.add_argument(
        "--semantic",
        action="store_true",
        help="Narrow candidates per task by TF-IDF similarity before matching",
    )
    args = parser.parse_args()

    load_dotenv()
    job_text = Path(args.path).read_text(encoding="utf-8") if args.path else sys.stdin.read()
    service = RecommendationService(
        _build_cache(args.live),
        MatchOptions(max_results=args.max_results, min_score=args.min_score),
        semantic_prefilter=args.semantic,
    )
    recommendation = service.recommend(job_text, args.title)
    print(json.dumps(asdict(recommendation), ensure_ascii=False, indent=2, default=str))


def refresh_catalog():
    """Refresh one catalog source (or all of them) into workflow_cache."""
    from dotenv import load_dotenv

    parser = argparse.ArgumentParser(description="Refresh catalog snapshots")
    parser.add_argument("source", nargs="?", help="Source key; all sources when omitted")
    args = parser.parse_args()

    load_dotenv()
    report = asyncio.run(refresh_report(_build_cache(live=True), args.source))
    print(json.dumps(report, indent=2, default=str))
    sys.exit(0 if report["result"]["success"] else 1)


async def refresh_report(cache, source: str | None = None) -> dict:
    """Refresh result plus the stored status of every refreshed source key."""
    from automation_matching.catalog.normalize import ALL_SOURCES, KNOWN_SOURCES, normalize_source_key

    result = await cache.refresh(source)
    key = normalize_source_key(source)
    keys = [*KNOWN_SOURCES, ALL_SOURCES] if key == ALL_SOURCES else [key]
    return {
        "result": asdict(result),
        "status": {k: asdict(await cache.get_cache_status(k)) for k in keys},
    }
