"""Catalog provider resource: raw workflow records per source key.

GitHub-hosted sources are read through the contents API; n8n.io through its
public templates API. All fetch paths return plain dicts in the shape the
catalog normalizer understands. Any failure, from the transport up to a
body of the wrong JSON shape, ends up as an empty list, so the catalog
cache can keep serving its last good snapshot.
"""

import random
import re
from typing import Any

import httpx
from dagster import ConfigurableResource, get_dagster_logger
from pydantic import Field

from automation_matching.catalog.normalize import (
    determine_trigger_type,
    map_category,
    normalize_source_key,
)

GITHUB_API_URL = "https://api.github.com"
N8N_TEMPLATES_URL = "https://api.n8n.io/api/templates/workflows"

GITHUB_REPOSITORIES: dict[str, str] = {
    "github": "Zie619/n8n-workflows",
    "awesome-n8n-templates": "enescingoz/awesome-n8n-templates",
    "ai-enhanced": "wassupjay/n8n-free-templates",
}

# Directories tried in order before falling back to the repository root
CANDIDATE_DIRECTORIES = ("workflows", "templates", "examples")

N8N_PAGE_SIZE = 200
N8N_MAX_PAGES = 30
MAX_NODE_INTEGRATIONS = 12

MOCK_INTEGRATIONS = [
    "Slack", "Gmail", "GoogleSheets", "Hubspot", "Notion", "Airtable", "Telegram",
    "Openai", "Stripe", "Shopify", "Trello", "Discord", "Postgres", "Webhook", "Datev",
]
MOCK_ACTIONS = ["Create", "Send", "Update", "Sync", "Import", "Notify", "Process"]
MOCK_TRIGGERS = ["Webhook", "Scheduled", "Triggered", "Manual"]


def humanize_integration(raw: str) -> str:
    """'n8n-nodes-base.googleSheets' -> 'Google Sheets'."""
    segment = (raw or "").split(".")[-1] or raw or ""
    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", re.sub(r"[-_]", " ", segment))
    return " ".join(word.capitalize() for word in spaced.split())


def complexity_for_node_count(node_count: int) -> str:
    if node_count > 12:
        return "High"
    if node_count > 6:
        return "Medium"
    return "Low"


def map_github_file(repo: str, entry: dict[str, Any], category: str, workflow_id: int) -> dict[str, Any]:
    """Raw record for one workflow JSON file in a GitHub repository."""
    path = entry.get("path") or entry["name"]
    return {
        "id": workflow_id,
        "filename": entry["name"],
        "category": map_category(category),
        "fileHash": (entry.get("sha") or "")[:8],
        "link": f"https://github.com/{repo}/blob/main/{path}",
    }


def map_n8n_template(item: dict[str, Any], index: int) -> dict[str, Any]:
    """Raw record for one entry of the n8n.io templates API."""
    try:
        template_id = int(item.get("id") or 0) or index + 1
    except (TypeError, ValueError):
        template_id = index + 1
    name = str(item.get("name") or f"n8n-workflow-{template_id}")
    description = str(item.get("description") or f"Official n8n workflow: {name}")
    nodes = item.get("nodes") if isinstance(item.get("nodes"), list) else []

    integrations: list[str] = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        raw = str(node.get("name") or node.get("id") or "")
        label = humanize_integration(raw) if raw else ""
        if label and label not in integrations:
            integrations.append(label)

    slug = re.sub(r"[^a-z0-9]", "-", name.lower())
    record: dict[str, Any] = {
        "id": template_id,
        "filename": f"n8n-{template_id}-{slug}.json",
        "name": name,
        "description": description,
        "active": True,
        "triggerType": determine_trigger_type(f"{name} {description}").value,
        "complexity": complexity_for_node_count(len(nodes)),
        "nodeCount": len(nodes),
        "integrations": integrations[:MAX_NODE_INTEGRATIONS],
        "link": f"https://n8n.io/workflows/{template_id}",
    }
    if isinstance(item.get("user"), dict):
        record["user"] = item["user"]
    return record


class CatalogProviderResource(ConfigurableResource):
    """Fetches raw catalog records for one source key at a time.

    In mock mode every source returns a small deterministic record set seeded
    by the source key, which keeps development runs offline.
    """

    github_token: str = Field(
        default="",
        description="GitHub token for the contents API (optional, raises the rate limit)",
    )
    timeout_seconds: float = Field(
        default=8.0,
        description="Per-request timeout for provider fetches",
    )
    mock_mode: bool = Field(
        default=False,
        description="If True, return deterministic mock records instead of calling the providers",
    )
    mock_record_count: int = Field(
        default=25,
        description="Records per source in mock mode",
    )

    async def fetch(self, source: str) -> list[dict[str, Any]]:
        """Raw records for a source key; [] when the provider fails or answers garbage."""
        key = normalize_source_key(source)
        if self.mock_mode:
            return self._mock_records(key)

        log = get_dagster_logger()
        try:
            if key == "n8n.io":
                records = await self._fetch_n8n_templates()
            elif key in GITHUB_REPOSITORIES:
                records = await self._fetch_github_repository(GITHUB_REPOSITORIES[key])
            else:
                log.warning(f"No provider for source '{key}'")
                return []
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers JSONDecodeError and unexpected payload shapes
            log.warning(f"Fetch failed for {key}: {type(e).__name__}: {e}")
            return []

        log.info(f"Fetched {len(records)} raw records from {key}")
        return records

    # ═══════════════════════════════════════════════════════════════════
    # GITHUB
    # ═══════════════════════════════════════════════════════════════════

    @property
    def _github_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "automation-matching-indexer",
        }
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        return headers

    async def _list_contents(self, client: httpx.AsyncClient, repo: str, path: str = "") -> list[dict] | None:
        """Directory listing, or None when the path does not exist."""
        url = f"{GITHUB_API_URL}/repos/{repo}/contents" + (f"/{path}" if path else "")
        response = await client.get(url, headers=self._github_headers)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            return None
        return [entry for entry in data if isinstance(entry, dict)]

    async def _fetch_github_repository(self, repo: str) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            root_dir, categories = None, None
            for directory in CANDIDATE_DIRECTORIES:
                categories = await self._list_contents(client, repo, directory)
                if categories:
                    root_dir = directory
                    break

            if not categories:
                for entry in await self._list_contents(client, repo) or []:
                    if str(entry.get("name", "")).endswith(".json"):
                        records.append(map_github_file(repo, entry, "misc", len(records) + 1))
                return records

            for category in categories:
                name = category.get("name")
                if category.get("type") != "dir" or not name:
                    continue
                files = await self._list_contents(client, repo, f"{root_dir}/{name}")
                for entry in files or []:
                    if str(entry.get("name", "")).endswith(".json"):
                        records.append(map_github_file(repo, entry, name, len(records) + 1))
        return records

    # ═══════════════════════════════════════════════════════════════════
    # N8N.IO
    # ═══════════════════════════════════════════════════════════════════

    async def _fetch_n8n_templates(self) -> list[dict[str, Any]]:
        headers = {"Accept": "application/json", "Referer": "https://n8n.io/workflows/"}
        records: list[dict[str, Any]] = []
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            for page in range(1, N8N_MAX_PAGES + 1):
                response = await client.get(
                    N8N_TEMPLATES_URL,
                    params={"page": page, "perPage": N8N_PAGE_SIZE},
                    headers=headers,
                )
                response.raise_for_status()
                payload = response.json()
                if not isinstance(payload, dict):
                    raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
                batch = payload.get("workflows") or []
                if not isinstance(batch, list):
                    raise ValueError(f"expected 'workflows' to be a list, got {type(batch).__name__}")
                records.extend(
                    map_n8n_template(item, len(records) + i)
                    for i, item in enumerate(batch)
                    if isinstance(item, dict)
                )
                if len(batch) < N8N_PAGE_SIZE:
                    break
        return records

    # ═══════════════════════════════════════════════════════════════════
    # MOCK
    # ═══════════════════════════════════════════════════════════════════

    def _mock_records(self, source: str) -> list[dict[str, Any]]:
        """Deterministic records; the same source key always yields the same list."""
        rng = random.Random(source)
        records = []
        for index in range(1, self.mock_record_count + 1):
            first, second = rng.sample(MOCK_INTEGRATIONS, 2)
            filename = f"{index:04d}_{first}_{second}_{rng.choice(MOCK_ACTIONS)}_{rng.choice(MOCK_TRIGGERS)}.json"
            records.append(
                {
                    "id": f"{source}-{index}",
                    "filename": filename,
                    "active": rng.random() > 0.1,
                    "nodeCount": rng.randint(3, 22),
                    "fileHash": f"{rng.getrandbits(32):08x}",
                }
            )
        return records
