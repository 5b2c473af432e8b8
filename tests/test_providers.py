"""Tests for the catalog provider resource.

HTTP calls are served by httpx.MockTransport; the resource's AsyncClient is
patched to a real client bound to that transport.
"""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from automation_matching.resources.providers import (
    N8N_PAGE_SIZE,
    CatalogProviderResource,
    complexity_for_node_count,
    humanize_integration,
    map_github_file,
    map_n8n_template,
)

RealAsyncClient = httpx.AsyncClient


def patched_client(handler):
    """Patch target that builds AsyncClients routed to `handler`."""
    transport = httpx.MockTransport(handler)
    return patch(
        "automation_matching.resources.providers.httpx.AsyncClient",
        side_effect=lambda **kwargs: RealAsyncClient(transport=transport, **kwargs),
    )


class TestMapping:
    """Tests for raw record mapping helpers."""

    def test_humanize_integration(self):
        """Test node type names to display names."""
        assert humanize_integration("n8n-nodes-base.googleSheets") == "Google Sheets"
        assert humanize_integration("n8n-nodes-base.slack") == "Slack"
        assert humanize_integration("httpRequest") == "Http Request"

    def test_complexity_for_node_count(self):
        """Test the node count tiers."""
        assert complexity_for_node_count(3) == "Low"
        assert complexity_for_node_count(7) == "Medium"
        assert complexity_for_node_count(13) == "High"

    def test_map_github_file(self):
        """Test the raw record for a GitHub workflow file."""
        entry = {"name": "0001_Slack_Notify.json", "path": "workflows/messaging/0001_Slack_Notify.json", "sha": "abcdef123456"}

        record = map_github_file("Zie619/n8n-workflows", entry, "messaging", 1)

        assert record["id"] == 1
        assert record["filename"] == "0001_Slack_Notify.json"
        assert record["category"] == "messaging"
        assert record["fileHash"] == "abcdef12"
        assert record["link"] == (
            "https://github.com/Zie619/n8n-workflows/blob/main/workflows/messaging/0001_Slack_Notify.json"
        )

    def test_map_n8n_template(self):
        """Test the raw record for an n8n.io template."""
        item = {
            "id": 1750,
            "name": "Daily Slack Digest",
            "description": "Scheduled digest",
            "nodes": [
                {"name": "n8n-nodes-base.slack"},
                {"name": "n8n-nodes-base.scheduleTrigger"},
                {"name": "n8n-nodes-base.slack"},
            ],
            "user": {"username": "jane"},
        }

        record = map_n8n_template(item, 0)

        assert record["id"] == 1750
        assert record["filename"] == "n8n-1750-daily-slack-digest.json"
        assert record["integrations"] == ["Slack", "Schedule Trigger"]
        assert record["nodeCount"] == 3
        assert record["complexity"] == "Low"
        assert record["triggerType"] == "Scheduled"
        assert record["link"] == "https://n8n.io/workflows/1750"
        assert record["user"] == {"username": "jane"}


class TestMockMode:
    """Tests for offline mock records."""

    def test_mock_records_are_deterministic(self):
        """Test that the same source always yields the same records."""
        provider = CatalogProviderResource(mock_mode=True, mock_record_count=5)

        first = asyncio.run(provider.fetch("github"))
        second = asyncio.run(provider.fetch("GitHub Community"))

        assert len(first) == 5
        assert first == second

    def test_mock_records_differ_per_source(self):
        """Test that each source gets its own record set."""
        provider = CatalogProviderResource(mock_mode=True)

        assert asyncio.run(provider.fetch("github")) != asyncio.run(provider.fetch("n8n.io"))


class TestGitHubFetch:
    """Tests for the GitHub contents API path."""

    def test_falls_back_through_candidate_directories(self):
        """Test that missing directories are skipped until one exists."""

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path.endswith("/contents/workflows"):
                return httpx.Response(404, json={"message": "Not Found"})
            if path.endswith("/contents/templates"):
                return httpx.Response(200, json=[{"name": "crm", "type": "dir"}, {"name": "README.md", "type": "file"}])
            if path.endswith("/contents/templates/crm"):
                return httpx.Response(
                    200,
                    json=[
                        {"name": "hubspot_sync.json", "path": "templates/crm/hubspot_sync.json", "sha": "1234567890"},
                        {"name": "notes.md", "path": "templates/crm/notes.md", "sha": "0"},
                    ],
                )
            return httpx.Response(404)

        provider = CatalogProviderResource(github_token="token-123")
        with patched_client(handler):
            records = asyncio.run(provider.fetch("awesome-n8n-templates"))

        assert len(records) == 1
        assert records[0]["filename"] == "hubspot_sync.json"
        assert records[0]["link"].startswith("https://github.com/enescingoz/awesome-n8n-templates/blob/main/")

    def test_root_json_files_when_no_directory(self):
        """Test the repository root fallback."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/contents"):
                return httpx.Response(200, json=[{"name": "root_flow.json", "sha": "abc"}])
            return httpx.Response(404)

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("ai-enhanced"))

        assert [r["filename"] for r in records] == ["root_flow.json"]
        assert records[0]["category"] == "development"

    def test_token_is_sent(self):
        """Test that the GitHub token is sent as an authorization header."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(404)

        with patched_client(handler):
            asyncio.run(CatalogProviderResource(github_token="secret").fetch("github"))

        assert seen and all(header == "token secret" for header in seen)

    def test_server_error_returns_empty(self):
        """Test that a 5xx response yields no records instead of raising."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("github"))

        assert records == []


class TestN8nFetch:
    """Tests for the n8n.io templates API path."""

    def test_paginates_until_short_page(self):
        """Test that pages are requested until one is shorter than the page size."""
        pages = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            pages.append(page)
            count = N8N_PAGE_SIZE if page == 1 else 3
            start = (page - 1) * N8N_PAGE_SIZE
            workflows = [{"id": start + i + 1, "name": f"Flow {start + i + 1}", "nodes": []} for i in range(count)]
            return httpx.Response(200, json={"workflows": workflows})

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("n8n.io"))

        assert pages == [1, 2]
        assert len(records) == N8N_PAGE_SIZE + 3

    def test_transport_error_returns_empty(self):
        """Test that connection failures yield no records."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("n8n.io"))

        assert records == []

    @pytest.mark.parametrize("source", ["unknown-source", "placeholder"])
    def test_unknown_source_returns_empty(self, source):
        """Test that sources without a provider yield no records."""
        assert asyncio.run(CatalogProviderResource().fetch(source)) == []


class TestMalformedPayloads:
    """Tests for 200 responses that are not the JSON the providers expect."""

    def test_html_body_from_n8n(self):
        """Test that an HTML challenge page yields no records instead of raising."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>Just a moment...</html>")

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("n8n.io"))

        assert records == []

    def test_html_body_from_github(self):
        """Test that a non-JSON contents listing yields no records."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>rate limited</html>")

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("github"))

        assert records == []

    def test_list_payload_from_n8n(self):
        """Test that a top-level JSON list is rejected as a wrong shape."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"id": 1, "name": "Flow"}])

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("n8n.io"))

        assert records == []

    def test_non_dict_items_are_skipped(self):
        """Test that stray entries inside the workflows list are ignored."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"workflows": ["oops", None, {"id": 5, "name": "Flow", "nodes": ["x"]}]})

        with patched_client(handler):
            records = asyncio.run(CatalogProviderResource().fetch("n8n.io"))

        assert [r["id"] for r in records] == [5]
        assert records[0]["integrations"] == []

    def test_non_numeric_template_id(self):
        """Test that a template id that is not a number falls back to the position."""
        record = map_n8n_template({"id": "abc", "name": "Flow"}, 4)

        assert record["id"] == 5
        assert record["link"] == "https://n8n.io/workflows/5"
