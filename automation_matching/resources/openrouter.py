"""OpenRouter chat completions resource.

Prompts and response parsing live in automation_matching.llm.operations.
This resource sends the request, retries rate limits and upstream errors,
and books every successful call into the `llm_costs` table under the run
and asset set via set_context().
"""

import asyncio
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import httpx
from dagster import ConfigurableResource, get_dagster_logger
from pydantic import Field, PrivateAttr

from automation_matching.db import session_scope
from automation_matching.models.llm_costs import LLMCost

OPENROUTER_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class LLMContext:
    """Which run and asset the next LLM calls are billed to."""

    run_id: str = ""
    asset_key: str = ""
    code_version: str = ""


@dataclass
class CallUsage:
    """Token counts and cost reported by OpenRouter for one call."""

    operation: str
    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: Decimal

    @classmethod
    def from_response(cls, operation: str, model: str, data: dict[str, Any]) -> "CallUsage":
        usage = data.get("usage") or {}
        return cls(
            operation=operation,
            model=data.get("model") or model,
            input_tokens=int(usage.get("prompt_tokens", 0)),
            output_tokens=int(usage.get("completion_tokens", 0)),
            cost_usd=Decimal(str(usage.get("cost", 0))),
        )


class OpenRouterResource(ConfigurableResource):
    """OpenRouter client used by the step extraction and job analysis operations.

    Assets bill their calls before running an operation:
        openrouter.set_context(
            run_id=context.run_id,
            asset_key="job_task_analysis",
            code_version=ANALYZE_JOB_PROMPT_VERSION,
        )
        result = asyncio.run(analyze_job(openrouter, job_text))
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""),
        description="OpenRouter API key",
    )
    default_model: str = Field(
        default="openai/gpt-4o-mini",
        description="Model used when an operation does not name one",
    )
    site_url: str = Field(
        default="https://workflowfinder.app",
        description="HTTP-Referer sent for OpenRouter app attribution",
    )
    app_name: str = Field(
        default="Automation Matching Pipeline",
        description="X-Title sent for OpenRouter app attribution",
    )
    timeout_seconds: float = Field(default=60.0, description="Request timeout for completions")
    max_retries: int = Field(
        default=2,
        description="Extra attempts after a 429, a 5xx or a transport error",
    )
    retry_backoff_seconds: float = Field(
        default=1.5,
        description="Base delay between attempts; doubles on each retry",
    )
    persist_costs: bool = Field(
        default=True,
        description="Write a row to llm_costs for every call",
    )
    _context: LLMContext = PrivateAttr(default_factory=LLMContext)

    def set_context(self, run_id: str, asset_key: str, code_version: str = "") -> None:
        """Bill subsequent calls to this run and asset."""
        self._context = LLMContext(run_id=run_id, asset_key=asset_key, code_version=code_version)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.site_url,
            "X-Title": self.app_name,
        }

    async def _post_with_retries(self, body: dict[str, Any]) -> dict[str, Any]:
        log = get_dagster_logger()
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            for attempt in range(self.max_retries + 1):
                last_attempt = attempt == self.max_retries
                try:
                    response = await client.post(OPENROUTER_CHAT_URL, headers=self._headers(), json=body)
                except httpx.TransportError as exc:
                    if last_attempt:
                        raise
                    log.warning(f"OpenRouter transport error ({exc!r}), retry {attempt + 1}/{self.max_retries}")
                else:
                    if response.status_code not in RETRYABLE_STATUS_CODES or last_attempt:
                        response.raise_for_status()
                        return response.json()
                    log.warning(
                        f"OpenRouter returned {response.status_code}, retry {attempt + 1}/{self.max_retries}"
                    )
                await asyncio.sleep(self.retry_backoff_seconds * (2**attempt))
        raise RuntimeError("unreachable")

    def _save_usage(self, usage: CallUsage) -> None:
        with session_scope() as session:
            session.add(
                LLMCost(
                    run_id=self._context.run_id or "unknown",
                    asset_key=self._context.asset_key or "unknown",
                    operation=usage.operation,
                    model=usage.model,
                    input_tokens=usage.input_tokens,
                    output_tokens=usage.output_tokens,
                    cost_usd=usage.cost_usd,
                    code_version=self._context.code_version or None,
                )
            )

    async def complete(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        operation: str = "completion",
        response_format: dict[str, str] | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Send a chat completion and book its cost.

        Returns the raw response body; `usage.cost` is filled in by OpenRouter.

        Raises:
            httpx.HTTPError: When every attempt failed or the status is not retryable
        """
        model = model or self.default_model
        body: dict[str, Any] = {"model": model, "messages": messages, "temperature": temperature}
        if response_format:
            body["response_format"] = response_format
        if max_tokens:
            body["max_tokens"] = max_tokens

        data = await self._post_with_retries(body)

        usage = CallUsage.from_response(operation, model, data)
        get_dagster_logger().info(
            f"LLM Cost: {usage.operation} | {usage.model} | "
            f"{usage.input_tokens}+{usage.output_tokens} tokens | ${usage.cost_usd:.6f}"
        )
        if self.persist_costs:
            await asyncio.to_thread(self._save_usage, usage)
        return data
