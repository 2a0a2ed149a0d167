"""Exa Research API client (async research tasks with polling)."""

from __future__ import annotations

import asyncio
import logging
import os
import time

from campaign_clients.exceptions import (
    ResearchError,
    ResearchTaskFailedError,
    ResearchTimeoutError,
)
from campaign_clients.research.models import ResearchTask

logger = logging.getLogger(__name__)

DEFAULT_RESEARCH_URL = os.environ.get("EXA_RESEARCH_URL", "https://api.exa.ai/research/v1")
DEFAULT_RESEARCH_MODEL = "exa-research"


def build_company_instructions(search_query: str, company_domain: str | None = None) -> str:
    """Research instructions for a lead's company (or a bare query)."""
    if not company_domain:
        return (
            f"Research and analyze: {search_query}. \n\n"
            "Provide comprehensive information with real sources and citations. "
            "Focus on factual, current information."
        )
    return (
        f"Research the company {company_domain} with focus on: {search_query}. \n\n"
        "Please provide comprehensive information about:\n"
        "1. Company overview and business model\n"
        "2. Products and services offered\n"
        "3. Target market and customer segments\n"
        "4. Recent news, funding, or business developments\n"
        "5. Growth initiatives and market positioning\n"
        "6. Leadership team and key personnel\n"
        "7. Competitive landscape and differentiation\n\n"
        f"Focus specifically on: {search_query}\n\n"
        "Make sure to find real, current information and cite sources. "
        "Don't speculate or add information not found in sources."
    )


class ExaResearchClient:
    """Exa Research API client.

    Research runs as a server-side task: ``create_task`` starts it and
    ``wait_for_completion`` polls with a growing delay until it finishes.

    Args:
        api_key: Exa API key (falls back to ``EXA_API_KEY``).
        base_url: Research endpoint root.
        timeout: Per-request timeout in seconds.
        poll_interval: First poll delay; grows by 1.5x up to ``max_poll_interval``.
        error_backoff: Delay after a failed poll request.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_RESEARCH_URL,
        timeout: float = 30.0,
        poll_interval: float = 1.0,
        max_poll_interval: float = 5.0,
        error_backoff: float = 2.0,
        transport=None,
    ):
        api_key = api_key or os.environ.get("EXA_API_KEY")
        if not api_key:
            raise ResearchError(
                "Exa API key is required. "
                "Pass it directly or set EXA_API_KEY in your environment."
            )
        try:
            import httpx  # noqa: F401
        except ImportError:
            raise ImportError(
                "httpx is required for ExaResearchClient. "
                "Install with: pip install campaign-clients[research]"
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.max_poll_interval = max_poll_interval
        self.error_backoff = error_backoff
        self._transport = transport

    def _http(self):
        import httpx

        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    async def _request(self, method: str, url: str, action: str, **kwargs) -> dict:
        import httpx

        try:
            async with self._http() as client:
                response = await client.request(method, url, **kwargs)
                if response.is_error:
                    raise ResearchError(
                        f"Failed to {action}: {response.status_code} {response.text}",
                        status_code=response.status_code,
                    )
                return response.json()
        except ResearchError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            raise ResearchError(f"Failed to {action}: {e}") from e

    async def create_task(
        self, instructions: str, model: str = DEFAULT_RESEARCH_MODEL
    ) -> ResearchTask:
        """Start a research task."""
        logger.info(f"Creating research task: {instructions[:100]}...")
        data = await self._request(
            "POST",
            self.base_url,
            "create research task",
            json={"model": model, "instructions": instructions},
        )
        task = ResearchTask.from_api(data)
        logger.info(f"Research task created: {task.research_id} ({task.status})")
        return task

    async def get_task(self, research_id: str) -> ResearchTask:
        """Fetch the current state of a research task."""
        data = await self._request(
            "GET", f"{self.base_url}/{research_id}", f"get research task {research_id}"
        )
        return ResearchTask.from_api(data)

    async def wait_for_completion(self, research_id: str, max_wait: float = 300.0) -> ResearchTask:
        """Poll until the task completes; raises on failure, cancel or deadline."""
        logger.info(f"Waiting for research task {research_id} (max {max_wait}s)")
        start = time.monotonic()
        attempts = 0

        while time.monotonic() - start < max_wait:
            attempts += 1
            try:
                task = await self.get_task(research_id)
            except ResearchError as e:
                logger.warning(f"Poll attempt {attempts} failed: {e}")
                await asyncio.sleep(self.error_backoff)
                continue

            logger.debug(f"Poll attempt {attempts}: status = {task.status}")
            if task.status == "completed":
                logger.info(f"Research completed (cost: {task.cost_dollars})")
                return task
            if task.status == "failed":
                raise ResearchTaskFailedError(f"Research task failed: {task.error}")
            if task.status == "canceled":
                raise ResearchTaskFailedError("Research task was canceled")

            delay = min(self.max_poll_interval, self.poll_interval * 1.5 ** (attempts - 1))
            await asyncio.sleep(delay)

        raise ResearchTimeoutError(f"Research task timed out after {max_wait}s")

    async def perform_company_research(
        self,
        search_query: str,
        company_domain: str | None = None,
        max_wait: float = 300.0,
    ) -> ResearchTask:
        """Create a company research task and wait for its result."""
        instructions = build_company_instructions(search_query, company_domain)
        task = await self.create_task(instructions)
        return await self.wait_for_completion(task.research_id, max_wait=max_wait)
