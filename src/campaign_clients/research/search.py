"""Exa Search API client for company pages and news."""

from __future__ import annotations

import logging
import os

from campaign_clients.exceptions import ResearchError
from campaign_clients.research.models import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = os.environ.get("EXA_SEARCH_URL", "https://api.exa.ai/search")


def format_results_for_memory(results: list[SearchResult], max_text: int = 500) -> str:
    """Render search hits as the plain-text research block given to the agent."""
    return "\n\n".join(
        f"Title: {r.title}\nURL: {r.url}\nContent: {r.text[:max_text]}..." for r in results
    )


class ExaSearchClient:
    """Exa neural search client.

    Args:
        api_key: Exa API key (falls back to ``EXA_API_KEY``).
        transport: Optional httpx transport (used by tests).
    """

    def __init__(self, api_key: str | None = None, transport=None):
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
                "httpx is required for ExaSearchClient. "
                "Install with: pip install campaign-clients[research]"
            )
        self.api_key = api_key
        self._transport = transport

    async def search(
        self, query: str, domain: str | None = None, num_results: int = 10
    ) -> list[SearchResult]:
        """Neural search with page text and highlights, optionally domain-focused."""
        import httpx

        search_query = f'{query} site:{domain} OR "{domain}"' if domain else query
        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
                response = await client.post(
                    DEFAULT_SEARCH_URL,
                    json={
                        "query": search_query,
                        "type": "neural",
                        "useAutoprompt": True,
                        "numResults": num_results,
                        "contents": {
                            "text": {"maxCharacters": 2000, "includeHtmlTags": False},
                            "highlights": {"numSentences": 3},
                        },
                    },
                    headers={"x-api-key": self.api_key, "Accept": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ResearchError(
                f"Exa search failed: {e}", status_code=e.response.status_code
            ) from e
        except Exception as e:
            raise ResearchError(f"Exa search failed: {e}") from e

        return [
            SearchResult(
                title=item.get("title") or "Untitled",
                url=item.get("url", ""),
                text=item.get("text") or "",
                published_date=item.get("publishedDate"),
                author=item.get("author"),
                highlights=item.get("highlights") or [],
                score=item.get("score") or 0.0,
            )
            for item in data.get("results", [])
        ]

    async def company_news(self, domain: str, limit: int = 5) -> list[SearchResult]:
        """Most recent dated news hits for a company domain; empty on failure."""
        try:
            results = await self.search(f'news updates press releases "{domain}"', domain)
        except ResearchError as e:
            logger.warning(f"Failed to get company news for {domain}: {e}")
            return []
        dated = [r for r in results if r.published_date]
        dated.sort(key=lambda r: r.published_date, reverse=True)
        return dated[:limit]
