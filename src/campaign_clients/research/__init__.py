"""Exa research and search clients."""

from campaign_clients.research.client import ExaResearchClient, build_company_instructions
from campaign_clients.research.models import ResearchTask, SearchResult
from campaign_clients.research.search import ExaSearchClient, format_results_for_memory

__all__ = [
    "ExaResearchClient",
    "ExaSearchClient",
    "ResearchTask",
    "SearchResult",
    "build_company_instructions",
    "format_results_for_memory",
]
