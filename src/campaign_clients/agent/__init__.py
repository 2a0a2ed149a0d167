"""Stateful copywriting agent (Letta) client and memory management."""

from campaign_clients.agent.client import (
    DEFAULT_PROJECT,
    AgentClient,
    build_prompt,
    parse_stream_event,
)
from campaign_clients.agent.memory import RESEARCH_BLOCK_LABEL, MemoryService
from campaign_clients.agent.models import CampaignRequest, MemoryBlock

__all__ = [
    "DEFAULT_PROJECT",
    "AgentClient",
    "MemoryService",
    "MemoryBlock",
    "CampaignRequest",
    "RESEARCH_BLOCK_LABEL",
    "build_prompt",
    "parse_stream_event",
]
