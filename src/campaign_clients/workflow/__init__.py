"""End-to-end campaign generation workflow and SSE framing."""

from campaign_clients.workflow.runner import CampaignWorkflow
from campaign_clients.workflow.sse import SSE_DONE, SSE_HEADERS, encode_sse, sse_frames

__all__ = ["CampaignWorkflow", "SSE_DONE", "SSE_HEADERS", "encode_sse", "sse_frames"]
