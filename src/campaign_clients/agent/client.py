"""Letta agent client: reset conversation state and stream generations."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any, AsyncIterator

from campaign_clients.agent.models import CampaignRequest
from campaign_clients.exceptions import AgentError, AgentStreamError
from campaign_clients.extraction.models import (
    FINAL_ANSWER,
    KEEPALIVE,
    OTHER,
    REASONING,
    StreamEvent,
)
from campaign_clients.retry import status_code_of

logger = logging.getLogger(__name__)


DEFAULT_PROJECT = os.environ.get("LETTA_PROJECT", "copywriting-demo").strip()
DEFAULT_MAX_STEPS = 50

_KIND_BY_MESSAGE_TYPE = {
    "reasoning_message": REASONING,
    "assistant_message": FINAL_ANSWER,
    "ping": KEEPALIVE,
}


def _get(payload: Any, name: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name)
    return getattr(payload, name, None)


def _first_not_none(*values: Any) -> Any:
    return next((v for v in values if v is not None), None)


def parse_stream_event(payload: Any) -> StreamEvent:
    """Convert a streamed Letta message (SDK model or dict) to a StreamEvent."""
    message_type = str(_get(payload, "message_type") or _get(payload, "messageType") or "")
    kind = _KIND_BY_MESSAGE_TYPE.get(message_type, OTHER)

    if kind == REASONING:
        content = _first_not_none(_get(payload, "reasoning"), _get(payload, "content"))
    elif kind == FINAL_ANSWER:
        content = _first_not_none(_get(payload, "assistant_message"), _get(payload, "content"))
    elif kind == KEEPALIVE:
        content = None
    else:
        content = _get(payload, "content")

    return StreamEvent(
        kind=kind,
        message_id=str(_get(payload, "id") or ""),
        content=content,
        message_type=message_type,
    )


def build_prompt(request: CampaignRequest) -> str:
    """The structured JSON message the copywriting agent expects."""
    name_parts = (request.lead_name or "").split(" ")
    lead_information = {
        "lead_name": name_parts[0] if request.lead_name else "",
        "lead_surname": " ".join(name_parts[1:]),
        "lead_default_position_title": request.lead_title or "",
        "employer": request.company_name or "",
        "lead_current_title": request.lead_title or "",
        "lead_company_domain": request.company_domain or "",
        "lead_company_name": request.company_name or "",
        "linkedin_url": request.linkedin_url or "",
    }
    campaign_information = {
        "number_threads": str(request.number_of_threads or 1),
        "number_emails": str(request.number_of_emails or 1),
        "language": request.language or "german",
        "formality": request.formality or "Sie",
    }
    return json.dumps(
        {"campaign_information": campaign_information, "lead_information": lead_information},
        indent=2,
        ensure_ascii=False,
    )


class AgentClient:
    """Asynchronous wrapper around the Letta SDK for one stateful agent.

    Args:
        api_key: Letta API token (falls back to ``LETTA_API_KEY``).
        agent_id: Target agent (falls back to ``LETTA_AGENT_ID``).
        project: Letta project slug.
        base_url: Optional self-hosted server URL (falls back to ``LETTA_BASE_URL``).
        max_steps: Agent step budget per generation.
        client: Pre-built ``AsyncLetta`` instance (skips SDK construction).
    """

    def __init__(
        self,
        api_key: str | None = None,
        agent_id: str | None = None,
        project: str = DEFAULT_PROJECT,
        base_url: str | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        client: Any = None,
    ):
        agent_id = agent_id or os.environ.get("LETTA_AGENT_ID")
        if not agent_id:
            raise AgentError(
                "Letta agent ID is required. "
                "Pass it directly or set LETTA_AGENT_ID in your environment."
            )
        if client is None:
            api_key = api_key or os.environ.get("LETTA_API_KEY")
            if not api_key:
                raise AgentError(
                    "Letta API key is required. "
                    "Pass it directly or set LETTA_API_KEY in your environment."
                )
            try:
                from letta_client import AsyncLetta
            except ImportError:
                raise ImportError(
                    "letta-client is required for AgentClient. "
                    "Install with: pip install campaign-clients[agent]"
                )
            kwargs: dict[str, Any] = {"token": api_key, "project": project}
            base_url = base_url or os.environ.get("LETTA_BASE_URL")
            if base_url:
                kwargs["base_url"] = base_url
            client = AsyncLetta(**kwargs)
            logger.debug(f"Letta client created for project {project!r}")

        self._client = client
        self.agent_id = agent_id
        self.project = project
        self.max_steps = max_steps

    @property
    def client(self):
        """Access the underlying Letta SDK client for advanced usage."""
        return self._client

    async def reset_messages(self) -> None:
        """Clear the agent's conversation so the next run starts cold."""
        logger.info(f"Resetting conversation state for agent {self.agent_id}")
        try:
            await self._client.agents.messages.reset(
                agent_id=self.agent_id, add_default_initial_messages=False
            )
        except Exception as e:
            raise AgentError(
                f"Failed to reset agent state: {e}", status_code=status_code_of(e)
            ) from e

    async def stream_events(self, prompt: str) -> AsyncIterator[StreamEvent]:
        """Send ``prompt`` and yield token-level stream events, pings included."""
        try:
            stream = self._client.agents.messages.create_stream(
                agent_id=self.agent_id,
                messages=[{"role": "user", "content": prompt}],
                stream_tokens=True,
                include_pings=True,
                enable_thinking="true",
                max_steps=self.max_steps,
            )
            async for payload in stream:
                event = parse_stream_event(payload)
                if event.kind == OTHER:
                    logger.debug(f"Passing through {event.message_type or 'untyped'} message")
                yield event
        except Exception as e:
            status = status_code_of(e)
            if status == 400:
                logger.error(
                    f"Bad request streaming agent {self.agent_id} "
                    f"(project {self.project!r}, prompt {len(prompt)} chars)"
                )
            raise AgentStreamError(
                f"Failed to stream email generation: {e}", status_code=status
            ) from e

    def build_prompt(self, request: CampaignRequest) -> str:
        return build_prompt(request)
