"""Five-step campaign workflow: research, agent discovery, memory, reset, generate."""

from __future__ import annotations

import logging
import time
from typing import AsyncIterator

from campaign_clients.agent.client import AgentClient
from campaign_clients.agent.memory import RESEARCH_BLOCK_LABEL, MemoryService
from campaign_clients.agent.models import CampaignRequest
from campaign_clients.cache.store import CampaignCache
from campaign_clients.extraction.models import FINAL_ANSWER, KEEPALIVE, REASONING
from campaign_clients.extraction.session import GenerationSession
from campaign_clients.research.client import ExaResearchClient
from campaign_clients.retry import with_agent_retry, with_memory_retry, with_research_retry

logger = logging.getLogger(__name__)

AGENT_NAME = "Letta Copywriter"
STEP_KEYS = (
    "step1_research",
    "step2_agent_discovery",
    "step3_memory_management",
    "step4_state_reset",
    "step5_email_generation",
)


def _status(step: int, message: str) -> dict:
    return {"type": "status", "step": step, "message": message}


class CampaignWorkflow:
    """Runs one campaign generation and reports progress as update dicts.

    ``run`` is an async generator; each yielded dict has a ``type`` key
    (``status``, ``research_complete``, ``agent_ready``, ``memory_updated``,
    ``state_reset``, ``agent_thinking``, ``ping``, ``reasoning_step``,
    ``email_generated``, ``final_emails``, ``workflow_complete``,
    ``workflow_error`` or ``fatal_error``). Failures are reported as the last
    update rather than raised, so the stream can always be closed cleanly.

    Args:
        research: Exa research client.
        agent: Letta agent client.
        memory: Memory service bound to the agent's SDK client.
        cache: Cache for research text and finished campaigns.
        research_ttl: Seconds to keep research for the same domain and query.
        research_max_wait: Deadline in seconds for one research task.
    """

    def __init__(
        self,
        research: ExaResearchClient,
        agent: AgentClient,
        memory: MemoryService,
        cache: CampaignCache | None = None,
        research_ttl: float = 30 * 60,
        research_max_wait: float = 300.0,
    ):
        self.research = research
        self.agent = agent
        self.memory = memory
        self.cache = cache if cache is not None else CampaignCache()
        self.research_ttl = research_ttl
        self.research_max_wait = research_max_wait

    async def run(self, request: CampaignRequest) -> AsyncIterator[dict]:
        session_id = self.cache.new_session_id()
        logger.info(f"Starting campaign workflow for {session_id}")
        try:
            async for update in self._run(request, session_id):
                yield update
        except Exception as e:
            logger.exception(f"Campaign workflow {session_id} failed")
            yield {"type": "fatal_error", "error": str(e)}

    async def _run(self, request: CampaignRequest, session_id: str) -> AsyncIterator[dict]:
        results: dict = {key: None for key in STEP_KEYS}
        agent_id = self.agent.agent_id

        # Step 1: research, reusing cached text for the same domain and query
        yield _status(1, "Checking research cache...")
        cache_key = request.research_cache_key
        research = self.cache.get_research(cache_key)
        if not research:
            yield _status(1, "Starting comprehensive research...")
            task = await with_research_retry(
                lambda: self.research.perform_company_research(
                    request.search_query, request.company_domain, self.research_max_wait
                ),
                "Research generation",
            )
            research = task.content
            results["step1_research"] = {
                "success": True,
                "research_id": task.research_id,
                "content": research,
                "content_length": len(research),
                "cost": task.cost_dollars,
                "duration_ms": task.duration_ms,
            }
            if research:
                self.cache.set_research(cache_key, research, self.research_ttl)
            else:
                logger.warning(f"Research for {cache_key} returned no content; not caching")
        else:
            yield _status(1, "Using cached research")
            results["step1_research"] = {
                "success": True,
                "from_cache": True,
                "content": research,
                "content_length": len(research),
            }
        yield {"type": "research_complete", "results": results["step1_research"]}

        # Step 2: agent discovery
        yield _status(2, "Connecting to AI agent...")
        blocks = await with_memory_retry(
            lambda: self.memory.list_blocks(agent_id), "Agent discovery"
        )
        results["step2_agent_discovery"] = {
            "success": True,
            "agent_name": AGENT_NAME,
            "memory_block_count": len(blocks),
            "memory_labels": [b.label for b in blocks],
        }
        yield {"type": "agent_ready", "results": results["step2_agent_discovery"]}

        # Step 3: push research into agent memory
        yield _status(3, "Updating agent memory with research...")
        await with_memory_retry(
            lambda: self.memory.update_lead_research(agent_id, research), "Memory update"
        )
        results["step3_memory_management"] = {
            "success": True,
            "block_label": RESEARCH_BLOCK_LABEL,
            "updated": True,
        }
        yield {"type": "memory_updated", "results": results["step3_memory_management"]}

        # Step 4: fresh conversation
        yield _status(4, "Preparing agent for fresh conversation...")
        await with_agent_retry(self.agent.reset_messages, "State reset")
        results["step4_state_reset"] = {"success": True, "reset_type": "full reset"}
        yield {"type": "state_reset", "results": results["step4_state_reset"]}

        # Step 5: stream the generation
        yield _status(5, "Agent is analyzing and crafting your email...")
        prompt = self.agent.build_prompt(request)
        session = GenerationSession()
        yield {"type": "agent_thinking", "message": "Agent connected and processing..."}

        try:
            async for event in self.agent.stream_events(prompt):
                updated = session.feed(event)
                if event.kind == KEEPALIVE:
                    yield {"type": "ping", "t": int(time.time() * 1000)}
                elif event.kind == REASONING and updated:
                    yield {"type": "reasoning_step", "step": 1, "content": session.reasoning}
                elif event.kind == FINAL_ANSWER and updated:
                    yield {"type": "email_generated", "content": session.answer}
        except Exception as e:
            logger.exception(f"Streaming email generation failed for {session_id}")
            results["step5_email_generation"] = {
                "success": False,
                "error": str(e),
                "message_count": session.event_count,
            }
            yield {"type": "workflow_error", "error": str(e), "results": results}
            return

        result = session.finalize()
        emails = [email.to_dict() for email in result.emails]
        results["step5_email_generation"] = {
            "success": result.success,
            "message_count": result.event_count,
            "reasoning": result.reasoning_text,
            "emails": emails,
            "campaign_data": request.to_dict(),
            "raw_assistant_text": result.answer_text,
            "raw_transcript": result.transcript,
        }
        self.cache.set_campaign_response(session_id, agent_id, emails)

        yield {
            "type": "final_emails",
            "emails": [{**email, "email_number": i + 1} for i, email in enumerate(emails)],
            "raw_assistant_text": result.answer_text,
        }
        yield {
            "type": "workflow_complete",
            "success": result.success,
            "session_id": session_id,
            "results": results,
        }
