"""Tests for the five-step campaign workflow."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

from campaign_clients.agent.client import build_prompt
from campaign_clients.agent.memory import RESEARCH_BLOCK_LABEL
from campaign_clients.agent.models import CampaignRequest, MemoryBlock
from campaign_clients.cache.store import CampaignCache
from campaign_clients.exceptions import AgentStreamError, ResearchError
from campaign_clients.extraction.models import (
    FINAL_ANSWER,
    KEEPALIVE,
    REASONING,
    StreamEvent,
)
from campaign_clients.research.models import ResearchTask
from campaign_clients.workflow.runner import STEP_KEYS, CampaignWorkflow

CAMPAIGN = {"emails": [{"subject": "Hallo Anna", "body": "Kurze Frage", "cta_type": "call"}]}

EVENTS = [
    StreamEvent(kind=KEEPALIVE),
    StreamEvent(kind=REASONING, message_id="r1", content="Planning"),
    StreamEvent(kind=FINAL_ANSWER, message_id="a1", content="```json\n"),
    StreamEvent(kind=FINAL_ANSWER, message_id="a1", content=json.dumps(CAMPAIGN) + "\n```"),
]


def _fakes(events=EVENTS, stream_error=None):
    research = MagicMock()
    research.perform_company_research = AsyncMock(
        return_value=ResearchTask(
            research_id="r1", status="completed", created_at=0, finished_at=10,
            content="Acme sells anvils.",
        )
    )

    agent = MagicMock()
    agent.agent_id = "agent-1"
    agent.reset_messages = AsyncMock()
    agent.build_prompt = build_prompt

    async def stream_events(prompt):
        agent.prompt = prompt
        for event in events:
            yield event
        if stream_error is not None:
            raise stream_error

    agent.stream_events = stream_events

    memory = MagicMock()
    memory.list_blocks = AsyncMock(return_value=[MemoryBlock(id="b1", label="persona")])
    memory.update_lead_research = AsyncMock()
    return research, agent, memory


def _run(workflow, request):
    async def collect():
        return [update async for update in workflow.run(request)]

    return asyncio.run(collect())


def _request():
    return CampaignRequest(search_query="growth", company_domain="acme.com", lead_name="Anna")


def test_full_run_update_sequence():
    research, agent, memory = _fakes()
    cache = CampaignCache()
    updates = _run(CampaignWorkflow(research, agent, memory, cache=cache), _request())
    types = [u["type"] for u in updates]

    assert types == [
        "status", "status", "research_complete",
        "status", "agent_ready",
        "status", "memory_updated",
        "status", "state_reset",
        "status", "agent_thinking",
        "ping", "reasoning_step", "email_generated", "email_generated",
        "final_emails", "workflow_complete",
    ]
    assert [u["step"] for u in updates if u["type"] == "status"] == [1, 1, 2, 3, 4, 5]

    final = next(u for u in updates if u["type"] == "final_emails")
    assert final["emails"] == [
        {"subject": "Hallo Anna", "body": "Kurze Frage", "cta_type": "call", "email_number": 1}
    ]

    complete = updates[-1]
    assert complete["success"] is True
    assert set(complete["results"]) == set(STEP_KEYS)
    assert complete["results"]["step2_agent_discovery"]["memory_labels"] == ["persona"]
    assert cache.get_campaign_response(complete["session_id"], "agent-1") == [
        {"subject": "Hallo Anna", "body": "Kurze Frage", "cta_type": "call"}
    ]

    research.perform_company_research.assert_awaited_once_with("growth", "acme.com", 300.0)
    memory.update_lead_research.assert_awaited_once_with("agent-1", "Acme sells anvils.")
    agent.reset_messages.assert_awaited_once()
    assert json.loads(agent.prompt)["lead_information"]["lead_name"] == "Anna"
    assert complete["results"]["step3_memory_management"]["block_label"] == RESEARCH_BLOCK_LABEL


def test_live_updates_carry_accumulated_text():
    research, agent, memory = _fakes()
    updates = _run(CampaignWorkflow(research, agent, memory), _request())
    generated = [u["content"] for u in updates if u["type"] == "email_generated"]
    assert generated[0] == "```json\n"
    assert generated[-1].endswith("```")
    assert next(u for u in updates if u["type"] == "reasoning_step")["content"] == "Planning"


def test_cached_research_skips_research_call():
    research, agent, memory = _fakes()
    cache = CampaignCache()
    cache.set_research(_request().research_cache_key, "Cached research")

    updates = _run(CampaignWorkflow(research, agent, memory, cache=cache), _request())
    research.perform_company_research.assert_not_awaited()
    assert {"type": "status", "step": 1, "message": "Using cached research"} in updates
    step1 = next(u for u in updates if u["type"] == "research_complete")["results"]
    assert step1["from_cache"] is True
    memory.update_lead_research.assert_awaited_once_with("agent-1", "Cached research")


def test_research_is_cached_for_next_run():
    research, agent, memory = _fakes()
    workflow = CampaignWorkflow(research, agent, memory)
    _run(workflow, _request())
    _run(workflow, _request())
    assert research.perform_company_research.await_count == 1


def test_no_campaign_in_answer_completes_unsuccessfully():
    events = [StreamEvent(kind=FINAL_ANSWER, message_id="a", content="I could not do it.")]
    research, agent, memory = _fakes(events=events)
    updates = _run(CampaignWorkflow(research, agent, memory), _request())
    final = next(u for u in updates if u["type"] == "final_emails")
    assert final["emails"] == []
    assert final["raw_assistant_text"] == "I could not do it."
    assert updates[-1]["type"] == "workflow_complete"
    assert updates[-1]["success"] is False


def test_stream_failure_reports_workflow_error():
    research, agent, memory = _fakes(
        events=EVENTS[:2], stream_error=AgentStreamError("connection dropped")
    )
    updates = _run(CampaignWorkflow(research, agent, memory), _request())
    last = updates[-1]
    assert last["type"] == "workflow_error"
    assert last["error"] == "connection dropped"
    assert last["results"]["step5_email_generation"]["success"] is False
    assert last["results"]["step5_email_generation"]["message_count"] == 2
    assert "final_emails" not in [u["type"] for u in updates]


def test_research_failure_is_fatal():
    research, agent, memory = _fakes()
    research.perform_company_research.side_effect = ResearchError("bad query", status_code=400)
    updates = _run(CampaignWorkflow(research, agent, memory), _request())
    assert updates[-1] == {"type": "fatal_error", "error": "bad query"}
    memory.list_blocks.assert_not_awaited()


def test_empty_research_is_not_cached():
    research, agent, memory = _fakes()
    research.perform_company_research.return_value = ResearchTask(
        research_id="r1", status="completed", content=""
    )
    cache = CampaignCache()
    workflow = CampaignWorkflow(research, agent, memory, cache=cache)

    _run(workflow, _request())
    updates = _run(workflow, _request())

    assert research.perform_company_research.await_count == 2
    assert cache.get_research(_request().research_cache_key) is None
    statuses = [u["message"] for u in updates if u["type"] == "status" and u["step"] == 1]
    assert statuses == ["Checking research cache...", "Starting comprehensive research..."]
