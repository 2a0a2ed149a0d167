"""Tests for agent memory block management."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from campaign_clients.agent.memory import (
    MAX_BLOCK_CHARS,
    RESEARCH_BLOCK_LABEL,
    MemoryService,
)
from campaign_clients.exceptions import MemoryBlockError


def _fake_sdk(blocks):
    sdk = MagicMock()
    sdk.agents.blocks.list = AsyncMock(return_value=blocks)
    sdk.agents.blocks.modify = AsyncMock(
        side_effect=lambda **kw: SimpleNamespace(id="b1", label=kw["block_label"], value=kw["value"])
    )
    sdk.blocks.create = AsyncMock(
        side_effect=lambda **kw: SimpleNamespace(id="new-block", label=kw["label"], value=kw["value"])
    )
    sdk.agents.blocks.attach = AsyncMock()
    return sdk


def test_list_blocks_accepts_objects_and_dicts():
    sdk = _fake_sdk([
        SimpleNamespace(id="b1", label="persona", value="I write emails", description=None),
        {"id": "b2", "label": None, "value": None},
    ])
    blocks = asyncio.run(MemoryService(sdk).list_blocks("a1"))
    assert [b.label for b in blocks] == ["persona", "unlabeled"]
    assert blocks[1].value == ""
    sdk.agents.blocks.list.assert_awaited_once_with(agent_id="a1")


def test_list_blocks_wraps_errors():
    sdk = _fake_sdk([])
    sdk.agents.blocks.list.side_effect = RuntimeError("offline")
    with pytest.raises(MemoryBlockError, match="Failed to list memory blocks"):
        asyncio.run(MemoryService(sdk).list_blocks("a1"))


def test_find_block_by_label():
    sdk = _fake_sdk([SimpleNamespace(id="b1", label="persona", value="", description="")])
    service = MemoryService(sdk)
    assert asyncio.run(service.find_block_by_label("a1", "persona")).id == "b1"
    assert asyncio.run(service.find_block_by_label("a1", "missing")) is None


def test_update_existing_block():
    sdk = _fake_sdk([
        SimpleNamespace(id="b1", label=RESEARCH_BLOCK_LABEL, value="old", description="desc")
    ])
    block = asyncio.run(MemoryService(sdk).update_block_by_label("a1", RESEARCH_BLOCK_LABEL, "new"))

    assert block.value == "new"
    sdk.agents.blocks.modify.assert_awaited_once_with(
        agent_id="a1", block_label=RESEARCH_BLOCK_LABEL, value="new", description="desc"
    )
    sdk.blocks.create.assert_not_awaited()


def test_create_and_attach_missing_block():
    sdk = _fake_sdk([])
    block = asyncio.run(MemoryService(sdk).update_block_by_label("a1", "notes", "text"))

    assert block.id == "new-block"
    assert block.label == "notes"
    sdk.blocks.create.assert_awaited_once_with(
        label="notes", value="text", description="notes memory block"
    )
    sdk.agents.blocks.attach.assert_awaited_once_with(agent_id="a1", block_id="new-block")


def test_value_is_truncated():
    sdk = _fake_sdk([])
    block = asyncio.run(
        MemoryService(sdk).update_block_by_label("a1", "notes", "x" * (MAX_BLOCK_CHARS + 100))
    )
    assert len(block.value) == MAX_BLOCK_CHARS
    assert len(sdk.blocks.create.await_args.kwargs["value"]) == MAX_BLOCK_CHARS


def test_update_wraps_errors():
    sdk = _fake_sdk([])
    sdk.blocks.create.side_effect = RuntimeError("quota")
    with pytest.raises(MemoryBlockError, match="Failed to update memory block notes"):
        asyncio.run(MemoryService(sdk).update_block_by_label("a1", "notes", "text"))


def test_update_lead_research_uses_research_label():
    sdk = _fake_sdk([])
    block = asyncio.run(MemoryService(sdk).update_lead_research("a1", "Acme research"))
    assert block.label == RESEARCH_BLOCK_LABEL
    assert "Exa" in sdk.blocks.create.await_args.kwargs["description"]
