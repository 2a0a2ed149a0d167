"""Agent core-memory block management."""

from __future__ import annotations

import logging
from typing import Any

from campaign_clients.agent.models import MemoryBlock
from campaign_clients.exceptions import MemoryBlockError
from campaign_clients.retry import status_code_of

logger = logging.getLogger(__name__)

MAX_BLOCK_CHARS = 4500
RESEARCH_BLOCK_LABEL = "lead-company-research"
RESEARCH_BLOCK_DESCRIPTION = (
    "Company research data from Exa API - used for email personalization"
)


def _to_block(raw: Any) -> MemoryBlock:
    def get(name: str) -> Any:
        return raw.get(name) if isinstance(raw, dict) else getattr(raw, name, None)

    return MemoryBlock(
        id=str(get("id") or ""),
        label=get("label") or "unlabeled",
        value=get("value") or "",
        description=get("description") or "",
    )


class MemoryService:
    """Read and write labelled memory blocks on a Letta agent.

    Args:
        client: An ``AsyncLetta`` SDK client (see ``AgentClient.client``).
    """

    def __init__(self, client: Any):
        self._client = client

    async def list_blocks(self, agent_id: str) -> list[MemoryBlock]:
        """All core-memory blocks attached to ``agent_id``."""
        try:
            raw_blocks = await self._client.agents.blocks.list(agent_id=agent_id)
        except Exception as e:
            raise MemoryBlockError(
                f"Failed to list memory blocks: {e}", status_code=status_code_of(e)
            ) from e
        blocks = [_to_block(b) for b in raw_blocks]
        logger.info(f"Found {len(blocks)} memory blocks on agent {agent_id}")
        return blocks

    async def find_block_by_label(self, agent_id: str, label: str) -> MemoryBlock | None:
        blocks = await self.list_blocks(agent_id)
        return next((b for b in blocks if b.label == label), None)

    async def update_block_by_label(
        self,
        agent_id: str,
        label: str,
        value: str,
        description: str | None = None,
    ) -> MemoryBlock:
        """Overwrite the block called ``label``, creating and attaching it if absent.

        Values are truncated to ``MAX_BLOCK_CHARS`` to fit the agent's memory
        limits.
        """
        existing = await self.find_block_by_label(agent_id, label)
        value = value[:MAX_BLOCK_CHARS]

        try:
            if existing is not None:
                logger.info(f"Updating memory block {label!r}")
                raw = await self._client.agents.blocks.modify(
                    agent_id=agent_id,
                    block_label=label,
                    value=value,
                    description=description or existing.description or f"Updated {label} block",
                )
            else:
                logger.info(f"Creating memory block {label!r}")
                raw = await self._client.blocks.create(
                    label=label,
                    value=value,
                    description=description or f"{label} memory block",
                )
                block_id = _to_block(raw).id
                await self._client.agents.blocks.attach(agent_id=agent_id, block_id=block_id)
                logger.info(f"Attached block {block_id} to agent {agent_id}")
        except Exception as e:
            raise MemoryBlockError(
                f"Failed to update memory block {label}: {e}", status_code=status_code_of(e)
            ) from e

        block = _to_block(raw) if raw is not None else MemoryBlock(id="", label=label)
        block.label = label
        block.value = value
        return block

    async def update_lead_research(self, agent_id: str, research: str) -> MemoryBlock:
        """Store company research in the ``lead-company-research`` block."""
        return await self.update_block_by_label(
            agent_id, RESEARCH_BLOCK_LABEL, research, RESEARCH_BLOCK_DESCRIPTION
        )
