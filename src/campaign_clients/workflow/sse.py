"""Server-Sent Events framing for workflow updates."""

from __future__ import annotations

import json
from typing import AsyncIterable, AsyncIterator

SSE_DONE = "data: [DONE]\n\n"

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_sse(update: dict) -> str:
    return f"data: {json.dumps(update, ensure_ascii=False, default=str)}\n\n"


async def sse_frames(updates: AsyncIterable[dict]) -> AsyncIterator[str]:
    """Encode each update; a completed workflow is followed by ``[DONE]``."""
    async for update in updates:
        yield encode_sse(update)
        if update.get("type") == "workflow_complete":
            yield SSE_DONE
