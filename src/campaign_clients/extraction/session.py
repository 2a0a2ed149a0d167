"""One generation session: accumulate the stream, then extract emails."""

from __future__ import annotations

import logging
from typing import AsyncIterable

from campaign_clients.extraction.accumulator import StreamAccumulator
from campaign_clients.extraction.extractor import extract_campaign_from_transcript
from campaign_clients.extraction.mapper import map_campaign_to_emails
from campaign_clients.extraction.models import (
    FINAL_ANSWER,
    REASONING,
    GenerationResult,
    StreamEvent,
)

logger = logging.getLogger(__name__)


class GenerationSession:
    """Owns the text buffers of a single agent generation.

    Usage::

        session = GenerationSession()
        async for event in agent.stream_events(prompt):
            session.feed(event)
        result = session.finalize()
    """

    def __init__(self):
        self.accumulator = StreamAccumulator()
        self.event_count = 0

    @property
    def reasoning(self) -> str:
        return self.accumulator.current(REASONING)

    @property
    def answer(self) -> str:
        return self.accumulator.current(FINAL_ANSWER)

    def feed(self, event: StreamEvent) -> str | None:
        """Record one event; returns the updated buffer when text changed."""
        self.event_count += 1
        return self.accumulator.feed(event)

    async def consume(self, events: AsyncIterable[StreamEvent]) -> GenerationResult:
        """Drain ``events`` and finalize."""
        async for event in events:
            self.feed(event)
        return self.finalize()

    def finalize(self) -> GenerationResult:
        answer_text = self.accumulator.text(FINAL_ANSWER)
        reasoning_text = self.accumulator.text(REASONING)
        logger.debug(
            f"Finalizing session: {self.event_count} events, "
            f"answer {len(answer_text)} chars, reasoning {len(reasoning_text)} chars"
        )

        campaign = extract_campaign_from_transcript(answer_text, reasoning_text)
        emails = map_campaign_to_emails(campaign) if campaign is not None else []
        logger.info(f"Session parsed={campaign is not None} emails={len(emails)}")

        return GenerationResult(
            emails=emails,
            campaign=campaign,
            answer_text=answer_text,
            reasoning_text=reasoning_text,
            event_count=self.event_count,
        )
