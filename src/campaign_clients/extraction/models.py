"""Data models for the stream extraction module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

REASONING = "reasoning"
FINAL_ANSWER = "final_answer"
KEEPALIVE = "keepalive"
OTHER = "other"


@dataclass(frozen=True)
class StreamEvent:
    """One fragment observed on the agent stream."""

    kind: str  # REASONING | FINAL_ANSWER | KEEPALIVE | OTHER
    message_id: str = ""
    content: Any = None
    message_type: str = ""


@dataclass(frozen=True)
class EmailRecord:
    """A single email recovered from the agent's campaign output."""

    subject: str = ""
    body: str = ""
    cta_type: str = ""

    def to_dict(self) -> dict:
        return {"subject": self.subject, "body": self.body, "cta_type": self.cta_type}


@dataclass
class GenerationResult:
    """Outcome of one generation session once the stream has drained."""

    emails: list[EmailRecord] = field(default_factory=list)
    campaign: dict | None = None
    answer_text: str = ""
    reasoning_text: str = ""
    event_count: int = 0

    @property
    def transcript(self) -> str:
        return "\n".join(part for part in (self.answer_text, self.reasoning_text) if part)

    @property
    def success(self) -> bool:
        return len(self.emails) > 0
