"""Data models for the Exa research module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ResearchTask:
    """An asynchronous Exa research task."""

    research_id: str
    status: str  # "pending" | "running" | "completed" | "failed" | "canceled"
    model: str = ""
    instructions: str = ""
    created_at: int = 0
    finished_at: int | None = None
    content: str = ""
    cost_dollars: dict = field(default_factory=dict)
    error: str | None = None

    @property
    def duration_ms(self) -> int:
        return self.finished_at - self.created_at if self.finished_at else 0

    @classmethod
    def from_api(cls, data: dict) -> "ResearchTask":
        output = data.get("output") or {}
        return cls(
            research_id=str(data.get("researchId") or data.get("id") or ""),
            status=str(data.get("status") or "pending"),
            model=data.get("model") or "",
            instructions=data.get("instructions") or "",
            created_at=int(data.get("createdAt") or 0),
            finished_at=data.get("finishedAt"),
            content=(output.get("content") or "") if isinstance(output, dict) else "",
            cost_dollars=data.get("costDollars") or {},
            error=data.get("error"),
        )


@dataclass
class SearchResult:
    """A single Exa search hit."""

    title: str
    url: str
    text: str = ""
    published_date: str | None = None
    author: str | None = None
    highlights: list[str] = field(default_factory=list)
    score: float = 0.0
