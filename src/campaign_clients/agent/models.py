"""Data models for the agent module."""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class MemoryBlock:
    """A labelled core-memory block attached to the agent."""

    id: str
    label: str
    value: str = ""
    description: str = ""


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class CampaignRequest:
    """Lead and campaign settings for one generation run."""

    search_query: str = ""
    company_domain: str = ""
    linkedin_url: str = ""
    number_of_emails: int = 1
    number_of_threads: int = 1
    language: str = "german"
    formality: str = "Sie"
    lead_name: str = ""
    lead_title: str = ""
    company_name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CampaignRequest":
        """Build from snake_case or camelCase keys (browser form payloads)."""
        kwargs = {}
        for f in fields(cls):
            for key in (f.name, _camel(f.name)):
                if data.get(key) is not None:
                    kwargs[f.name] = data[key]
                    break
        return cls(**kwargs)

    @property
    def research_cache_key(self) -> str:
        domain = (self.company_domain or "").strip().lower()
        query = (self.search_query or "").strip().lower()
        return f"research:{domain}:{query}"

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
