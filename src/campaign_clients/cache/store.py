"""In-memory TTL cache for research text and campaign sessions."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expires: float | None
    created: float


class TTLCache:
    """Key-value store whose entries may expire.

    Expired entries are dropped when read, and a full sweep runs on writes
    once ``cleanup_interval`` seconds have passed since the last sweep. No
    background thread is started.

    Args:
        default_ttl: TTL in seconds applied when ``set`` gets none (None = never).
        cleanup_interval: Minimum seconds between sweeps.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        default_ttl: float | None = None,
        cleanup_interval: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return entry.expires is not None and now > entry.expires

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        now = self._clock()
        ttl = ttl if ttl is not None else self.default_ttl
        expires = now + ttl if ttl else None
        self._entries[key] = CacheEntry(value=value, expires=expires, created=now)
        logger.debug(f"Cache set: {key} (TTL: {f'{ttl}s' if ttl else 'none'})")
        if now - self._last_cleanup >= self.cleanup_interval:
            self.cleanup()

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self._expired(entry, self._clock()):
            del self._entries[key]
            logger.debug(f"Cache expired and removed: {key}")
            return default
        logger.debug(f"Cache hit: {key}")
        return entry.value

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._expired(entry, self._clock()):
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        deleted = self._entries.pop(key, None) is not None
        if deleted:
            logger.debug(f"Cache deleted: {key}")
        return deleted

    def clear(self) -> None:
        size = len(self._entries)
        self._entries.clear()
        logger.debug(f"Cache cleared: {size} entries removed")

    def keys(self) -> list[str]:
        return list(self._entries)

    def cleanup(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for key in expired:
            del self._entries[key]
        self._last_cleanup = now
        if expired:
            logger.info(f"Cache cleanup: {len(expired)} expired entries removed")
        return len(expired)

    def stats(self) -> dict:
        now = self._clock()
        expired = sum(1 for e in self._entries.values() if self._expired(e, now))
        return {
            "size": len(self._entries),
            "expired": expired,
            "active": len(self._entries) - expired,
        }

    def entry_info(self, key: str) -> dict:
        entry = self._entries.get(key)
        if entry is None:
            return {"exists": False}
        now = self._clock()
        return {
            "exists": True,
            "expired": self._expired(entry, now),
            "age": now - entry.created,
        }


class CampaignCache(TTLCache):
    """TTL cache with key helpers for research text and campaign sessions."""

    RESPONSE_TTL = 15 * 60
    MESSAGES_TTL = 30 * 60
    RESEARCH_TTL = 60 * 60

    @staticmethod
    def new_session_id() -> str:
        return f"session:{int(time.time() * 1000)}:{uuid.uuid4().hex[:9]}"

    @staticmethod
    def campaign_key(session_id: str, agent_id: str, step: str) -> str:
        return f"{session_id}:agent:{agent_id}:{step}"

    def set_campaign_response(
        self, session_id: str, agent_id: str, response: Any, ttl: float = RESPONSE_TTL
    ) -> str:
        key = self.campaign_key(session_id, agent_id, "response")
        self.set(key, response, ttl)
        return key

    def get_campaign_response(self, session_id: str, agent_id: str) -> Any:
        return self.get(self.campaign_key(session_id, agent_id, "response"))

    def set_campaign_messages(
        self, session_id: str, agent_id: str, messages: list, ttl: float = MESSAGES_TTL
    ) -> str:
        key = self.campaign_key(session_id, agent_id, "messages")
        self.set(key, messages, ttl)
        return key

    def get_campaign_messages(self, session_id: str, agent_id: str) -> list | None:
        return self.get(self.campaign_key(session_id, agent_id, "messages"))

    def set_research(self, key: str, research: str, ttl: float = RESEARCH_TTL) -> str:
        self.set(key, research, ttl)
        return key

    def get_research(self, key: str) -> str | None:
        return self.get(key)
