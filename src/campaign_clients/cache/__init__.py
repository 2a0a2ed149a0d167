"""Explicit in-memory caching (no module-level singleton)."""

from campaign_clients.cache.store import CacheEntry, CampaignCache, TTLCache

__all__ = ["CacheEntry", "TTLCache", "CampaignCache"]
