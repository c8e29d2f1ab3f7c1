"""Defines common Value Objects used across the lookup contexts.

These objects represent simple values like cache keys, player names and
identifiers, ensuring consistency and type safety.
"""

from typing import NewType, TypedDict

# === Lookup Context ===
PlayerName = NewType("PlayerName", str)    # Trimmed player name as typed by the user
PlayerId = NewType("PlayerId", str)        # Player UUID as returned by the API

# === Caching Context ===
CacheKey = NewType("CacheKey", str)        # Unique key for a cache entry
CachePrefix = NewType("CachePrefix", str)  # Prefix for categorizing cache keys (e.g., 'player')

PLAYER_CACHE_PREFIX = CachePrefix("player")


def make_cache_key(prefix: CachePrefix, subject: str) -> CacheKey:
    """Builds a case-insensitive cache key for a lookup subject."""
    return CacheKey(f"{prefix}:{subject.lower()}")


class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration."""
    max_attempts: int
    base_delay: float
    max_jitter: float
