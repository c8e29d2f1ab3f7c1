"""Interface for caching mechanisms.

Defines the contract for storing, retrieving, and managing cached lookup
results across the fast (L1) and durable (L2) levels.
"""

import abc
from typing import Any, Optional

from tierlookup.domain.models.common import CacheKey

CACHE_LEVELS = ('l1', 'l2', 'all')


class CacheService(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    async def get(self, key: CacheKey) -> Optional[Any]:
        """Retrieves an item from the cache asynchronously.

        Searches L1 first, then L2, warming L1 on an L2 hit.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached item if found and not expired, otherwise None.
        """
        pass

    @abc.abstractmethod
    async def set(self, key: CacheKey, value: Any) -> None:
        """Stores an item in every cache level.

        Implementations must not block the caller on the durable write.

        Args:
            key: The cache key to store the item under.
            value: The item to store. Must be JSON serialisable.
        """
        pass

    @abc.abstractmethod
    async def delete(self, key: CacheKey, level: str = 'all') -> None:
        """Deletes an item from the specified cache level(s) asynchronously.

        Args:
            key: The cache key to delete.
            level: The cache level(s) to delete from ('l1', 'l2', 'all').
        """
        pass

    @abc.abstractmethod
    async def clear(self, level: str = 'all') -> None:
        """Clears all items from the specified cache level(s) asynchronously.

        Args:
            level: The cache level(s) to clear ('l1', 'l2', 'all').
        """
        pass

    async def flush(self) -> None:
        """Waits for background writes to finish. No-op by default."""
        return None
