"""Interface for the durable key/value store backing the L2 cache.

Wraps whatever persistence the host provides behind one awaitable calling
convention so the cache never deals with callbacks or blocking IO directly.
"""

import abc
from typing import Any, Dict, Optional

from tierlookup.domain.models.common import CacheKey

# One persisted record: {"value": <json>, "expires_at": <unix seconds>}
StoredRecord = Dict[str, Any]


class DurableStore(abc.ABC):
    """Abstract Base Class for durable record storage."""

    @abc.abstractmethod
    async def get(self, key: CacheKey) -> Optional[StoredRecord]:
        """Returns the stored record for ``key`` or None if there is none."""
        pass

    @abc.abstractmethod
    async def set(self, key: CacheKey, record: StoredRecord) -> None:
        """Replaces the record stored under ``key``."""
        pass

    @abc.abstractmethod
    async def delete(self, key: CacheKey) -> None:
        """Removes the record for ``key``; missing keys are ignored."""
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Removes every record."""
        pass
