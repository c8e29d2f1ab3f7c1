"""Concrete implementation of the two-level Caching Service.

Manages L1 (in-memory) and L2 (durable store) caches sharing one fixed TTL.
Expiry is lazy: expired entries are dropped when they are next read.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set

from tierlookup.domain.interfaces.cache import CACHE_LEVELS, CacheService
from tierlookup.domain.interfaces.durable_store import DurableStore
from tierlookup.domain.models.common import CacheKey

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3 * 60  # 3 minutes


@dataclass
class CacheEntry:
    """Internal representation of a cache entry with expiry."""
    value: Any
    expires_at: float  # Unix timestamp when the entry expires

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TwoTierCache(CacheService):
    """Fast in-memory tier layered over a durable store.

    Reads check L1, then L2, warming L1 on an L2 hit. Writes land in L1
    immediately; the L2 write runs as a detached task.
    """

    def __init__(
        self,
        store: DurableStore,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initializes the caching service.

        Args:
            store: Durable store used as L2.
            ttl: Time-to-live in seconds applied to every write.
            clock: Wall-clock source; persisted expiry must survive restarts.
        """
        self.store = store
        self.ttl = ttl
        self._clock = clock
        self.l1_cache: Dict[CacheKey, CacheEntry] = {}
        self._pending_writes: Set[asyncio.Task] = set()
        self._latest_write: Dict[CacheKey, asyncio.Task] = {}
        logger.info(f"CachingService initialized. ttl={ttl}s, store={type(store).__name__}")

    # --- CacheService Interface Implementation ---

    async def get(self, key: CacheKey) -> Optional[Any]:
        """Retrieves an item from L1, falling back to L2."""
        entry = self.l1_cache.get(key)
        if entry is not None:
            if entry.is_valid(self._clock()):
                logger.debug(f"L1 cache hit for key: {key}")
                return entry.value
            del self.l1_cache[key]
            logger.debug(f"L1 cache expired for key: {key}")

        try:
            record = await self.store.get(key)
        except OSError as e:
            logger.warning(f"Durable cache read failed for key {key}: {e}")
            return None

        # A set() may have landed while we were suspended on the store
        fresher = self.l1_cache.get(key)
        if fresher is not None and fresher.is_valid(self._clock()):
            return fresher.value

        if record is None:
            logger.debug(f"Cache miss for key: {key}")
            return None

        try:
            entry = CacheEntry(value=record['value'], expires_at=float(record['expires_at']))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unreadable L2 record for key {key}: {e}. Removing record.")
            await self._purge_durable(key)
            return None
        if not entry.is_valid(self._clock()):
            logger.debug(f"L2 cache expired for key: {key}. Removing record.")
            await self._purge_durable(key)
            return None

        logger.debug(f"L2 cache hit for key: {key}. Warming L1.")
        self.l1_cache[key] = entry
        return entry.value

    async def set(self, key: CacheKey, value: Any) -> None:
        """Stores an item in L1 now and in L2 in the background."""
        entry = CacheEntry(value=value, expires_at=self._clock() + self.ttl)
        self.l1_cache[key] = entry
        logger.debug(f"Stored item in L1 cache: key={key}")

        record = {'value': entry.value, 'expires_at': entry.expires_at}
        previous = self._latest_write.get(key)
        task = asyncio.create_task(self._persist(key, record, previous))
        self._latest_write[key] = task
        self._pending_writes.add(task)
        task.add_done_callback(lambda t, k=key: self._write_done(k, t))

    async def delete(self, key: CacheKey, level: str = 'all') -> None:
        """Deletes an item from the specified cache level(s)."""
        self._check_level(level)
        if level in ('l1', 'all') and self.l1_cache.pop(key, None) is not None:
            logger.debug(f"Deleted item from L1 cache: key={key}")
        if level in ('l2', 'all'):
            await self.store.delete(key)
            logger.debug(f"Deleted item from L2 cache: key={key}")

    async def clear(self, level: str = 'all') -> None:
        """Clears all items from the specified cache level(s)."""
        self._check_level(level)
        if level in ('l1', 'all'):
            self.l1_cache.clear()
            logger.info("Cleared L1 (in-memory) cache.")
        if level in ('l2', 'all'):
            await self.flush()
            await self.store.clear()

    async def flush(self) -> None:
        """Waits until every pending durable write has finished."""
        while self._pending_writes:
            await asyncio.wait(list(self._pending_writes))

    # --- Internal helpers ---

    @staticmethod
    def _check_level(level: str) -> None:
        if level not in CACHE_LEVELS:
            raise ValueError(f"Invalid cache level '{level}'. Choose one of: {', '.join(CACHE_LEVELS)}")

    async def _persist(self, key: CacheKey, record: Dict[str, Any], previous: Optional[asyncio.Task]) -> None:
        # Writes to one key land in submission order
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        try:
            await self.store.set(key, record)
        except Exception as e:
            logger.error(f"Failed to write durable cache record for key {key}: {e}", exc_info=True)

    def _write_done(self, key: CacheKey, task: asyncio.Task) -> None:
        self._pending_writes.discard(task)
        if self._latest_write.get(key) is task:
            del self._latest_write[key]

    async def _purge_durable(self, key: CacheKey) -> None:
        if key in self._latest_write:
            return  # A newer record is on its way
        try:
            await self.store.delete(key)
        except OSError as e:
            logger.warning(f"Failed to remove expired record for key {key}: {e}")
