"""Disk-backed durable store for the L2 cache.

Records live in a diskcache.Cache under ``root``. Blocking disk access runs
in a worker thread so callers only ever see awaitables.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import diskcache as dc

from tierlookup.domain.interfaces.durable_store import DurableStore, StoredRecord
from tierlookup.domain.models.common import CacheKey

logger = logging.getLogger(__name__)


class FileStore(DurableStore):
    """Stores one ``{value, expires_at}`` record per key under ``root``.

    Expiry is left to the cache layer; records stay on disk until they are
    overwritten, deleted or cleared.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        try:
            self.disk_cache = dc.Cache(str(self.root), timeout=1)
            logger.info(f"Initialized durable cache at: {self.disk_cache.directory}")
        except OSError as e:
            logger.error(f"Failed to initialize durable cache at {self.root}: {e}")
            raise

    # --- Blocking helpers (run in a worker thread) ---

    def _read(self, key: CacheKey) -> Optional[StoredRecord]:
        record = self.disk_cache.get(key)
        if record is None:
            return None
        if not isinstance(record, dict) or 'expires_at' not in record or 'value' not in record:
            logger.warning(f"Malformed cache record for key {key}. Removing.")
            self.disk_cache.delete(key)
            return None
        return record

    # --- DurableStore Interface Implementation ---

    async def get(self, key: CacheKey) -> Optional[StoredRecord]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: CacheKey, record: StoredRecord) -> None:
        await asyncio.to_thread(self.disk_cache.set, key, record)
        logger.debug(f"Stored record on disk: key={key}")

    async def delete(self, key: CacheKey) -> None:
        await asyncio.to_thread(self.disk_cache.delete, key)

    async def clear(self) -> None:
        removed = await asyncio.to_thread(self.disk_cache.clear)
        logger.info(f"Cleared durable cache at {self.root} ({removed} records).")
