"""Best-effort avatar warming.

Downloads player avatars into a local image cache so the UI can render them
without waiting on the network. Every failure is logged and dropped: a cold
avatar only means the UI fetches it itself.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Set

import diskcache as dc
import httpx

from tierlookup.domain.interfaces.avatar_warmer import AvatarWarmer
from tierlookup.domain.models.common import PlayerId

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_BASE_URL = "https://crafatar.com/avatars"
# Matches the display size in the UI
DEFAULT_AVATAR_SIZE = 64


def build_avatar_url(player_id: str, base_url: str = DEFAULT_AVATAR_BASE_URL, size: int = DEFAULT_AVATAR_SIZE) -> str:
    return f"{base_url.rstrip('/')}/{player_id}?size={size}&overlay=true"


class AvatarPrefetcher(AvatarWarmer):
    """Warms avatar images into a disk cache keyed by image URL, using detached tasks."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache_dir: Path,
        base_url: str = DEFAULT_AVATAR_BASE_URL,
        size: int = DEFAULT_AVATAR_SIZE,
    ):
        self.client = client
        self.cache_dir = Path(cache_dir)
        self.base_url = base_url
        self.size = size
        self.image_cache = dc.Cache(str(self.cache_dir), timeout=1)
        self._tasks: Set[asyncio.Task] = set()

    def avatar_url(self, player_id: str) -> str:
        return build_avatar_url(player_id, self.base_url, self.size)

    def cached_image(self, url: str) -> Optional[bytes]:
        """Image bytes stored for ``url``, or None if it was never warmed."""
        return self.image_cache.get(url)

    def schedule(self, player_id: PlayerId, image_url: Optional[str] = None) -> None:
        """Starts a detached warm-up. Never raises, never awaited by callers."""
        if not player_id:
            return
        try:
            task = asyncio.get_running_loop().create_task(self.prefetch(player_id, image_url))
        except RuntimeError as e:
            logger.debug(f"Avatar prefetch for {player_id} not scheduled: {e}")
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def prefetch(self, player_id: PlayerId, image_url: Optional[str] = None) -> bool:
        """Downloads the avatar unless it is already cached.

        Returns:
            True if the avatar is cached afterwards, False otherwise.
        """
        if not player_id:
            return False
        url = image_url or self.avatar_url(player_id)
        try:
            if await asyncio.to_thread(self.image_cache.__contains__, url):
                logger.debug(f"Avatar already warm: {url}")
                return True
            response = await self.client.get(url)
            if not response.is_success:
                logger.debug(f"Avatar fetch for {player_id} returned HTTP {response.status_code}")
                return False
            await asyncio.to_thread(self.image_cache.set, url, response.content)
            logger.debug(f"Avatar cached: {url}")
            return True
        except (httpx.HTTPError, OSError, dc.Timeout) as e:
            logger.debug(f"Avatar prefetch for {player_id} failed: {e}")
            return False

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
