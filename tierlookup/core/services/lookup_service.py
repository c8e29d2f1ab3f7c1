"""Application Service for resolving players to profiles.

Checks the cache first; on a miss, submits one operation to the request
scheduler (with a capitalisation fallback for names), shapes the result,
caches it and kicks off avatar warming.

Concurrent lookups for the same uncached player are not coalesced: each one
queues its own request.
"""

import logging
import re
from typing import Any, Dict, Optional

from tierlookup.core.services.profile_shaper import ProfileShaper
from tierlookup.domain.events.api_events import NameFallbackTriggered, dispatch_event
from tierlookup.domain.interfaces.avatar_warmer import AvatarWarmer
from tierlookup.domain.interfaces.cache import CacheService
from tierlookup.domain.interfaces.profile_api import ProfileApi
from tierlookup.domain.models.common import (
    PLAYER_CACHE_PREFIX, CacheKey, PlayerId, PlayerName, make_cache_key
)
from tierlookup.domain.models.errors import ApiError, ErrorKind
from tierlookup.domain.models.profile import LookupOutcome, ProfileResult
from tierlookup.infrastructure.resilience.rate_limiter import RequestScheduler

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}$"
)


def is_player_id(value: str) -> bool:
    """True if ``value`` looks like a player UUID (dashed or not)."""
    return bool(UUID_PATTERN.match(value))


def capitalized_variant(name: str) -> str:
    """First character upper-cased, the rest lower-cased."""
    return name[:1].upper() + name[1:].lower()


class LookupService:
    """Resolves a player name or UUID to a ProfileResult."""

    def __init__(
        self,
        cache_service: CacheService,
        scheduler: RequestScheduler,
        profile_api: ProfileApi,
        shaper: ProfileShaper,
        avatar_warmer: Optional[AvatarWarmer] = None,
    ):
        self.cache_service = cache_service
        self.scheduler = scheduler
        self.profile_api = profile_api
        self.shaper = shaper
        self.avatar_warmer = avatar_warmer

    async def lookup(self, raw_input: str) -> LookupOutcome:
        """Looks up a player, serving from cache when possible.

        Args:
            raw_input: Player name or UUID as typed by the user.

        Returns:
            The shaped profile and whether it came from the cache.

        Raises:
            ValueError: If the input is blank.
            ApiError: If the remote lookup fails.
        """
        subject = (raw_input or "").strip()
        if not subject:
            raise ValueError("Player name must not be empty.")

        cache_key = make_cache_key(PLAYER_CACHE_PREFIX, subject)
        cached = await self._cached_profile(cache_key)
        if cached is not None:
            logger.info(f"Serving '{subject}' from cache.")
            return LookupOutcome(profile=cached, from_cache=True)

        logger.info(f"Cache miss for '{subject}'. Queuing remote lookup.")
        raw = await self.scheduler.enqueue(lambda: self._fetch(subject))

        profile = self.shaper.shape(raw)
        await self.cache_service.set(cache_key, profile.to_dict())
        self._warm_avatar(profile)
        return LookupOutcome(profile=profile, from_cache=False)

    async def _cached_profile(self, cache_key: CacheKey) -> Optional[ProfileResult]:
        cached = await self.cache_service.get(cache_key)
        if cached is None:
            return None
        try:
            return ProfileResult.from_dict(cached)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Discarding unreadable cache entry {cache_key}: {e}")
            await self.cache_service.delete(cache_key)
            return None

    async def _fetch(self, subject: str) -> Dict[str, Any]:
        """Runs inside one scheduler slot, fallback included."""
        if is_player_id(subject):
            return await self.profile_api.fetch_profile_by_id(PlayerId(subject))

        try:
            return await self.profile_api.fetch_profile_by_name(PlayerName(subject))
        except ApiError as e:
            if e.kind is not ErrorKind.NOT_FOUND:
                raise
            variant = capitalized_variant(subject)
            if variant == subject:
                raise
            dispatch_event(NameFallbackTriggered(original_name=subject, fallback_name=variant))
            logger.info(f"'{subject}' not found, retrying as '{variant}'.")
            return await self.profile_api.fetch_profile_by_name(PlayerName(variant))

    def _warm_avatar(self, profile: ProfileResult) -> None:
        if self.avatar_warmer is None:
            return
        try:
            self.avatar_warmer.schedule(profile.id, profile.avatar_url)
        except Exception as e:
            logger.debug(f"Avatar warming for {profile.id} could not be scheduled: {e}")
