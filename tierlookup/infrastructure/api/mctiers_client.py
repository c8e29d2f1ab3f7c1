"""
MCTiers HTTP Client
Builds profile URLs for the MCTiers v2 API and fetches them through the
backoff layer.
"""

import logging
from typing import Any, Dict
from urllib.parse import quote

from tierlookup.domain.interfaces.profile_api import ProfileApi
from tierlookup.domain.models.common import PlayerId, PlayerName
from tierlookup.domain.models.errors import ApiError, ErrorKind
from tierlookup.infrastructure.resilience.api_retry import BackoffFetcher

logger = logging.getLogger(__name__)


class MCTiersClient(ProfileApi):
    """
    Read-only client for MCTiers player profiles.

    Pacing is not handled here; callers submit calls through the
    RequestScheduler. Retries happen inside the BackoffFetcher.
    """

    BASE_URL = "https://mctiers.com/api/v2"

    def __init__(self, fetcher: BackoffFetcher, base_url: str = BASE_URL) -> None:
        """
        Initialize the client.

        Args:
            fetcher: Backoff layer performing the HTTP requests
            base_url: API root, without trailing slash
        """
        self.fetcher = fetcher
        self.base_url = base_url.rstrip('/')

    def profile_by_name_url(self, name: str) -> str:
        return f"{self.base_url}/profile/by-name/{quote(name, safe='')}?tests"

    def profile_by_id_url(self, player_id: str) -> str:
        return f"{self.base_url}/profile/{quote(player_id, safe='')}?tests"

    async def fetch_profile_by_name(self, name: PlayerName) -> Dict[str, Any]:
        """
        Fetch a player profile by name (includes rankings and tests).

        Args:
            name: Player name, sent exactly as given

        Returns:
            Raw profile document

        Raises:
            ApiError: If the request fails
        """
        return self._expect_object(await self.fetcher.fetch_json(self.profile_by_name_url(name)))

    async def fetch_profile_by_id(self, player_id: PlayerId) -> Dict[str, Any]:
        """
        Fetch a player profile by UUID (includes rankings and tests).

        Args:
            player_id: Player UUID, dashed or undashed

        Returns:
            Raw profile document

        Raises:
            ApiError: If the request fails
        """
        return self._expect_object(await self.fetcher.fetch_json(self.profile_by_id_url(player_id)))

    @staticmethod
    def _expect_object(payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            logger.error(f"Unexpected profile payload type: {type(payload).__name__}")
            raise ApiError(ErrorKind.SERVER_ERROR, 200)
        return payload
