"""Interface for the remote player-ranking API."""

import abc
from typing import Any, Dict

from tierlookup.domain.models.common import PlayerId, PlayerName


class ProfileApi(abc.ABC):
    """Read-only access to raw player profile documents.

    Implementations raise ApiError for every classified failure.
    """

    @abc.abstractmethod
    async def fetch_profile_by_name(self, name: PlayerName) -> Dict[str, Any]:
        """Fetches a profile (rankings and tests) by player name."""
        pass

    @abc.abstractmethod
    async def fetch_profile_by_id(self, player_id: PlayerId) -> Dict[str, Any]:
        """Fetches a profile (rankings and tests) by player UUID."""
        pass
