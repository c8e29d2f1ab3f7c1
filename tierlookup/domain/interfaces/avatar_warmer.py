"""Interface for best-effort avatar image warming."""

import abc
from typing import Optional

from tierlookup.domain.models.common import PlayerId


class AvatarWarmer(abc.ABC):
    """Primes player avatars so the UI renders them from a local cache."""

    @abc.abstractmethod
    def schedule(self, player_id: PlayerId, image_url: Optional[str] = None) -> None:
        """Starts warming in the background and returns immediately.

        Never raises and never reports failure to the caller.
        """
        pass

    @abc.abstractmethod
    async def drain(self) -> None:
        """Waits for scheduled warm-ups to finish (used at shutdown)."""
        pass
