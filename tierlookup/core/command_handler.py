"""Command Handler: the inbound boundary of the application.

Receives UI messages (LOOKUP_PLAYER, PREFETCH_AVATAR) and CLI commands and
delegates the work to the LookupService and the avatar warmer. Nothing
raised below this layer escapes it: every failure is mapped to a stable
``{kind, message}`` pair.
"""

import json
import logging
from typing import Any, Dict, Optional

from tierlookup.core.services.lookup_service import LookupService
from tierlookup.domain.interfaces.avatar_warmer import AvatarWarmer
from tierlookup.domain.interfaces.cache import CACHE_LEVELS, CacheService
from tierlookup.domain.interfaces.user_interface import UserInterface
from tierlookup.domain.models.common import PlayerId
from tierlookup.domain.models.errors import UNKNOWN_ERROR_KIND, ApiError, ErrorKind

logger = logging.getLogger(__name__)

LOOKUP_PLAYER = "LOOKUP_PLAYER"
PREFETCH_AVATAR = "PREFETCH_AVATAR"

ERROR_MESSAGES: Dict[str, str] = {
    ErrorKind.NOT_FOUND.value: "Player not found. Check the spelling and try again.",
    ErrorKind.RATE_LIMITED.value: "Too many requests. Please wait a moment.",
    ErrorKind.SERVER_ERROR.value: "MCTiers is having server issues. Try again shortly.",
    ErrorKind.NETWORK_ERROR.value: "Network error. Check your connection.",
    UNKNOWN_ERROR_KIND: "An unexpected error occurred.",
}


def classify_error(error: BaseException) -> Dict[str, str]:
    """Maps any exception to the user-facing ``{kind, message}`` pair."""
    if isinstance(error, ApiError):
        kind = error.kind.value
    else:
        kind = UNKNOWN_ERROR_KIND
    return {'kind': kind, 'message': ERROR_MESSAGES[kind]}


def error_response(error: BaseException) -> Dict[str, Any]:
    return {'error': classify_error(error)}


class CommandHandler:
    """Handles incoming messages and commands and delegates to services."""

    def __init__(
        self,
        lookup_service: LookupService,
        avatar_warmer: AvatarWarmer,
        cache_service: CacheService,
        ui: UserInterface,
    ):
        """Initializes the CommandHandler with required services."""
        self.lookup_service = lookup_service
        self.avatar_warmer = avatar_warmer
        self.cache_service = cache_service
        self.ui = ui

    # --- Message protocol ---

    async def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """Dispatches one inbound message. Never raises.

        Returns:
            The response for LOOKUP_PLAYER, None for PREFETCH_AVATAR.
        """
        msg_type = message.get('type') if isinstance(message, dict) else None
        if msg_type == LOOKUP_PLAYER:
            return await self.handle_lookup(message.get('name'))
        if msg_type == PREFETCH_AVATAR:
            self.handle_prefetch_avatar(message.get('id'), message.get('imageUrl'))
            return None

        logger.warning(f"Ignoring message of unknown type: {msg_type!r}")
        return {'error': {'kind': UNKNOWN_ERROR_KIND, 'message': f"Unsupported message type: {msg_type!r}"}}

    async def handle_lookup(self, name: Any) -> Dict[str, Any]:
        """Answers a LOOKUP_PLAYER message."""
        try:
            outcome = await self.lookup_service.lookup(name if isinstance(name, str) else "")
        except ApiError as e:
            logger.info(f"Lookup for {name!r} failed: {e}")
            return error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error looking up {name!r}: {e}", exc_info=True)
            return error_response(e)

        response: Dict[str, Any] = {'ok': True, 'data': outcome.profile.to_dict()}
        if outcome.from_cache:
            response['fromCache'] = True
        return response

    def handle_prefetch_avatar(self, player_id: Any, image_url: Optional[str] = None) -> None:
        """Answers a PREFETCH_AVATAR message: fire and forget."""
        if not player_id:
            logger.debug("PREFETCH_AVATAR without id ignored.")
            return
        try:
            self.avatar_warmer.schedule(PlayerId(str(player_id)), image_url)
        except Exception as e:
            logger.debug(f"Avatar prefetch for {player_id} not scheduled: {e}")

    # --- CLI commands ---

    async def handle_lookup_command(self, name: str, as_json: bool = False) -> bool:
        """Looks up a player and renders the result. Returns success."""
        logger.info(f"Handling 'lookup' command for: {name}")
        if as_json:
            response = await self.handle_lookup(name)
            self.ui.display_output(json.dumps(response, indent=2))
            return 'error' not in response

        try:
            outcome = await self.lookup_service.lookup(name)
        except ValueError as e:
            self.ui.display_error(str(e))
            return False
        except Exception as e:
            if not isinstance(e, ApiError):
                logger.error(f"Lookup command failed: {e}", exc_info=True)
            self.ui.display_error(classify_error(e)['message'])
            return False
        self.ui.display_profile(outcome.profile, from_cache=outcome.from_cache)
        return True

    async def handle_message_command(self, raw_message: str) -> bool:
        """Feeds one JSON-encoded message through the protocol and prints the response."""
        try:
            message = json.loads(raw_message)
        except ValueError as e:
            self.ui.display_error(f"Message is not valid JSON: {e}")
            return False
        response = await self.handle_message(message)
        if response is not None:
            self.ui.display_output(json.dumps(response, indent=2))
            return "error" not in response
        return True

    async def handle_clear_cache(self, level: str) -> bool:
        """Handles the 'clear-cache' command."""
        logger.info(f"Handling 'clear-cache' command for level: {level}")
        if level not in CACHE_LEVELS:
            self.ui.display_error(f"Invalid cache level. Choose one of: {', '.join(CACHE_LEVELS)}.")
            return False
        try:
            await self.cache_service.clear(level)
        except OSError as e:
            logger.error(f"Failed to clear cache level '{level}': {e}", exc_info=True)
            self.ui.display_error(f"Failed to clear cache: {e}")
            return False
        self.ui.display_info(f"Cache level '{level}' cleared successfully.")
        return True

    async def shutdown(self) -> None:
        """Waits for background cache writes and avatar downloads."""
        await self.cache_service.flush()
        await self.avatar_warmer.drain()
