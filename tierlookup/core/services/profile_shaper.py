"""Reshapes raw MCTiers profile documents into ProfileResult objects."""

import logging
from typing import Any, Dict, List
from urllib.parse import quote

from tierlookup.domain.models.common import PlayerId
from tierlookup.domain.models.profile import ProfileResult
from tierlookup.infrastructure.avatar.avatar_prefetcher import (
    DEFAULT_AVATAR_BASE_URL, DEFAULT_AVATAR_SIZE, build_avatar_url
)

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_BASE_URL = "https://mctiers.com/player"


def shape_gamemodes(rankings: Any) -> List[Dict[str, Any]]:
    """Turns ``{slug: ranking}`` into a list of ``{slug, **ranking}`` sorted by slug."""
    if not isinstance(rankings, dict):
        return []
    gamemodes = []
    for slug, ranking in rankings.items():
        entry: Dict[str, Any] = {'slug': slug}
        if isinstance(ranking, dict):
            entry.update(ranking)
        gamemodes.append(entry)
    return sorted(gamemodes, key=lambda g: g['slug'])


def record_timestamp(test: Dict[str, Any]) -> float:
    """Numeric ``at`` of a test record; missing or unparseable values sort as 0."""
    try:
        return float(test.get('at') or 0)
    except (TypeError, ValueError):
        return 0.0


def sort_tests(tests: Any) -> List[Dict[str, Any]]:
    """Returns test records newest first."""
    if not isinstance(tests, list):
        return []
    records = [t for t in tests if isinstance(t, dict)]
    return sorted(records, key=record_timestamp, reverse=True)


class ProfileShaper:
    """Builds display-ready profiles, including avatar and profile page URLs."""

    def __init__(
        self,
        profile_base_url: str = DEFAULT_PROFILE_BASE_URL,
        avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
        avatar_size: int = DEFAULT_AVATAR_SIZE,
    ):
        self.profile_base_url = profile_base_url.rstrip('/')
        self.avatar_base_url = avatar_base_url
        self.avatar_size = avatar_size

    def shape(self, raw: Dict[str, Any]) -> ProfileResult:
        player_id = PlayerId(str(raw.get('uuid') or raw.get('id') or ''))
        name = str(raw.get('name') or '')
        tests = sort_tests(raw.get('tests'))
        if not player_id:
            logger.warning(f"Profile for '{name}' has no uuid; avatar URL will be unusable.")

        return ProfileResult(
            id=player_id,
            name=name,
            region=raw.get('region'),
            score=raw.get('points'),
            overall=raw.get('overall'),
            gamemodes=shape_gamemodes(raw.get('rankings')),
            tests=tests,
            first_test=tests[-1] if tests else None,
            avatar_url=build_avatar_url(player_id, self.avatar_base_url, self.avatar_size),
            profile_url=f"{self.profile_base_url}/{quote(name, safe='')}",
        )
