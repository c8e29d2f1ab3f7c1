"""Player profile models returned by the lookup service."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tierlookup.domain.models.common import PlayerId


@dataclass
class ProfileResult:
    """A player profile shaped for display.

    ``gamemodes`` is ordered by mode slug, ``tests`` by timestamp (newest
    first) and ``first_test`` is the oldest test, if any.
    """
    id: PlayerId
    name: str
    region: Optional[str]
    score: Optional[int]
    overall: Optional[int]
    gamemodes: List[Dict[str, Any]] = field(default_factory=list)
    tests: List[Dict[str, Any]] = field(default_factory=list)
    first_test: Optional[Dict[str, Any]] = None
    avatar_url: str = ""
    profile_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialises to the JSON-compatible wire representation."""
        return {
            "id": self.id,
            "name": self.name,
            "region": self.region,
            "score": self.score,
            "overall": self.overall,
            "gamemodes": self.gamemodes,
            "tests": self.tests,
            "firstTest": self.first_test,
            "avatarUrl": self.avatar_url,
            "profileUrl": self.profile_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileResult":
        return cls(
            id=PlayerId(data["id"]),
            name=data["name"],
            region=data.get("region"),
            score=data.get("score"),
            overall=data.get("overall"),
            gamemodes=list(data.get("gamemodes") or []),
            tests=list(data.get("tests") or []),
            first_test=data.get("firstTest"),
            avatar_url=data.get("avatarUrl", ""),
            profile_url=data.get("profileUrl", ""),
        )


@dataclass
class LookupOutcome:
    """Result of a lookup together with where it came from."""
    profile: ProfileResult
    from_cache: bool = False
