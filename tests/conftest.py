import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest
from typer.testing import CliRunner

from tierlookup.infrastructure.cache.file_store import FileStore
from tierlookup.infrastructure.config.settings import clear_test_config


class FakeClock:
    """Manually advanced clock whose sleep() moves time forward instantly."""

    def __init__(self, start: float = 1_000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Still yield so other tasks get a turn, like a real sleep would
        await asyncio.sleep(0)


def make_raw_profile(name: str = "Notch", uuid: str = "069a79f444e94726a5befca90e38aaf5") -> Dict[str, Any]:
    """A profile document shaped like the MCTiers v2 response."""
    return {
        "uuid": uuid,
        "name": name,
        "region": "EU",
        "points": 120,
        "overall": 42,
        "rankings": {
            "sword": {"tier": 2, "pos": 0, "peak_tier": 1, "peak_pos": 1, "retired": False},
            "axe": {"tier": 3, "pos": 1, "peak_tier": 3, "peak_pos": 0, "retired": False},
            "nethop": {"tier": 5, "pos": 1, "peak_tier": 4, "peak_pos": 1, "retired": True},
        },
        "tests": [
            {"at": 1_700_000_100, "gamemode": "axe", "tier": 3, "pos": 1},
            {"at": 1_700_000_300, "gamemode": "sword", "tier": 2, "pos": 0},
            {"at": 1_700_000_000, "gamemode": "nethop", "tier": 5, "pos": 1},
        ],
    }


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def raw_profile() -> Dict[str, Any]:
    return make_raw_profile()


@pytest.fixture
def raw_profile_factory() -> Callable[..., Dict[str, Any]]:
    return make_raw_profile


@pytest.fixture
def file_store(tmp_path: Path) -> FileStore:
    return FileStore(tmp_path / "cache")


@pytest.fixture
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mock_transport_factory() -> Callable[..., httpx.MockTransport]:
    """Builds an httpx.MockTransport that records every request it serves."""
    def factory(handler: Callable[[httpx.Request], httpx.Response], seen: List[httpx.Request]) -> httpx.MockTransport:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)
        return httpx.MockTransport(recording_handler)
    return factory


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch):
    """Points every directory setting at tmp_path and drops test overrides afterwards."""
    monkeypatch.setenv("TIERLOOKUP_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("TIERLOOKUP_AVATAR_DIR", str(tmp_path / "avatars"))
    monkeypatch.delenv("TIERLOOKUP_LOGGING_LEVEL", raising=False)
    yield
    clear_test_config()
