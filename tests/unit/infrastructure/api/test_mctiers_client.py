from typing import List

import httpx
import pytest

from tierlookup.domain.models.common import PlayerId, PlayerName
from tierlookup.domain.models.errors import ApiError, ErrorKind
from tierlookup.infrastructure.api.mctiers_client import MCTiersClient
from tierlookup.infrastructure.resilience.api_retry import BackoffFetcher


def test_profile_by_name_url():
    client = MCTiersClient(fetcher=None)
    assert client.profile_by_name_url("Notch") == "https://mctiers.com/api/v2/profile/by-name/Notch?tests"


def test_name_is_percent_encoded():
    client = MCTiersClient(fetcher=None)
    assert client.profile_by_name_url("a b/c") == "https://mctiers.com/api/v2/profile/by-name/a%20b%2Fc?tests"


def test_profile_by_id_url_and_trailing_slash_on_base():
    client = MCTiersClient(fetcher=None, base_url="http://localhost:8080/api/v2/")
    assert client.profile_by_id_url("069a79f4") == "http://localhost:8080/api/v2/profile/069a79f4?tests"


@pytest.mark.asyncio
async def test_fetch_profile_by_name_sends_name_as_given(mock_transport_factory, fake_clock, raw_profile):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(lambda request: httpx.Response(200, json=raw_profile), seen)

    async with httpx.AsyncClient(transport=transport) as http_client:
        client = MCTiersClient(BackoffFetcher(http_client, sleep=fake_clock.sleep))
        profile = await client.fetch_profile_by_name(PlayerName("notch"))

    assert profile == raw_profile
    assert seen[0].url.path == "/api/v2/profile/by-name/notch"
    assert seen[0].method == "GET"


@pytest.mark.asyncio
async def test_fetch_profile_by_id(mock_transport_factory, fake_clock, raw_profile):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(lambda request: httpx.Response(200, json=raw_profile), seen)

    async with httpx.AsyncClient(transport=transport) as http_client:
        client = MCTiersClient(BackoffFetcher(http_client, sleep=fake_clock.sleep))
        await client.fetch_profile_by_id(PlayerId(raw_profile["uuid"]))

    assert seen[0].url.path == f"/api/v2/profile/{raw_profile['uuid']}"


@pytest.mark.asyncio
async def test_non_object_payload_is_a_server_error(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(lambda request: httpx.Response(200, json=["unexpected"]), seen)

    async with httpx.AsyncClient(transport=transport) as http_client:
        client = MCTiersClient(BackoffFetcher(http_client, sleep=fake_clock.sleep))
        with pytest.raises(ApiError) as exc_info:
            await client.fetch_profile_by_name(PlayerName("Notch"))

    assert exc_info.value.kind is ErrorKind.SERVER_ERROR
