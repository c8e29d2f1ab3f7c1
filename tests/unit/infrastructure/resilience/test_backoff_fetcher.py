from typing import Iterator, List

import httpx
import pytest

from tierlookup.domain.models.errors import ApiError, ErrorKind
from tierlookup.infrastructure.resilience.api_retry import BackoffFetcher, classify_status, is_transient

URL = "https://mctiers.com/api/v2/profile/by-name/Notch?tests"


def sequence(*responses: httpx.Response):
    """Handler serving the given responses in order, repeating the last one."""
    remaining: Iterator[httpx.Response] = iter(responses)
    last = [responses[-1]]

    def handler(request: httpx.Request) -> httpx.Response:
        try:
            last[0] = next(remaining)
        except StopIteration:
            pass
        return last[0]
    return handler


def make_fetcher(client: httpx.AsyncClient, fake_clock, **kwargs) -> BackoffFetcher:
    kwargs.setdefault('rand', lambda: 0.5)
    return BackoffFetcher(client, sleep=fake_clock.sleep, **kwargs)


@pytest.mark.parametrize("status,kind", [
    (404, ErrorKind.NOT_FOUND),
    (429, ErrorKind.RATE_LIMITED),
    (500, ErrorKind.SERVER_ERROR),
    (503, ErrorKind.SERVER_ERROR),
    (400, ErrorKind.SERVER_ERROR),
])
def test_classify_status(status, kind):
    assert classify_status(status) is kind


def test_only_429_and_5xx_are_transient():
    assert is_transient(429)
    assert is_transient(500)
    assert is_transient(502)
    assert not is_transient(404)
    assert not is_transient(400)


@pytest.mark.parametrize("attempt", [0, 1, 2, 3])
def test_backoff_delay_bounds(attempt):
    low = BackoffFetcher(client=None, rand=lambda: 0.0)
    high = BackoffFetcher(client=None, rand=lambda: 0.999999)

    base = (2 ** attempt) * 0.5
    assert low.backoff_delay(attempt) == pytest.approx(base)
    assert base <= high.backoff_delay(attempt) < base + 0.3


@pytest.mark.asyncio
async def test_success_returns_payload_without_sleeping(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(httpx.Response(200, json={"name": "Notch"})), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        payload = await make_fetcher(client, fake_clock).fetch_json(URL)

    assert payload == {"name": "Notch"}
    assert len(seen) == 1
    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_transient_failures_are_retried_until_success(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(
        httpx.Response(429),
        httpx.Response(503),
        httpx.Response(200, json={"ok": True}),
    ), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        payload = await make_fetcher(client, fake_clock).fetch_json(URL)

    assert payload == {"ok": True}
    assert len(seen) == 3
    assert fake_clock.sleeps == [pytest.approx(0.65), pytest.approx(1.15)]


@pytest.mark.asyncio
async def test_persistent_server_error_exhausts_the_budget(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(httpx.Response(500)), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            await make_fetcher(client, fake_clock).fetch_json(URL)

    assert exc_info.value.kind is ErrorKind.SERVER_ERROR
    assert exc_info.value.status == 500
    # One initial attempt plus four retries, no sleep after the last one
    assert len(seen) == 5
    assert fake_clock.sleeps == [
        pytest.approx(0.65), pytest.approx(1.15), pytest.approx(2.15), pytest.approx(4.15)
    ]


@pytest.mark.asyncio
async def test_persistent_rate_limit_ends_rate_limited(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(httpx.Response(429)), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            await make_fetcher(client, fake_clock, max_attempts=2).fetch_json(URL)

    assert exc_info.value.kind is ErrorKind.RATE_LIMITED
    assert exc_info.value.status == 429
    assert len(seen) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("status,kind", [(404, ErrorKind.NOT_FOUND), (400, ErrorKind.SERVER_ERROR)])
async def test_non_transient_status_is_not_retried(mock_transport_factory, fake_clock, status, kind):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(httpx.Response(status)), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            await make_fetcher(client, fake_clock).fetch_json(URL)

    assert exc_info.value.kind is kind
    assert exc_info.value.status == status
    assert len(seen) == 1
    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_transport_failure_is_network_error_without_retry(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=mock_transport_factory(refuse, seen)) as client:
        with pytest.raises(ApiError) as exc_info:
            await make_fetcher(client, fake_clock).fetch_json(URL)

    assert exc_info.value.kind is ErrorKind.NETWORK_ERROR
    assert exc_info.value.status == 0
    assert len(seen) == 1
    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_undecodable_body_is_network_error(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(httpx.Response(200, content=b"<html>oops</html>")), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            await make_fetcher(client, fake_clock).fetch_json(URL)

    assert exc_info.value.kind is ErrorKind.NETWORK_ERROR
    assert exc_info.value.status == 0


@pytest.mark.asyncio
async def test_zero_retries_means_a_single_request(mock_transport_factory, fake_clock):
    seen: List[httpx.Request] = []
    transport = mock_transport_factory(sequence(httpx.Response(502)), seen)

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(ApiError):
            await make_fetcher(client, fake_clock, max_attempts=0).fetch_json(URL)

    assert len(seen) == 1
    assert fake_clock.sleeps == []
