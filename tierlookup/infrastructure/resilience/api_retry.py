"""Service for executing API calls with automatic retries.

Implements exponential backoff with added jitter for transient errors like
rate limits (429) or temporary server issues (5xx). Every other outcome is
classified into a terminal ApiError on the spot.
"""

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable

import httpx

from tierlookup.domain.events.api_events import (
    ApiCallFailed, ApiCallInitiated, ApiCallSucceeded, RetryScheduled, dispatch_event
)
from tierlookup.domain.models.errors import ApiError, ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_BASE_DELAY_SECONDS = 0.5
DEFAULT_MAX_JITTER_SECONDS = 0.3


def classify_status(status: int) -> ErrorKind:
    """Maps a non-success HTTP status to an error kind."""
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    return ErrorKind.SERVER_ERROR


def is_transient(status: int) -> bool:
    return status == 429 or status >= 500


class BackoffFetcher:
    """Performs one logical GET with bounded retries on transient failures.

    Attempt ``a`` (0-based) that fails transiently is followed by a sleep of
    ``base_delay * 2**a + U[0, max_jitter)`` seconds, up to ``max_attempts``
    retries. Transport failures are never retried.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
        max_jitter: float = DEFAULT_MAX_JITTER_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ):
        """Initializes the BackoffFetcher.

        Args:
            client: HTTP client used for the requests.
            max_attempts: Maximum number of retries after the first attempt.
            base_delay: Delay in seconds before the first retry (before jitter).
            max_jitter: Upper bound (exclusive) of the random delay added.
            sleep: Coroutine used to wait between attempts.
            rand: Source of uniform floats in [0, 1).
        """
        if max_attempts < 0:
            raise ValueError("max_attempts must be non-negative.")
        self.client = client
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_jitter = max_jitter
        self._sleep = sleep
        self._rand = rand

        logger.info(
            f"BackoffFetcher initialized: max_attempts={max_attempts}, "
            f"base_delay={base_delay}s, max_jitter={max_jitter}s"
        )

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt``."""
        return (2 ** attempt) * self.base_delay + self._rand() * self.max_jitter

    async def fetch_json(self, url: str) -> Any:
        """GETs ``url`` and returns the decoded JSON body.

        Raises:
            ApiError: NOT_FOUND, RATE_LIMITED, SERVER_ERROR or NETWORK_ERROR.
        """
        endpoint = httpx.URL(url).path

        last_status = 0
        for attempt in range(self.max_attempts + 1):
            dispatch_event(ApiCallInitiated(endpoint=endpoint, attempt_number=attempt + 1))
            start_time = time.perf_counter()
            try:
                response = await self.client.get(url)
            except httpx.HTTPError as e:
                logger.warning(f"Network error calling {endpoint}: {type(e).__name__}: {e}")
                raise self._fail(endpoint, ErrorKind.NETWORK_ERROR, 0, attempt)

            status = response.status_code
            if is_transient(status):
                last_status = status
                if attempt < self.max_attempts:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"Transient HTTP {status} from {endpoint} on attempt "
                        f"{attempt + 1}/{self.max_attempts + 1}. Waiting {delay:.2f}s..."
                    )
                    dispatch_event(RetryScheduled(
                        endpoint=endpoint, attempt_number=attempt + 1, delay_seconds=delay, status=status
                    ))
                    await self._sleep(delay)
                    continue
                break

            if not response.is_success:
                raise self._fail(endpoint, classify_status(status), status, attempt)

            try:
                payload = response.json()
            except ValueError as e:
                logger.warning(f"Undecodable response body from {endpoint}: {e}")
                raise self._fail(endpoint, ErrorKind.NETWORK_ERROR, 0, attempt)

            latency_ms = (time.perf_counter() - start_time) * 1000
            dispatch_event(ApiCallSucceeded(endpoint=endpoint, latency_ms=latency_ms, attempt_number=attempt + 1))
            return payload

        logger.error(f"Max retries ({self.max_attempts}) reached for {endpoint}. Last status: {last_status}")
        raise self._fail(endpoint, classify_status(last_status), last_status, self.max_attempts)

    def _fail(self, endpoint: str, kind: ErrorKind, status: int, attempt: int) -> ApiError:
        dispatch_event(ApiCallFailed(
            endpoint=endpoint, error_type=kind.value, status=status, attempt_number=attempt + 1
        ))
        return ApiError(kind, status)
