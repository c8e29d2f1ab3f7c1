"""Domain Events related to API calls and resilience.

Examples include events for when calls are queued, deferred, retried, fail,
or succeed.
"""

import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


# --- Scheduling Events ---

@dataclass
class RequestQueued(DomainEvent):
    """Event triggered when an operation is submitted to the request queue."""
    queue_length: int
    drain_started: bool
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallDeferred(DomainEvent):
    """Event triggered when a queued call waits for the pacing interval."""
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)


# --- Specific API Events ---

@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an API call is about to be made."""
    endpoint: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an API call succeeds."""
    endpoint: str
    latency_ms: float
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an API call fails definitively (after retries)."""
    endpoint: str
    error_type: str
    status: int
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed API call."""
    endpoint: str
    attempt_number: int
    delay_seconds: float
    status: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class NameFallbackTriggered(DomainEvent):
    """Event triggered when a lookup retries with a re-capitalised name."""
    original_name: str
    fallback_name: str
    timestamp: float = field(default_factory=time.time)


def dispatch_event(event: DomainEvent) -> None:
    """Publishes an event. Events only go to the debug log for now."""
    logger.debug(f"EVENT: {event}")
