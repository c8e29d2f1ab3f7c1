"""Error types shared by the resilience layer and the lookup boundary."""

import enum


class ErrorKind(str, enum.Enum):
    """Classification of a failed remote API call."""
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"


# Not an ErrorKind: used only at the boundary for errors without a kind.
UNKNOWN_ERROR_KIND = "UNKNOWN"


class ApiError(Exception):
    """Terminal outcome of a remote API call.

    Attributes:
        kind: The classified failure.
        status: HTTP status code, or 0 when no response was received.
    """

    def __init__(self, kind: ErrorKind, status: int = 0):
        self._kind = kind
        self._status = status
        super().__init__(f"{kind.value} (status={status})")

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def status(self) -> int:
        return self._status

    def __repr__(self) -> str:
        return f"ApiError(kind={self._kind.value}, status={self._status})"
