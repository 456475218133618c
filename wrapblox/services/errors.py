"""
Service layer exceptions.

Every terminal failure surfaced by the request layer is a FetchError carrying
an immutable ErrorRecord. The record's kind is a closed enumeration so callers
can switch on it; the subclasses exist so callers can also catch one kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of error kinds produced by the classifier."""

    AUTHENTICATION = "AuthenticationError"
    PERMISSION = "PermissionError"
    NOT_FOUND = "NotFoundError"
    VALIDATION = "ValidationError"
    RATE_LIMIT = "RateLimitError"
    SERVER = "ServerError"
    NETWORK = "NetworkError"
    UNKNOWN_SERVICE = "UnknownServiceError"
    UNKNOWN = "UnknownError"


@dataclass(frozen=True)
class ErrorRecord:
    """Classified outcome of a failed request."""

    kind: ErrorKind
    status: int | None = None
    message: str = ""
    body: Any = None
    retry_after: float | None = None


class WrapBloxError(Exception):
    """Base exception for all library errors."""

    pass


class FetchError(WrapBloxError):
    """A request failed terminally."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, record: ErrorRecord, service: str | None = None):
        self.record = record
        self.service = service
        prefix = f"[{service}] " if service else ""
        status = f"HTTP {record.status}: " if record.status is not None else ""
        super().__init__(f"{prefix}{status}{record.message}")

    @property
    def status(self) -> int | None:
        return self.record.status

    @property
    def message(self) -> str:
        return self.record.message

    @classmethod
    def from_record(cls, record: ErrorRecord, service: str | None = None) -> "FetchError":
        """Build the exception subclass matching the record's kind."""
        error_cls = _ERRORS_BY_KIND.get(record.kind, FetchError)
        return error_cls(record, service=service)


class AuthenticationError(FetchError):
    """Credentials missing, expired, or rejected twice by anti-forgery checks."""

    kind = ErrorKind.AUTHENTICATION


class ForbiddenError(FetchError):
    """Authenticated but not allowed (403 without anti-forgery semantics)."""

    kind = ErrorKind.PERMISSION


PermissionDeniedError = ForbiddenError


class NotFoundError(FetchError):
    """Resource does not exist."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(FetchError):
    """Upstream rejected the request payload or parameters."""

    kind = ErrorKind.VALIDATION


class RateLimitError(FetchError):
    """Rate limit exceeded after exhausting retries."""

    kind = ErrorKind.RATE_LIMIT

    @property
    def retry_after(self) -> float | None:
        return self.record.retry_after


class ServerError(FetchError):
    """Upstream returned a 5xx response."""

    kind = ErrorKind.SERVER


class NetworkError(FetchError):
    """Transport failure or timeout, no response received."""

    kind = ErrorKind.NETWORK


class UnknownServiceError(FetchError):
    """Service name is not registered in the router."""

    kind = ErrorKind.UNKNOWN_SERVICE

    def __init__(self, record: ErrorRecord | str, service: str | None = None):
        if isinstance(record, str):
            service = record
            record = ErrorRecord(
                kind=ErrorKind.UNKNOWN_SERVICE,
                message=f"Unknown service '{record}'",
            )
        super().__init__(record, service=service)


_ERRORS_BY_KIND: dict[ErrorKind, type[FetchError]] = {
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.PERMISSION: ForbiddenError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.RATE_LIMIT: RateLimitError,
    ErrorKind.SERVER: ServerError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.UNKNOWN_SERVICE: UnknownServiceError,
}


class LoginRequiredError(WrapBloxError):
    """Operation needs a logged-in client and none is set."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"You must be authenticated to {action}.")
