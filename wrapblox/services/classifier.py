"""
Error classification for upstream HTTP outcomes.

Pure functions: the same status, headers and body always map to the same
ErrorRecord.
"""

from collections.abc import Mapping
from typing import Any

from wrapblox.services.errors import ErrorKind, ErrorRecord

CSRF_HEADER = "x-csrf-token"
RETRY_AFTER_HEADER = "retry-after"


def _header(headers: Mapping[str, str], name: str) -> str | None:
    # httpx.Headers is case-insensitive, plain dicts are not
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def is_token_expired(status: int, headers: Mapping[str, str]) -> bool:
    """403 carrying a fresh anti-forgery token means our token was rejected."""
    return status == 403 and bool(_header(headers, CSRF_HEADER))


def get_csrf_token(headers: Mapping[str, str]) -> str | None:
    return _header(headers, CSRF_HEADER)


def parse_retry_after(headers: Mapping[str, str], default: float) -> float:
    """Read Retry-After in seconds, falling back to default."""
    raw = _header(headers, RETRY_AFTER_HEADER)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def extract_message(body: Any, text: str = "") -> str:
    """Pull the first upstream error message out of an error envelope."""
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
        if body.get("message"):
            return str(body["message"])
    return text[:200]


def classify(
    status: int,
    headers: Mapping[str, str],
    body: Any = None,
    text: str = "",
    default_retry_after: float = 1.0,
) -> ErrorRecord:
    """
    Map a non-2xx response to an ErrorRecord.

    Args:
        status: HTTP status code
        headers: Response headers
        body: Decoded JSON body, if the body was JSON
        text: Raw response text
        default_retry_after: Retry interval used when 429 has no Retry-After

    Returns:
        ErrorRecord describing the failure
    """
    message = extract_message(body, text)
    raw = body if body is not None else text

    if status == 401:
        kind = ErrorKind.AUTHENTICATION
    elif status == 403:
        # A 403 with a token header is an anti-forgery failure that survived
        # the refresh retry.
        kind = (
            ErrorKind.AUTHENTICATION
            if is_token_expired(status, headers)
            else ErrorKind.PERMISSION
        )
    elif status == 404:
        kind = ErrorKind.NOT_FOUND
    elif status in (400, 422):
        kind = ErrorKind.VALIDATION
    elif status == 429:
        return ErrorRecord(
            kind=ErrorKind.RATE_LIMIT,
            status=status,
            message=message or "Too many requests",
            body=raw,
            retry_after=parse_retry_after(headers, default_retry_after),
        )
    elif 500 <= status < 600:
        kind = ErrorKind.SERVER
    else:
        kind = ErrorKind.UNKNOWN

    return ErrorRecord(kind=kind, status=status, message=message, body=raw)


def network_error(message: str) -> ErrorRecord:
    """Record for a transport-level failure."""
    return ErrorRecord(kind=ErrorKind.NETWORK, message=message)
