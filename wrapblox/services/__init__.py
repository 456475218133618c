"""
Service layer infrastructure - the request path every entity delegates to.

Provides:
- Router: Logical service name to base URL
- CacheManager: In-memory response cache with TTL and prefix invalidation
- SessionManager: Credentials and single-flight anti-forgery token refresh
- ServiceClient: Request executor with retry policy and pagination
- Error taxonomy: FetchError and its classified subclasses
"""

from wrapblox.services.errors import (
    ErrorKind,
    ErrorRecord,
    WrapBloxError,
    FetchError,
    AuthenticationError,
    ForbiddenError,
    PermissionDeniedError,
    NotFoundError,
    ValidationError,
    RateLimitError,
    ServerError,
    NetworkError,
    UnknownServiceError,
    LoginRequiredError,
)
from wrapblox.services.cache import CacheManager, CacheEntry, CacheStats
from wrapblox.services.classifier import classify
from wrapblox.services.request import RequestDescriptor, RequestOptions
from wrapblox.services.router import SERVICE_URLS, resolve
from wrapblox.services.session import Session, SessionManager, TokenState
from wrapblox.services.singleflight import SingleFlight
from wrapblox.services.pagination import fetch_list
from wrapblox.services.client import ServiceClient

__all__ = [
    # Errors
    "ErrorKind",
    "ErrorRecord",
    "WrapBloxError",
    "FetchError",
    "AuthenticationError",
    "ForbiddenError",
    "PermissionDeniedError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "UnknownServiceError",
    "LoginRequiredError",
    "classify",
    # Cache
    "CacheManager",
    "CacheEntry",
    "CacheStats",
    # Requests
    "RequestDescriptor",
    "RequestOptions",
    "SERVICE_URLS",
    "resolve",
    # Session
    "Session",
    "SessionManager",
    "TokenState",
    "SingleFlight",
    # Client
    "fetch_list",
    "ServiceClient",
]
