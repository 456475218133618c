"""
wrapblox - Async client for the Roblox web APIs.
"""

from wrapblox.client import WrapBlox
from wrapblox.models import (
    AuthedUser,
    Badge,
    FriendRequest,
    Group,
    ItemType,
    OwnershipStatus,
    SortOrder,
    Universe,
    User,
)
from wrapblox.services import (
    AuthenticationError,
    ErrorKind,
    FetchError,
    ForbiddenError,
    LoginRequiredError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestOptions,
    ServerError,
    ServiceClient,
    UnknownServiceError,
    ValidationError,
    WrapBloxError,
)
from wrapblox.settings import Settings

__all__ = [
    "WrapBlox",
    "AuthedUser",
    "Badge",
    "FriendRequest",
    "Group",
    "ItemType",
    "OwnershipStatus",
    "SortOrder",
    "Universe",
    "User",
    "AuthenticationError",
    "ErrorKind",
    "FetchError",
    "ForbiddenError",
    "LoginRequiredError",
    "NetworkError",
    "NotFoundError",
    "RateLimitError",
    "RequestOptions",
    "ServerError",
    "ServiceClient",
    "UnknownServiceError",
    "ValidationError",
    "WrapBloxError",
    "Settings",
]
