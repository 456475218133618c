"""
Typed entities shaped from raw API JSON.
"""

from wrapblox.models.base import Entity
from wrapblox.models.enums import ItemType, OwnershipStatus, SortOrder, ThumbnailFormat
from wrapblox.models.badge import Badge
from wrapblox.models.group import Group, GroupRole
from wrapblox.models.universe import Universe
from wrapblox.models.friend_request import FriendRequest
from wrapblox.models.user import AuthedUser, OwnedItem, User, UserPresence

__all__ = [
    "Entity",
    "ItemType",
    "OwnershipStatus",
    "SortOrder",
    "ThumbnailFormat",
    "Badge",
    "Group",
    "GroupRole",
    "Universe",
    "FriendRequest",
    "AuthedUser",
    "OwnedItem",
    "User",
    "UserPresence",
]
