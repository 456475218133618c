"""
User entities.

Methods are grouped by the upstream service they call.
"""

from datetime import datetime, timezone
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, PrivateAttr, TypeAdapter

from wrapblox.models.badge import Badge
from wrapblox.models.base import Entity
from wrapblox.models.enums import ItemType, OwnershipStatus, SortOrder, ThumbnailFormat
from wrapblox.models.friend_request import FriendRequest
from wrapblox.models.group import Group, GroupRole
from wrapblox.models.universe import Universe
from wrapblox.services.errors import FetchError, LoginRequiredError

_timestamp = TypeAdapter(datetime)


class UserPresence(BaseModel):
    user_presence_type: int = Field(default=0, alias="userPresenceType")
    last_location: str | None = Field(default=None, alias="lastLocation")
    place_id: int | None = Field(default=None, alias="placeId")
    universe_id: int | None = Field(default=None, alias="universeId")
    last_online: datetime | None = Field(default=None, alias="lastOnline")


class GroupMembership(BaseModel):
    group: dict[str, Any]
    role: GroupRole

    @property
    def group_id(self) -> int:
        return self.group["id"]


class OwnedItem(BaseModel):
    id: int
    name: str | None = None
    type: str | None = None
    instance_id: int | None = Field(default=None, alias="instanceId")


class User(Entity):
    """A user account."""

    id: int
    name: str
    display_name: str = Field(default="", alias="displayName")
    description: str | None = None
    has_verified_badge: bool = Field(default=False, alias="hasVerifiedBadge")
    external_app_display_name: str | None = Field(
        default=None, alias="externalAppDisplayName"
    )
    is_banned: bool = Field(default=False, alias="isBanned")
    created: datetime | None = None

    @property
    def account_age(self) -> int | None:
        """Account age in days."""
        if self.created is None:
            return None
        created = self.created
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return (datetime.now(timezone.utc) - created).days

    # Users

    async def fetch_username_history(
        self, max_results: int = 100, use_cache: bool = True
    ) -> list[str]:
        entries = await self.http.fetch_endpoint_list(
            "GET",
            "Users",
            f"/users/{self.id}/username-history",
            max_results=max_results,
            use_cache=use_cache,
        )
        return [entry["name"] for entry in entries]

    # Presence

    async def fetch_presence(self, use_cache: bool = True) -> UserPresence:
        data = await self.http.fetch_endpoint(
            "POST",
            "Presence",
            "/presence/users",
            use_cache=use_cache,
            body={"userIds": [self.id]},
        )
        return UserPresence.model_validate(data["userPresences"][0])

    async def fetch_last_online_date(self, use_cache: bool = True) -> datetime:
        data = await self.http.fetch_endpoint(
            "POST",
            "Presence",
            "/presence/last-online",
            use_cache=use_cache,
            body={"userIds": [self.id]},
        )
        return _timestamp.validate_python(data["lastOnlineTimestamps"][0]["lastOnline"])

    # Groups

    async def fetch_group_roles(
        self,
        include_locked: bool = False,
        include_notification_preferences: bool = False,
        use_cache: bool = True,
    ) -> list[GroupMembership]:
        data = await self.http.fetch_endpoint(
            "GET",
            "GroupsV2",
            f"/users/{self.id}/groups/roles",
            use_cache=use_cache,
            params={
                "includeLocked": include_locked,
                "includeNotificationPreferences": include_notification_preferences,
            },
        )
        return [GroupMembership.model_validate(entry) for entry in data["data"]]

    async def in_group(self, group_id: int, use_cache: bool = True) -> bool:
        roles = await self.fetch_group_roles(use_cache=use_cache)
        return any(entry.group_id == group_id for entry in roles)

    async def get_role_in_group(
        self, group_id: int, use_cache: bool = True
    ) -> GroupRole | None:
        roles = await self.fetch_group_roles(use_cache=use_cache)
        return next((e.role for e in roles if e.group_id == group_id), None)

    async def fetch_primary_group(self, use_cache: bool = True) -> Group | None:
        data = await self.http.fetch_endpoint(
            "GET", "Groups", f"/users/{self.id}/groups/primary/role", use_cache=use_cache
        )
        if not data or not data.get("group"):
            return None
        return await self.client.fetch_group(data["group"]["id"], use_cache)

    async def fetch_groups(self, use_cache: bool = True) -> list[Group]:
        roles = await self.fetch_group_roles(use_cache=use_cache)
        return [await self.client.fetch_group(e.group_id, use_cache) for e in roles]

    # Badges

    async def fetch_badges(
        self,
        max_results: int = 100,
        sort_order: SortOrder = SortOrder.ASC,
        use_cache: bool = True,
    ) -> list[Badge]:
        entries = await self.http.fetch_endpoint_list(
            "GET",
            "Badges",
            f"/users/{self.id}/badges",
            max_results=max_results,
            use_cache=use_cache,
            params={"sortOrder": sort_order.value},
        )
        return [Badge.from_raw(self.client, entry) for entry in entries]

    async def fetch_badge_award_date(
        self, badge_id: int, use_cache: bool = True
    ) -> datetime | None:
        data = await self.http.fetch_endpoint(
            "GET",
            "Badges",
            f"/users/{self.id}/badges/{badge_id}/awarded-date",
            use_cache=use_cache,
        )
        if not data or not data.get("awardedDate"):
            return None
        return _timestamp.validate_python(data["awardedDate"])

    # Inventory

    async def can_view_inventory(self, use_cache: bool = True) -> bool:
        data = await self.http.fetch_endpoint(
            "GET", "Inventory", f"/users/{self.id}/can-view-inventory", use_cache=use_cache
        )
        return bool(data["canView"])

    async def check_ownership(
        self, item_type: ItemType, item_id: int, use_cache: bool = True
    ) -> OwnershipStatus:
        """
        Check whether the user owns an item.

        A failed lookup yields UNKNOWN rather than NOT_OWNED.
        """
        try:
            owned = await self.http.fetch_endpoint(
                "GET",
                "Inventory",
                f"/users/{self.id}/items/{item_type.value}/{item_id}/is-owned",
                use_cache=use_cache,
            )
        except FetchError as e:
            logger.warning(
                f"Ownership check failed for user {self.id}, "
                f"{item_type.value} {item_id}: {e}"
            )
            return OwnershipStatus.UNKNOWN
        return OwnershipStatus.OWNED if owned is True else OwnershipStatus.NOT_OWNED

    async def get_owned_asset(
        self, item_type: ItemType, item_id: int, use_cache: bool = True
    ) -> OwnedItem | None:
        """The user's copy of an item, or None when they do not own it."""
        data = await self.http.fetch_endpoint(
            "GET",
            "Inventory",
            f"/users/{self.id}/items/{item_type.value}/{item_id}",
            use_cache=use_cache,
        )
        entries = (data or {}).get("data") or []
        return OwnedItem.model_validate(entries[0]) if entries else None

    async def fetch_inventory(
        self,
        asset_types: list[str],
        max_results: int = 100,
        sort_order: SortOrder = SortOrder.ASC,
        use_cache: bool = True,
    ) -> list[dict[str, Any]]:
        return await self.http.fetch_endpoint_list(
            "GET",
            "InventoryV2",
            f"/users/{self.id}/inventory",
            max_results=max_results,
            use_cache=use_cache,
            params={"assetTypes": asset_types, "sortOrder": sort_order.value},
        )

    async def owns_asset(
        self, item_type: ItemType, item_id: int, use_cache: bool = True
    ) -> bool:
        """Boolean ownership check; a failed lookup counts as not owned."""
        status = await self.check_ownership(item_type, item_id, use_cache)
        return status == OwnershipStatus.OWNED

    async def owns_badge(self, badge_id: int, use_cache: bool = True) -> bool:
        return await self.owns_asset(ItemType.BADGE, badge_id, use_cache)

    async def owns_gamepass(self, gamepass_id: int, use_cache: bool = True) -> bool:
        return await self.owns_asset(ItemType.GAME_PASS, gamepass_id, use_cache)

    async def owns_bundle(self, bundle_id: int, use_cache: bool = True) -> bool:
        return await self.owns_asset(ItemType.BUNDLE, bundle_id, use_cache)

    # Avatar

    async def fetch_avatar_v1(self, use_cache: bool = True) -> dict[str, Any]:
        return await self.http.fetch_endpoint(
            "GET", "Avatar", f"/users/{self.id}/avatar", use_cache=use_cache
        )

    async def fetch_avatar_v2(self, use_cache: bool = True) -> dict[str, Any]:
        return await self.http.fetch_endpoint(
            "GET", "AvatarV2", f"/avatar/users/{self.id}/avatar", use_cache=use_cache
        )

    # Thumbnails

    async def fetch_avatar_thumbnail_url(
        self,
        size: str = "150x150",
        image_format: ThumbnailFormat = ThumbnailFormat.PNG,
        is_circular: bool = False,
        use_cache: bool = True,
    ) -> str | None:
        return await self._fetch_thumbnail_url(
            "/users/avatar", size, image_format, is_circular, use_cache
        )

    async def fetch_avatar_bust_url(
        self,
        size: str = "150x150",
        image_format: ThumbnailFormat = ThumbnailFormat.PNG,
        is_circular: bool = False,
        use_cache: bool = True,
    ) -> str | None:
        return await self._fetch_thumbnail_url(
            "/users/avatar-bust", size, image_format, is_circular, use_cache
        )

    async def fetch_avatar_headshot_url(
        self,
        size: str = "150x150",
        image_format: ThumbnailFormat = ThumbnailFormat.PNG,
        is_circular: bool = False,
        use_cache: bool = True,
    ) -> str | None:
        return await self._fetch_thumbnail_url(
            "/users/avatar-headshot", size, image_format, is_circular, use_cache
        )

    async def _fetch_thumbnail_url(
        self,
        path: str,
        size: str,
        image_format: ThumbnailFormat,
        is_circular: bool,
        use_cache: bool,
    ) -> str | None:
        data = await self.http.fetch_endpoint(
            "GET",
            "Thumbnails",
            path,
            use_cache=use_cache,
            params={
                "userIds": [self.id],
                "size": size,
                "format": image_format.value,
                "isCircular": is_circular,
            },
        )
        entries = data.get("data") or []
        return entries[0].get("imageUrl") if entries else None

    # Friends

    async def fetch_friends(
        self, max_results: int = 100, use_cache: bool = True
    ) -> list["User"]:
        if not self.client.is_logged_in():
            raise LoginRequiredError("view someone's friend list")

        data = await self.http.fetch_endpoint(
            "GET", "Friends", f"/users/{self.id}/friends", use_cache=use_cache
        )
        entries = (data.get("data") or [])[:max_results]
        return [User.from_raw(self.client, entry) for entry in entries]

    async def fetch_friends_metadata(self, use_cache: bool = True) -> dict[str, Any]:
        return await self.http.fetch_endpoint(
            "GET",
            "Friends",
            "/metadata",
            use_cache=use_cache,
            params={"targetUserId": self.id},
        )

    async def fetch_friend_count(self, use_cache: bool = True) -> int:
        data = await self.http.fetch_endpoint(
            "GET", "Friends", f"/users/{self.id}/friends/count", use_cache=use_cache
        )
        return data["count"]

    async def fetch_followers(
        self,
        max_results: int = 100,
        sort_order: SortOrder = SortOrder.ASC,
        use_cache: bool = True,
    ) -> list["User"]:
        entries = await self.http.fetch_endpoint_list(
            "GET",
            "Friends",
            f"/users/{self.id}/followers",
            max_results=max_results,
            use_cache=use_cache,
            params={"sortOrder": sort_order.value},
        )
        return [User.from_raw(self.client, entry) for entry in entries]

    async def fetch_follower_count(self, use_cache: bool = True) -> int:
        data = await self.http.fetch_endpoint(
            "GET", "Friends", f"/users/{self.id}/followers/count", use_cache=use_cache
        )
        return data["count"]

    async def fetch_followings(
        self,
        max_results: int = 100,
        sort_order: SortOrder = SortOrder.ASC,
        use_cache: bool = True,
    ) -> list["User"]:
        entries = await self.http.fetch_endpoint_list(
            "GET",
            "Friends",
            f"/users/{self.id}/followings",
            max_results=max_results,
            use_cache=use_cache,
            params={"sortOrder": sort_order.value},
        )
        return [User.from_raw(self.client, entry) for entry in entries]

    async def fetch_followings_count(self, use_cache: bool = True) -> int:
        data = await self.http.fetch_endpoint(
            "GET", "Friends", f"/users/{self.id}/followings/count", use_cache=use_cache
        )
        return data["count"]

    # Games

    async def fetch_created_universes(
        self, max_results: int = 100, use_cache: bool = True
    ) -> list[Universe]:
        entries = await self.http.fetch_endpoint_list(
            "GET",
            "GamesV2",
            f"/users/{self.id}/games",
            max_results=max_results,
            use_cache=use_cache,
            params={"accessFilter": "Public"},
        )
        return [Universe.from_raw(self.client, entry) for entry in entries]

    # Account settings

    async def block(self) -> None:
        if not self.client.is_logged_in():
            raise LoginRequiredError("block users")
        await self.http.fetch_endpoint(
            "POST", "AccountSettings", f"/users/{self.id}/block", use_cache=False
        )

    async def unblock(self) -> None:
        if not self.client.is_logged_in():
            raise LoginRequiredError("unblock users")
        await self.http.fetch_endpoint(
            "POST", "AccountSettings", f"/users/{self.id}/unblock", use_cache=False
        )

    # Premium features

    async def has_premium(self, use_cache: bool = True) -> bool:
        data = await self.http.fetch_endpoint(
            "GET",
            "PremiumFeatures",
            f"/users/{self.id}/validate-membership",
            use_cache=use_cache,
        )
        return data is True

    def __str__(self) -> str:
        return f"{self.name}:{self.id}"


class AuthedUser(User):
    """A user whose credential this client holds."""

    _cookie: str | None = PrivateAttr(default=None)

    def bind_cookie(self, cookie: str) -> "AuthedUser":
        self._cookie = cookie
        return self

    @property
    def cookie(self) -> str | None:
        return self._cookie

    async def fetch_friend_requests(
        self, max_results: int = 100, use_cache: bool = False
    ) -> list[FriendRequest]:
        entries = await self.http.fetch_endpoint_list(
            "GET",
            "Friends",
            "/my/friends/requests",
            max_results=max_results,
            use_cache=use_cache,
            cookie=self.cookie,
        )
        return [FriendRequest.from_raw(self.client, entry, self) for entry in entries]
