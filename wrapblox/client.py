"""
WrapBlox - Client context owning one session and one response cache.
"""

from typing import Any

import httpx
from loguru import logger

from wrapblox.models import AuthedUser, Badge, Group, Universe, User
from wrapblox.services.client import ServiceClient
from wrapblox.services.errors import ErrorKind, ErrorRecord, NotFoundError
from wrapblox.settings import Settings


def _not_found(message: str) -> NotFoundError:
    # Empty lookup result, not an upstream 404
    return NotFoundError(ErrorRecord(kind=ErrorKind.NOT_FOUND, message=message))


class WrapBlox:
    """
    Entry point for the typed API.

    Usage:
        async with WrapBlox() as client:
            await client.login(cookie)
            user = await client.fetch_user("Roblox")
            badges = await user.fetch_badges(max_results=250)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service_client = ServiceClient(
            cookie="", settings=settings, transport=transport
        )
        self.me: AuthedUser | None = None

    async def login(self, cookie: str) -> AuthedUser:
        """Authenticate the shared session and return the logged-in user."""
        self.service_client.session.set_cookie(cookie)
        info = await self.service_client.fetch_endpoint(
            "GET", "Users", "/users/authenticated", use_cache=False
        )
        raw = await self._fetch_raw_user(info["id"])
        self.me = AuthedUser.from_raw(self, raw).bind_cookie(cookie)
        logger.info(f"Logged in as {self.me}")
        return self.me

    async def fetch_authed_user(self, cookie: str) -> AuthedUser:
        """Resolve the user behind a cookie without touching the shared session."""
        info = await self.service_client.fetch_endpoint(
            "GET", "Users", "/users/authenticated", use_cache=False, cookie=cookie
        )
        raw = await self._fetch_raw_user(info["id"])
        return AuthedUser.from_raw(self, raw).bind_cookie(cookie)

    def is_logged_in(self) -> bool:
        return self.me is not None

    # Users

    async def _resolve_user_id(self, username: str, use_cache: bool = True) -> int:
        data = await self.service_client.fetch_endpoint(
            "POST",
            "Users",
            "/usernames/users",
            use_cache=use_cache,
            body={"usernames": [username], "excludeBannedUsers": False},
        )
        matches = data.get("data") or []
        if not matches:
            raise _not_found(f"User '{username}' not found")
        return matches[0]["id"]

    async def _fetch_raw_user(self, user_id: int, use_cache: bool = True) -> dict[str, Any]:
        return await self.service_client.fetch_endpoint(
            "GET", "Users", f"/users/{user_id}", use_cache=use_cache
        )

    async def fetch_user(self, query: int | str, use_cache: bool = True) -> User:
        """Fetch a user by id, or by username via a name-to-id lookup."""
        user_id = (
            query
            if isinstance(query, int)
            else await self._resolve_user_id(query, use_cache)
        )
        raw = await self._fetch_raw_user(user_id, use_cache)
        return User.from_raw(self, raw)

    # Badges

    async def fetch_badge(self, badge_id: int, use_cache: bool = True) -> Badge:
        raw = await self.service_client.fetch_endpoint(
            "GET", "Badges", f"/badges/{badge_id}", use_cache=use_cache
        )
        return Badge.from_raw(self, raw)

    # Groups

    async def _resolve_group_id(self, name: str, use_cache: bool = True) -> int:
        data = await self.service_client.fetch_endpoint(
            "GET",
            "Groups",
            "/groups/search/lookup",
            use_cache=use_cache,
            params={"groupName": name},
        )
        matches = data.get("data") or []
        if not matches:
            raise _not_found(f"Group '{name}' not found")
        return matches[0]["id"]

    async def fetch_group(self, query: int | str, use_cache: bool = True) -> Group:
        """Fetch a group by id, or by name via a name-to-id lookup."""
        group_id = (
            query
            if isinstance(query, int)
            else await self._resolve_group_id(query, use_cache)
        )
        data = await self.service_client.fetch_endpoint(
            "GET",
            "GroupsV2",
            "/groups",
            use_cache=use_cache,
            params={"groupIds": [group_id]},
        )
        matches = data.get("data") or []
        if not matches:
            raise _not_found(f"Group {group_id} not found")
        return Group.from_raw(self, matches[0])

    # Universes

    async def fetch_universe(self, universe_id: int, use_cache: bool = True) -> Universe:
        data = await self.service_client.fetch_endpoint(
            "GET",
            "Games",
            "/games",
            use_cache=use_cache,
            params={"universeIds": [universe_id]},
        )
        matches = data.get("data") or []
        if not matches:
            raise _not_found(f"Universe {universe_id} not found")
        return Universe.from_raw(self, matches[0])

    async def close(self) -> None:
        await self.service_client.close()

    async def __aenter__(self) -> "WrapBlox":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
