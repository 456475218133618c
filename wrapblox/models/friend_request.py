"""
Friend request entity.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, PrivateAttr

from wrapblox.models.base import Entity

if TYPE_CHECKING:
    from wrapblox.client import WrapBlox
    from wrapblox.models.user import AuthedUser, User


class FriendRequestInfo(BaseModel):
    sender_id: int = Field(alias="senderId")
    sent_at: datetime = Field(alias="sentAt")
    source_universe_id: int | None = Field(default=None, alias="sourceUniverseId")


class FriendRequest(Entity):
    """A pending friend request addressed to an authenticated user."""

    friend_request: FriendRequestInfo = Field(alias="friendRequest")

    _target: "AuthedUser | None" = PrivateAttr(default=None)

    @classmethod
    def from_raw(
        cls,
        client: "WrapBlox",
        raw_data: dict[str, Any],
        target: "AuthedUser | None" = None,
    ) -> "FriendRequest":
        request = super().from_raw(client, raw_data)
        request._target = target
        return request

    @property
    def sender_id(self) -> int:
        return self.friend_request.sender_id

    @property
    def created(self) -> datetime:
        return self.friend_request.sent_at

    @property
    def target(self) -> "AuthedUser | None":
        return self._target

    async def fetch_sender(self, use_cache: bool = True) -> "User":
        return await self.client.fetch_user(self.sender_id, use_cache)

    async def accept(self) -> None:
        await self._respond("accept")

    async def decline(self) -> None:
        await self._respond("decline")

    async def _respond(self, action: str) -> None:
        cookie = self._target.cookie if self._target else None
        await self.http.fetch_endpoint(
            "POST",
            "Friends",
            f"/users/{self.sender_id}/{action}-friend-request",
            use_cache=False,
            cookie=cookie,
        )
