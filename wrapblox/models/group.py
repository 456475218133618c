"""
Group entity.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from wrapblox.models.base import Entity

if TYPE_CHECKING:
    from wrapblox.models.user import User


class GroupOwner(BaseModel):
    id: int
    type: str = "User"


class GroupRole(BaseModel):
    id: int
    name: str
    rank: int = 0


class Group(Entity):
    """A group as returned by the v2 groups endpoint."""

    id: int
    name: str
    description: str | None = None
    owner: GroupOwner | None = None
    created: datetime | None = None
    has_verified_badge: bool = Field(default=False, alias="hasVerifiedBadge")

    async def fetch_owner(self, use_cache: bool = True) -> "User | None":
        if self.owner is None or self.owner.type != "User":
            return None
        return await self.client.fetch_user(self.owner.id, use_cache)

    def __str__(self) -> str:
        return f"{self.name}:{self.id}"
