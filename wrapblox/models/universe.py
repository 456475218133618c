"""
Universe entity.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from wrapblox.models.base import Entity
from wrapblox.services.errors import LoginRequiredError

if TYPE_CHECKING:
    from wrapblox.models.group import Group
    from wrapblox.models.user import User


class UniverseCreator(BaseModel):
    id: int
    name: str | None = None
    type: str = "User"


class Universe(Entity):
    """A universe (game) and its root place."""

    id: int
    name: str
    description: str | None = None
    root_place_id: int | None = Field(default=None, alias="rootPlaceId")
    creator: UniverseCreator | None = None
    playing: int = 0
    visits: int = 0
    max_players: int = Field(default=0, alias="maxPlayers")
    created: datetime | None = None
    updated: datetime | None = None

    async def fetch_creator(self, use_cache: bool = True) -> "User | Group | None":
        if self.creator is None:
            return None
        if self.creator.type == "Group":
            return await self.client.fetch_group(self.creator.id, use_cache)
        return await self.client.fetch_user(self.creator.id, use_cache)

    async def fetch_favorite_count(self, use_cache: bool = True) -> int:
        data = await self.http.fetch_endpoint(
            "GET", "Games", f"/games/{self.id}/favorites/count", use_cache=use_cache
        )
        return data["favoritesCount"]

    async def favorite(self, favorited: bool = True) -> None:
        """Add the universe to (or remove it from) the logged-in user's favorites."""
        if not self.client.is_logged_in():
            raise LoginRequiredError("favorite games")
        await self.http.fetch_endpoint(
            "POST",
            "Games",
            f"/games/{self.id}/favorites",
            use_cache=False,
            body={"isFavorited": favorited},
        )

    def __str__(self) -> str:
        return f"{self.name}:{self.id}"
