"""
Badge entity.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from wrapblox.models.base import Entity

if TYPE_CHECKING:
    from wrapblox.models.universe import Universe


class BadgeStatistics(BaseModel):
    past_day_awarded_count: int = Field(default=0, alias="pastDayAwardedCount")
    awarded_count: int = Field(default=0, alias="awardedCount")
    win_rate_percentage: float = Field(default=0.0, alias="winRatePercentage")


class AwardingUniverse(BaseModel):
    id: int
    name: str = ""
    root_place_id: int | None = Field(default=None, alias="rootPlaceId")


class Badge(Entity):
    """A badge awarded inside a universe."""

    id: int
    name: str
    description: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    enabled: bool = True
    icon_image_id: int | None = Field(default=None, alias="iconImageId")
    created: datetime | None = None
    updated: datetime | None = None
    statistics: BadgeStatistics | None = None
    awarding_universe: AwardingUniverse | None = Field(
        default=None, alias="awardingUniverse"
    )

    async def fetch_awarding_universe(self, use_cache: bool = True) -> "Universe | None":
        if self.awarding_universe is None:
            return None
        return await self.client.fetch_universe(self.awarding_universe.id, use_cache)

    def __str__(self) -> str:
        return f"{self.name}:{self.id}"
