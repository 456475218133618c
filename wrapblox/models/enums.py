from enum import Enum


class ItemType(str, Enum):
    """Inventory item types as used in inventory URLs."""

    ASSET = "Asset"
    GAME_PASS = "GamePass"
    BADGE = "Badge"
    BUNDLE = "Bundle"


class OwnershipStatus(str, Enum):
    """Outcome of an ownership check."""

    OWNED = "OWNED"
    NOT_OWNED = "NOT_OWNED"
    UNKNOWN = "UNKNOWN"  # The check itself failed


class SortOrder(str, Enum):
    ASC = "Asc"
    DESC = "Desc"


class ThumbnailFormat(str, Enum):
    PNG = "Png"
    JPEG = "Jpeg"
    WEBP = "Webp"
