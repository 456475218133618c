"""
Service router - maps logical service names to their base URLs.
"""

from wrapblox.services.errors import UnknownServiceError

SERVICE_URLS: dict[str, str] = {
    "Users": "https://users.roblox.com/v1",
    "Presence": "https://presence.roblox.com/v1",
    "Groups": "https://groups.roblox.com/v1",
    "GroupsV2": "https://groups.roblox.com/v2",
    "Badges": "https://badges.roblox.com/v1",
    "Inventory": "https://inventory.roblox.com/v1",
    "InventoryV2": "https://inventory.roblox.com/v2",
    "Avatar": "https://avatar.roblox.com/v1",
    "AvatarV2": "https://avatar.roblox.com/v2",
    "Thumbnails": "https://thumbnails.roblox.com/v1",
    "Friends": "https://friends.roblox.com/v1",
    "AccountSettings": "https://accountsettings.roblox.com/v1",
    "PremiumFeatures": "https://premiumfeatures.roblox.com/v1",
    "Games": "https://games.roblox.com/v1",
    "GamesV2": "https://games.roblox.com/v2",
    "Auth": "https://auth.roblox.com/v2",
}


def resolve(service: str) -> str:
    """Get the base URL for a service, raising UnknownServiceError if absent."""
    try:
        return SERVICE_URLS[service]
    except KeyError:
        raise UnknownServiceError(service) from None


def build_url(service: str, path: str) -> str:
    return resolve(service) + "/" + path.lstrip("/")


def is_registered(service: str) -> bool:
    return service in SERVICE_URLS
