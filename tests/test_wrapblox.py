"""Tests for the client context and the entity layer built on the request path."""

import json

import httpx
import pytest

from tests.conftest import FakeUpstream
from wrapblox import (
    AuthedUser,
    ItemType,
    LoginRequiredError,
    NotFoundError,
    OwnershipStatus,
    SortOrder,
    WrapBlox,
)

USER = {
    "id": 1,
    "name": "Roblox",
    "displayName": "Roblox",
    "description": "Welcome to the Roblox profile!",
    "created": "2006-02-27T21:06:40.3Z",
    "isBanned": False,
    "externalAppDisplayName": None,
    "hasVerifiedBadge": True,
}

FRIEND_REQUEST = {
    "friendRequest": {"sentAt": "2024-01-02T03:04:05.123Z", "senderId": 1},
    "id": 1,
    "name": "Roblox",
}


def route(routes: dict[tuple[str, str], object]):
    """Answer by (method, host+path); unknown routes 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.host + request.url.path)
        target = routes.get(key)
        if target is None:
            return httpx.Response(404, json={"errors": [{"message": "NotFound"}]})
        if callable(target):
            return target(request)
        return httpx.Response(200, json=target)

    return handler


@pytest.fixture
def make_wrapblox(settings):
    def _make(routes):
        upstream = FakeUpstream(route(routes))
        client = WrapBlox(settings=settings, transport=httpx.MockTransport(upstream))
        return client, upstream

    return _make


@pytest.mark.asyncio
async def test_fetch_user_by_id(make_wrapblox):
    client, upstream = make_wrapblox({("GET", "users.roblox.com/v1/users/1"): USER})

    user = await client.fetch_user(1)

    assert user.id == 1
    assert user.display_name == "Roblox"
    assert user.has_verified_badge is True
    assert user.account_age > 365
    assert user.raw_data == USER
    assert str(user) == "Roblox:1"


@pytest.mark.asyncio
async def test_fetch_user_by_name_resolves_then_fetches(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("POST", "users.roblox.com/v1/usernames/users"): {
                "data": [{"requestedUsername": "Roblox", "id": 1, "name": "Roblox"}]
            },
            ("GET", "users.roblox.com/v1/users/1"): USER,
        }
    )

    user = await client.fetch_user("Roblox")

    assert user.id == 1
    assert [r.method for r in upstream.requests] == ["POST", "GET"]
    assert json.loads(upstream.requests[0].content) == {
        "usernames": ["Roblox"],
        "excludeBannedUsers": False,
    }


@pytest.mark.asyncio
async def test_fetch_user_by_unknown_name_is_not_found(make_wrapblox):
    client, upstream = make_wrapblox(
        {("POST", "users.roblox.com/v1/usernames/users"): {"data": []}}
    )

    with pytest.raises(NotFoundError) as exc_info:
        await client.fetch_user("nobody-here")

    assert exc_info.value.status is None
    assert len(upstream.requests) == 1


@pytest.mark.asyncio
async def test_fetch_group_by_name(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "groups.roblox.com/v1/groups/search/lookup"): {
                "data": [{"id": 7, "name": "Builders"}]
            },
            ("GET", "groups.roblox.com/v2/groups"): {
                "data": [
                    {
                        "id": 7,
                        "name": "Builders",
                        "description": "",
                        "owner": {"id": 1, "type": "User"},
                        "created": "2010-01-01T00:00:00Z",
                        "hasVerifiedBadge": False,
                    }
                ]
            },
            ("GET", "users.roblox.com/v1/users/1"): USER,
        }
    )

    group = await client.fetch_group("Builders")
    owner = await group.fetch_owner()

    assert group.id == 7
    assert upstream.requests[1].url.params["groupIds"] == "7"
    assert owner.name == "Roblox"


@pytest.mark.asyncio
async def test_fetch_universe_and_favorites(make_wrapblox):
    client, _ = make_wrapblox(
        {
            ("GET", "games.roblox.com/v1/games"): {
                "data": [
                    {
                        "id": 99,
                        "rootPlaceId": 100,
                        "name": "Obby",
                        "creator": {"id": 1, "name": "Roblox", "type": "User"},
                        "playing": 12,
                        "visits": 3400,
                        "maxPlayers": 20,
                    }
                ]
            },
            ("GET", "games.roblox.com/v1/games/99/favorites/count"): {
                "favoritesCount": 5
            },
        }
    )

    universe = await client.fetch_universe(99)

    assert universe.max_players == 20
    assert await universe.fetch_favorite_count() == 5


@pytest.mark.asyncio
async def test_missing_universe_is_not_found(make_wrapblox):
    client, _ = make_wrapblox({("GET", "games.roblox.com/v1/games"): {"data": []}})

    with pytest.raises(NotFoundError):
        await client.fetch_universe(1)


@pytest.mark.asyncio
async def test_login_sets_shared_session(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/authenticated"): {"id": 1, "name": "Roblox"},
            ("GET", "users.roblox.com/v1/users/1"): USER,
        }
    )

    me = await client.login("secret")

    assert isinstance(me, AuthedUser)
    assert me.cookie == "secret"
    assert client.is_logged_in()
    assert client.service_client.session.is_authenticated()
    assert upstream.requests[0].headers["cookie"] == ".ROBLOSECURITY=secret"


@pytest.mark.asyncio
async def test_fetch_authed_user_leaves_session_untouched(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/authenticated"): {"id": 1, "name": "Roblox"},
            ("GET", "users.roblox.com/v1/users/1"): USER,
        }
    )

    other = await client.fetch_authed_user("other-cookie")

    assert other.cookie == "other-cookie"
    assert not client.is_logged_in()
    assert not client.service_client.session.is_authenticated()
    assert upstream.requests[0].headers["cookie"] == ".ROBLOSECURITY=other-cookie"
    assert "cookie" not in upstream.requests[1].headers


@pytest.mark.asyncio
async def test_ownership_is_three_state(make_wrapblox):
    client, _ = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "inventory.roblox.com/v1/users/1/items/Badge/5/is-owned"): True,
            ("GET", "inventory.roblox.com/v1/users/1/items/GamePass/6/is-owned"): False,
            ("GET", "inventory.roblox.com/v1/users/1/items/Bundle/7/is-owned"): (
                lambda request: httpx.Response(500, text="oops")
            ),
        }
    )
    user = await client.fetch_user(1)

    assert await user.check_ownership(ItemType.BADGE, 5) == OwnershipStatus.OWNED
    assert await user.check_ownership(ItemType.GAME_PASS, 6) == OwnershipStatus.NOT_OWNED
    assert await user.check_ownership(ItemType.BUNDLE, 7) == OwnershipStatus.UNKNOWN

    assert await user.owns_badge(5) is True
    assert await user.owns_gamepass(6) is False
    assert await user.owns_bundle(7) is False


@pytest.mark.asyncio
async def test_fetch_badges_paginates(make_wrapblox):
    def badges(request):
        cursor = request.url.params.get("cursor")
        start = 0 if cursor is None else 100
        return httpx.Response(
            200,
            json={
                "nextPageCursor": None if cursor else "next",
                "data": [{"id": start + i, "name": f"Badge {start + i}"} for i in range(100)],
            },
        )

    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "badges.roblox.com/v1/users/1/badges"): badges,
        }
    )
    user = await client.fetch_user(1)

    result = await user.fetch_badges(max_results=150)

    assert len(result) == 150
    assert result[-1].id == 149
    assert upstream.calls_to("/badges")[0].url.params["sortOrder"] == "Asc"


@pytest.mark.asyncio
async def test_mutations_require_login(make_wrapblox):
    client, upstream = make_wrapblox({("GET", "users.roblox.com/v1/users/1"): USER})
    user = await client.fetch_user(1)

    with pytest.raises(LoginRequiredError):
        await user.block()
    with pytest.raises(LoginRequiredError):
        await user.fetch_friends()

    assert len(upstream.requests) == 1


@pytest.mark.asyncio
async def test_friend_request_accept_uses_target_cookie(make_wrapblox):
    def accept(request):
        if request.headers.get("x-csrf-token") != "tok":
            return httpx.Response(403, headers={"x-csrf-token": "x"})
        return httpx.Response(200, json={})

    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/authenticated"): {"id": 1, "name": "Roblox"},
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "friends.roblox.com/v1/my/friends/requests"): {
                "nextPageCursor": None,
                "data": [FRIEND_REQUEST],
            },
            ("POST", "auth.roblox.com/v2/logout"): (
                lambda request: httpx.Response(403, headers={"x-csrf-token": "tok"})
            ),
            ("POST", "friends.roblox.com/v1/users/1/accept-friend-request"): accept,
        }
    )
    me = await client.fetch_authed_user("target-cookie")

    requests = await me.fetch_friend_requests()
    await requests[0].accept()

    assert requests[0].sender_id == 1
    assert requests[0].created.year == 2024
    accepts = upstream.calls_to("/accept-friend-request")
    assert len(accepts) == 2
    assert all(r.headers["cookie"] == ".ROBLOSECURITY=target-cookie" for r in accepts)
    assert upstream.calls_to("/logout")[0].headers["cookie"] == ".ROBLOSECURITY=target-cookie"


@pytest.mark.asyncio
async def test_presence_posts_are_cached_by_body(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("POST", "presence.roblox.com/v1/presence/last-online"): {
                "lastOnlineTimestamps": [
                    {"userId": 1, "lastOnline": "2024-05-06T07:08:09.1234567Z"}
                ]
            },
        }
    )
    user = await client.fetch_user(1)

    first = await user.fetch_last_online_date()
    second = await user.fetch_last_online_date()

    assert first == second
    assert first.year == 2024
    assert len(upstream.calls_to("/last-online")) == 1


@pytest.mark.asyncio
async def test_followings_paginate_with_sort_order(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "friends.roblox.com/v1/users/1/followings"): {
                "nextPageCursor": None,
                "data": [
                    {"id": 2, "name": "Builderman"},
                    {"id": 3, "name": "Stickmasterluke"},
                ],
            },
        }
    )
    user = await client.fetch_user(1)

    followings = await user.fetch_followings(sort_order=SortOrder.DESC)

    assert [u.name for u in followings] == ["Builderman", "Stickmasterluke"]
    assert upstream.calls_to("/followings")[0].url.params["sortOrder"] == "Desc"


@pytest.mark.asyncio
async def test_avatar_and_thumbnail_endpoints(make_wrapblox):
    def thumbnail(request):
        kind = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(
            200, json={"data": [{"targetId": 1, "imageUrl": f"https://t/{kind}.png"}]}
        )

    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "avatar.roblox.com/v1/users/1/avatar"): {"playerAvatarType": "R15"},
            ("GET", "avatar.roblox.com/v2/avatar/users/1/avatar"): {"assets": []},
            ("GET", "thumbnails.roblox.com/v1/users/avatar"): thumbnail,
            ("GET", "thumbnails.roblox.com/v1/users/avatar-bust"): thumbnail,
            ("GET", "thumbnails.roblox.com/v1/users/avatar-headshot"): thumbnail,
        }
    )
    user = await client.fetch_user(1)

    assert (await user.fetch_avatar_v1())["playerAvatarType"] == "R15"
    assert (await user.fetch_avatar_v2()) == {"assets": []}
    assert await user.fetch_avatar_thumbnail_url() == "https://t/avatar.png"
    assert await user.fetch_avatar_bust_url(size="60x60") == "https://t/avatar-bust.png"
    assert await user.fetch_avatar_headshot_url() == "https://t/avatar-headshot.png"
    bust = upstream.calls_to("/avatar-bust")[0]
    assert bust.url.params["size"] == "60x60"
    assert bust.url.params["userIds"] == "1"


@pytest.mark.asyncio
async def test_friends_metadata_targets_user(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "friends.roblox.com/v1/metadata"): {"isFriendsFilterBarEnabled": True},
        }
    )
    user = await client.fetch_user(1)

    assert await user.fetch_friends_metadata() == {"isFriendsFilterBarEnabled": True}
    assert upstream.calls_to("/metadata")[0].url.params["targetUserId"] == "1"


@pytest.mark.asyncio
async def test_get_owned_asset(make_wrapblox):
    client, _ = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "inventory.roblox.com/v1/users/1/items/Asset/5"): {
                "previousPageCursor": None,
                "nextPageCursor": None,
                "data": [{"type": "Asset", "id": 5, "name": "Hat", "instanceId": 77}],
            },
            ("GET", "inventory.roblox.com/v1/users/1/items/Asset/6"): {"data": []},
        }
    )
    user = await client.fetch_user(1)

    owned = await user.get_owned_asset(ItemType.ASSET, 5)

    assert owned.name == "Hat"
    assert owned.instance_id == 77
    assert await user.get_owned_asset(ItemType.ASSET, 6) is None


@pytest.mark.asyncio
async def test_fetch_inventory_uses_v2_listing(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "inventory.roblox.com/v2/users/1/inventory"): {
                "nextPageCursor": None,
                "data": [{"assetId": 5, "name": "Hat", "assetType": "Hat"}],
            },
        }
    )
    user = await client.fetch_user(1)

    items = await user.fetch_inventory(["Hat", "Face"])

    assert items == [{"assetId": 5, "name": "Hat", "assetType": "Hat"}]
    assert upstream.calls_to("/inventory")[0].url.params.get_list("assetTypes") == [
        "Hat",
        "Face",
    ]


@pytest.mark.asyncio
async def test_favorite_universe_requires_login(make_wrapblox):
    client, upstream = make_wrapblox(
        {
            ("GET", "users.roblox.com/v1/users/authenticated"): {"id": 1, "name": "Roblox"},
            ("GET", "users.roblox.com/v1/users/1"): USER,
            ("GET", "games.roblox.com/v1/games"): {"data": [{"id": 99, "name": "Obby"}]},
            ("POST", "auth.roblox.com/v2/logout"): (
                lambda request: httpx.Response(403, headers={"x-csrf-token": "tok"})
            ),
            ("POST", "games.roblox.com/v1/games/99/favorites"): (
                lambda request: httpx.Response(200, json={})
                if request.headers.get("x-csrf-token") == "tok"
                else httpx.Response(403, headers={"x-csrf-token": "x"})
            ),
        }
    )
    universe = await client.fetch_universe(99)

    with pytest.raises(LoginRequiredError):
        await universe.favorite()

    await client.login("secret")
    await universe.favorite()
    await universe.favorite(favorited=False)

    favorites = upstream.calls_to("/favorites")
    assert [json.loads(r.content) for r in favorites] == [
        {"isFavorited": True},
        {"isFavorited": True},
        {"isFavorited": False},
    ]
    assert favorites[-1].headers["x-csrf-token"] == "tok"
