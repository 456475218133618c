from __future__ import annotations

import inspect
from typing import Any, Callable

import httpx
import pytest

from wrapblox.services.client import ServiceClient
from wrapblox.settings import Settings


class FakeUpstream:
    """Records every request and answers it with the wrapped handler."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        cookie="",
        request_timeout=5.0,
        rate_limit_max_retries=2,
        rate_limit_default_delay=1.0,
        cache_ttl_seconds=60,
        page_size=100,
    )


@pytest.fixture
def make_client(settings):
    """Build a ServiceClient talking to a FakeUpstream."""

    def _make(handler, cookie: str | None = "test-cookie", cache=None):
        upstream = FakeUpstream(handler)
        client = ServiceClient(
            cookie=cookie,
            settings=settings,
            transport=httpx.MockTransport(upstream),
            cache=cache,
        )
        return client, upstream

    return _make


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff delays instead of sleeping."""
    import wrapblox.services.client as client_module

    delays: list[float] = []

    async def _record(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr(client_module, "_sleep", _record)
    return delays
