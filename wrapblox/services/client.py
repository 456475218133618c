"""
ServiceClient - Unified async HTTP client for every upstream service.

Combines:
- Service router for base URLs
- CacheManager for response caching
- SessionManager for credentials and anti-forgery token refresh
- Error classification and the retry policy for transient failures
- Cursor pagination for list endpoints
"""

import asyncio
from dataclasses import replace
from datetime import timedelta
from typing import Any

import httpx
from loguru import logger

from wrapblox.services.cache import CacheManager
from wrapblox.services.classifier import (
    CSRF_HEADER,
    classify,
    get_csrf_token,
    is_token_expired,
    network_error,
)
from wrapblox.services.errors import (
    AuthenticationError,
    ErrorKind,
    ErrorRecord,
    FetchError,
    NetworkError,
)
from wrapblox.services.pagination import ItemExtractor, extract_data, fetch_list
from wrapblox.services.request import (
    RequestDescriptor,
    RequestOptions,
    fingerprint_prefix,
)
from wrapblox.services.router import build_url
from wrapblox.services.session import SessionManager
from wrapblox.settings import Settings, global_settings

COOKIE_NAME = ".ROBLOSECURITY"
TOKEN_ENDPOINT = ("Auth", "/logout")


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


class ServiceClient:
    """
    Unified HTTP client with caching, session handling, and retries.

    Usage:
        client = ServiceClient(cookie=cookie)

        # Single item
        user = await client.fetch_endpoint("GET", "Users", "/users/1")

        # Cursor-paginated list
        badges = await client.fetch_endpoint_list(
            "GET", "Badges", "/users/1/badges", max_results=250
        )
    """

    def __init__(
        self,
        cookie: str | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: CacheManager | None = None,
    ):
        self._settings = settings or global_settings
        self._transport = transport

        self._cache = cache if cache is not None else CacheManager(
            max_size=self._settings.cache_max_size,
            default_ttl=timedelta(seconds=self._settings.cache_ttl_seconds),
            debug=self._settings.debug,
        )
        self._session = SessionManager(
            minter=self.mint_csrf_token,
            cookie=cookie if cookie is not None else self._settings.cookie,
            debug=self._settings.debug,
        )

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    @property
    def cache(self) -> CacheManager:
        return self._cache

    @property
    def session(self) -> SessionManager:
        return self._session

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.request_timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http_client

    async def fetch_endpoint(
        self,
        method: str,
        service: str,
        path: str,
        options: RequestOptions | None = None,
        **kwargs: Any,
    ) -> Any:
        """
        Fetch a single endpoint.

        Args:
            method: HTTP method (GET, POST, etc.)
            service: Logical service name, e.g. "Users"
            path: Path below the service base URL
            options: Per-call options; keyword arguments build one if omitted
            **kwargs: use_cache, cookie, params, body

        Returns:
            Decoded JSON response

        Raises:
            FetchError: Classified upstream or transport failure
        """
        options = options or RequestOptions(**kwargs)
        return await self.execute(RequestDescriptor.build(method, service, path, options))

    async def fetch_endpoint_list(
        self,
        method: str,
        service: str,
        path: str,
        options: RequestOptions | None = None,
        max_results: int = 100,
        extractor: ItemExtractor = extract_data,
        **kwargs: Any,
    ) -> list[Any]:
        """Fetch up to max_results items from a cursor-paginated endpoint."""
        options = options or RequestOptions(**kwargs)
        descriptor = RequestDescriptor.build(method, service, path, options)
        return await fetch_list(
            self.execute,
            descriptor,
            max_results,
            extractor=extractor,
            page_size=self._settings.page_size,
        )

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """
        Run one request through cache, session, retry and classification.

        Recovers locally from exactly two conditions: one anti-forgery token
        refresh per call, and rate limiting up to the configured retry ceiling.
        Every other failure is raised as a FetchError subclass.
        """
        url = build_url(descriptor.service, descriptor.path)

        if descriptor.use_cache:
            hit, data = await self._cache.get(descriptor.fingerprint)
            if hit:
                return data

        attached = self._session.attach(descriptor)
        token_refreshed = False
        rate_limit_retries = 0

        while True:
            response = await self._send(url, attached)

            if response.is_success:
                break

            if is_token_expired(response.status_code, response.headers):
                if token_refreshed:
                    raise AuthenticationError(
                        self._classify(response), service=descriptor.service
                    )
                token_refreshed = True
                token = await self._session.refresh(attached)
                attached = replace(attached, csrf_token=token)
                continue

            record = self._classify(response)

            if record.kind == ErrorKind.RATE_LIMIT:
                if rate_limit_retries >= self._settings.rate_limit_max_retries:
                    raise FetchError.from_record(record, service=descriptor.service)
                rate_limit_retries += 1
                logger.warning(
                    f"Rate limited on {descriptor.service}{descriptor.path}, "
                    f"retry {rate_limit_retries}/"
                    f"{self._settings.rate_limit_max_retries} in {record.retry_after}s"
                )
                await _sleep(record.retry_after or 0)
                continue

            raise FetchError.from_record(record, service=descriptor.service)

        data = self._decode(response)

        if descriptor.use_cache:
            await self._cache.put(descriptor.fingerprint, data)

        return data

    async def mint_csrf_token(self, cookie: str | None) -> str:
        """
        Ask upstream for a new anti-forgery token.

        An empty POST without a token is answered with 403 and the new token
        in the x-csrf-token header.
        """
        service, path = TOKEN_ENDPOINT
        descriptor = RequestDescriptor(
            method="POST", service=service, path=path, cookie=cookie, use_cache=False
        )
        response = await self._send(build_url(service, path), descriptor)

        token = get_csrf_token(response.headers)
        if token:
            return token

        if response.is_success:
            raise AuthenticationError(
                ErrorRecord(
                    kind=ErrorKind.AUTHENTICATION,
                    status=response.status_code,
                    message=f"No {CSRF_HEADER} header in token response",
                ),
                service=service,
            )
        raise FetchError.from_record(self._classify(response), service=service)

    async def _send(
        self, url: str, descriptor: RequestDescriptor
    ) -> httpx.Response:
        """Execute the actual HTTP request."""
        client = await self._get_http_client()

        headers = {"Accept": "application/json"}
        if descriptor.cookie:
            headers["Cookie"] = f"{COOKIE_NAME}={descriptor.cookie}"
        if descriptor.csrf_token:
            headers[CSRF_HEADER] = descriptor.csrf_token

        try:
            return await client.request(
                method=descriptor.method,
                url=url,
                params=descriptor.query_params() or None,
                headers=headers,
                json=descriptor.body,
            )

        except httpx.TimeoutException as e:
            raise NetworkError(
                network_error(
                    f"Request timed out after {self._settings.request_timeout}s"
                ),
                service=descriptor.service,
            ) from e

        except httpx.RequestError as e:
            raise NetworkError(
                network_error(str(e) or type(e).__name__),
                service=descriptor.service,
            ) from e

    def _classify(self, response: httpx.Response) -> ErrorRecord:
        try:
            body = response.json()
        except ValueError:
            body = None
        return classify(
            response.status_code,
            response.headers,
            body=body,
            text=response.text,
            default_retry_after=self._settings.rate_limit_default_delay,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def invalidate(
        self, method: str, service: str, path: str = ""
    ) -> int:
        """
        Drop cached responses for a path, across all queries and bodies.

        Without a path every cached response for the method and service goes.
        """
        prefix = fingerprint_prefix(method, service, path)
        if path:
            prefix += "?"
        return await self._cache.invalidate(prefix)

    async def clear_cache(self) -> None:
        await self._cache.clear()

    def get_health_status(self) -> dict[str, Any]:
        """Get cache and session status."""
        return {
            "cache": self._cache.get_stats().to_dict(),
            "authenticated": self._session.is_authenticated(),
            "token_refreshes": self._session.refresh_count,
        }

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

        await self._session.close()
        logger.debug("ServiceClient closed")

    async def __aenter__(self) -> "ServiceClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
