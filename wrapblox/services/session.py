"""
SessionManager - Owns the session credential and the anti-forgery token.

Token states:
- UNKNOWN: No token yet, or the last one was rejected upstream
- FRESH: Token set and believed valid

Transitions:
- UNKNOWN → FRESH: After a refresh mints a new token
- FRESH → UNKNOWN: When a request reports the token was rejected

Concurrent refreshes for the same credential collapse into one upstream call.
"""

import hashlib
from collections import OrderedDict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger

from wrapblox.services.request import RequestDescriptor
from wrapblox.services.singleflight import SingleFlight

TokenMinter = Callable[[str | None], Awaitable[str]]

MAX_OVERRIDE_SESSIONS = 64


class TokenState(str, Enum):
    """Anti-forgery token states."""

    UNKNOWN = "UNKNOWN"
    FRESH = "FRESH"


@dataclass
class Session:
    """Credential pair for one authenticated identity."""

    cookie: str | None = None
    csrf_token: str | None = None
    token_state: TokenState = TokenState.UNKNOWN

    @property
    def is_fresh(self) -> bool:
        return self.token_state == TokenState.FRESH and self.csrf_token is not None


def _credential_key(cookie: str | None) -> str:
    if not cookie:
        return "csrf:anonymous"
    return "csrf:" + hashlib.sha256(cookie.encode()).hexdigest()[:16]


class SessionManager:
    """
    Attaches credentials to requests and refreshes the anti-forgery token.

    Requests made with a cookie override get their own token bookkeeping so
    acting as another identity never touches the primary session.

    Usage:
        manager = SessionManager(minter=client.mint_csrf_token)
        manager.set_cookie(cookie)

        descriptor = manager.attach(descriptor)
        ...
        token = await manager.refresh(descriptor)
    """

    def __init__(
        self,
        minter: TokenMinter,
        cookie: str | None = None,
        debug: bool = False,
    ):
        self._minter = minter
        self._session = Session(cookie=cookie or None)
        self._override_sessions: OrderedDict[str, Session] = OrderedDict()
        self._flight = SingleFlight(debug=debug)
        self._refresh_count = 0

    @property
    def session(self) -> Session:
        return self._session

    @property
    def refresh_count(self) -> int:
        """Number of upstream token refreshes performed."""
        return self._refresh_count

    def set_cookie(self, cookie: str | None) -> None:
        """Replace the primary credential. The token state resets to UNKNOWN."""
        self._session = Session(cookie=cookie or None)

    def is_authenticated(self) -> bool:
        return bool(self._session.cookie)

    def _session_for(self, cookie: str | None) -> Session:
        if not cookie or cookie == self._session.cookie:
            return self._session
        session = self._override_sessions.get(cookie)
        if session is None:
            session = Session(cookie=cookie)
            self._override_sessions[cookie] = session
            # Least recently used identity loses its token first
            while len(self._override_sessions) > MAX_OVERRIDE_SESSIONS:
                self._override_sessions.popitem(last=False)
        else:
            self._override_sessions.move_to_end(cookie)
        return session

    def attach(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        """
        Return a copy of the descriptor carrying credentials.

        The descriptor's own cookie takes precedence over the primary one.
        Mutating requests also carry the anti-forgery token if one is known.
        """
        cookie = descriptor.cookie or self._session.cookie
        session = self._session_for(cookie)
        token = session.csrf_token if descriptor.is_mutating else None
        return replace(descriptor, cookie=cookie, csrf_token=token)

    async def refresh(self, descriptor: RequestDescriptor | None = None) -> str:
        """
        Mint a fresh anti-forgery token for the descriptor's credential.

        The rejected token is the one the descriptor carried. If another
        caller already replaced it, the current token is returned without
        contacting upstream. Concurrent callers share one refresh.
        """
        cookie = descriptor.cookie if descriptor else self._session.cookie
        stale_token = descriptor.csrf_token if descriptor else None
        session = self._session_for(cookie)

        if session.csrf_token == stale_token:
            session.token_state = TokenState.UNKNOWN
        elif session.is_fresh:
            return session.csrf_token

        async def do_refresh() -> str:
            token = await self._minter(cookie)
            self._refresh_count += 1
            target = self._session_for(cookie)
            target.csrf_token = token
            target.token_state = TokenState.FRESH
            logger.info("Anti-forgery token refreshed")
            return token

        return await self._flight.run(_credential_key(cookie), do_refresh)

    async def close(self) -> None:
        await self._flight.cancel_all()
