"""
SingleFlight - at most one running call per key.

Callers that arrive while a call for their key is running wait on it and
get its result or its exception. The key is released when the call ends,
so the next caller starts a new one.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


class SingleFlight:
    """
    Usage:
        flight = SingleFlight()
        token = await flight.run("csrf:<credential>", mint_token)
    """

    def __init__(self, debug: bool = False):
        self._running: dict[str, asyncio.Task[Any]] = {}
        self._lock = asyncio.Lock()
        self._debug = debug

    def is_running(self, key: str) -> bool:
        return key in self._running

    async def run(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            task = self._running.get(key)
            if task is None:
                task = asyncio.create_task(self._run_and_release(key, fn))
                self._running[key] = task
                self._log(f"START {key}")
            else:
                self._log(f"JOIN {key}")

        # A cancelled waiter must not cancel the call other waiters share
        return await asyncio.shield(task)

    async def _run_and_release(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        finally:
            async with self._lock:
                self._running.pop(key, None)

    async def cancel_all(self) -> int:
        """Cancel every running call. Returns how many were cancelled."""
        async with self._lock:
            tasks = list(self._running.values())
            self._running.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            self._log(f"CANCEL {len(tasks)} calls")
        return len(tasks)

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[SingleFlight] {message}")
