"""Background event loop for hosts that are not themselves asynchronous."""

from __future__ import annotations

import asyncio
import atexit
from threading import Thread
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class AsyncLoopRunner:
    """Owns one event loop on a daemon thread and runs coroutines on it.

    Every ledger operation goes through this single loop, so background
    snapshot writes outlive the request that scheduled them.
    """

    def __init__(self, name: str = "expense-ledger-loop") -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = Thread(target=self._run_loop, name=name, daemon=True)
        self._closed = False
        self._thread.start()
        atexit.register(self.close)

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def closed(self) -> bool:
        return self._closed

    def run(self, coro: Awaitable[T]) -> T:
        if self._closed:
            raise RuntimeError("Event loop runner is closed")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def call(self, func: Callable[..., T], *args: Any) -> T:
        """Run a plain callable on the loop thread and return its result."""

        async def invoke() -> T:
            return func(*args)

        return self.run(invoke())

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=1.0)
