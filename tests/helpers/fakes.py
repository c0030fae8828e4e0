"""In-memory collaborators shared by the test suite."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import requests

from expense_ledger.exceptions import PersistenceReadError, PersistenceWriteError
from expense_ledger.storage import MemoryStore


class FailingStore(MemoryStore):
    def __init__(
        self,
        initial: Optional[Dict[str, str]] = None,
        *,
        fail_reads: bool = False,
        fail_writes: bool = False,
    ) -> None:
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise PersistenceReadError(f"cannot read {key}")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceWriteError(f"cannot write {key}")
        await super().set(key, value)


class GatedStore(MemoryStore):
    """Holds every write open until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()
        self.started: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def set(self, key: str, value: str) -> None:
        self.started.append(value)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self.release.wait()
            await super().set(key, value)
        finally:
            self.in_flight -= 1


class FakeResponse:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.closed = False

    def close(self) -> None:
        self.closed = True


class RecordingSession:
    """Stands in for ``requests.Session`` and records every POST."""

    def __init__(self, status_code: int = 200, error: Optional[Exception] = None) -> None:
        self.status_code = status_code
        self.error = error
        self.posts: List[dict] = []
        self.responses: List[FakeResponse] = []
        self.closed = False

    def post(self, url: str, **kwargs) -> FakeResponse:
        self.posts.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        response = FakeResponse(self.status_code)
        self.responses.append(response)
        return response

    def close(self) -> None:
        self.closed = True


def unreachable_session() -> RecordingSession:
    return RecordingSession(error=requests.ConnectionError("connection refused"))
