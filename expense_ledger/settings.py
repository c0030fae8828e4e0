"""Persisted destination URL for expense mirroring."""

from __future__ import annotations

import logging
from typing import Optional

from .exceptions import PersistenceError, PersistenceReadError, PersistenceWriteError
from .storage import DESTINATION_KEY, KeyValueStore

LOGGER = logging.getLogger(__name__)


class SettingsStore:
    """Get/set of the sync destination through the persistence adapter.

    Unlike ledger writes, ``save`` lets PersistenceWriteError propagate so the
    user can be told the change did not stick.
    """

    def __init__(self, store: KeyValueStore, key: str = DESTINATION_KEY) -> None:
        self._store = store
        self._key = key
        self._destination: Optional[str] = None

    @property
    def destination(self) -> Optional[str]:
        return self._destination

    async def load(self) -> Optional[str]:
        try:
            raw = await self._store.get(self._key)
        except PersistenceReadError as exc:
            LOGGER.warning("Unable to read sync destination: %s", exc)
            raw = None
        if raw is None:
            LOGGER.info("No sync destination configured")
        self._destination = (raw or "").strip() or None
        return self._destination

    async def save(self, url: Optional[str]) -> Optional[str]:
        """Persist ``url``; a blank value clears the destination."""
        cleaned = (url or "").strip()
        try:
            await self._store.set(self._key, cleaned)
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceWriteError("Unexpected error while saving settings") from exc
        self._destination = cleaned or None
        LOGGER.info("Sync destination %s", "updated" if cleaned else "cleared")
        return self._destination
