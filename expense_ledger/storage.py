"""Persistence adapters for the expense ledger core.

The ledger and the settings store only need an asynchronous key/value
service holding opaque strings. ``FileStore`` keeps one file per key with
crash-safe writes; ``MemoryStore`` backs tests and throwaway sessions.
"""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .exceptions import PersistenceReadError, PersistenceWriteError

LEDGER_KEY = "expenses"
DESTINATION_KEY = "google-sheets-url"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore(ABC):
    """Asynchronous get/set of string values under string keys."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or ``None`` when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, raising PersistenceWriteError on failure."""


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FileStore(KeyValueStore):
    """File-based storage, one UTF-8 file per key, with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self.path_for(key), value)

    def path_for(self, key: str) -> Path:
        safe_name = _UNSAFE_KEY_CHARS.sub("_", key).strip(".") or "_"
        return self._base_path / safe_name

    @property
    def base_path(self) -> Path:
        return self._base_path

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceReadError(f"Unable to read from {path}") from exc

    @staticmethod
    def _write(path: Path, value: str) -> None:
        temp_path = path.with_name(path.name + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Use replace for atomic move on POSIX; a crash never leaves a half-written file.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceWriteError(f"Unable to write to {path}") from exc
