"""Tests for the file-backed persistence adapter."""

from __future__ import annotations

import asyncio

import pytest

from expense_ledger.exceptions import PersistenceReadError, PersistenceWriteError
from expense_ledger.storage import FileStore


def test_missing_key_reads_as_none(tmp_path):
    store = FileStore(tmp_path)
    assert asyncio.run(store.get("expenses")) is None


def test_set_then_get_round_trips_text(tmp_path):
    store = FileStore(tmp_path / "nested")

    async def scenario():
        await store.set("expenses", '[{"description": "Café"}]')
        return await store.get("expenses")

    assert asyncio.run(scenario()) == '[{"description": "Café"}]'
    assert [path.name for path in (tmp_path / "nested").iterdir()] == ["expenses"]


def test_keys_cannot_escape_base_directory(tmp_path):
    store = FileStore(tmp_path)
    path = store.path_for("../../etc/passwd")
    assert path.parent == tmp_path


def test_unreadable_value_raises_read_error(tmp_path):
    store = FileStore(tmp_path)
    store.path_for("expenses").write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(PersistenceReadError):
        asyncio.run(store.get("expenses"))


def test_write_failure_raises_write_error(tmp_path):
    store = FileStore(tmp_path)
    store.path_for("expenses").mkdir()

    with pytest.raises(PersistenceWriteError):
        asyncio.run(store.set("expenses", "[]"))
