"""In-memory expense ledger backed by a key/value persistence adapter.

The in-memory records are authoritative for the running process. Every
mutation schedules a rewrite of the full snapshot; the write happens on the
event loop in the background and its failure is logged, never raised to the
caller that mutated the ledger.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from .exceptions import PersistenceError, PersistenceReadError, ValidationError
from .models import CATEGORIES, ExpenseRecord
from .storage import LEDGER_KEY, KeyValueStore
from .validators import normalize_description, parse_amount, validate_category, validate_date

LOGGER = logging.getLogger(__name__)


class Ledger:
    """Ordered, newest-first collection of expense records."""

    def __init__(self, store: KeyValueStore, key: str = LEDGER_KEY) -> None:
        self._store = store
        self._key = key
        self._records: List[ExpenseRecord] = []
        self._dirty = False
        self._writer: Optional[asyncio.Task] = None
        self.last_persist_error: Optional[BaseException] = None

    # Public API -----------------------------------------------------------
    async def load(self) -> None:
        """Hydrate the ledger from the stored snapshot, falling back to empty."""
        try:
            raw = await self._store.get(self._key)
            if raw is None:
                LOGGER.info("No stored expenses found; starting with an empty ledger")
                self._records = []
                return
            self._records = _decode_snapshot(raw)
        except PersistenceReadError as exc:
            LOGGER.warning("Discarding unreadable expense snapshot: %s", exc)
            self._records = []
            return
        LOGGER.info("Loaded %d expenses", len(self._records))

    def add(self, candidate: Mapping[str, object]) -> ExpenseRecord:
        """Validate ``candidate`` and prepend the resulting record.

        Must be called from a running event loop so the snapshot write can be
        scheduled. Raises ValidationError before anything is mutated.
        """
        record = ExpenseRecord(
            id=uuid4().hex,
            date=validate_date(candidate.get("date")),
            amount=parse_amount(candidate.get("amount")),
            category=validate_category(candidate.get("category")),
            description=normalize_description(candidate.get("description")),
        )
        self._records.insert(0, record)
        LOGGER.debug("Added expense %s (%s %s)", record.id, record.category, record.amount)
        self._schedule_persist()
        return record

    def remove(self, record_id: str) -> bool:
        """Drop the record with ``record_id``; unknown ids leave the ledger unchanged."""
        before = len(self._records)
        self._records = [record for record in self._records if record.id != record_id]
        removed = len(self._records) != before
        if removed:
            LOGGER.debug("Removed expense %s", record_id)
        self._schedule_persist()
        return removed

    def get(self, record_id: str) -> Optional[ExpenseRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def total(self) -> Decimal:
        return sum((record.amount for record in self._records), start=Decimal("0.00"))

    def snapshot(self) -> Tuple[ExpenseRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    async def flush(self) -> None:
        """Wait for every scheduled snapshot write to finish."""
        while self._writer is not None and not self._writer.done():
            await asyncio.shield(self._writer)

    # Internal helpers -----------------------------------------------------
    def _schedule_persist(self) -> None:
        self._dirty = True
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._drain_writes())

    async def _drain_writes(self) -> None:
        # One writer at a time; the payload is encoded from current state right
        # before each write, so a mutation made mid-write is picked up next pass.
        while self._dirty:
            self._dirty = False
            payload = json.dumps([record.to_dict() for record in self._records])
            try:
                await self._store.set(self._key, payload)
            except PersistenceError as exc:
                self.last_persist_error = exc
                LOGGER.error("Error saving expenses: %s", exc)
            except Exception as exc:  # pragma: no cover - defensive guard
                self.last_persist_error = exc
                LOGGER.exception("Unexpected error while saving expenses")
            else:
                self.last_persist_error = None


def _decode_snapshot(raw: str) -> List[ExpenseRecord]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceReadError("Corrupted JSON in stored expenses") from exc
    if not isinstance(payload, list):
        raise PersistenceReadError("Expected a list of stored expenses")

    records: List[ExpenseRecord] = []
    seen: Dict[str, int] = {}
    for index, item in enumerate(payload):
        try:
            record = ExpenseRecord.from_dict(item)
        except (KeyError, TypeError, AttributeError, ArithmeticError) as exc:
            raise PersistenceReadError(f"Malformed expense at position {index}") from exc
        record = _normalise_stored_record(record, index)
        if record.id in seen:
            LOGGER.warning(
                "Skipping duplicate expense id %s at position %d (first seen at %d)",
                record.id,
                index,
                seen[record.id],
            )
            continue
        seen[record.id] = index
        records.append(record)
    return records


def _normalise_stored_record(record: ExpenseRecord, index: int) -> ExpenseRecord:
    """Apply the same rules as ``add`` to a stored record, or reject it."""
    if record.category not in CATEGORIES:
        raise PersistenceReadError(f"Unknown category {record.category!r} at position {index}")
    try:
        amount = parse_amount(record.amount)
        description = normalize_description(record.description)
        # An empty stored date would otherwise silently become today.
        if not record.date.strip() or validate_date(record.date) != record.date:
            raise ValidationError("date must use the YYYY-MM-DD format")
    except ValidationError as exc:
        raise PersistenceReadError(f"Invalid expense stored at position {index}: {exc}") from exc
    return replace(record, amount=amount, description=description)
