"""Application facade tying the ledger, settings, sync and export together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Mapping, Optional, Tuple

from .export import export as export_workbook, export_filename
from .ledger import Ledger
from .models import ExpenseRecord
from .settings import SettingsStore
from .storage import KeyValueStore
from .sync import DeliveryStatus, SyncClient

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddResult:
    record: ExpenseRecord
    status: DeliveryStatus

    def to_dict(self) -> Dict[str, object]:
        return {
            "expense": self.record.to_dict(),
            "sync": {"status": self.status.value, "message": self.status.message},
        }


class ExpenseTracker:
    """Runs the add -> persist -> deliver flow on top of one key/value store."""

    def __init__(self, store: KeyValueStore, sync_client: Optional[SyncClient] = None) -> None:
        self.ledger = Ledger(store)
        self.settings = SettingsStore(store)
        self.sync_client = sync_client or SyncClient()

    async def start(self) -> None:
        await self.ledger.load()
        await self.settings.load()

    async def add_expense(self, candidate: Mapping[str, object]) -> AddResult:
        # The record is committed (and its write scheduled) before any network I/O.
        record = self.ledger.add(candidate)
        status = await self.sync_client.deliver(record, self.settings.destination)
        return AddResult(record=record, status=status)

    async def remove_expense(self, record_id: str) -> bool:
        return self.ledger.remove(record_id)

    def total(self) -> Decimal:
        return self.ledger.total()

    def snapshot(self) -> Tuple[ExpenseRecord, ...]:
        return self.ledger.snapshot()

    def summary(self) -> Dict[str, object]:
        return {"total": f"{self.ledger.total():.2f}", "count": len(self.ledger)}

    def export(self, today: Optional[date] = None) -> Tuple[str, bytes]:
        records = self.ledger.snapshot()
        filename = export_filename(today)
        LOGGER.info("Generating %s with %d expenses", filename, len(records))
        return filename, export_workbook(records)

    async def save_destination(self, url: Optional[str]) -> Optional[str]:
        return await self.settings.save(url)

    async def close(self) -> None:
        await self.ledger.flush()
        self.sync_client.close()
