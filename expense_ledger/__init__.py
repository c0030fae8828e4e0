"""Core business logic package for the expense ledger."""

from .exceptions import (
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    ValidationError,
)
from .export import export_filename, write_export
from .ledger import Ledger
from .models import CATEGORIES, ExpenseRecord
from .settings import SettingsStore
from .storage import FileStore, KeyValueStore, MemoryStore
from .sync import DeliveryStatus, SyncClient
from .tracker import AddResult, ExpenseTracker

__all__ = [
    "CATEGORIES",
    "ExpenseRecord",
    "Ledger",
    "SettingsStore",
    "SyncClient",
    "DeliveryStatus",
    "ExpenseTracker",
    "AddResult",
    "KeyValueStore",
    "FileStore",
    "MemoryStore",
    "export_filename",
    "write_export",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "ValidationError",
]
