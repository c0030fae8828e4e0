"""Data models for the expense ledger domain."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Tuple

__all__ = ["CATEGORIES", "DEFAULT_CATEGORY", "EMPTY_DESCRIPTION", "ExpenseRecord"]

CATEGORIES: Tuple[str, ...] = (
    "Food",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills",
    "Healthcare",
    "Education",
    "Other",
)

DEFAULT_CATEGORY = CATEGORIES[0]

# Stored in place of blank descriptions.
EMPTY_DESCRIPTION = "-"


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    date: str
    amount: Decimal
    category: str
    description: str = EMPTY_DESCRIPTION

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives."""
        return {
            "id": self.id,
            "date": self.date,
            "amount": f"{self.amount:.2f}",
            "category": self.category,
            "description": self.description,
        }

    def sync_payload(self) -> Dict[str, Any]:
        """Return the four-field body posted to the sync destination."""
        return {
            "date": self.date,
            "category": self.category,
            "description": self.description,
            "amount": float(self.amount),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseRecord":
        """Hydrate a record from JSON-native data.

        Older snapshots stored numeric ids and float amounts, so both are
        coerced through ``str`` before use.
        """
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            amount=Decimal(str(data["amount"])),
            category=data["category"],
            description=data.get("description") or EMPTY_DESCRIPTION,
        )
