"""Best-effort mirroring of new expenses to a Google Apps Script web app.

The sheet endpoint is write-only from our side: the response is closed
without being read, so an HTTP 200 and an HTTP 500 look the same. A delivery
is therefore only ever "attempted", never confirmed, and it is made at most
once. There is no retry and no queue.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

import requests
import urllib3

from .models import ExpenseRecord

LOGGER = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    """Outcome of a single delivery attempt."""

    NOT_CONFIGURED = "not_configured"
    ATTEMPTED = "attempted"
    TRANSPORT_ERROR = "transport_error"

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self]


_STATUS_MESSAGES = {
    DeliveryStatus.NOT_CONFIGURED: "Please configure Google Sheets URL in settings",
    DeliveryStatus.ATTEMPTED: "Sent to Google Sheets!",
    DeliveryStatus.TRANSPORT_ERROR: "Error syncing. Check your URL.",
}


class SyncClient:
    """Posts one expense per call to the configured destination."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()
        self.timeout = timeout

    async def deliver(self, record: ExpenseRecord, destination: Optional[str]) -> DeliveryStatus:
        url = (destination or "").strip()
        if not url:
            LOGGER.info("Sync destination not configured; skipping expense %s", record.id)
            return DeliveryStatus.NOT_CONFIGURED

        try:
            await asyncio.to_thread(self._post, url, record.sync_payload())
        except (requests.RequestException, urllib3.exceptions.HTTPError, ValueError) as exc:
            # urllib3 raises LocationParseError (a ValueError) for some malformed hosts.
            LOGGER.warning("Error syncing expense %s to %s: %s", record.id, url, exc)
            return DeliveryStatus.TRANSPORT_ERROR
        LOGGER.info("Sync attempted for expense %s", record.id)
        return DeliveryStatus.ATTEMPTED

    def _post(self, url: str, payload: dict) -> None:
        response = self._session.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
            stream=True,
        )
        # Status and body are never inspected.
        response.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()
