"""Entry store used when the configured store cannot be built."""

import logging

from wodlog.core.entries import WodEntry
from wodlog.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class UnavailableEntryStore:
    """
    Stands in for a store whose construction failed.

    Implements EntryStore protocol. Reads come back empty like any other read
    fault; writes raise StoreUnavailableError carrying the original reason.
    """

    def __init__(self, reason: str):
        self.reason = reason

    def list_all(self) -> list[WodEntry]:
        return []

    def list_by_date(self, date_iso: str) -> list[WodEntry]:
        return []

    def get_by_id(self, entry_id: str) -> WodEntry | None:
        return None

    def save(self, entry: WodEntry) -> WodEntry:
        raise StoreUnavailableError(f"Entry store unavailable: {self.reason}")

    def delete(self, entry_id: str) -> None:
        raise StoreUnavailableError(f"Entry store unavailable: {self.reason}")
