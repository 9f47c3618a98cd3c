"""Local single-blob entry store adapter."""

import json
import logging

from wodlog.core.entries import (
    WodEntry,
    filter_by_date,
    prepare_for_save,
    sort_by_date_desc,
)
from wodlog.ports.local_state import LocalState

logger = logging.getLogger(__name__)

ENTRIES_KEY = "wods_data"


def read_entry_blob(state: LocalState) -> list[WodEntry] | None:
    """
    Decode the entry array stored under ENTRIES_KEY.

    Returns None when no blob exists. Raises ValueError when the blob is not
    a JSON array.
    """
    raw = state.get_item(ENTRIES_KEY)
    if raw is None:
        return None
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"{ENTRIES_KEY} is not a JSON array")
    return [WodEntry.from_dict(item) for item in data]


class LocalEntryStore:
    """
    Entry store backed by one JSON array in local state.

    Implements EntryStore protocol for the single local scope, so it never
    raises NotAuthenticatedError.
    """

    def __init__(self, state: LocalState):
        self.state = state

    def _load(self) -> list[WodEntry]:
        return read_entry_blob(self.state) or []

    def _dump(self, entries: list[WodEntry]) -> None:
        self.state.set_item(ENTRIES_KEY, json.dumps([e.to_dict() for e in entries]))

    def list_all(self) -> list[WodEntry]:
        try:
            return sort_by_date_desc(self._load())
        except Exception as e:
            logger.error(f"Error loading local entries: {e}")
            return []

    def list_by_date(self, date_iso: str) -> list[WodEntry]:
        try:
            return filter_by_date(self._load(), date_iso)
        except Exception as e:
            logger.error(f"Error loading local entries by date: {e}")
            return []

    def get_by_id(self, entry_id: str) -> WodEntry | None:
        try:
            return next((e for e in self._load() if e.id == entry_id), None)
        except Exception as e:
            logger.error(f"Error loading local entry by id: {e}")
            return None

    def save(self, entry: WodEntry) -> WodEntry:
        stored = prepare_for_save(entry)
        entries = self._load()
        for i, existing in enumerate(entries):
            if existing.id == stored.id:
                entries[i] = stored
                break
        else:
            entries.append(stored)
        self._dump(entries)
        return stored

    def delete(self, entry_id: str) -> None:
        entries = self._load()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) != len(entries):
            self._dump(remaining)
