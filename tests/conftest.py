"""Shared test fixtures."""

import json

import pytest

from wodlog.core.entries import WodEntry, WodSection, prepare_for_save


class MemoryState:
    """In-memory LocalState."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data = dict(data or {})

    def get_item(self, key):
        return self.data.get(key)

    def set_item(self, key, value):
        self.data[key] = value

    def remove_item(self, key):
        self.data.pop(key, None)


class MemoryStore:
    """In-memory EntryStore that records saves and can be told to fail."""

    def __init__(self, entries=None, fail_on_save: int | None = None):
        self.entries = {e.id: e for e in entries or []}
        self.saved = []
        self.fail_on_save = fail_on_save

    def list_all(self):
        return sorted(self.entries.values(), key=lambda e: e.date, reverse=True)

    def list_by_date(self, date_iso):
        return [e for e in self.entries.values() if e.date == date_iso]

    def get_by_id(self, entry_id):
        return self.entries.get(entry_id)

    def save(self, entry):
        if self.fail_on_save is not None and len(self.saved) == self.fail_on_save:
            raise RuntimeError("network down")
        stored = prepare_for_save(entry)
        self.entries[stored.id] = stored
        self.saved.append(stored)
        return stored

    def delete(self, entry_id):
        self.entries.pop(entry_id, None)


def make_entry(entry_id="a1", date_iso="2024-03-05", title="Fran", sections=None):
    if sections is None:
        sections = [WodSection(id=f"{entry_id}-s1", title="Metcon", content="21-15-9")]
    return WodEntry(id=entry_id, date=date_iso, title=title, sections=sections)


def blob(*entries: WodEntry) -> str:
    return json.dumps([e.to_dict() for e in entries])


@pytest.fixture
def state():
    return MemoryState()


@pytest.fixture
def store():
    return MemoryStore()
