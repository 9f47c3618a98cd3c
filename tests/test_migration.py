"""Tests for the local-to-remote migration."""

import pytest

from wodlog.adapters.local_store import ENTRIES_KEY
from wodlog.core.errors import MigrationError
from wodlog.migration import MIGRATION_KEY, is_migration_complete, migrate_local_entries

from conftest import MemoryState, MemoryStore, blob, make_entry


class TestMigrateLocalEntries:
    def test_copies_single_entry(self):
        state = MemoryState({ENTRIES_KEY: blob(make_entry("a1", "2024-03-05"))})
        store = MemoryStore()

        assert migrate_local_entries(state, store) == 1

        assert store.get_by_id("a1").date == "2024-03-05"
        assert state.get_item(MIGRATION_KEY) == "true"

    def test_saves_every_entry_in_order(self):
        entries = [make_entry(f"e{i}", f"2024-03-0{i}") for i in range(1, 4)]
        state = MemoryState({ENTRIES_KEY: blob(*entries)})
        store = MemoryStore()

        assert migrate_local_entries(state, store) == 3
        assert [e.id for e in store.saved] == ["e1", "e2", "e3"]

    def test_runs_once(self):
        state = MemoryState({ENTRIES_KEY: blob(make_entry("a1"))})
        store = MemoryStore()
        migrate_local_entries(state, store)

        assert migrate_local_entries(state, store) == 0
        assert len(store.saved) == 1

    def test_nothing_to_migrate_sets_marker(self):
        state = MemoryState()
        store = MemoryStore()
        assert migrate_local_entries(state, store) == 0
        assert store.saved == []
        assert is_migration_complete(state)

    def test_empty_array_sets_marker(self):
        state = MemoryState({ENTRIES_KEY: "[]"})
        assert migrate_local_entries(state, MemoryStore()) == 0
        assert is_migration_complete(state)

    def test_failure_leaves_marker_unset(self):
        entries = [make_entry(f"e{i}") for i in range(3)]
        state = MemoryState({ENTRIES_KEY: blob(*entries)})
        store = MemoryStore(fail_on_save=1)

        with pytest.raises(MigrationError) as exc_info:
            migrate_local_entries(state, store)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert not is_migration_complete(state)
        assert [e.id for e in store.saved] == ["e0"]

    def test_retry_after_failure_copies_again(self):
        state = MemoryState({ENTRIES_KEY: blob(make_entry("a1"), make_entry("a2"))})
        with pytest.raises(MigrationError):
            migrate_local_entries(state, MemoryStore(fail_on_save=1))

        store = MemoryStore()
        assert migrate_local_entries(state, store) == 2
        assert is_migration_complete(state)

    def test_unreadable_blob(self):
        state = MemoryState({ENTRIES_KEY: "garbage"})
        with pytest.raises(MigrationError):
            migrate_local_entries(state, MemoryStore())
        assert not is_migration_complete(state)

    def test_local_blob_is_kept(self):
        raw = blob(make_entry("a1"))
        state = MemoryState({ENTRIES_KEY: raw})
        migrate_local_entries(state, MemoryStore())
        assert state.get_item(ENTRIES_KEY) == raw


class CountingState(MemoryState):
    def __init__(self, data=None):
        super().__init__(data)
        self.writes = []

    def set_item(self, key, value):
        self.writes.append(key)
        super().set_item(key, value)


class TestSquatDayScenario:
    def test_single_legacy_entry(self):
        raw = '[{"id": "a1", "date": "2024-03-01", "title": "Squat Day", "content": "", "sections": []}]'
        state = CountingState({ENTRIES_KEY: raw})
        store = MemoryStore()

        migrate_local_entries(state, store)
        migrate_local_entries(state, store)

        assert [e.id for e in store.list_all()] == ["a1"]
        assert store.get_by_id("a1").title == "Squat Day"
        assert len(store.saved) == 1
        assert state.writes == [MIGRATION_KEY]
