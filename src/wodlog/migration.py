"""One-time copy of locally stored entries into the signed-in user's store."""

import json
import logging

from .adapters.local_store import read_entry_blob
from .core.errors import MigrationError
from .ports.entry_store import EntryStore
from .ports.local_state import LocalState

logger = logging.getLogger(__name__)

MIGRATION_KEY = "migration_complete"


def is_migration_complete(state: LocalState) -> bool:
    return bool(state.get_item(MIGRATION_KEY))


def mark_migration_complete(state: LocalState) -> None:
    state.set_item(MIGRATION_KEY, "true")


def migrate_local_entries(state: LocalState, store: EntryStore) -> int:
    """
    Copy the legacy local entry blob into `store`, once per installation.

    Entries are saved one at a time, in blob order. The completion marker is
    set only after every save succeeded, so a failure means the whole blob is
    copied again on the next attempt. Legacy entries without an id get a new
    one on every attempt and can therefore be duplicated by a retry.

    Returns:
        Number of entries migrated (0 when already done or nothing to do).

    Raises:
        MigrationError: the blob is unreadable or a save failed. The marker
            stays unset.
    """
    if is_migration_complete(state):
        return 0

    try:
        legacy = read_entry_blob(state)
    except (json.JSONDecodeError, ValueError, AttributeError, TypeError) as e:
        raise MigrationError(f"Local entries are unreadable: {e}") from e

    if not legacy:
        mark_migration_complete(state)
        return 0

    for i, entry in enumerate(legacy):
        try:
            store.save(entry)
        except Exception as e:
            raise MigrationError(
                f"Failed to migrate entry {i + 1} of {len(legacy)} ({entry.id or 'no id'}): {e}"
            ) from e

    mark_migration_complete(state)
    logger.info(f"Migrated {len(legacy)} entries to the remote store")
    return len(legacy)
