"""Entry store interface."""

from typing import Protocol

from wodlog.core.entries import WodEntry


class EntryStore(Protocol):
    """
    Interface for persisting workout entries of the current scope.

    Read methods never raise: faults degrade to an empty list or None.
    Write methods propagate faults, including NotAuthenticatedError.
    """

    def list_all(self) -> list[WodEntry]:
        """All entries, newest date first."""
        ...

    def list_by_date(self, date_iso: str) -> list[WodEntry]:
        """Entries whose date equals date_iso exactly."""
        ...

    def get_by_id(self, entry_id: str) -> WodEntry | None:
        """Point lookup. Returns None if not found."""
        ...

    def save(self, entry: WodEntry) -> WodEntry:
        """Upsert the full entry. Returns the stored entry."""
        ...

    def delete(self, entry_id: str) -> None:
        """Remove an entry. Deleting a missing id is not an error."""
        ...
