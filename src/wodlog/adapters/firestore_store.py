"""Firestore entry store adapter."""

import logging
from datetime import datetime, timezone

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from wodlog.core.entries import WodEntry, prepare_for_save
from wodlog.core.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
ENTRIES_COLLECTION = "wods"


class FirestoreEntryStore:
    """
    Per-user Firestore collection at users/{uid}/wods/{entryId}.

    Implements EntryStore protocol. Reads log and swallow faults; writes
    propagate them.
    """

    def __init__(self, client: firestore.Client, user_id: str | None):
        self.client = client
        self.user_id = user_id

    def _collection(self):
        if not self.user_id:
            raise NotAuthenticatedError("User not authenticated")
        return (
            self.client.collection(USERS_COLLECTION)
            .document(self.user_id)
            .collection(ENTRIES_COLLECTION)
        )

    @staticmethod
    def _to_entry(snapshot) -> WodEntry:
        return WodEntry.from_dict(snapshot.to_dict() or {}, doc_id=snapshot.id)

    def list_all(self) -> list[WodEntry]:
        """All entries, newest date first."""
        if not self.user_id:
            return []
        try:
            query = self._collection().order_by("date", direction=firestore.Query.DESCENDING)
            return [self._to_entry(s) for s in query.stream()]
        except Exception as e:
            logger.error(f"Error loading entries from Firestore: {e}")
            return []

    def list_by_date(self, date_iso: str) -> list[WodEntry]:
        """Entries whose date equals date_iso."""
        if not self.user_id:
            return []
        try:
            query = self._collection().where(filter=FieldFilter("date", "==", date_iso))
            return [self._to_entry(s) for s in query.stream()]
        except Exception as e:
            logger.error(f"Error loading entries by date: {e}")
            return []

    def get_by_id(self, entry_id: str) -> WodEntry | None:
        """Point lookup. Returns None if not found."""
        if not self.user_id:
            return None
        try:
            snapshot = self._collection().document(entry_id).get()
            if not snapshot.exists:
                return None
            return self._to_entry(snapshot)
        except Exception as e:
            logger.error(f"Error loading entry by id: {e}")
            return None

    def save(self, entry: WodEntry) -> WodEntry:
        """Write the full entry document, replacing any previous version."""
        collection = self._collection()
        stored = prepare_for_save(entry)
        document = stored.to_dict()
        document["updatedAt"] = datetime.now(timezone.utc).isoformat()
        try:
            collection.document(stored.id).set(document)
        except Exception as e:
            logger.error(f"Error saving entry {stored.id}: {e}")
            raise
        return stored

    def delete(self, entry_id: str) -> None:
        """Delete the entry document. Missing documents are a no-op."""
        collection = self._collection()
        try:
            collection.document(entry_id).delete()
        except Exception as e:
            logger.error(f"Error deleting entry {entry_id}: {e}")
            raise
