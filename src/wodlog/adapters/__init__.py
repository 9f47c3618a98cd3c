"""Adapters - I/O implementations of ports."""

from .file_state import FileLocalState
from .local_store import LocalEntryStore
from .firestore_store import FirestoreEntryStore
from .firebase_auth import FirebaseAuthAdapter
from .gemini import GeminiService
from .callable_functions import CallableService
from .unavailable_store import UnavailableEntryStore

__all__ = [
    "FileLocalState",
    "LocalEntryStore",
    "FirestoreEntryStore",
    "FirebaseAuthAdapter",
    "GeminiService",
    "CallableService",
    "UnavailableEntryStore",
]
