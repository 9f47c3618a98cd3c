"""Ports - interfaces/protocols for external dependencies."""

from .entry_store import EntryStore
from .local_state import LocalState
from .identity import IdentityProvider
from .ai_service import AIService

__all__ = [
    "EntryStore",
    "LocalState",
    "IdentityProvider",
    "AIService",
]
