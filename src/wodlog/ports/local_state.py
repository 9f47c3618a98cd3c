"""Local key-value state interface."""

from typing import Protocol


class LocalState(Protocol):
    """String key-value storage that survives restarts on this machine."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value or None."""
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...
