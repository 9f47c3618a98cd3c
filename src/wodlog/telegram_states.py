"""Conversation states for Telegram bot."""

from enum import IntEnum, auto


class ImportStates(IntEnum):
    """States for the AI import conversation."""

    CONTENT = auto()
    CONFIRM = auto()
