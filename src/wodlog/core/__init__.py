"""Functional core - pure business logic with no I/O."""

from .entries import (
    WodEntry,
    WodSection,
    build_legacy_content,
    prepare_for_save,
    filter_by_date,
    sort_by_date_desc,
)
from .calendar import DayCell, build_month_grid, previous_month, next_month
from .editor import EditorMode, EntryEditor
from .ai_import import ImportPayload, ParsedWod, ParsedSection, parse_ai_response

__all__ = [
    # Entries
    "WodEntry",
    "WodSection",
    "build_legacy_content",
    "prepare_for_save",
    "filter_by_date",
    "sort_by_date_desc",
    # Calendar
    "DayCell",
    "build_month_grid",
    "previous_month",
    "next_month",
    # Editor
    "EditorMode",
    "EntryEditor",
    # AI import
    "ImportPayload",
    "ParsedWod",
    "ParsedSection",
    "parse_ai_response",
]
