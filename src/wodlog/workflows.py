"""Shared workflow layer between CLI and Telegram.

Each function composes the pure core with the store and AI service held by
the application context.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from .context import AppContext
from .core.ai_import import ImportPayload, classify_import_error, guess_media_type, is_text_media_type
from .core.calendar import DayCell, build_month_grid
from .core.editor import EditorMode, EntryEditor
from .core.entries import WodEntry
from .core.errors import EditorStateError, ImportFailedError, NotAuthenticatedError
from .core.messages import import_error_message
from .ports.entry_store import EntryStore

logger = logging.getLogger(__name__)


# ============== Calendar ==============


def month_grid(store: EntryStore, month: int, year: int, today: date | None = None) -> list[DayCell]:
    """Load all entries and derive the full grid for a month."""
    return build_month_grid(month, year, store.list_all(), today=today)


# ============== Date Options ==============


@dataclass
class DateOptions:
    """Entries on a selected date, plus the date used for a new entry."""

    date_iso: str
    entries: list[WodEntry] = field(default_factory=list)

    def change_date(self, store: EntryStore, date_iso: str) -> "DateOptions":
        return load_date_options(store, date_iso)

    def new_editor(self) -> EntryEditor:
        return EntryEditor.for_new(self.date_iso)


def load_date_options(store: EntryStore, date_iso: str) -> DateOptions:
    return DateOptions(date_iso=date_iso, entries=store.list_by_date(date_iso))


# ============== Editor ==============


def open_editor(store: EntryStore, entry_id: str) -> EntryEditor | None:
    """Editor for an existing entry, or None if it does not exist."""
    entry = store.get_by_id(entry_id)
    if entry is None:
        return None
    return EntryEditor.for_existing(entry)


def save_editor(editor: EntryEditor, store: EntryStore) -> WodEntry:
    """
    Persist the editor's entry and close the editor.

    On failure the editor stays open with its contents untouched and the
    error propagates.
    """
    if editor.closed:
        raise EditorStateError("Editor is closed")
    if editor.mode is not EditorMode.EDITING:
        raise EditorStateError("Save is only available while editing")
    if editor.saving:
        raise EditorStateError("A save is already in progress")

    editor.saving = True
    try:
        saved = store.save(editor.build_entry())
    finally:
        editor.saving = False

    editor.entry_id = saved.id
    editor.close()
    return saved


def delete_from_editor(editor: EntryEditor, store: EntryStore) -> None:
    """Delete the entry being edited and close the editor."""
    if editor.closed:
        raise EditorStateError("Editor is closed")
    if editor.is_new:
        raise EditorStateError("Only saved entries can be deleted")
    if editor.mode is not EditorMode.EDITING:
        raise EditorStateError("Delete is only available while editing")
    store.delete(editor.entry_id)
    editor.close()


# ============== AI Import ==============


def read_import_file(path: Path | str, declared_type: str = "") -> ImportPayload:
    """Read a file fully into memory: text for text-like types, bytes otherwise."""
    path = Path(path).expanduser()
    media_type = guess_media_type(path.name, declared_type)
    if is_text_media_type(media_type):
        return ImportPayload(content=path.read_text(), media_type=media_type)
    return ImportPayload(content=path.read_bytes(), media_type=media_type)


@dataclass
class ImportOutcome:
    """Result of an import attempt at the editor boundary."""

    applied: bool
    notice: str | None = None
    error: ImportFailedError | None = None


def parse_import(ctx: AppContext, payload: ImportPayload):
    """Call the AI service for a signed-in user. Errors are classified."""
    ctx.require_user()
    try:
        return ctx.ai.parse_content(payload)
    except NotAuthenticatedError:
        raise
    except Exception as e:
        raise classify_import_error(e) from e


def import_into_editor(
    ctx: AppContext,
    editor: EntryEditor,
    payload: ImportPayload,
    from_file: bool = False,
) -> ImportOutcome:
    """
    Run an AI import and merge the result into the editor.

    Failures never modify the editor; they come back as a single notice.
    """
    ticket = editor.begin_import()
    try:
        parsed = parse_import(ctx, payload)
    except NotAuthenticatedError:
        raise
    except ImportFailedError as e:
        logger.error(f"AI import failed: {e}")
        return ImportOutcome(
            applied=False,
            notice=import_error_message(e, from_file, ctx.config.language),
            error=e,
        )

    applied = editor.apply_import(parsed, ticket)
    if not applied:
        logger.info("Discarding AI import result for a closed or superseded editor")
    return ImportOutcome(applied=applied)


def generate_wod(ctx: AppContext, prompt: str = "") -> str:
    """Ask the AI service for a fresh WOD in markdown."""
    ctx.require_user()
    try:
        return ctx.ai.generate_wod(prompt)
    except NotAuthenticatedError:
        raise
    except Exception as e:
        raise classify_import_error(e) from e
