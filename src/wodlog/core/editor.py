"""Entry editor state machine - no I/O dependencies."""

from dataclasses import replace
from enum import Enum

from .ai_import import ParsedWod
from .entries import (
    WodEntry,
    WodSection,
    build_legacy_content,
    new_id,
    sections_from_legacy,
)
from .errors import EditorStateError


class EditorMode(Enum):
    """Mutually exclusive editor modes."""

    EDITING = "editing"
    PRESENTING = "presenting"  # Read-only full-screen display


def default_title(date_iso: str) -> str:
    return f"WOD {date_iso}"


class EntryEditor:
    """
    In-memory editing session for one entry.

    Editing mutates the title and the ordered section list. Presenting is a
    read-only walk through the sections and never touches entry data.
    Persistence happens in workflows.save_editor / delete_from_editor.
    """

    def __init__(
        self,
        date_iso: str,
        title: str = "",
        sections: list[WodSection] | None = None,
        entry_id: str | None = None,
    ):
        self.entry_id = entry_id
        self.date = date_iso
        self.title = title
        self.sections: list[WodSection] = sections or []
        self.active_section_id = self.sections[0].id if self.sections else ""
        self.mode = EditorMode.EDITING
        self.focused_index = 0
        self.show_all = True
        self.closed = False
        self.saving = False
        self._import_generation = 0

    @classmethod
    def for_new(cls, date_iso: str) -> "EntryEditor":
        return cls(date_iso=date_iso, title=default_title(date_iso))

    @classmethod
    def for_existing(cls, entry: WodEntry) -> "EntryEditor":
        return cls(
            date_iso=entry.date,
            title=entry.title,
            sections=sections_from_legacy(entry),
            entry_id=entry.id,
        )

    @property
    def is_new(self) -> bool:
        return not self.entry_id

    def _require_editing(self) -> None:
        if self.closed:
            raise EditorStateError("Editor is closed")
        if self.mode is not EditorMode.EDITING:
            raise EditorStateError("Entry is read-only while presenting")

    def _find(self, section_id: str) -> WodSection:
        for s in self.sections:
            if s.id == section_id:
                return s
        raise KeyError(section_id)

    # ---------- Editing ----------

    def set_title(self, title: str) -> None:
        self._require_editing()
        self.title = title

    def change_date(self, date_iso: str) -> None:
        self._require_editing()
        self.date = date_iso

    def add_section(self, title: str = "", content: str = "") -> WodSection:
        """Append a section and make it the active one."""
        self._require_editing()
        section = WodSection(id=new_id(), title=title, content=content)
        self.sections.append(section)
        self.active_section_id = section.id
        return section

    def remove_section(self, section_id: str) -> None:
        """Remove a section. Removing the last one leaves the list empty."""
        self._require_editing()
        self.sections = [s for s in self.sections if s.id != section_id]
        if not any(s.id == self.active_section_id for s in self.sections):
            self.active_section_id = self.sections[0].id if self.sections else ""

    def update_section(
        self,
        section_id: str,
        title: str | None = None,
        content: str | None = None,
    ) -> WodSection:
        self._require_editing()
        section = self._find(section_id)
        if title is not None:
            section.title = title
        if content is not None:
            section.content = content
        return section

    # ---------- AI import ----------

    def begin_import(self) -> int:
        """Start an import and return its ticket. Older tickets become stale."""
        self._require_editing()
        self._import_generation += 1
        return self._import_generation

    def apply_import(self, parsed: ParsedWod, ticket: int) -> bool:
        """
        Merge an AI import result.

        Returns False (and changes nothing) when the editor was closed or a
        newer import started after `ticket` was issued.
        """
        if self.closed or ticket != self._import_generation:
            return False
        self._require_editing()

        new_sections = [
            WodSection(id=new_id(), title=s.title, content=s.content)
            for s in parsed.sections
        ]
        placeholder_only = len(self.sections) == 1 and self.sections[0].is_blank()
        if not self.sections or placeholder_only:
            self.sections = new_sections
        else:
            self.sections = self.sections + new_sections

        if parsed.title:
            self.title = parsed.title
        if new_sections:
            self.active_section_id = new_sections[0].id
        return True

    # ---------- Presenting ----------

    def enter_presentation(self) -> None:
        if self.closed:
            raise EditorStateError("Editor is closed")
        self.mode = EditorMode.PRESENTING
        self.focused_index = 0

    def exit_presentation(self) -> None:
        self.mode = EditorMode.EDITING

    def _require_presenting(self) -> None:
        if self.mode is not EditorMode.PRESENTING:
            raise EditorStateError("Not presenting")

    def next_section(self) -> int:
        self._require_presenting()
        self.focused_index = min(self.focused_index + 1, max(len(self.sections) - 1, 0))
        return self.focused_index

    def previous_section(self) -> int:
        self._require_presenting()
        self.focused_index = max(self.focused_index - 1, 0)
        return self.focused_index

    def toggle_show_all(self) -> bool:
        self._require_presenting()
        self.show_all = not self.show_all
        return self.show_all

    def is_dimmed(self, index: int) -> bool:
        """Whether a section renders dimmed (focus mode, not the focused one)."""
        return not self.show_all and index != self.focused_index

    def presentation(self) -> list[tuple[WodSection, bool]]:
        """Sections in display order paired with their dimmed flag."""
        return [(s, self.is_dimmed(i)) for i, s in enumerate(self.sections)]

    # ---------- Output ----------

    def build_entry(self) -> WodEntry:
        """Snapshot the editor as an entry with recomputed legacy content."""
        sections = [replace(s) for s in self.sections]
        return WodEntry(
            id=self.entry_id or new_id(),
            date=self.date,
            title=self.title.strip() or default_title(self.date),
            content=build_legacy_content(sections),
            sections=sections,
        )

    def close(self) -> None:
        self.closed = True
