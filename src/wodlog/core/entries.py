"""Pure workout entry domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace

LEGACY_SECTION_TITLE = "WOD"


def new_id() -> str:
    """Generate a client-side unique identifier."""
    return str(uuid.uuid4())


@dataclass
class WodSection:
    """A named block of an entry (warm up, metcon, ...)."""

    id: str
    title: str
    content: str

    def is_blank(self) -> bool:
        return not self.title and not self.content

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict, fallback_id: str = "") -> "WodSection":
        return cls(
            id=data.get("id") or fallback_id or new_id(),
            title=data.get("title", ""),
            content=data.get("content", ""),
        )


@dataclass
class WodEntry:
    """
    A workout-of-the-day record tied to a calendar date.

    `content` is a denormalized plain-text rendering of `sections`, kept for
    readers that predate sections. It is recomputed on every save and never
    edited directly.
    """

    id: str
    date: str  # YYYY-MM-DD
    title: str
    content: str = ""
    sections: list[WodSection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "title": self.title,
            "content": self.content,
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(cls, data: dict, doc_id: str | None = None) -> "WodEntry":
        """Build an entry from a stored document.

        Documents written before sections existed have no `sections` key.
        Unknown keys such as `updatedAt` are ignored. Sections stored
        without an id get one derived from the entry id and position, so
        repeated reads agree.
        """
        entry_id = doc_id or data.get("id", "")
        return cls(
            id=entry_id,
            date=data.get("date", ""),
            title=data.get("title", ""),
            content=data.get("content", ""),
            sections=[
                WodSection.from_dict(s, fallback_id=f"{entry_id}-s{i}" if entry_id else "")
                for i, s in enumerate(data.get("sections") or [], start=1)
            ],
        )


def build_legacy_content(sections: list[WodSection]) -> str:
    """Render sections as `### title` blocks separated by blank lines."""
    return "\n\n".join(f"### {s.title}\n{s.content}" for s in sections)


def prepare_for_save(entry: WodEntry) -> WodEntry:
    """Return a copy ready to persist: id assigned, legacy content recomputed."""
    sections = [replace(s) for s in entry.sections]
    return replace(
        entry,
        id=entry.id or new_id(),
        content=build_legacy_content(sections),
        sections=sections,
    )


def sections_from_legacy(entry: WodEntry) -> list[WodSection]:
    """Sections to edit for an entry, wrapping legacy content when needed."""
    if entry.sections:
        return [replace(s) for s in entry.sections]
    if entry.content:
        return [WodSection(id=new_id(), title=LEGACY_SECTION_TITLE, content=entry.content)]
    return []


def filter_by_date(entries: list[WodEntry], date_iso: str) -> list[WodEntry]:
    """Entries whose date string equals `date_iso` exactly."""
    return [e for e in entries if e.date == date_iso]


def sort_by_date_desc(entries: list[WodEntry]) -> list[WodEntry]:
    """Sort entries newest date first. Stable for entries sharing a date."""
    return sorted(entries, key=lambda e: e.date, reverse=True)


def count_by_date(entries: list[WodEntry]) -> dict[str, int]:
    """Number of entries per date string."""
    counts: dict[str, int] = {}
    for e in entries:
        counts[e.date] = counts.get(e.date, 0) + 1
    return counts


def format_entry_markdown(entry: WodEntry) -> str:
    """Render an entry as markdown for display."""
    body = build_legacy_content(entry.sections) if entry.sections else entry.content
    header = f"# {entry.title}\n_{entry.date}_"
    if not body.strip():
        return header
    return f"{header}\n\n{body}"
