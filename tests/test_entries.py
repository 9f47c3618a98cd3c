"""Tests for the entry domain logic."""

from wodlog.core.entries import (
    WodEntry,
    WodSection,
    build_legacy_content,
    count_by_date,
    filter_by_date,
    format_entry_markdown,
    prepare_for_save,
    sections_from_legacy,
    sort_by_date_desc,
)

from conftest import make_entry


class TestBuildLegacyContent:
    def test_joins_sections_with_headings(self):
        sections = [
            WodSection(id="1", title="Warm Up", content="Row 500m"),
            WodSection(id="2", title="Metcon", content="21-15-9"),
        ]
        assert build_legacy_content(sections) == "### Warm Up\nRow 500m\n\n### Metcon\n21-15-9"

    def test_empty_sections(self):
        assert build_legacy_content([]) == ""


class TestPrepareForSave:
    def test_assigns_id_when_missing(self):
        entry = WodEntry(id="", date="2024-03-05", title="T")
        stored = prepare_for_save(entry)
        assert stored.id
        assert entry.id == ""

    def test_keeps_existing_id(self):
        assert prepare_for_save(make_entry("a1")).id == "a1"

    def test_recomputes_content(self):
        entry = make_entry()
        entry.content = "stale"
        stored = prepare_for_save(entry)
        assert stored.content == "### Metcon\n21-15-9"

    def test_does_not_share_sections(self):
        entry = make_entry()
        stored = prepare_for_save(entry)
        stored.sections[0].content = "changed"
        assert entry.sections[0].content == "21-15-9"


class TestFromDict:
    def test_legacy_document_without_sections(self):
        entry = WodEntry.from_dict({"date": "2024-03-05", "title": "Old", "content": "5k run"}, doc_id="x")
        assert entry.id == "x"
        assert entry.sections == []
        assert entry.content == "5k run"

    def test_ignores_unknown_keys(self):
        entry = WodEntry.from_dict({"id": "a", "date": "2024-03-05", "title": "T", "updatedAt": "2024"})
        assert entry.id == "a"

    def test_section_without_id_gets_one(self):
        entry = WodEntry.from_dict({"id": "a", "date": "d", "title": "t", "sections": [{"title": "W", "content": "c"}]})
        assert entry.sections[0].id

    def test_round_trip(self):
        entry = prepare_for_save(make_entry())
        assert WodEntry.from_dict(entry.to_dict()) == entry


class TestSectionsFromLegacy:
    def test_wraps_legacy_content(self):
        entry = WodEntry(id="a", date="2024-03-05", title="T", content="5k run")
        sections = sections_from_legacy(entry)
        assert len(sections) == 1
        assert sections[0].title == "WOD"
        assert sections[0].content == "5k run"

    def test_prefers_sections(self):
        entry = make_entry()
        assert [s.id for s in sections_from_legacy(entry)] == ["a1-s1"]

    def test_empty_entry(self):
        assert sections_from_legacy(WodEntry(id="a", date="d", title="t")) == []


class TestQueries:
    def test_filter_by_date_exact_match(self):
        entries = [make_entry("a", "2024-03-05"), make_entry("b", "2024-03-06")]
        assert [e.id for e in filter_by_date(entries, "2024-03-05")] == ["a"]

    def test_sort_by_date_desc(self):
        entries = [make_entry("a", "2024-01-01"), make_entry("b", "2024-03-01"), make_entry("c", "2024-02-01")]
        assert [e.id for e in sort_by_date_desc(entries)] == ["b", "c", "a"]

    def test_count_by_date(self):
        entries = [make_entry("a", "2024-03-05"), make_entry("b", "2024-03-05"), make_entry("c", "2024-03-06")]
        assert count_by_date(entries) == {"2024-03-05": 2, "2024-03-06": 1}


class TestFormatEntryMarkdown:
    def test_includes_sections(self):
        text = format_entry_markdown(make_entry())
        assert text.startswith("# Fran\n_2024-03-05_")
        assert "### Metcon\n21-15-9" in text

    def test_falls_back_to_content(self):
        entry = WodEntry(id="a", date="2024-03-05", title="Old", content="5k run")
        assert format_entry_markdown(entry).endswith("5k run")

    def test_header_only_when_empty(self):
        entry = WodEntry(id="a", date="2024-03-05", title="Rest")
        assert format_entry_markdown(entry) == "# Rest\n_2024-03-05_"


class TestStableSectionIds:
    def test_repeated_reads_agree(self):
        data = {"id": "a1", "date": "2024-03-05", "title": "T", "sections": [{"title": "A", "content": "a"}, {"title": "B", "content": "b"}]}
        first = WodEntry.from_dict(data)
        second = WodEntry.from_dict(data)
        assert [s.id for s in first.sections] == [s.id for s in second.sections]
        assert [s.id for s in first.sections] == ["a1-s1", "a1-s2"]

    def test_uses_document_id(self):
        entry = WodEntry.from_dict({"date": "d", "title": "t", "sections": [{"title": "A", "content": "a"}]}, doc_id="doc")
        assert entry.sections[0].id == "doc-s1"

    def test_stored_id_wins(self):
        entry = WodEntry.from_dict({"id": "a1", "date": "d", "title": "t", "sections": [{"id": "x", "title": "A", "content": "a"}]})
        assert entry.sections[0].id == "x"
