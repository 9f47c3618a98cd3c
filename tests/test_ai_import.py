"""Tests for AI import payloads and response validation."""

import base64

import pytest

from wodlog.core.ai_import import (
    ImportPayload,
    classify_import_error,
    guess_media_type,
    parse_ai_response,
    validate_import_payload,
)
from wodlog.core.errors import ImportFailedError, ImportQuotaError


class TestGuessMediaType:
    def test_declared_type_wins(self):
        assert guess_media_type("x.bin", "image/png") == "image/png"

    def test_pdf_fallback(self):
        assert guess_media_type("WOD.PDF") == "application/pdf"

    def test_markdown_fallback(self):
        assert guess_media_type("notes.md") == "text/markdown"

    def test_unknown(self):
        assert guess_media_type("blob") == "application/octet-stream"


class TestImportPayload:
    def test_from_text(self):
        payload = ImportPayload.from_text("21-15-9")
        assert payload.is_text
        assert payload.as_text() == "21-15-9"

    def test_binary_is_not_text(self):
        assert not ImportPayload(content=b"%PDF", media_type="application/pdf").is_text

    def test_json_is_text(self):
        assert ImportPayload(content="{}", media_type="application/json").is_text

    def test_data_url(self):
        payload = ImportPayload(content=b"\x89PNG", media_type="image/png")
        assert payload.to_data_url() == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()


class TestParseAiResponse:
    def test_plain_json(self):
        wod = parse_ai_response('{"title": "Fran", "sections": [{"title": "Metcon", "content": "21-15-9"}]}')
        assert wod.title == "Fran"
        assert wod.sections[0].content == "21-15-9"

    def test_fenced_json(self):
        text = '```json\n{"sections": [{"title": "A", "content": "b"}]}\n```'
        wod = parse_ai_response(text)
        assert wod.title is None
        assert len(wod.sections) == 1

    def test_extra_keys_ignored(self):
        wod = parse_ai_response('{"sections": [{"id": "x", "title": "A", "content": "b"}], "notes": 1}')
        assert wod.sections[0].title == "A"

    def test_invalid_json(self):
        with pytest.raises(ImportFailedError):
            parse_ai_response("not json")

    def test_missing_sections(self):
        with pytest.raises(ImportFailedError):
            parse_ai_response('{"title": "Fran"}')

    def test_section_missing_content(self):
        with pytest.raises(ImportFailedError):
            validate_import_payload({"sections": [{"title": "A"}]})

    def test_none_result(self):
        with pytest.raises(ImportFailedError):
            validate_import_payload(None)


class TestClassifyImportError:
    def test_quota_by_code(self):
        exc = Exception("Too many requests")
        exc.code = 429
        assert isinstance(classify_import_error(exc), ImportQuotaError)

    def test_quota_by_message(self):
        assert isinstance(classify_import_error(Exception("RESOURCE_EXHAUSTED: quota")), ImportQuotaError)

    def test_other_failure(self):
        err = classify_import_error(RuntimeError("boom"))
        assert type(err) is ImportFailedError
        assert str(err) == "boom"

    def test_passes_through_import_errors(self):
        err = ImportQuotaError("slow down")
        assert classify_import_error(err) is err
