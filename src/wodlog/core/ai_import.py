"""AI import payloads and response validation - no I/O dependencies."""

import base64
import json
import mimetypes
import re
from dataclasses import dataclass

from pydantic import BaseModel, Field, ValidationError

from .errors import ImportFailedError, ImportQuotaError

TEXT_MEDIA_TYPES = {"application/json"}

# Fallbacks for platforms that report no type for these
_EXTENSION_MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".json": "application/json",
}

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


class ParsedSection(BaseModel):
    """A section returned by the AI import service."""

    title: str
    content: str


class ParsedWod(BaseModel):
    """Validated AI import result. Extra keys (section ids, ...) are ignored."""

    title: str | None = None
    sections: list[ParsedSection] = Field(...)


def is_text_media_type(media_type: str) -> bool:
    return media_type.startswith("text/") or media_type in TEXT_MEDIA_TYPES


def guess_media_type(filename: str, declared: str = "") -> str:
    """Best-effort media type for an uploaded file."""
    if declared:
        return declared
    lower = filename.lower()
    for ext, media_type in _EXTENSION_MEDIA_TYPES.items():
        if lower.endswith(ext):
            return media_type
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


@dataclass
class ImportPayload:
    """Content handed to the AI import service, with a media-type hint."""

    content: str | bytes
    media_type: str = "text/plain"

    @property
    def is_text(self) -> bool:
        return is_text_media_type(self.media_type)

    @classmethod
    def from_text(cls, text: str) -> "ImportPayload":
        return cls(content=text, media_type="text/plain")

    def as_text(self) -> str:
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8", errors="replace")
        return self.content

    def as_bytes(self) -> bytes:
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content

    def to_data_url(self) -> str:
        """Self-describing base64 payload for binary content."""
        encoded = base64.b64encode(self.as_bytes()).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"


def strip_code_fences(text: str) -> str:
    return _FENCE_PATTERN.sub("", text).strip()


def validate_import_payload(data: object) -> ParsedWod:
    """Validate already-decoded JSON against the import schema."""
    try:
        return ParsedWod.model_validate(data)
    except ValidationError as e:
        raise ImportFailedError(f"AI response does not match the expected shape: {e}") from e


def parse_ai_response(text: str) -> ParsedWod:
    """Parse raw model output (JSON, possibly fenced) into a ParsedWod."""
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise ImportFailedError(f"AI response is not valid JSON: {e}") from e
    return validate_import_payload(data)


def is_quota_message(message: str) -> bool:
    lowered = message.lower()
    return "429" in lowered or "quota" in lowered or "resource_exhausted" in lowered


def classify_import_error(exc: Exception) -> ImportFailedError:
    """Map any import failure to ImportQuotaError or ImportFailedError."""
    if isinstance(exc, ImportFailedError):
        return exc
    code = getattr(exc, "code", None)
    if code == 429 or is_quota_message(str(exc)):
        return ImportQuotaError(str(exc))
    return ImportFailedError(str(exc) or exc.__class__.__name__)
