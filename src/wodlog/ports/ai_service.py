"""AI service interface."""

from typing import Protocol

from wodlog.core.ai_import import ImportPayload, ParsedWod


class AIService(Protocol):
    """Interface for the generative-language collaborator."""

    def parse_content(self, payload: ImportPayload) -> ParsedWod:
        """Turn unstructured text, an image or a PDF into title + sections."""
        ...

    def generate_wod(self, prompt: str = "") -> str:
        """Generate a workout of the day as markdown."""
        ...
