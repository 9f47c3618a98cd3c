"""Gemini adapter - direct google-genai client."""

import logging

from google import genai
from google.genai import errors, types

from wodlog.core.ai_import import ImportPayload, ParsedWod, classify_import_error, parse_ai_response

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-flash-latest"
DEFAULT_WOD_PROMPT = "Generate a random intermediate level WOD focusing on general physical preparedness."

LANGUAGE_NAMES = {"en": "ENGLISH", "es": "SPANISH (Español)"}

PARSE_INSTRUCTION = """You are an expert CrossFit coach AI.
Your task: Analyze the provided content (image, PDF, or text) which contains a Workout of the Day (WOD).
Extract the workout structure and return it as strict JSON.

JSON Structure:
{{
    "title": "Title of the WOD (or derived from date/content)",
    "sections": [
        {{ "title": "Section Name (e.g., Warm Up, Metcon)", "content": "Full details of the section" }}
    ]
}}

Rules:
1. "content" usually lists exercises, reps, and rounds. Keep formatting clean.
2. Translate vague section names to standard terms (Warm Up, Skill, WOD, Cool Down) if applicable, but prefer original names if clear.
3. IMPORTANT: Return ONLY valid JSON. No markdown backticks.
4. Respond in {language}.
"""

GENERATE_INSTRUCTION = """You are an elite CrossFit coach.
Generate a challenging but scalable "Workout of the Day" (WOD).
Structure it clearly with:
1. WARM-UP (5-10 mins)
2. STRENGTH/SKILL
3. METCON (The main workout)
4. COOL DOWN

Use standard CrossFit terminology (AMRAP, EMOM, RFT).
Format the output in clean Markdown. Keep it concise.
IMPORTANT: Respond in {language}."""


class GeminiService:
    """
    Gemini API adapter.

    Implements AIService protocol. Output is parsed and validated as data;
    nothing returned by the model is executed.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        language: str = "en",
        client: genai.Client | None = None,
    ):
        if client is None and not api_key:
            raise ValueError("GEMINI_API_KEY not configured in wodlog.conf")
        self.model = model
        self.language = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])
        self._client = client or genai.Client(api_key=api_key)

    def _content_parts(self, payload: ImportPayload) -> list:
        if payload.is_text:
            return [payload.as_text()]
        return [types.Part.from_bytes(data=payload.as_bytes(), mime_type=payload.media_type)]

    def _generate(self, contents: list) -> str:
        try:
            response = self._client.models.generate_content(model=self.model, contents=contents)
        except errors.APIError as e:
            logger.error(f"Gemini error: {e}")
            raise classify_import_error(e) from e
        return response.text or ""

    def parse_content(self, payload: ImportPayload) -> ParsedWod:
        """Extract title and sections from text, an image or a PDF."""
        prompt = PARSE_INSTRUCTION.format(language=self.language)
        text = self._generate([prompt, *self._content_parts(payload)])
        return parse_ai_response(text)

    def generate_wod(self, prompt: str = "") -> str:
        """Generate a WOD as markdown."""
        instruction = GENERATE_INSTRUCTION.format(language=self.language)
        return self._generate([f"{instruction}\n\n{prompt.strip() or DEFAULT_WOD_PROMPT}"]).strip()
