"""Firebase callable functions adapter - AI calls through the deployed backend."""

import logging
from typing import Callable

import requests

from wodlog.core.ai_import import (
    ImportPayload,
    ParsedWod,
    classify_import_error,
    is_quota_message,
    validate_import_payload,
)
from wodlog.core.errors import ImportFailedError, ImportQuotaError, NotAuthenticatedError

logger = logging.getLogger(__name__)

PARSE_FUNCTION = "parseWodContent"
GENERATE_FUNCTION = "generateWod"


class CallableService:
    """
    Calls the `parseWodContent` / `generateWod` HTTPS callable functions.

    Implements AIService protocol. Each request carries the signed-in user's
    ID token, so the backend rejects anonymous callers.
    """

    def __init__(
        self,
        project_id: str,
        token_provider: Callable[[], str | None],
        region: str = "us-central1",
        timeout: int = 120,
    ):
        if not project_id:
            raise ValueError("FIREBASE_PROJECT_ID not configured in wodlog.conf")
        self.base_url = f"https://{region}-{project_id}.cloudfunctions.net"
        self.token_provider = token_provider
        self.timeout = timeout
        self._session = requests.Session()

    def _call(self, name: str, data: dict):
        """Invoke a callable function and return its `result`."""
        token = self.token_provider()
        if not token:
            raise NotAuthenticatedError()

        try:
            resp = self._session.post(
                f"{self.base_url}/{name}",
                json={"data": data},
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Callable {name} request failed: {e}")
            raise classify_import_error(e) from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code != 200 or "error" in body:
            error = body.get("error") or {}
            status = error.get("status", "")
            message = error.get("message") or resp.text
            logger.error(f"Callable {name} failed ({resp.status_code} {status}): {message}")
            if status == "UNAUTHENTICATED":
                raise NotAuthenticatedError(message)
            if resp.status_code == 429 or status == "RESOURCE_EXHAUSTED" or is_quota_message(message):
                raise ImportQuotaError(message)
            raise ImportFailedError(message or f"{name} failed with HTTP {resp.status_code}")

        return body.get("result")

    def parse_content(self, payload: ImportPayload) -> ParsedWod:
        content = payload.as_text() if payload.is_text else payload.to_data_url()
        result = self._call(PARSE_FUNCTION, {"base64OrText": content, "mimeType": payload.media_type})
        return validate_import_payload(result)

    def generate_wod(self, prompt: str = "") -> str:
        result = self._call(GENERATE_FUNCTION, {"prompt": prompt})
        if not isinstance(result, dict) or not isinstance(result.get("text"), str):
            raise ImportFailedError("generateWod returned no text")
        return result["text"].strip()
