"""Tests for the callable functions adapter."""

from unittest.mock import MagicMock

import pytest

from wodlog.adapters.callable_functions import CallableService
from wodlog.core.ai_import import ImportPayload
from wodlog.core.errors import ImportFailedError, ImportQuotaError, NotAuthenticatedError


def response(status, payload):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


@pytest.fixture
def service():
    svc = CallableService("my-proj", token_provider=lambda: "tok", region="europe-west1")
    svc._session = MagicMock()
    return svc


class TestCallableService:
    def test_requires_project(self):
        with pytest.raises(ValueError):
            CallableService("", token_provider=lambda: "tok")

    def test_parse_text(self, service):
        service._session.post.return_value = response(
            200, {"result": {"title": "Fran", "sections": [{"title": "Metcon", "content": "21-15-9"}]}}
        )

        wod = service.parse_content(ImportPayload.from_text("Fran"))

        assert wod.title == "Fran"
        args, kwargs = service._session.post.call_args
        assert args[0] == "https://europe-west1-my-proj.cloudfunctions.net/parseWodContent"
        assert kwargs["json"] == {"data": {"base64OrText": "Fran", "mimeType": "text/plain"}}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_parse_binary_sends_data_url(self, service):
        service._session.post.return_value = response(200, {"result": {"sections": []}})
        service.parse_content(ImportPayload(content=b"img", media_type="image/png"))
        data = service._session.post.call_args.kwargs["json"]["data"]
        assert data["base64OrText"].startswith("data:image/png;base64,")

    def test_requires_token(self):
        svc = CallableService("p", token_provider=lambda: None)
        with pytest.raises(NotAuthenticatedError):
            svc.generate_wod()

    def test_unauthenticated(self, service):
        service._session.post.return_value = response(
            401, {"error": {"status": "UNAUTHENTICATED", "message": "User must be logged in"}}
        )
        with pytest.raises(NotAuthenticatedError):
            service.parse_content(ImportPayload.from_text("x"))

    def test_quota(self, service):
        service._session.post.return_value = response(
            429, {"error": {"status": "RESOURCE_EXHAUSTED", "message": "AI usage limit reached"}}
        )
        with pytest.raises(ImportQuotaError):
            service.parse_content(ImportPayload.from_text("x"))

    def test_internal_error(self, service):
        service._session.post.return_value = response(
            500, {"error": {"status": "INTERNAL", "message": "Failed to process content"}}
        )
        with pytest.raises(ImportFailedError, match="Failed to process content"):
            service.parse_content(ImportPayload.from_text("x"))

    def test_generate(self, service):
        service._session.post.return_value = response(200, {"result": {"text": " # WOD \n"}})
        assert service.generate_wod("hero wod") == "# WOD"
        assert service._session.post.call_args.kwargs["json"] == {"data": {"prompt": "hero wod"}}

    def test_generate_without_text(self, service):
        service._session.post.return_value = response(200, {"result": {}})
        with pytest.raises(ImportFailedError):
            service.generate_wod()
