"""Tests for the Firebase Authentication adapter."""

import time
from unittest.mock import MagicMock

import pytest
import requests

from wodlog.adapters.firebase_auth import FirebaseAuthAdapter, error_kind
from wodlog.config import Session
from wodlog.core.errors import AuthenticationError, AuthErrorKind


def response(status, payload):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


SIGN_IN_OK = {"localId": "uid-1", "email": "a@b.co", "idToken": "tok", "refreshToken": "ref", "expiresIn": "3600"}


@pytest.fixture
def session_path(tmp_path):
    return tmp_path / ".session.json"


@pytest.fixture
def auth(session_path):
    adapter = FirebaseAuthAdapter("api-key", session_path=session_path)
    adapter._session = MagicMock()
    return adapter


class TestErrorKind:
    @pytest.mark.parametrize(
        "code,kind",
        [
            ("INVALID_LOGIN_CREDENTIALS", AuthErrorKind.BAD_CREDENTIALS),
            ("EMAIL_NOT_FOUND", AuthErrorKind.BAD_CREDENTIALS),
            ("INVALID_EMAIL", AuthErrorKind.INVALID_EMAIL),
            ("TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled", AuthErrorKind.RATE_LIMITED),
            ("EMAIL_EXISTS", AuthErrorKind.EMAIL_IN_USE),
            ("WEAK_PASSWORD : Password should be at least 6 characters", AuthErrorKind.WEAK_PASSWORD),
            ("SOMETHING_ELSE", AuthErrorKind.UNKNOWN),
        ],
    )
    def test_maps_codes(self, code, kind):
        assert error_kind(code) == kind


class TestSignIn:
    def test_success_persists_session(self, auth, session_path):
        auth._session.post.return_value = response(200, SIGN_IN_OK)

        user = auth.sign_in("a@b.co", "secret")

        assert user.user_id == "uid-1"
        assert auth.current_user is user
        assert Session.load(session_path).id_token == "tok"
        url = auth._session.post.call_args[0][0]
        assert url.endswith("accounts:signInWithPassword")
        assert auth._session.post.call_args.kwargs["json"]["returnSecureToken"] is True

    def test_bad_credentials(self, auth):
        auth._session.post.return_value = response(400, {"error": {"message": "INVALID_LOGIN_CREDENTIALS"}})
        with pytest.raises(AuthenticationError) as exc_info:
            auth.sign_in("a@b.co", "wrong")
        assert exc_info.value.kind is AuthErrorKind.BAD_CREDENTIALS
        assert exc_info.value.operation == "sign_in"
        assert auth.current_user is None

    def test_network_error(self, auth):
        auth._session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(AuthenticationError) as exc_info:
            auth.sign_in("a@b.co", "secret")
        assert exc_info.value.kind is AuthErrorKind.UNKNOWN

    def test_missing_api_key(self, session_path):
        adapter = FirebaseAuthAdapter("", session_path=session_path)
        with pytest.raises(AuthenticationError, match="FIREBASE_API_KEY"):
            adapter.sign_in("a@b.co", "secret")


class TestSignUp:
    def test_uses_sign_up_endpoint(self, auth):
        auth._session.post.return_value = response(200, SIGN_IN_OK)
        auth.sign_up("a@b.co", "secret")
        assert auth._session.post.call_args[0][0].endswith("accounts:signUp")

    def test_email_in_use(self, auth):
        auth._session.post.return_value = response(400, {"error": {"message": "EMAIL_EXISTS"}})
        with pytest.raises(AuthenticationError) as exc_info:
            auth.sign_up("a@b.co", "secret")
        assert exc_info.value.kind is AuthErrorKind.EMAIL_IN_USE
        assert exc_info.value.operation == "sign_up"


class TestAuthState:
    def test_listener_called_immediately_and_on_change(self, auth):
        auth._session.post.return_value = response(200, SIGN_IN_OK)
        seen = []
        auth.on_auth_state_changed(seen.append)

        auth.sign_in("a@b.co", "secret")
        auth.sign_out()

        assert seen[0] is None
        assert seen[1].user_id == "uid-1"
        assert seen[2] is None

    def test_unsubscribe(self, auth):
        seen = []
        unsubscribe = auth.on_auth_state_changed(seen.append)
        unsubscribe()
        auth.sign_out()
        assert seen == [None]

    def test_sign_out_clears_session_file(self, auth, session_path):
        auth._session.post.return_value = response(200, SIGN_IN_OK)
        auth.sign_in("a@b.co", "secret")
        auth.sign_out()
        assert not session_path.exists()
        assert auth.current_user is None

    def test_restores_saved_session(self, session_path):
        Session(user_id="uid-1", email="a@b.co", id_token="tok").save(session_path)
        assert FirebaseAuthAdapter("key", session_path=session_path).current_user.user_id == "uid-1"


class TestEnsureFreshToken:
    def test_no_refresh_when_valid(self, auth):
        auth._user = Session(user_id="u", id_token="tok", refresh_token="r", expires_at=int(time.time()) + 3600)
        assert auth.ensure_fresh_token().id_token == "tok"
        auth._session.post.assert_not_called()

    def test_refreshes_when_expiring(self, auth, session_path):
        auth._user = Session(user_id="u", id_token="old", refresh_token="r", expires_at=int(time.time()) + 10)
        auth._session.post.return_value = response(
            200, {"id_token": "new", "refresh_token": "r2", "expires_in": "3600"}
        )

        user = auth.ensure_fresh_token()

        assert user.id_token == "new"
        assert user.refresh_token == "r2"
        assert auth._session.post.call_args.kwargs["data"]["grant_type"] == "refresh_token"
        assert Session.load(session_path).id_token == "new"

    def test_signed_out(self, auth):
        assert auth.ensure_fresh_token() is None
