"""Configuration management for wodlog."""

import json
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

WODLOG_HOME = Path(os.environ.get("WODLOG_HOME", Path.home() / "wodlog"))
CONFIG_FILE = WODLOG_HOME / "config" / "wodlog.conf"
SESSION_FILE = WODLOG_HOME / "config" / ".session.json"
DATA_DIR = WODLOG_HOME / "data"
LOCAL_STATE_FILE = DATA_DIR / "local_state.json"

AI_BACKENDS = ("gemini", "callable")
STORAGE_BACKENDS = ("firestore", "local")
LANGUAGES = ("en", "es")


@dataclass
class Config:
    """wodlog configuration."""

    firebase_api_key: str = ""
    firebase_project_id: str = ""
    functions_region: str = "us-central1"
    ai_backend: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-flash-latest"
    storage_backend: str = "firestore"
    language: str = "en"
    local_state_file: str = ""
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)


@dataclass
class Session:
    """A signed-in user and their Firebase tokens."""

    user_id: str = ""
    email: str = ""
    id_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0

    def is_expiring(self, margin: int = 300) -> bool:
        """True when the ID token expires within `margin` seconds."""
        return bool(self.expires_at) and time.time() >= self.expires_at - margin

    def save(self, path: Path | None = None) -> None:
        """Save session to file."""
        path = path or SESSION_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(
                {
                    "user_id": self.user_id,
                    "email": self.email,
                    "id_token": self.id_token,
                    "refresh_token": self.refresh_token,
                    "expires_at": self.expires_at,
                }
            )
        )
        path.chmod(0o600)

    @classmethod
    def load(cls, path: Path | None = None) -> "Session | None":
        """Load session from file. Returns None when signed out."""
        path = path or SESSION_FILE
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text())
            session = cls(
                user_id=data["user_id"],
                email=data.get("email", ""),
                id_token=data.get("id_token", ""),
                refresh_token=data.get("refresh_token", ""),
                expires_at=data.get("expires_at", 0),
            )
        except (json.JSONDecodeError, KeyError):
            return None
        return session if session.user_id else None

    @staticmethod
    def clear(path: Path | None = None) -> None:
        """Remove the saved session."""
        path = path or SESSION_FILE
        path.unlink(missing_ok=True)


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _choice(key: str, value: str, allowed: tuple[str, ...], default: str) -> str:
    value = value.lower()
    if value in allowed:
        return value
    logger.warning(f"Invalid {key.upper()} '{value}', expected one of {', '.join(allowed)}")
    return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from wodlog.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "firebase_api_key":
                config.firebase_api_key = value
            case "firebase_project_id":
                config.firebase_project_id = value
            case "functions_region":
                config.functions_region = value
            case "ai_backend":
                config.ai_backend = _choice(key, value, AI_BACKENDS, config.ai_backend)
            case "gemini_api_key":
                config.gemini_api_key = value
            case "gemini_model":
                config.gemini_model = value
            case "storage_backend":
                config.storage_backend = _choice(key, value, STORAGE_BACKENDS, config.storage_backend)
            case "language":
                config.language = _choice(key, value, LANGUAGES, config.language)
            case "local_state_file":
                config.local_state_file = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                try:
                    config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]
                except ValueError:
                    logger.warning(f"Failed to parse TELEGRAM_ALLOWED_USERS: {value}")

    return config
