"""Application context - the wiring shared by the CLI and the Telegram bot."""

import logging
from pathlib import Path
from typing import Callable

from .adapters.file_state import FileLocalState
from .adapters.firebase_auth import FirebaseAuthAdapter
from .adapters.local_store import LocalEntryStore
from .adapters.unavailable_store import UnavailableEntryStore
from .config import LOCAL_STATE_FILE, SESSION_FILE, Config, Session
from .core.errors import AuthenticationError, MigrationError, NotAuthenticatedError
from .migration import is_migration_complete, migrate_local_entries
from .ports.ai_service import AIService
from .ports.entry_store import EntryStore
from .ports.identity import IdentityProvider
from .ports.local_state import LocalState

logger = logging.getLogger(__name__)


def firestore_store(ctx: "AppContext") -> EntryStore:
    """Entry store for the signed-in user, authorized with their ID token."""
    from google.cloud import firestore
    from google.oauth2.credentials import Credentials

    from .adapters.firestore_store import FirestoreEntryStore

    try:
        user = ctx.fresh_user()
    except AuthenticationError as e:
        logger.warning(f"Token refresh failed, using stored token: {e}")
        user = ctx.current_user
    if user is None:
        return FirestoreEntryStore(client=None, user_id=None)
    if not ctx.config.firebase_project_id:
        raise ValueError("FIREBASE_PROJECT_ID not configured in wodlog.conf")
    client = firestore.Client(
        project=ctx.config.firebase_project_id,
        credentials=Credentials(token=user.id_token),
    )
    return FirestoreEntryStore(client=client, user_id=user.user_id)


def default_ai_service(ctx: "AppContext") -> AIService:
    if ctx.config.ai_backend == "callable":
        from .adapters.callable_functions import CallableService

        return CallableService(
            project_id=ctx.config.firebase_project_id,
            token_provider=ctx.id_token,
            region=ctx.config.functions_region,
        )

    from .adapters.gemini import GeminiService

    return GeminiService(
        api_key=ctx.config.gemini_api_key,
        model=ctx.config.gemini_model,
        language=ctx.config.language,
    )


class AppContext:
    """
    Holds configuration and collaborators built once at startup.

    The entry store is rebuilt whenever the signed-in user changes and when
    the user's ID token is about to expire. Signing in triggers the one-time
    local migration when the remote store is in use.
    """

    def __init__(
        self,
        config: Config,
        local_state: LocalState,
        identity: IdentityProvider,
        store_factory: Callable[["AppContext"], EntryStore] | None = None,
        ai_factory: Callable[["AppContext"], AIService] | None = None,
    ):
        self.config = config
        self.local_state = local_state
        self.identity = identity
        self._store_factory = store_factory or firestore_store
        self._ai_factory = ai_factory or default_ai_service
        self._store: EntryStore | None = None
        self._store_error = ""
        self._ai: AIService | None = None
        self.last_migrated = 0
        self._unsubscribe = identity.on_auth_state_changed(self._handle_auth_change)

    @property
    def uses_remote_store(self) -> bool:
        return self.config.storage_backend == "firestore"

    @property
    def current_user(self) -> Session | None:
        return self.identity.current_user

    def fresh_user(self) -> Session | None:
        """Current user with a non-expired ID token."""
        return self.identity.ensure_fresh_token()

    def id_token(self) -> str | None:
        user = self.fresh_user()
        return user.id_token if user else None

    def require_user(self) -> Session:
        user = self.current_user
        if user is None:
            raise NotAuthenticatedError()
        return user

    def _build_remote_store(self) -> EntryStore | None:
        """Remote store, or None (not cached) when it cannot be built."""
        try:
            return self._store_factory(self)
        except Exception as e:
            logger.error(f"Could not open the entry store: {e}")
            self._store_error = str(e)
            return None

    @property
    def store(self) -> EntryStore:
        if not self.uses_remote_store:
            if self._store is None:
                self._store = LocalEntryStore(self.local_state)
            return self._store

        user = self.current_user
        if self._store is not None and user is not None and user.is_expiring():
            logger.debug("ID token expiring, rebuilding entry store")
            self._store = None
        if self._store is None:
            self._store = self._build_remote_store()
        if self._store is None:
            return UnavailableEntryStore(self._store_error)
        return self._store

    @property
    def ai(self) -> AIService:
        if self._ai is None:
            self._ai = self._ai_factory(self)
        return self._ai

    def _handle_auth_change(self, user: Session | None) -> None:
        self._store = None
        self._ai = None
        if user is None or not self.uses_remote_store:
            return
        if is_migration_complete(self.local_state):
            return
        try:
            self.run_migration()
        except MigrationError as e:
            logger.error(f"Error migrating local entries: {e}")

    def run_migration(self) -> int:
        """
        Run the local-to-remote migration.

        Raises:
            MigrationError: nothing was marked complete; the next sign-in
                retries.
        """
        self.last_migrated = 0
        self.last_migrated = migrate_local_entries(self.local_state, self.store)
        return self.last_migrated

    def close(self) -> None:
        self._unsubscribe()


def build_context(config: Config, session_path: Path | None = None) -> AppContext:
    """Construct the application context from configuration."""
    state_path = Path(config.local_state_file).expanduser() if config.local_state_file else LOCAL_STATE_FILE
    return AppContext(
        config=config,
        local_state=FileLocalState(state_path),
        identity=FirebaseAuthAdapter(config.firebase_api_key, session_path=session_path or SESSION_FILE),
    )
