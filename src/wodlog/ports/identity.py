"""Identity provider interface."""

from typing import Callable, Protocol

from wodlog.config import Session

AuthListener = Callable[[Session | None], None]


class IdentityProvider(Protocol):
    """Interface for email/password authentication."""

    @property
    def current_user(self) -> Session | None:
        """The signed-in session, or None."""
        ...

    def sign_in(self, email: str, password: str) -> Session:
        ...

    def sign_up(self, email: str, password: str) -> Session:
        ...

    def sign_out(self) -> None:
        ...

    def on_auth_state_changed(self, callback: AuthListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unregisters it."""
        ...

    def ensure_fresh_token(self) -> Session | None:
        """Current user, refreshing the ID token first if it is about to expire."""
        ...
