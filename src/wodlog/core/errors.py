"""Domain exceptions shared by core, adapters and workflows."""

from enum import Enum


class WodlogError(Exception):
    """Base class for wodlog errors."""

    pass


class NotAuthenticatedError(WodlogError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "Not signed in. Run 'wodlog login' first."):
        super().__init__(message)


class AuthErrorKind(Enum):
    """Categories of identity provider failures shown to the user."""

    BAD_CREDENTIALS = "bad_credentials"
    INVALID_EMAIL = "invalid_email"
    RATE_LIMITED = "rate_limited"
    EMAIL_IN_USE = "email_in_use"
    WEAK_PASSWORD = "weak_password"
    UNKNOWN = "unknown"


class AuthenticationError(WodlogError):
    """Raised when sign-in, sign-up, sign-out or token refresh fails."""

    def __init__(self, kind: AuthErrorKind, operation: str, detail: str = ""):
        self.kind = kind
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail or kind.value}")


class MigrationError(WodlogError):
    """Raised when the local-to-remote migration does not complete."""

    pass


class ImportFailedError(WodlogError):
    """Raised when the AI import service fails or returns unusable data."""

    pass


class ImportQuotaError(ImportFailedError):
    """Raised when the AI import service rejects a call for quota/rate limits."""

    pass


class EditorStateError(WodlogError):
    """Raised when an editor transition is not allowed in the current state."""

    pass


class StoreUnavailableError(WodlogError):
    """Raised on writes when the entry store could not be built."""

    pass
