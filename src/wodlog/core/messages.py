"""User-facing messages in English and Spanish."""

from .errors import AuthErrorKind, ImportQuotaError

DEFAULT_LANGUAGE = "en"

_AUTH_MESSAGES = {
    "en": {
        AuthErrorKind.BAD_CREDENTIALS: "Incorrect email or password.",
        AuthErrorKind.INVALID_EMAIL: "Invalid email.",
        AuthErrorKind.RATE_LIMITED: "Too many attempts. Try again later.",
        AuthErrorKind.EMAIL_IN_USE: "This email is already registered.",
        AuthErrorKind.WEAK_PASSWORD: "Password must be at least 6 characters.",
    },
    "es": {
        AuthErrorKind.BAD_CREDENTIALS: "Email o contraseña incorrectos",
        AuthErrorKind.INVALID_EMAIL: "Email inválido",
        AuthErrorKind.RATE_LIMITED: "Demasiados intentos. Intenta más tarde.",
        AuthErrorKind.EMAIL_IN_USE: "Este email ya está registrado",
        AuthErrorKind.WEAK_PASSWORD: "La contraseña debe tener al menos 6 caracteres",
    },
}

_AUTH_FALLBACKS = {
    "en": {
        "sign_in": "Could not sign in.",
        "sign_up": "Could not sign up.",
        "sign_out": "Could not sign out.",
        "refresh": "Session expired. Sign in again.",
    },
    "es": {
        "sign_in": "Error al iniciar sesión",
        "sign_up": "Error al registrarse",
        "sign_out": "Error al cerrar sesión",
        "refresh": "La sesión expiró. Inicia sesión de nuevo.",
    },
}

_IMPORT_MESSAGES = {
    "en": {
        "quota": "AI usage limit reached. Please wait a minute and try again.",
        "file": "Could not analyze the file. Try again.",
        "text": "Could not analyze the text. Try again.",
    },
    "es": {
        "quota": "Límite de uso de IA alcanzado. Por favor espera 1 minuto y prueba de nuevo.",
        "file": "Error al analizar el archivo. Intenta nuevamente.",
        "text": "Error al analizar el texto. Intenta nuevamente.",
    },
}


def _lang(language: str) -> str:
    return language if language in _AUTH_MESSAGES else DEFAULT_LANGUAGE


def auth_error_message(kind: AuthErrorKind, operation: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Localized message for an authentication failure."""
    lang = _lang(language)
    message = _AUTH_MESSAGES[lang].get(kind)
    if message:
        return message
    return _AUTH_FALLBACKS[lang].get(operation, _AUTH_FALLBACKS[lang]["sign_in"])


def import_error_message(exc: Exception, from_file: bool, language: str = DEFAULT_LANGUAGE) -> str:
    """Localized notice for a failed AI import."""
    messages = _IMPORT_MESSAGES[_lang(language)]
    if isinstance(exc, ImportQuotaError):
        return messages["quota"]
    return messages["file"] if from_file else messages["text"]
