"""
Conecta Rua - Exceptions
Error taxonomy shared by the backend clients, the report flows and the API.
"""

from typing import Optional


class ConectaRuaError(Exception):
    """Base exception for all application errors."""


class ValidationError(ConectaRuaError):
    """Raised when user input fails client-side validation."""


class AuthenticationRequiredError(ConectaRuaError):
    """Raised when an action needs a signed-in user and there is none."""


# ---------------------------------------------------------------------------
# Upstream (backend platform) failures
# ---------------------------------------------------------------------------

class BackendError(ConectaRuaError):
    """Raised when a backend collaborator answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(BackendError):
    """Raised by the auth collaborator, e.g. invalid or expired token."""


class StorageError(BackendError):
    """Raised when an object upload fails."""


class DataError(BackendError):
    """Raised when a row query or insert fails."""
