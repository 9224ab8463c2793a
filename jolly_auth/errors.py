"""Classified failures raised by the auth service.

Each error carries the HTTP status it is reported with. ``main.py`` turns
any ``AuthError`` into a ``{"detail": message}`` JSON response.
"""


class AuthError(Exception):
    """Base class for all auth service failures."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AuthError):
    """Missing or malformed input."""


class ConflictError(AuthError):
    """Email already registered."""


class NotFoundError(AuthError):
    """No matching user."""

    status_code = 404


class AuthenticationError(AuthError):
    """Credential mismatch.

    ``token`` is set by login, which signs the identity token before the
    password comparison is acted on; the route still writes it as the cookie.
    """

    def __init__(self, message: str, status_code: int | None = None, token: str | None = None) -> None:
        super().__init__(message, status_code)
        self.token = token


class InvalidTokenError(AuthError):
    """Reset token unknown or expired."""

    status_code = 404


class DeliveryError(AuthError):
    """Outbound email could not be sent."""

    status_code = 500


class InvalidStateError(AuthError):
    """The store did not return a usable record after a write."""
