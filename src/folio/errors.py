from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Raised on sign in with an unknown email or a wrong password.

    Both cases share one message so callers cannot tell which one happened.
    """

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class UnauthorizedError(AuthenticationError):
    """Raised when a session token is missing, invalid or expired."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class DuplicateEmailError(ValidationError):
    """Raised when an email is already registered."""

    def __init__(self) -> None:
        super().__init__("User already exists")


class InternalError(Exception):
    """Unexpected failure of the store or another dependency. Never shown to the user."""


class StoreTimeoutError(InternalError):
    """Raised when a database call does not finish within the configured timeout."""
