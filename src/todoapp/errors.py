from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Todo not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when the request has no authenticated user."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ConfigurationError(Exception):
    """Raised when required configuration is missing, blank or malformed.

    Not a UserError: configuration problems are fatal and never shown to end users.
    """
