"""Lineal exception hierarchy.

Messages on the authentication errors are user-facing and are shown
verbatim by the UI layer.
"""

from __future__ import annotations


class LinealError(Exception):
    """Base exception for all Lineal errors."""


class ConfigError(LinealError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class SeedParseError(ConfigError):
    """Raised when a seed data file cannot be parsed or fails validation."""


class StorageUnavailable(LinealError):
    """Raised when the persistence backend cannot be read or written."""


class PermissionDenied(LinealError):
    """Raised when the acting account's role lacks a permission."""


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthError(LinealError):
    """Base class for caller-correctable authentication failures."""

    default_message = "Authentication failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentials(AuthError):
    """Unknown email or wrong password; never says which."""

    default_message = "Invalid credentials."


class AccountDisabled(AuthError):
    default_message = "Account is disabled. Contact Super Admin."


class PasswordMismatch(AuthError):
    default_message = "Passwords do not match."


class WeakPassword(AuthError):
    default_message = "Password must be at least 8 chars, 1 uppercase, 1 lowercase, 1 number."


class PasswordRequired(AuthError):
    default_message = "Password is required for new users."


class DuplicateEmail(LinealError):
    """Raised when an account would share its login email with another account."""
