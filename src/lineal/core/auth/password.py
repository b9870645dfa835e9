"""Password complexity policy.

A new password needs at least 8 characters with one uppercase letter,
one lowercase letter, and one digit (ASCII classes).
"""

from __future__ import annotations

import re

from lineal.core.constants import MIN_PASSWORD_LENGTH
from lineal.core.exceptions import PasswordMismatch, WeakPassword

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")


def policy_violations(password: str) -> list[str]:
    """Human-readable list of the rules *password* breaks (empty if none)."""
    problems: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if not _UPPER.search(password):
        problems.append("an uppercase letter")
    if not _LOWER.search(password):
        problems.append("a lowercase letter")
    if not _DIGIT.search(password):
        problems.append("a number")
    return problems


def is_strong_password(password: str) -> bool:
    return not policy_violations(password)


def check_password_strength(password: str) -> None:
    """Raise :class:`WeakPassword` unless *password* meets the policy."""
    if not is_strong_password(password):
        raise WeakPassword()


def validate_new_password(new_password: str, confirm_password: str) -> str:
    """Confirmation must match first, then the complexity policy applies."""
    if new_password != confirm_password:
        raise PasswordMismatch()
    check_password_strength(new_password)
    return new_password
