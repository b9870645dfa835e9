"""
lineal.core.auth — password policy and authentication.

Modules:
    password    Complexity policy checks
    service     AuthService: login, forced rotation, password resets
"""

from lineal.core.auth.password import (
    check_password_strength,
    is_strong_password,
    validate_new_password,
)
from lineal.core.auth.service import AuthService, LoginResult, PendingRotation, Session

__all__ = [
    "AuthService",
    "LoginResult",
    "PendingRotation",
    "Session",
    "check_password_strength",
    "is_strong_password",
    "validate_new_password",
]
