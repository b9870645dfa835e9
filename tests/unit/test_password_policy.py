"""Unit tests for lineal.core.auth.password — complexity policy."""

from __future__ import annotations

import pytest

from lineal.core.auth.password import (
    check_password_strength,
    is_strong_password,
    policy_violations,
    validate_new_password,
)
from lineal.core.exceptions import PasswordMismatch, WeakPassword


class TestPolicy:
    @pytest.mark.parametrize("password", ["Abc12345", "Admin@123", "zZ9zzzzz"])
    def test_accepted(self, password):
        assert is_strong_password(password)

    @pytest.mark.parametrize(
        "password",
        ["abc12345", "ABC12345", "Abcdefgh", "Ab1", ""],
    )
    def test_rejected(self, password):
        assert not is_strong_password(password)

    def test_violations_listed(self):
        assert policy_violations("ab") == [
            "at least 8 characters",
            "an uppercase letter",
            "a number",
        ]

    def test_check_raises_with_user_message(self):
        with pytest.raises(WeakPassword, match="at least 8 chars"):
            check_password_strength("abc12345")


class TestValidateNewPassword:
    def test_ok(self):
        assert validate_new_password("Abc12345", "Abc12345") == "Abc12345"

    def test_mismatch_checked_before_strength(self):
        with pytest.raises(PasswordMismatch, match="Passwords do not match."):
            validate_new_password("weak", "other")

    def test_weak_when_matching(self):
        with pytest.raises(WeakPassword):
            validate_new_password("abc12345", "abc12345")
