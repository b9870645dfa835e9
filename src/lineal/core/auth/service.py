"""
Authentication service — login, forced password rotation, and resets.

States::

    Anonymous ──login──▶ Session
                 │
                 └─────▶ PendingRotation ──rotate_password──▶ Session

An account flagged ``must_change_password`` never reaches a Session
from ``login`` directly. Each account has at most one PendingRotation
token, held only in this service's memory: a later login replaces it,
and the first successful rotation spends it. A failed rotation attempt
(mismatch, weak password) leaves it valid.

Rotation re-reads the stored account and refuses unless the account
still requires rotation with the password the token was issued against,
so a token outlived by another rotation or an administrator reset is
dead.

Passwords are compared as stored (plain equality).
"""

from __future__ import annotations

import hmac
import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime

from lineal.core.auth.password import validate_new_password
from lineal.core.exceptions import AccountDisabled, InvalidCredentials, PasswordRequired
from lineal.core.models import PublicUser, UserAccount, utcnow
from lineal.core.store.repository import CollectionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """An established, authenticated principal."""

    user: PublicUser
    established_at: datetime = field(default_factory=utcnow)

    @property
    def email(self) -> str:
        return self.user.email


@dataclass(frozen=True)
class _Ticket:
    token: str
    issued_password: str


@dataclass(frozen=True)
class PendingRotation:
    """Login succeeded but the account must set a new password first."""

    token: str
    user_id: str
    email: str


LoginResult = Session | PendingRotation


def _expired() -> InvalidCredentials:
    return InvalidCredentials("Password change session expired. Please log in again.")


class AuthService:
    def __init__(self, users: CollectionRepository[UserAccount]) -> None:
        self._users = users
        self._pending: dict[str, _Ticket] = {}  # user id -> outstanding ticket
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_account(self, email: str) -> UserAccount | None:
        """Exact, case-sensitive email lookup; first match wins."""
        return self._users.find(lambda u: u.email == email)

    # ------------------------------------------------------------------
    # Login / logout
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        account = self.get_account(email)
        if account is None or not hmac.compare_digest(
            account.password.encode("utf-8"), password.encode("utf-8")
        ):
            logger.info("login rejected for %r", email)
            raise InvalidCredentials()

        if not account.is_active:
            logger.info("login rejected for %r: account disabled", email)
            raise AccountDisabled()

        if account.must_change_password:
            token = secrets.token_urlsafe(32)
            with self._lock:
                self._pending[account.id] = _Ticket(token, account.password)
            logger.info("login for %r requires password rotation", email)
            return PendingRotation(token=token, user_id=account.id, email=account.email)

        return self._establish(account)

    def logout(self, session: Session) -> None:
        """Forget any outstanding rotation token for the session's user."""
        with self._lock:
            self._pending.pop(session.user.id, None)

    def _establish(self, account: UserAccount) -> Session:
        stamped = account.model_copy(update={"last_login": utcnow()})
        self._users.upsert(stamped)
        return Session(user=stamped.public())

    # ------------------------------------------------------------------
    # Password changes
    # ------------------------------------------------------------------

    def rotate_password(
        self, pending: PendingRotation, new_password: str, confirm_password: str
    ) -> Session:
        """Complete a forced rotation and open the session."""
        self._ticket_for(pending)
        validate_new_password(new_password, confirm_password)

        with self._lock:
            ticket = self._ticket_for(pending)
            del self._pending[pending.user_id]

        account = self._users.get_by_id(pending.user_id)
        if (
            account is None
            or not account.is_active
            or not account.must_change_password
            or account.password != ticket.issued_password
        ):
            logger.info("stale rotation token for %r rejected", pending.email)
            raise _expired()

        rotated = account.model_copy(
            update={"password": new_password, "must_change_password": False}
        )
        logger.info("password rotated for %r", rotated.email)
        return self._establish(rotated)

    def _ticket_for(self, pending: PendingRotation) -> _Ticket:
        ticket = self._pending.get(pending.user_id)
        if ticket is None or not hmac.compare_digest(ticket.token, pending.token):
            raise _expired()
        return ticket

    def change_own_password(
        self,
        account: UserAccount,
        new_password: str,
        confirm_password: str,
    ) -> UserAccount:
        """
        Return *account* carrying the new password.

        A blank *new_password* means "leave unchanged" and returns
        *account* as is. The caller persists the result.
        """
        if not new_password:
            return account
        validate_new_password(new_password, confirm_password)
        return account.model_copy(update={"password": new_password})

    def set_or_reset_password(
        self,
        target: UserAccount,
        new_password: str,
        confirm_password: str,
        *,
        is_new_account: bool,
    ) -> UserAccount:
        """
        Administrator-set password for *target*.

        Blank is allowed only when editing an existing account (password
        kept). Any password actually set forces rotation at next login.
        The caller persists the result.
        """
        if not new_password:
            if is_new_account:
                raise PasswordRequired()
            return target
        validate_new_password(new_password, confirm_password)
        return target.model_copy(update={"password": new_password, "must_change_password": True})
