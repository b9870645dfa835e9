"""
Roster service — audited, role-gated operations for the UI layer.

Every successful mutation goes through the repository, is summarized by
the diff engine, and is recorded as exactly one audit entry carrying the
acting account's email. Usage::

    roster = open_roster(load_config())
    result = roster.login("admin@bjmp.gov.ph", "Admin@123")
    if isinstance(result, PendingRotation):
        session = roster.complete_rotation(result, "NewPass1", "NewPass1")
    roster.save_personnel(session, person)

Permissions are checked against the account as currently stored, so a
session whose account was disabled, demoted, or deleted stops working.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from lineal.core.access import require_permission
from lineal.core.audit.diff import created_summary, deleted_summary, diff_personnel, diff_user
from lineal.core.audit.log import AuditAction, AuditLog
from lineal.core.auth.service import AuthService, LoginResult, PendingRotation, Session
from lineal.core.config import LinealConfig
from lineal.core.constants import AUDIT_LOG_MAX_ENTRIES, SYSTEM_PRINCIPAL
from lineal.core.exceptions import DuplicateEmail, InvalidCredentials
from lineal.core.models import (
    AuditLogEntry,
    Gender,
    Personnel,
    PersonnelStatus,
    PublicUser,
    Rank,
    UserAccount,
    rank_index,
    utcnow,
)
from lineal.core.seed import BootstrapReport, SeedData, bootstrap, default_seed, load_seed
from lineal.core.store.backend import open_backend
from lineal.core.store.repository import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonnelQuery:
    """Roster filters; unset fields match everything."""

    search: str = ""  # last name, first name, or id substring
    rank: Rank | None = None
    status: PersonnelStatus | None = None
    gender: Gender | None = None
    office: str | None = None
    training: str | None = None

    def matches(self, p: Personnel) -> bool:
        term = self.search.lower()
        if term and not (
            term in p.last_name.lower() or term in p.first_name.lower() or term in p.id.lower()
        ):
            return False
        if self.rank is not None and p.rank != self.rank:
            return False
        if self.status is not None and p.status != self.status:
            return False
        if self.gender is not None and p.gender != self.gender:
            return False
        if self.office and self.office not in p.office_assignment:
            return False
        if self.training and p.training_type != self.training:
            return False
        return True


def filter_personnel(records: Iterable[Personnel], query: PersonnelQuery) -> list[Personnel]:
    """Matching records, most senior rank first (stable within a rank)."""
    return sorted((p for p in records if query.matches(p)), key=lambda p: rank_index(p.rank))


class Roster:
    def __init__(self, store: RecordStore, audit: AuditLog, auth: AuthService) -> None:
        self.store = store
        self.audit = audit
        self.auth = auth

    def close(self) -> None:
        self.store.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _account(self, session: Session) -> UserAccount:
        account = self.store.users.get_by_id(session.user.id)
        if account is None or not account.is_active:
            raise InvalidCredentials("Session is no longer valid. Please log in again.")
        return account

    def _require(self, session: Session, permission: str) -> UserAccount:
        account = self._account(session)
        require_permission(account.role, permission)
        return account

    @staticmethod
    def _actor(account: UserAccount | PublicUser | None) -> str:
        return account.email if account is not None and account.email else SYSTEM_PRINCIPAL

    def _check_email_free(self, email: str, user_id: str) -> None:
        clash = self.store.users.find(lambda u: u.email == email and u.id != user_id)
        if clash is not None:
            raise DuplicateEmail(f"Email {email} is already used by another account.")

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        result = self.auth.login(email, password)
        if isinstance(result, Session):
            self.audit.append(AuditAction.LOGIN, "User logged in", result.email)
        return result

    def complete_rotation(
        self, pending: PendingRotation, new_password: str, confirm_password: str
    ) -> Session:
        session = self.auth.rotate_password(pending, new_password, confirm_password)
        self.audit.append(AuditAction.LOGIN, "User logged in", session.email)
        return session

    def logout(self, session: Session) -> None:
        self.auth.logout(session)
        self.audit.append(AuditAction.LOGOUT, "User logged out", session.email)

    # ------------------------------------------------------------------
    # Personnel (ADMIN)
    # ------------------------------------------------------------------

    def list_personnel(self, session: Session) -> list[Personnel]:
        self._require(session, "view_personnel")
        return self.store.personnel.list()

    def query_personnel(self, session: Session, query: PersonnelQuery) -> list[Personnel]:
        return filter_personnel(self.list_personnel(session), query)

    def save_personnel(self, session: Session, person: Personnel) -> Personnel:
        """Create or replace *person*; the audit entry describes what changed."""
        actor = self._require(session, "manage_personnel")
        old = self.store.personnel.get_by_id(person.id)
        self.store.personnel.upsert(person)
        if old is None:
            self.audit.append(AuditAction.CREATE, created_summary(person), self._actor(actor))
        else:
            self.audit.append(AuditAction.UPDATE, diff_personnel(old, person), self._actor(actor))
        return person

    def delete_personnel(self, session: Session, person_id: str) -> None:
        actor = self._require(session, "manage_personnel")
        old = self.store.personnel.get_by_id(person_id)
        self.store.personnel.remove(person_id)
        details = deleted_summary(old) if old else f"Deleted personnel ID {person_id}"
        self.audit.append(AuditAction.DELETE, details, self._actor(actor))

    # ------------------------------------------------------------------
    # Accounts (SUPER_ADMIN)
    # ------------------------------------------------------------------

    def list_users(self, session: Session) -> list[PublicUser]:
        self._require(session, "view_users")
        return [u.public() for u in self.store.users.list()]

    def save_user(
        self,
        session: Session,
        user: PublicUser,
        password: str = "",
        confirm_password: str = "",
    ) -> PublicUser:
        """
        Create or edit an account.

        Editing keeps the stored password unless a new one is given; any
        password set here forces rotation at the user's next login.
        """
        actor = self._require(session, "manage_users")
        existing = self.store.users.get_by_id(user.id)
        self._check_email_free(user.email, user.id)

        fields = user.model_dump()
        if existing is None:
            fields.update(
                must_change_password=True,
                created_at=utcnow(),
                created_by=user.created_by or actor.id,
            )
        else:
            fields.update(
                must_change_password=existing.must_change_password,
                created_at=existing.created_at,
                created_by=existing.created_by,
                last_login=existing.last_login,
            )
        account = UserAccount.model_validate(
            {**fields, "password": existing.password if existing else ""}
        )
        account = self.auth.set_or_reset_password(
            account, password, confirm_password, is_new_account=existing is None
        )

        self.store.users.upsert(account)
        action = AuditAction.USER_UPDATE if existing else AuditAction.USER_CREATE
        details = diff_user(existing, account, password_changed=bool(password))
        self.audit.append(action, details, self._actor(actor))
        return account.public()

    def toggle_user_status(self, session: Session, user_id: str) -> PublicUser | None:
        actor = self._require(session, "manage_users")
        existing = self.store.users.get_by_id(user_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"is_active": not existing.is_active})
        self.store.users.upsert(updated)
        state = "Active" if updated.is_active else "Inactive"
        self.audit.append(
            AuditAction.USER_STATUS,
            f"Changed status of {existing.email} to {state}",
            self._actor(actor),
        )
        return updated.public()

    def delete_user(self, session: Session, user_id: str) -> None:
        actor = self._require(session, "manage_users")
        old = self.store.users.get_by_id(user_id)
        self.store.users.remove(user_id)
        details = deleted_summary(old) if old else f"Deleted user ID {user_id}"
        self.audit.append(AuditAction.USER_DELETE, details, self._actor(actor))

    # ------------------------------------------------------------------
    # Own account
    # ------------------------------------------------------------------

    def update_self(
        self,
        session: Session,
        *,
        email: str | None = None,
        password: str = "",
        confirm_password: str = "",
    ) -> Session:
        """Change the session user's own email and/or password."""
        account = self._require(session, "update_own_account")
        new_email = email or account.email
        self._check_email_free(new_email, account.id)

        updated = self.auth.change_own_password(
            account.model_copy(update={"email": new_email}), password, confirm_password
        )
        self.store.users.upsert(updated)
        self.audit.append(
            AuditAction.SELF_UPDATE, "User updated own profile details", self._actor(updated)
        )
        return Session(user=updated.public(), established_at=session.established_at)

    # ------------------------------------------------------------------
    # Audit log (SUPER_ADMIN)
    # ------------------------------------------------------------------

    def list_logs(self, session: Session) -> list[AuditLogEntry]:
        self._require(session, "view_audit")
        return self.audit.list()

    def search_logs(self, session: Session, term: str) -> list[AuditLogEntry]:
        self._require(session, "view_audit")
        return self.audit.search(term)

    def clear_logs(self, session: Session) -> AuditLogEntry:
        """Empty the log, leaving one SYSTEM entry recording the erasure."""
        actor = self._require(session, "clear_audit")
        self.audit.clear()
        return self.audit.append(
            AuditAction.SYSTEM, "Audit logs cleared manually", self._actor(actor)
        )


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def seed_from_config(config: LinealConfig) -> SeedData:
    if config.seed.personnel_file:
        return load_seed(config.seed.personnel_file)
    return default_seed(
        super_admin_email=config.seed.super_admin_email,
        admin_email=config.seed.admin_email,
    )


def build_roster(store: RecordStore, *, max_entries: int = AUDIT_LOG_MAX_ENTRIES) -> Roster:
    audit = AuditLog(store.audit_entries, max_entries=max_entries)
    return Roster(store, audit, AuthService(store.users))


def run_bootstrap(roster: Roster, seed: SeedData, default_password: str) -> BootstrapReport:
    """Bootstrap the store and record what it created, if anything."""
    report = bootstrap(roster.store, seed, default_password)
    if report.changed:
        parts = []
        if report.users_created:
            parts.append(f"created default accounts: {', '.join(report.users_created)}")
        if report.personnel_seeded:
            parts.append(f"seeded {report.personnel_seeded} personnel record(s)")
        roster.audit.append(AuditAction.SYSTEM, "Bootstrap " + "; ".join(parts), SYSTEM_PRINCIPAL)
        logger.info("bootstrap: %s", "; ".join(parts))
    return report


def open_roster(config: LinealConfig, *, run_seed: bool = True) -> Roster:
    """Open the configured store, bootstrap it once, and return the service."""
    backend = open_backend(config.storage.backend, config.storage_path)
    roster = build_roster(RecordStore(backend), max_entries=config.audit.max_entries)
    if run_seed:
        run_bootstrap(
            roster, seed_from_config(config), config.seed.default_password.get_secret_value()
        )
    return roster
