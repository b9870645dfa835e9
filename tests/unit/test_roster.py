"""Unit tests for lineal.core.roster — audited, role-gated operations."""

from __future__ import annotations

from datetime import date

import pytest

from lineal.core.audit.log import AuditAction
from lineal.core.auth.service import PendingRotation, Session
from lineal.core.constants import DEFAULT_PASSWORD, SYSTEM_PRINCIPAL
from lineal.core.exceptions import (
    AccountDisabled,
    DuplicateEmail,
    InvalidCredentials,
    PasswordRequired,
    PermissionDenied,
)
from lineal.core.models import Gender, Personnel, PersonnelStatus, PublicUser, Rank, Role
from lineal.core.roster import PersonnelQuery, Roster, build_roster, filter_personnel, run_bootstrap
from lineal.core.seed import default_seed
from lineal.core.store import MemoryBackend, RecordStore

NEW_PASSWORD = "NewPass123"


def _person(pid: str = "p-new", **overrides) -> Personnel:
    fields = {
        "id": pid,
        "rank": Rank.JO1,
        "last_name": "Cruz",
        "first_name": "Juan",
        "gender": Gender.MALE,
        "office_assignment": ["A"],
        "date_of_birth": date(1990, 1, 1),
        "date_of_appointment": date(2015, 1, 1),
    }
    fields.update(overrides)
    return Personnel(**fields)


def _sign_in(roster: Roster, email: str) -> Session:
    pending = roster.login(email, DEFAULT_PASSWORD)
    assert isinstance(pending, PendingRotation)
    return roster.complete_rotation(pending, NEW_PASSWORD, NEW_PASSWORD)


@pytest.fixture
def roster() -> Roster:
    r = build_roster(RecordStore(MemoryBackend()))
    run_bootstrap(r, default_seed(super_admin_email="super@x", admin_email="admin@x"), DEFAULT_PASSWORD)
    return r


@pytest.fixture
def admin(roster: Roster) -> Session:
    return _sign_in(roster, "admin@x")


@pytest.fixture
def super_admin(roster: Roster) -> Session:
    return _sign_in(roster, "super@x")


def _latest(roster: Roster):
    return roster.audit.list()[0]


class TestBootstrapAudit:
    def test_single_system_entry(self):
        r = build_roster(RecordStore(MemoryBackend()))
        run_bootstrap(r, default_seed(), DEFAULT_PASSWORD)
        entries = r.audit.list()
        assert len(entries) == 1
        assert entries[0].action == AuditAction.SYSTEM
        assert entries[0].performed_by == SYSTEM_PRINCIPAL

    def test_rerun_adds_nothing(self, roster):
        before = len(roster.audit)
        report = run_bootstrap(roster, default_seed(super_admin_email="super@x", admin_email="admin@x"), DEFAULT_PASSWORD)
        assert not report.changed
        assert len(roster.audit) == before


class TestSessionLifecycle:
    def test_pending_login_is_not_logged(self, roster):
        before = len(roster.audit)
        roster.login("admin@x", DEFAULT_PASSWORD)
        assert len(roster.audit) == before

    def test_rotation_logs_login(self, roster, admin):
        entry = _latest(roster)
        assert (entry.action, entry.details, entry.performed_by) == (
            AuditAction.LOGIN,
            "User logged in",
            "admin@x",
        )

    def test_logout_logged(self, roster, admin):
        roster.logout(admin)
        assert _latest(roster).action == AuditAction.LOGOUT

    def test_failed_login_not_logged(self, roster):
        before = len(roster.audit)
        with pytest.raises(InvalidCredentials):
            roster.login("admin@x", "Wrong1234")
        assert len(roster.audit) == before


class TestPersonnel:
    def test_create(self, roster, admin):
        roster.save_personnel(admin, _person())
        entry = _latest(roster)
        assert entry.action == AuditAction.CREATE
        assert entry.details == "Added New Personnel: JO1 Cruz, Juan"
        assert entry.performed_by == "admin@x"

    def test_update_records_diff(self, roster, admin):
        roster.save_personnel(admin, _person())
        roster.save_personnel(admin, _person(rank=Rank.JO2))
        entry = _latest(roster)
        assert entry.action == AuditAction.UPDATE
        assert entry.details == 'Juan Cruz | Rank: "JO1" → "JO2"'
        assert roster.store.personnel.get_by_id("p-new").rank is Rank.JO2

    def test_delete(self, roster, admin):
        roster.save_personnel(admin, _person())
        roster.delete_personnel(admin, "p-new")
        assert roster.store.personnel.get_by_id("p-new") is None
        assert _latest(roster).details == "Deleted Personnel: JO1 Cruz, Juan"

    def test_delete_absent_still_logged(self, roster, admin):
        roster.delete_personnel(admin, "p-404")
        entry = _latest(roster)
        assert entry.action == AuditAction.DELETE
        assert entry.details == "Deleted personnel ID p-404"

    def test_super_admin_cannot_manage_personnel(self, roster, super_admin):
        with pytest.raises(PermissionDenied):
            roster.save_personnel(super_admin, _person())
        with pytest.raises(PermissionDenied):
            roster.list_personnel(super_admin)

    def test_query_sorted_by_rank(self, roster, admin):
        ranks = [p.rank for p in roster.query_personnel(admin, PersonnelQuery())]
        assert ranks == sorted(ranks, key=list(Rank).index)
        assert ranks[0] is Rank.JSUP

    def test_query_filters(self, roster, admin):
        suspended = roster.query_personnel(admin, PersonnelQuery(status=PersonnelStatus.SUSPENDED))
        assert [p.id for p in suspended] == ["p-005"]
        assert [p.id for p in roster.query_personnel(admin, PersonnelQuery(search="REYES"))] == ["p-002"]
        office = roster.query_personnel(admin, PersonnelQuery(office="Regional Office"))
        assert {p.id for p in office} == {"p-001", "p-002"}


class TestFilterPersonnel:
    def test_stable_within_rank(self):
        records = [_person("a", rank=Rank.JO2), _person("b", rank=Rank.SJO1), _person("c", rank=Rank.JO2)]
        assert [p.id for p in filter_personnel(records, PersonnelQuery())] == ["b", "a", "c"]

    def test_gender_and_training(self):
        records = [
            _person("a", gender=Gender.FEMALE, training_type="OAC"),
            _person("b", training_type="OAC"),
        ]
        query = PersonnelQuery(gender=Gender.FEMALE, training="OAC")
        assert [p.id for p in filter_personnel(records, query)] == ["a"]


class TestUsers:
    def _new_user(self, **overrides) -> PublicUser:
        fields = {
            "id": "u-new",
            "first_name": "Ana",
            "last_name": "Garcia",
            "email": "ana@x",
            "rank": Rank.JO2,
        }
        fields.update(overrides)
        return PublicUser(**fields)

    def test_list_users_hides_passwords(self, roster, super_admin):
        users = roster.list_users(super_admin)
        assert {u.email for u in users} == {"super@x", "admin@x"}
        assert all(not hasattr(u, "password") for u in users)

    def test_admin_cannot_manage_users(self, roster, admin):
        with pytest.raises(PermissionDenied):
            roster.list_users(admin)
        with pytest.raises(PermissionDenied):
            roster.save_user(admin, self._new_user(), "Start1234", "Start1234")

    def test_create_requires_password(self, roster, super_admin):
        with pytest.raises(PasswordRequired):
            roster.save_user(super_admin, self._new_user())

    def test_create_forces_rotation(self, roster, super_admin):
        roster.save_user(super_admin, self._new_user(), "Start1234", "Start1234")
        stored = roster.store.users.get_by_id("u-new")
        assert stored.must_change_password is True
        assert stored.created_by == "user-superadmin"
        entry = _latest(roster)
        assert entry.action == AuditAction.USER_CREATE
        assert entry.details == "Created new user: JO2 Garcia (ana@x)"
        assert isinstance(roster.login("ana@x", "Start1234"), PendingRotation)

    def test_edit_keeps_password(self, roster, super_admin, admin):
        account = roster.store.users.get_by_id("user-admin")
        roster.save_user(super_admin, account.public().model_copy(update={"first_name": "Desk"}))
        entry = _latest(roster)
        assert entry.action == AuditAction.USER_UPDATE
        assert entry.details == 'Records Officer | First Name: "Records" → "Desk"'
        assert isinstance(roster.login("admin@x", NEW_PASSWORD), Session)

    def test_reset_password(self, roster, super_admin):
        account = roster.store.users.get_by_id("user-admin")
        roster.save_user(super_admin, account.public(), "Reset1234", "Reset1234")
        assert _latest(roster).details == "Records Officer | Password: (Updated)"
        assert isinstance(roster.login("admin@x", "Reset1234"), PendingRotation)

    def test_duplicate_email(self, roster, super_admin):
        with pytest.raises(DuplicateEmail):
            roster.save_user(super_admin, self._new_user(email="admin@x"), "Start1234", "Start1234")

    def test_toggle_disables_account(self, roster, super_admin, admin):
        updated = roster.toggle_user_status(super_admin, "user-admin")
        assert updated.is_active is False
        assert _latest(roster).details == "Changed status of admin@x to Inactive"
        with pytest.raises(AccountDisabled):
            roster.login("admin@x", NEW_PASSWORD)
        with pytest.raises(InvalidCredentials):
            roster.list_personnel(admin)

    def test_toggle_absent(self, roster, super_admin):
        assert roster.toggle_user_status(super_admin, "nobody") is None

    def test_delete_user(self, roster, super_admin):
        roster.delete_user(super_admin, "user-admin")
        assert roster.store.users.get_by_id("user-admin") is None
        entry = _latest(roster)
        assert entry.action == AuditAction.USER_DELETE
        assert entry.details == "Deleted User: JINSP Officer (admin@x)"


class TestUpdateSelf:
    def test_change_email(self, roster, admin):
        session = roster.update_self(admin, email="desk@x")
        assert session.email == "desk@x"
        entry = _latest(roster)
        assert entry.action == AuditAction.SELF_UPDATE
        assert entry.performed_by == "desk@x"
        assert isinstance(roster.login("desk@x", NEW_PASSWORD), Session)

    def test_change_password(self, roster, admin):
        roster.update_self(admin, password="Other1234", confirm_password="Other1234")
        assert isinstance(roster.login("admin@x", "Other1234"), Session)

    def test_blank_password_keeps_current(self, roster, admin):
        roster.update_self(admin)
        assert isinstance(roster.login("admin@x", NEW_PASSWORD), Session)

    def test_email_taken(self, roster, admin):
        with pytest.raises(DuplicateEmail):
            roster.update_self(admin, email="super@x")


class TestAuditAccess:
    def test_admin_cannot_view_logs(self, roster, admin):
        with pytest.raises(PermissionDenied):
            roster.list_logs(admin)

    def test_search(self, roster, super_admin):
        found = roster.search_logs(super_admin, "SUPER@X")
        assert found
        assert all("super@x" in (e.performed_by + e.details).lower() for e in found)

    def test_clear_leaves_one_system_entry(self, roster, super_admin):
        roster.clear_logs(super_admin)
        entries = roster.list_logs(super_admin)
        assert len(entries) == 1
        assert entries[0].action == AuditAction.SYSTEM
        assert entries[0].details == "Audit logs cleared manually"
        assert entries[0].performed_by == "super@x"
