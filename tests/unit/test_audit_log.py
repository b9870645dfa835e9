"""Unit tests for lineal.core.audit.log — bounded, newest-first audit log."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from lineal.core.audit.log import AuditAction, AuditLog, next_entry_id
from lineal.core.models import AuditLogEntry
from lineal.core.store import MemoryBackend, RecordStore


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(MemoryBackend())


@pytest.fixture
def audit(store: RecordStore) -> AuditLog:
    return AuditLog(store.audit_entries)


class TestAppend:
    def test_newest_first(self, audit):
        audit.append(AuditAction.LOGIN, "first", "a@x")
        audit.append(AuditAction.LOGOUT, "second", "a@x")
        assert [e.details for e in audit.list()] == ["second", "first"]

    def test_returns_persisted_entry(self, audit, store):
        entry = audit.append(AuditAction.CREATE, "Added", "a@x")
        assert store.audit_entries.get_by_id(entry.id) == entry
        assert entry.performed_by == "a@x"

    def test_ids_strictly_increasing(self):
        ids = [int(next_entry_id()) for _ in range(50)]
        assert ids == sorted(set(ids))

    def test_explicit_id(self, audit):
        entry = audit.append(AuditAction.SYSTEM, "x", "System", entry_id="fixed")
        assert entry.id == "fixed"

    def test_truncates_to_limit(self, store):
        audit = AuditLog(store.audit_entries, max_entries=3)
        for i in range(5):
            audit.append(AuditAction.UPDATE, f"change {i}", "a@x")
        assert [e.details for e in audit.list()] == ["change 4", "change 3", "change 2"]

    def test_default_limit_drops_oldest(self, audit, store):
        ts = datetime(2024, 1, 1, tzinfo=UTC)
        store.audit_entries.replace_all(
            AuditLogEntry(id=str(i), action="UPDATE", details=f"old {i}", performed_by="a@x", timestamp=ts)
            for i in range(1000, 0, -1)
        )
        audit.append(AuditAction.UPDATE, "newest", "a@x")
        entries = audit.list()
        assert len(entries) == 1000
        assert entries[0].details == "newest"
        assert entries[-1].details == "old 2"

    def test_rejects_non_positive_limit(self, store):
        with pytest.raises(ValueError):
            AuditLog(store.audit_entries, max_entries=0)


class TestSearch:
    def test_case_insensitive_on_every_field(self, audit):
        audit.append(AuditAction.UPDATE, 'Juan Cruz | Rank: "JO1" → "JO2"', "admin@x")
        audit.append(AuditAction.LOGIN, "User logged in", "super@x")
        assert len(audit.search("RANK")) == 1
        assert len(audit.search("login")) == 1
        assert len(audit.search("SUPER@")) == 1
        assert audit.search("nothing-like-this") == []

    def test_empty_term_matches_all(self, audit):
        audit.append(AuditAction.LOGIN, "a", "x@x")
        audit.append(AuditAction.LOGOUT, "b", "x@x")
        assert len(audit.search("")) == 2


class TestClear:
    def test_clear_empties(self, audit):
        audit.append(AuditAction.LOGIN, "a", "x@x")
        audit.clear()
        assert audit.list() == []
        assert len(audit) == 0
