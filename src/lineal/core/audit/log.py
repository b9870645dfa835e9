"""
Audit log — bounded, newest-first record of every change.

Usage::

    audit = AuditLog(store.audit_entries)
    audit.append(AuditAction.UPDATE, summary, "admin@bjmp.gov.ph")

    for entry in audit.search("rank"):
        print(entry.timestamp, entry.details)

Entries are immutable. New entries are prepended and the log is cut to
the most recent ``max_entries`` on every append; dropped entries are not
reported. ``clear()`` is the only other destructive operation; by
convention the caller records a SYSTEM entry right after it.
"""

from __future__ import annotations

import logging
import threading
import time

from lineal.core.constants import AUDIT_LOG_MAX_ENTRIES
from lineal.core.models import AuditLogEntry, utcnow
from lineal.core.store.repository import CollectionRepository

logger = logging.getLogger(__name__)


class AuditAction:
    """Action tags used by the roster layer. Free-form strings are allowed."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    USER_CREATE = "USER_CREATE"
    USER_UPDATE = "USER_UPDATE"
    USER_STATUS = "USER_STATUS"
    USER_DELETE = "USER_DELETE"
    SELF_UPDATE = "SELF_UPDATE"
    SYSTEM = "SYSTEM"


_id_lock = threading.Lock()
_last_id = 0


def next_entry_id() -> str:
    """Creation-time-derived id, strictly increasing within the process."""
    global _last_id
    with _id_lock:
        candidate = time.time_ns()
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


class AuditLog:
    def __init__(
        self,
        entries: CollectionRepository[AuditLogEntry],
        max_entries: int = AUDIT_LOG_MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries = entries
        self.max_entries = max_entries

    def append(
        self,
        action: str,
        details: str,
        performed_by: str,
        entry_id: str | None = None,
    ) -> AuditLogEntry:
        """Record one entry at the head of the log and persist it."""
        entry = AuditLogEntry(
            id=entry_id or next_entry_id(),
            action=action,
            details=details,
            performed_by=performed_by,
            timestamp=utcnow(),
        )
        limit = self.max_entries
        self._entries.mutate(lambda existing: ([entry] + existing)[:limit])
        logger.info("audit %s by %s: %s", action, performed_by, details)
        return entry

    def list(self) -> list[AuditLogEntry]:
        """All entries, newest first."""
        return self._entries.list()

    def search(self, term: str) -> list[AuditLogEntry]:
        """Entries whose action, details, or performer contain *term* (any case)."""
        needle = term.lower()
        return [
            e
            for e in self.list()
            if needle in e.action.lower()
            or needle in e.details.lower()
            or needle in e.performed_by.lower()
        ]

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.replace_all([])
        logger.warning("audit log cleared")

    def __len__(self) -> int:
        return self._entries.count()
