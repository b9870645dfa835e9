"""
Collection repository — generic CRUD over one typed collection.

Usage::

    repo = CollectionRepository(backend, "personnel", Personnel)
    repo.upsert(person)
    repo.get_by_id(person.id)
    repo.remove("p-404")   # absent id: no-op

Each collection is persisted as a single JSON array under its key. There
is no cache: every call re-reads the backend, so a ``list()`` after a
successful ``upsert``/``remove`` always reflects it. Read-modify-write
cycles are serialized per (backend, key).
"""

from __future__ import annotations

import json
import logging
import threading
import weakref
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from lineal.core.constants import AUDIT_LOG_KEY, PERSONNEL_KEY, USERS_KEY
from lineal.core.exceptions import StorageUnavailable
from lineal.core.models import AuditLogEntry, Personnel, Record, UserAccount
from lineal.core.store.backend import PersistenceBackend

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

_registry_lock = threading.Lock()
_collection_locks: weakref.WeakKeyDictionary[PersistenceBackend, dict[str, threading.RLock]] = (
    weakref.WeakKeyDictionary()
)


def _lock_for(backend: PersistenceBackend, key: str) -> threading.RLock:
    with _registry_lock:
        locks = _collection_locks.setdefault(backend, {})
        return locks.setdefault(key, threading.RLock())


class CollectionRepository(Generic[R]):
    """Identity-keyed collection of *model* records stored under *key*."""

    def __init__(self, backend: PersistenceBackend, key: str, model: type[R]) -> None:
        self.backend = backend
        self.key = key
        self.model = model
        self._adapter: TypeAdapter[list[R]] = TypeAdapter(list[model])  # type: ignore[valid-type]
        self._lock = _lock_for(backend, key)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def _decode(self, blob: bytes) -> list[R]:
        try:
            return self._adapter.validate_json(blob)
        except ValidationError as exc:
            raise StorageUnavailable(
                f"Stored collection {self.key!r} is corrupt: {exc.error_count()} invalid field(s)"
            ) from exc

    def _encode(self, records: Iterable[R]) -> bytes:
        return json.dumps([r.to_storage() for r in records], ensure_ascii=False).encode("utf-8")

    def _persist(self, records: list[R]) -> None:
        self.backend.write(self.key, self._encode(records))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[R]:
        """All records in insertion order; empty if never written."""
        blob = self.backend.read(self.key)
        if blob is None:
            return []
        return self._decode(blob)

    def get_by_id(self, record_id: str) -> R | None:
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def find(self, predicate: Callable[[R], bool]) -> R | None:
        """First record matching *predicate*, in insertion order."""
        for record in self.list():
            if predicate(record):
                return record
        return None

    def count(self) -> int:
        return len(self.list())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, record: R) -> R:
        """Replace the record with the same id in place, or append it."""
        with self._lock:
            records = self.list()
            for i, existing in enumerate(records):
                if existing.id == record.id:
                    records[i] = record
                    break
            else:
                records.append(record)
            self._persist(records)
        logger.debug("upsert %s id=%s", self.key, record.id)
        return record

    def remove(self, record_id: str) -> None:
        """Drop *record_id*. Absent ids are not an error."""
        with self._lock:
            records = self.list()
            kept = [r for r in records if r.id != record_id]
            self._persist(kept)
        if len(kept) == len(records):
            logger.debug("remove %s id=%s: not present", self.key, record_id)

    def replace_all(self, records: Iterable[R]) -> None:
        """Overwrite the whole collection with *records*."""
        with self._lock:
            self._persist(list(records))

    def mutate(self, fn: Callable[[list[R]], list[R]]) -> list[R]:
        """
        Atomic read-modify-write of the whole collection.

        *fn* gets a fresh list it may modify in place. A result equal to
        the stored collection is not written.
        """
        with self._lock:
            current = self.list()
            updated = fn(list(current))
            if updated != current:
                self._persist(updated)
        return updated


class RecordStore:
    """The three Lineal collections on one backend."""

    def __init__(self, backend: PersistenceBackend) -> None:
        self.backend = backend
        self.users: CollectionRepository[UserAccount] = CollectionRepository(
            backend, USERS_KEY, UserAccount
        )
        self.personnel: CollectionRepository[Personnel] = CollectionRepository(
            backend, PERSONNEL_KEY, Personnel
        )
        self.audit_entries: CollectionRepository[AuditLogEntry] = CollectionRepository(
            backend, AUDIT_LOG_KEY, AuditLogEntry
        )

    def close(self) -> None:
        self.backend.close()

    def __enter__(self) -> RecordStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
