"""
lineal.core.store — persistence layer.

Modules:
    backend     PersistenceBackend interface + memory / file / sqlite backends
    repository  CollectionRepository (generic CRUD) and RecordStore
"""

from lineal.core.store.backend import (
    FileBackend,
    MemoryBackend,
    PersistenceBackend,
    SQLiteBackend,
    open_backend,
)
from lineal.core.store.repository import CollectionRepository, RecordStore

__all__ = [
    "CollectionRepository",
    "FileBackend",
    "MemoryBackend",
    "PersistenceBackend",
    "RecordStore",
    "SQLiteBackend",
    "open_backend",
]
