"""
Persistence backends — the sole I/O boundary of Lineal.

A backend is a durable key -> bytes map. Each logical collection is one
key holding one blob, so every mutation rewrites that whole blob. This
is fine at roster scale; swapping in an indexed store does not
change the repository contract.

Implementations:
    MemoryBackend   dict-backed, for tests and throwaway sessions
    FileBackend     one file per key, written via tmp file + rename
    SQLiteBackend   single ``kv`` table in WAL mode (default)

Every backend failure surfaces as :class:`StorageUnavailable`.
"""

from __future__ import annotations

import logging
import os
import re
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from lineal.core.exceptions import StorageUnavailable

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_RE.fullmatch(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class PersistenceBackend(ABC):
    """Interface for a local, synchronous key -> bytes store."""

    name: str = "abstract"

    @abstractmethod
    def read(self, key: str) -> bytes | None:
        """Return the blob stored at *key*, or None if never written."""
        ...

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Replace the blob at *key*. Atomic from the caller's view."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all keys that currently hold a blob."""
        ...

    def close(self) -> None:  # noqa: B027
        """Release any held resources."""

    def describe(self) -> str:
        return self.name

    def __enter__(self) -> PersistenceBackend:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class MemoryBackend(PersistenceBackend):
    """In-process backend. Contents vanish with the object."""

    name = "memory"

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self.writes = 0

    def read(self, key: str) -> bytes | None:
        return self._data.get(_check_key(key))

    def write(self, key: str, data: bytes) -> None:
        self._data[_check_key(key)] = bytes(data)
        self.writes += 1

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileBackend(PersistenceBackend):
    """One ``<key>.json`` file per key under *directory*."""

    name = "file"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory).expanduser()
        try:
            self.directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailable(f"Cannot create data directory {self.directory}: {exc}") from exc

    def _path(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.json"

    def read(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read {path}: {exc}") from exc

    def write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageUnavailable(f"Cannot write {path}: {exc}") from exc

    def keys(self) -> list[str]:
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def describe(self) -> str:
        return f"file ({self.directory})"


class SQLiteBackend(PersistenceBackend):
    """Key/value blobs in a single SQLite table."""

    name = "sqlite"

    _SCHEMA = """
    CREATE TABLE IF NOT EXISTS kv (
        key         TEXT PRIMARY KEY,
        value       BLOB NOT NULL,
        updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        if self._conn is not None:
            return
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(self._SCHEMA)
            conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(f"Cannot open database {self.path}: {exc}") from exc
        self._conn = conn
        logger.debug("Opened database %s", self.path)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    def read(self, key: str) -> bytes | None:
        _check_key(key)
        try:
            with self._lock:
                row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot read {key!r} from {self.path}: {exc}") from exc
        return bytes(row[0]) if row else None

    def write(self, key: str, data: bytes) -> None:
        _check_key(key)
        try:
            with self._lock, self.conn:
                self.conn.execute(
                    "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now')) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                    "updated_at = excluded.updated_at",
                    (key, sqlite3.Binary(data)),
                )
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot write {key!r} to {self.path}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            with self._lock:
                rows = self.conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot list keys in {self.path}: {exc}") from exc
        return [r[0] for r in rows]

    def describe(self) -> str:
        return f"sqlite ({self.path})"


def open_backend(kind: str, path: Path) -> PersistenceBackend:
    """Build the backend named *kind* rooted at *path*."""
    if kind == "memory":
        return MemoryBackend()
    if kind == "file":
        return FileBackend(path)
    if kind == "sqlite":
        backend = SQLiteBackend(path)
        backend.connect()
        return backend
    raise ValueError(f"Unknown storage backend: {kind!r}")
