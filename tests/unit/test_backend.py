"""Unit tests for lineal.core.store.backend — memory, file, and SQLite backends."""

from __future__ import annotations

from pathlib import Path

import pytest

from lineal.core.exceptions import StorageUnavailable
from lineal.core.store.backend import FileBackend, MemoryBackend, SQLiteBackend, open_backend


class TestMemoryBackend:
    def test_read_missing_returns_none(self):
        assert MemoryBackend().read("users") is None

    def test_write_then_read(self):
        b = MemoryBackend()
        b.write("users", b"[]")
        assert b.read("users") == b"[]"
        assert b.keys() == ["users"]

    def test_counts_writes(self):
        b = MemoryBackend()
        b.write("a", b"1")
        b.write("a", b"2")
        assert b.writes == 2

    def test_rejects_path_like_keys(self):
        with pytest.raises(ValueError):
            MemoryBackend().write("../etc/passwd", b"")


class TestFileBackend:
    def test_round_trip_across_instances(self, tmp_path: Path):
        FileBackend(tmp_path).write("personnel", b'[{"id": "p-1"}]')
        assert FileBackend(tmp_path).read("personnel") == b'[{"id": "p-1"}]'

    def test_one_file_per_key(self, tmp_path: Path):
        b = FileBackend(tmp_path)
        b.write("users", b"[]")
        b.write("auditLog", b"[]")
        assert (tmp_path / "users.json").exists()
        assert b.keys() == ["auditLog", "users"]
        assert not list(tmp_path.glob("*.tmp"))

    def test_missing_key(self, tmp_path: Path):
        assert FileBackend(tmp_path).read("users") is None

    def test_unusable_directory(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(StorageUnavailable):
            FileBackend(blocker)


class TestSQLiteBackend:
    @pytest.fixture
    def backend(self, tmp_path: Path):
        b = SQLiteBackend(tmp_path / "lineal.db")
        b.connect()
        yield b
        b.close()

    def test_write_then_read(self, backend: SQLiteBackend):
        backend.write("users", b"[1]")
        backend.write("users", b"[2]")
        assert backend.read("users") == b"[2]"
        assert backend.keys() == ["users"]

    def test_persists_after_reopen(self, tmp_path: Path):
        path = tmp_path / "lineal.db"
        with SQLiteBackend(path) as b:
            b.write("personnel", b"[]")
        with SQLiteBackend(path) as b:
            assert b.read("personnel") == b"[]"

    def test_describe(self, backend: SQLiteBackend, tmp_path: Path):
        assert backend.describe() == f"sqlite ({tmp_path / 'lineal.db'})"

    def test_unopenable_path(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(StorageUnavailable):
            SQLiteBackend(blocker / "lineal.db").connect()


class TestOpenBackend:
    def test_kinds(self, tmp_path: Path):
        assert isinstance(open_backend("memory", tmp_path), MemoryBackend)
        assert isinstance(open_backend("file", tmp_path / "data"), FileBackend)
        b = open_backend("sqlite", tmp_path / "x.db")
        try:
            assert isinstance(b, SQLiteBackend)
        finally:
            b.close()

    def test_unknown_kind(self, tmp_path: Path):
        with pytest.raises(ValueError):
            open_backend("postgres", tmp_path)
