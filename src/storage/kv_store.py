# src/storage/kv_store.py

"""Asynchronous key-value stores holding JSON-serialisable blobs.

Two backends share the same async surface (``get`` / ``set`` /
``get_all`` / ``clear``):

* :class:`JsonFileStore` — one JSON object on disk, rewritten through a
  temp file and ``os.replace`` so a crash never leaves a half-written
  file behind.
* :class:`SqliteStore` — one ``kv`` table in a WAL-mode database.

Blocking I/O runs in ``asyncio.to_thread`` so callers suspend instead of
stalling the event loop.
"""

import asyncio
import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from src.config.settings import Settings

logger = logging.getLogger("package_tracker.storage")


class StoreError(Exception):
    """Raised when persisted state cannot be read back."""


class KeyValueStore(ABC):
    """Async get/set/clear of named JSON blobs."""

    async def get(self, keys: list[str]) -> dict[str, Any]:
        """Return the stored values for *keys*; absent keys are omitted."""
        data = await self.get_all()
        return {k: data[k] for k in keys if k in data}

    async def set(self, items: dict[str, Any]) -> None:
        """Replace the values of every key in *items*."""
        await asyncio.to_thread(self._write_items, items)

    async def get_all(self) -> dict[str, Any]:
        """Return every stored key and value."""
        return await asyncio.to_thread(self._read_all)

    async def clear(self) -> None:
        """Remove every stored key."""
        await asyncio.to_thread(self._clear)

    def close(self) -> None:
        """Release any resources held by the backend."""

    @abstractmethod
    def _read_all(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def _write_items(self, items: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _clear(self) -> None:
        ...


class JsonFileStore(KeyValueStore):
    """Key-value store backed by a single JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.STORE_JSON_PATH
        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("JsonFileStore initialised — path=%s", self.path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data: Any = json.load(f)
        except json.JSONDecodeError as exc:
            raise StoreError(
                f"Corrupt store file {self.path}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise StoreError(
                f"Store file {self.path} does not hold a JSON object"
            )
        return data

    def _atomic_dump(self, data: dict[str, Any]) -> None:
        """Write *data* next to the target, then swap it into place."""
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _write_items(self, items: dict[str, Any]) -> None:
        data = self._read_all()
        data.update(items)
        self._atomic_dump(data)
        logger.debug(
            "Wrote keys %s to %s", sorted(items), self.path,
        )

    def _clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.info("Store cleared (%s)", self.path)


_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class SqliteStore(KeyValueStore):
    """Key-value store backed by a SQLite table of JSON strings."""

    def __init__(self, db_path: Path | None = None) -> None:
        path = db_path or Settings.STORE_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        logger.debug("SqliteStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _read_all(self) -> dict[str, Any]:
        rows = self._conn.execute("SELECT key, value FROM kv").fetchall()
        data: dict[str, Any] = {}
        for key, value in rows:
            try:
                data[str(key)] = json.loads(value)
            except json.JSONDecodeError as exc:
                raise StoreError(
                    f"Corrupt value for key '{key}': {exc}"
                ) from exc
        return data

    def _write_items(self, items: dict[str, Any]) -> None:
        # One transaction per write keeps the replace atomic
        with self._conn:
            self._conn.executemany(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                [
                    (k, json.dumps(v, ensure_ascii=False))
                    for k, v in items.items()
                ],
            )
        logger.debug("Wrote keys %s to sqlite store", sorted(items))

    def _clear(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM kv")
        logger.info("Store cleared (sqlite)")


def create_store(backend: str | None = None) -> KeyValueStore:
    """Build the configured store backend (``json`` or ``sqlite``)."""
    name = (backend or Settings.STORE_BACKEND).lower()
    if name == "json":
        return JsonFileStore()
    if name == "sqlite":
        return SqliteStore()
    valid = ", ".join(Settings.AVAILABLE_BACKENDS)
    msg = f"Unknown store backend '{name}' (expected one of: {valid})"
    raise ValueError(msg)
