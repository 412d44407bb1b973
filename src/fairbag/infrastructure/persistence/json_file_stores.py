"""JSON-file-backed storage backends.

``JsonFileKeyValueStore`` stands in for the on-device cache and
``JsonFileRemoteStore`` for the remote table store.  Both keep a single
JSON document on disk and rewrite it atomically on every change.
"""

from __future__ import annotations

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from fairbag.domain.exceptions import PersistenceUnavailableError
from fairbag.domain.repository.backends import KeyValueStore, RemoteStore

logger = structlog.get_logger(__name__)

_LOCKS: dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(file_path: Path) -> threading.RLock:
    """One lock per file, shared by every store instance opened on it."""
    key = file_path.resolve()
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(key, threading.RLock())


class _JsonDocument:
    """A JSON object persisted to one file, guarded by a per-path lock.

    With ``reset_if_corrupt`` an undecodable document is moved aside to
    ``<name>.corrupt`` and read as empty instead of raising.
    """

    def __init__(self, file_path: Path, reset_if_corrupt: bool = False) -> None:
        self._file_path = file_path
        self._reset_if_corrupt = reset_if_corrupt
        self.lock = _lock_for(file_path)
        with self.lock:
            self._ensure_file()

    def load(self) -> dict:
        try:
            raw = self._file_path.read_bytes()
        except OSError as exc:
            raise PersistenceUnavailableError(f"Cannot read {self._file_path}: {exc}") from exc
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
        except ValueError as exc:
            if not self._reset_if_corrupt:
                raise PersistenceUnavailableError(f"Cannot read {self._file_path}: {exc}") from exc
            return self._reset(exc)
        return data

    def persist(self, data: dict) -> None:
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            tmp_path.replace(self._file_path)
        except OSError as exc:
            raise PersistenceUnavailableError(f"Cannot write {self._file_path}: {exc}") from exc

    def _reset(self, exc: ValueError) -> dict:
        backup = self._file_path.with_suffix(self._file_path.suffix + ".corrupt")
        logger.warning("json_document_reset", path=str(self._file_path), backup=str(backup), error=str(exc))
        try:
            self._file_path.replace(backup)
        except OSError as move_exc:
            raise PersistenceUnavailableError(f"Cannot reset {self._file_path}: {move_exc}") from move_exc
        self.persist({})
        return {}

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")


class JsonFileKeyValueStore(KeyValueStore):

    def __init__(self, file_path: Path) -> None:
        self._doc = _JsonDocument(file_path, reset_if_corrupt=True)

    # --- KeyValueStore interface ----------------------------------------------

    def get(self, key: str) -> str | None:
        with self._doc.lock:
            return self._doc.load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._doc.lock:
            data = self._doc.load()
            data[key] = value
            self._doc.persist(data)

    def remove(self, key: str) -> None:
        with self._doc.lock:
            data = self._doc.load()
            if data.pop(key, None) is not None:
                self._doc.persist(data)


class JsonFileRemoteStore(RemoteStore):

    def __init__(self, file_path: Path) -> None:
        self._doc = _JsonDocument(file_path)

    # --- RemoteStore interface ------------------------------------------------

    def upsert(self, table: str, record: dict[str, Any], on_conflict: tuple[str, ...]) -> None:
        with self._doc.lock:
            data = self._doc.load()
            rows = data.setdefault(table, [])
            for i, row in enumerate(rows):
                if all(row.get(col) == record.get(col) for col in on_conflict):
                    rows[i] = {**row, **record}
                    break
            else:
                rows.append(dict(record))
            self._doc.persist(data)

    def delete(self, table: str, filters: dict[str, Any]) -> None:
        with self._doc.lock:
            data = self._doc.load()
            rows = data.get(table, [])
            kept = [row for row in rows if not _matches(row, filters)]
            if len(kept) != len(rows):
                data[table] = kept
                self._doc.persist(data)

    def select(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        with self._doc.lock:
            rows = [row for row in self._doc.load().get(table, []) if _matches(row, filters)]
        if order_by is not None:
            rows.sort(key=lambda row: row.get(order_by) or "", reverse=descending)
        return rows

    def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = dict(record)
        if not stored.get("id"):
            stored["id"] = uuid.uuid4().hex
        stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        with self._doc.lock:
            data = self._doc.load()
            data.setdefault(table, []).append(stored)
            self._doc.persist(data)
        return dict(stored)


def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
    return all(row.get(col) == value for col, value in filters.items())
