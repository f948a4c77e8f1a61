from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence
from urllib.parse import urlparse

import aiosqlite
from pydantic import ValidationError as PydanticValidationError

from app.config import DATA_FILE, DATABASE_URL
from app.exceptions import StorageCorruptError, StorageError, StorageWriteError
from app.models.patient import PatientRecord

logger = logging.getLogger(__name__)


class StorageAdapter:
    """Whole-collection persistence. Every write replaces the full list."""

    engine: str

    async def load_all(self) -> list[PatientRecord]:  # pragma: no cover - interface
        raise NotImplementedError

    async def save_all(self, records: Sequence[PatientRecord]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


def _parse_records(raw: Any, source: str) -> list[PatientRecord]:
    if not isinstance(raw, list):
        raise StorageCorruptError(f"{source}: expected a JSON array of patient records")
    records = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise StorageCorruptError(f"{source}: entry {index} is not an object")
        try:
            records.append(PatientRecord.model_validate(item))
        except PydanticValidationError as exc:
            raise StorageCorruptError(f"{source}: entry {index} is not a valid patient record") from exc
    return records


@dataclass
class JsonFileStorage(StorageAdapter):
    path: Path
    engine: str = "json"

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    async def load_all(self) -> list[PatientRecord]:
        return await asyncio.to_thread(self._load_sync)

    async def save_all(self, records: Sequence[PatientRecord]) -> None:
        payload = [r.to_storage() for r in records]
        await asyncio.to_thread(self._write_sync, payload)

    async def close(self) -> None:
        return

    def _load_sync(self) -> list[PatientRecord]:
        if not self.path.exists():
            logger.info("No patient data at %s, initializing empty collection", self.path)
            self._write_sync([])
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"{self.path}: unreadable") from exc
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageCorruptError(f"{self.path}: invalid JSON") from exc
        return _parse_records(raw, str(self.path))

    def _write_sync(self, payload: list[dict[str, Any]]) -> None:
        # Write a sibling temp file and rename it over the target, so a crash
        # leaves either the previous or the new collection on disk.
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"{self.path}: write failed") from exc


@dataclass
class SQLiteStorage(StorageAdapter):
    conn: aiosqlite.Connection
    engine: str = "sqlite"

    async def ensure_schema(self) -> None:
        await self.conn.executescript(SQLITE_SCHEMA)
        await self.conn.commit()

    async def load_all(self) -> list[PatientRecord]:
        cursor = await self.conn.execute("SELECT id, data FROM patients ORDER BY position ASC")
        rows = await cursor.fetchall()
        raw = []
        for row in rows:
            try:
                raw.append(json.loads(row["data"]))
            except json.JSONDecodeError as exc:
                raise StorageCorruptError(f"sqlite: row {row['id']} holds invalid JSON") from exc
        return _parse_records(raw, "sqlite")

    async def save_all(self, records: Sequence[PatientRecord]) -> None:
        rows = [(pos, r.id, json.dumps(r.to_storage())) for pos, r in enumerate(records)]
        try:
            await self.conn.execute("DELETE FROM patients")
            await self.conn.executemany(
                "INSERT INTO patients (position, id, data) VALUES (?, ?, ?)", rows
            )
            await self.conn.commit()
        except aiosqlite.Error as exc:
            await self.conn.rollback()
            raise StorageWriteError("sqlite: write failed") from exc

    async def close(self) -> None:
        await self.conn.close()


SQLITE_SCHEMA = """
    CREATE TABLE IF NOT EXISTS patients (
        position INTEGER PRIMARY KEY,
        id TEXT NOT NULL UNIQUE,
        data TEXT NOT NULL
    );
"""


_storage: StorageAdapter | None = None


async def get_storage() -> StorageAdapter:
    global _storage
    if _storage is None:
        if DATABASE_URL.startswith("sqlite"):
            sqlite_path = _sqlite_path_from_url(DATABASE_URL)
            if not sqlite_path:
                raise RuntimeError(f"DATABASE_URL has no database path: {DATABASE_URL}")
            conn = await aiosqlite.connect(sqlite_path)
            conn.row_factory = aiosqlite.Row
            storage = SQLiteStorage(conn)
            await storage.ensure_schema()
            _storage = storage
            logger.info("Using SQLite patient storage at %s", sqlite_path)
        elif DATABASE_URL:
            raise RuntimeError(f"Unsupported DATABASE_URL scheme: {DATABASE_URL}")
        else:
            _storage = JsonFileStorage(Path(DATA_FILE))
            logger.info("Using JSON patient storage at %s", DATA_FILE)
    return _storage


def _sqlite_path_from_url(url: str) -> str:
    parsed = urlparse(url)
    path = parsed.path or ""
    if not path or path == "/":
        return ""
    # sqlite:////absolute/path.db -> keep absolute path
    if url.startswith("sqlite:////"):
        return "/" + path.lstrip("/")
    # sqlite:///relative.db -> strip leading slash
    if path.startswith("/"):
        return path[1:]
    return path


async def init_storage() -> None:
    """Open storage and read it once so corrupt data fails at startup."""
    storage = await get_storage()
    records = await storage.load_all()
    logger.info("Loaded %d patient records (%s)", len(records), storage.engine)


async def close_storage() -> None:
    global _storage
    if _storage is not None:
        await _storage.close()
        _storage = None
