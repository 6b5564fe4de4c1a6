"""File record store — content-addressed metadata in SQLite.

The store owns the uniqueness of content_hash: the UNIQUE constraint is
the source of truth, and a rejected insert surfaces as StoreConflict even
when the caller's own exists() pre-check passed.

DB file: state/fileproof.db (see config).
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, field_serializer

from fileproof.errors import StoreConflict
from fileproof.felt import FieldElement


class FileRecord(BaseModel):
    """One registered file. id is None until the store assigns it."""

    id: int | None = None
    filename: str
    file_type: str
    file_size_bytes: int
    content_hash: FieldElement
    author_address: str
    chain_tx_handle: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @field_serializer("content_hash")
    def _felt_as_hex(self, felt: FieldElement) -> str:
        return felt.to_hex()


class RecordStore(Protocol):
    """CRUD surface the service depends on. Listings are newest first."""

    def exists(self, content_hash: FieldElement) -> bool: ...

    def insert(self, record: FileRecord) -> FileRecord: ...

    def update_chain_handle(self, record_id: int, handle: str) -> None: ...

    def find_by_hash(self, content_hash: FieldElement) -> FileRecord | None: ...

    def list_all(self) -> list[FileRecord]: ...

    def list_by_author(self, author_address: str) -> list[FileRecord]: ...


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS files (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    filename         TEXT NOT NULL,
    file_type        TEXT NOT NULL,
    file_size        INTEGER NOT NULL,
    content_hash     TEXT NOT NULL UNIQUE,
    author_address   TEXT NOT NULL,
    chain_tx_handle  TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT
);

CREATE INDEX IF NOT EXISTS idx_files_author ON files(author_address);
CREATE INDEX IF NOT EXISTS idx_files_created ON files(created_at);
"""

_COLUMNS = (
    "id, filename, file_type, file_size, content_hash, author_address, "
    "chain_tx_handle, created_at, updated_at"
)


class SqliteRecordStore:
    """SQLite-backed RecordStore. One connection per operation."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._init_db()

    def _init_db(self) -> None:
        with self._lock:
            conn = self._conn()
            conn.executescript(_SCHEMA_SQL)
            conn.close()

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=10)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    # ── Write ────────────────────────────────────────────────────────

    def insert(self, record: FileRecord) -> FileRecord:
        """Insert a record; raises StoreConflict if the hash already exists."""
        with self._lock:
            conn = self._conn()
            try:
                cur = conn.execute(
                    """INSERT INTO files
                    (filename, file_type, file_size, content_hash, author_address,
                     chain_tx_handle, created_at, updated_at)
                    VALUES (?,?,?,?,?,?,?,?)""",
                    (
                        record.filename,
                        record.file_type,
                        record.file_size_bytes,
                        record.content_hash.to_hex(),
                        record.author_address,
                        record.chain_tx_handle,
                        record.created_at.isoformat(timespec="microseconds"),
                        record.updated_at.isoformat(timespec="microseconds") if record.updated_at else None,
                    ),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise StoreConflict(
                    f"File with hash {record.content_hash.to_hex()} already exists",
                    content_hash=record.content_hash.to_hex(),
                ) from e
            finally:
                conn.close()
        return record.model_copy(update={"id": cur.lastrowid})

    def update_chain_handle(self, record_id: int, handle: str) -> None:
        with self._lock:
            conn = self._conn()
            try:
                conn.execute(
                    "UPDATE files SET chain_tx_handle = ?, updated_at = ? WHERE id = ?",
                    (handle, datetime.now(timezone.utc).isoformat(timespec="microseconds"), record_id),
                )
                conn.commit()
            finally:
                conn.close()

    # ── Read ─────────────────────────────────────────────────────────

    def exists(self, content_hash: FieldElement) -> bool:
        return self.find_by_hash(content_hash) is not None

    def find_by_hash(self, content_hash: FieldElement) -> FileRecord | None:
        rows = self._query(
            f"SELECT {_COLUMNS} FROM files WHERE content_hash = ?",
            (content_hash.to_hex(),),
        )
        return rows[0] if rows else None

    def list_all(self) -> list[FileRecord]:
        return self._query(f"SELECT {_COLUMNS} FROM files ORDER BY created_at DESC, id DESC")

    def list_by_author(self, author_address: str) -> list[FileRecord]:
        return self._query(
            f"SELECT {_COLUMNS} FROM files WHERE author_address = ? "
            "ORDER BY created_at DESC, id DESC",
            (author_address,),
        )

    def _query(self, sql: str, params: tuple = ()) -> list[FileRecord]:
        with self._lock:
            conn = self._conn()
            try:
                rows = conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        return [_row_to_record(r) for r in rows]


def _row_to_record(row: tuple) -> FileRecord:
    return FileRecord(
        id=row[0],
        filename=row[1],
        file_type=row[2],
        file_size_bytes=row[3],
        content_hash=FieldElement.from_hex(row[4]),
        author_address=row[5],
        chain_tx_handle=row[6],
        created_at=datetime.fromisoformat(row[7]),
        updated_at=datetime.fromisoformat(row[8]) if row[8] else None,
    )
