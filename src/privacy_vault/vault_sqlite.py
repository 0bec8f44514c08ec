"""Persistent vault backed by SQLite — survives process restarts.

Drop-in replacement for MemoryVaultStore when you need durability.

Usage:
    with SqliteVaultStore(db_path="~/.privacy-vault/vault.db") as store:
        store.put("{{EMAIL_ab12cd34}}", "juan@example.com", "EMAIL")
        store.get("{{EMAIL_ab12cd34}}").original_value
"""

from __future__ import annotations
import sqlite3
import threading
from datetime import datetime
from pathlib import Path

import structlog

from .errors import DuplicateTokenError, StoreError, TokenNotFoundError
from .types import VaultEntry
from .vault import VaultStore, utcnow

logger = structlog.get_logger()

_SCHEMA = """
CREATE TABLE IF NOT EXISTS vault_entries (
    token TEXT PRIMARY KEY,
    original_value TEXT NOT NULL,
    category TEXT NOT NULL CHECK (category IN ('NAME', 'EMAIL', 'PHONE')),
    created_at TEXT NOT NULL
);
"""


class SqliteVaultStore(VaultStore):
    """Token store on a single shared SQLite connection.

    The connection is shared across request threads; a lock serializes
    access so the primary-key check and insert happen atomically.
    """

    __slots__ = ("_db_path", "_db", "_lock")

    def __init__(self, *, db_path: str | Path = "vault.db") -> None:
        self._db_path = db_path if str(db_path) == ":memory:" else Path(db_path).expanduser()
        self._db: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        if self._db is not None:
            return
        if isinstance(self._db_path, Path):
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db = None
        try:
            db = sqlite3.connect(str(self._db_path), check_same_thread=False)
            db.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            if db is not None:
                db.close()
            raise StoreError(f"Cannot open vault database: {exc}") from exc
        self._db = db
        logger.info("vault_store_connected", backend="sqlite", path=str(self._db_path))

    def close(self) -> None:
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None

    def put(self, token: str, original_value: str, category: str) -> VaultEntry:
        entry = VaultEntry(
            token=token,
            original_value=original_value,
            category=category,
            created_at=utcnow(),
        )
        with self._lock:
            db = self._conn()
            try:
                db.execute(
                    "INSERT INTO vault_entries (token, original_value, category, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (token, original_value, category, entry.created_at.isoformat()),
                )
                db.commit()
            except sqlite3.IntegrityError as exc:
                db.rollback()
                if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                    raise DuplicateTokenError(token) from exc
                raise StoreError(f"Rejected vault entry: {exc}") from exc
            except sqlite3.Error as exc:
                db.rollback()
                raise StoreError(f"Failed to save vault entry: {exc}") from exc
        return entry

    def get(self, token: str) -> VaultEntry:
        with self._lock:
            db = self._conn()
            try:
                row = db.execute(
                    "SELECT token, original_value, category, created_at "
                    "FROM vault_entries WHERE token = ?",
                    (token,),
                ).fetchone()
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to read vault entry: {exc}") from exc
        if row is None:
            raise TokenNotFoundError(token)
        return VaultEntry(
            token=row[0],
            original_value=row[1],
            category=row[2],
            created_at=datetime.fromisoformat(row[3]),
        )

    @property
    def size(self) -> int:
        with self._lock:
            return self._conn().execute("SELECT COUNT(*) FROM vault_entries").fetchone()[0]

    def dump(self) -> dict[str, str]:
        with self._lock:
            rows = self._conn().execute(
                "SELECT token, original_value FROM vault_entries ORDER BY created_at"
            ).fetchall()
        return {token: orig for token, orig in rows}

    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            raise StoreError("Vault store is not connected")
        return self._db
