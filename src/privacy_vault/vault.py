"""Vault store — token → original value mapping.

Design goals:
  - Uniqueness: the store, not the minter, rejects duplicate tokens
  - No caching: every lookup reflects the latest committed write
  - Append-only: entries are never updated or deleted
"""

from __future__ import annotations
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from types import TracebackType

from .errors import DuplicateTokenError, StoreError, TokenNotFoundError
from .types import VaultEntry


class VaultStore(ABC):
    """Contract for token stores.  Call ``connect()`` before use, ``close()`` after."""

    __slots__ = ()

    @abstractmethod
    def connect(self) -> None:
        """Open the underlying storage."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying storage."""

    @abstractmethod
    def put(self, token: str, original_value: str, category: str) -> VaultEntry:
        """Insert a new entry.

        Raises:
            DuplicateTokenError: the token already exists.
            StoreError: any other storage failure.
        """

    @abstractmethod
    def get(self, token: str) -> VaultEntry:
        """Exact-match lookup.

        Raises:
            TokenNotFoundError: no entry for this token.
            StoreError: any other storage failure.
        """

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of stored entries."""

    @abstractmethod
    def dump(self) -> dict[str, str]:
        """Return a copy of the token → original mapping (for debugging)."""

    def __enter__(self) -> "VaultStore":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryVaultStore(VaultStore):
    """In-process store.  Used for tests and ephemeral deployments."""

    __slots__ = ("_entries", "_lock", "_open")

    def __init__(self) -> None:
        self._entries: dict[str, VaultEntry] = {}
        self._lock = threading.Lock()
        self._open = False

    def connect(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def put(self, token: str, original_value: str, category: str) -> VaultEntry:
        entry = VaultEntry(
            token=token,
            original_value=original_value,
            category=category,
            created_at=utcnow(),
        )
        with self._lock:
            self._check_open()
            if token in self._entries:
                raise DuplicateTokenError(token)
            self._entries[token] = entry
        return entry

    def get(self, token: str) -> VaultEntry:
        with self._lock:
            self._check_open()
            entry = self._entries.get(token)
        if entry is None:
            raise TokenNotFoundError(token)
        return entry

    @property
    def size(self) -> int:
        return len(self._entries)

    def dump(self) -> dict[str, str]:
        with self._lock:
            return {t: e.original_value for t, e in self._entries.items()}

    def _check_open(self) -> None:
        if not self._open:
            raise StoreError("Vault store is not connected")
