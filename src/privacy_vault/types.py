"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime

# Detection and tokenization priority: specific matchers before the broad name heuristic
EMAIL = "EMAIL"
PHONE = "PHONE"
NAME = "NAME"
CATEGORIES: tuple[str, ...] = (EMAIL, PHONE, NAME)


@dataclass(frozen=True, slots=True)
class PiiOccurrence:
    """A single detected PII occurrence."""
    category: str          # "EMAIL" | "PHONE" | "NAME"
    text: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class VaultEntry:
    """Persisted token → original value record."""
    token: str             # wrapped form, e.g. "{{EMAIL_ab12cd34}}"
    original_value: str
    category: str
    created_at: datetime   # UTC


@dataclass(slots=True)
class AnonymizedMessage:
    """Result of anonymizing a message."""
    text: str                                              # text with tokens
    occurrences: list[PiiOccurrence] = field(default_factory=list)
    token_map: dict[str, str] = field(default_factory=dict)  # token → original


@dataclass(slots=True)
class RestoredMessage:
    """Result of deanonymizing a message."""
    text: str
    restored: dict[str, str] = field(default_factory=dict)  # token → original
    unresolved: list[str] = field(default_factory=list)      # tokens left as-is
