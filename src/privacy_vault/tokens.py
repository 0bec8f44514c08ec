"""Token wire format and minting.

Wire format: ``{{<CATEGORY>_<suffix>}}`` where the suffix is 8 or more
lowercase letters/digits.  Text-generation models tend to pass double-brace
markup through untouched, which is why the delimiters are braces and not
something more exotic.
"""

from __future__ import annotations
import re
import secrets

from .types import CATEGORIES

ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
SUFFIX_LENGTH = 8
OPEN, CLOSE = "{{", "}}"

_PREFIX = "|".join(CATEGORIES)

# Wrapped form first so "{{NAME_x}}" is never matched as a bare legacy token
TOKEN_PATTERN = re.compile(
    rf"\{{\{{(?:{_PREFIX})_[a-z0-9]{{{SUFFIX_LENGTH},}}\}}\}}"
    rf"|(?:{_PREFIX})_[a-z0-9]{{{SUFFIX_LENGTH},}}"
)
_WRAPPED = re.compile(
    rf"\{{\{{(?P<category>{_PREFIX})_[a-z0-9]{{{SUFFIX_LENGTH},}}\}}\}}"
)


def wrap_token(token: str) -> str:
    """``NAME_ab12cd34`` → ``{{NAME_ab12cd34}}``.  Already-wrapped input is returned as-is."""
    if token.startswith(OPEN) and token.endswith(CLOSE):
        return token
    return f"{OPEN}{token}{CLOSE}"


def unwrap_token(token: str) -> str:
    if token.startswith(OPEN) and token.endswith(CLOSE):
        return token[len(OPEN):-len(CLOSE)]
    return token


def is_token(text: str) -> bool:
    """True if *text* is exactly one wrapped token."""
    return _WRAPPED.fullmatch(text) is not None


def token_category(token: str) -> str | None:
    m = _WRAPPED.fullmatch(wrap_token(token))
    return m.group("category") if m else None


class TokenMinter:
    """Generates random wrapped tokens.

    No shared counter and no store pre-check: uniqueness is left to the
    store's insert, and 36**8 suffixes make collisions rare.
    """

    __slots__ = ("_length",)

    def __init__(self, *, suffix_length: int = SUFFIX_LENGTH) -> None:
        if suffix_length < SUFFIX_LENGTH:
            raise ValueError(f"suffix_length must be >= {SUFFIX_LENGTH}")
        self._length = suffix_length

    def suffix(self) -> str:
        return "".join(secrets.choice(ALPHABET) for _ in range(self._length))

    def mint(self, category: str) -> str:
        """Return a new wrapped token for *category*."""
        if category not in CATEGORIES:
            raise ValueError(f"Unknown PII category: {category!r}")
        return wrap_token(f"{category}_{self.suffix()}")
