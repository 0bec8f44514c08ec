"""Deanonymizer — restore original values from vault tokens.

Lenient: a token that cannot be resolved (missing entry or store
failure) is left in place and reported, never raised.  Both the
wrapped ``{{NAME_ab12cd34}}`` form and the legacy bare ``NAME_ab12cd34``
form are recognized.
"""

from __future__ import annotations

import structlog

from .errors import TokenNotFoundError, require_text
from .tokens import OPEN, TOKEN_PATTERN, wrap_token
from .types import RestoredMessage, VaultEntry
from .vault import VaultStore

logger = structlog.get_logger()


class Deanonymizer:
    """Resolves tokens against a VaultStore."""

    def __init__(self, store: VaultStore) -> None:
        self.store = store

    def restore(self, text: str) -> RestoredMessage:
        """Replace every resolvable token in *text* with its original value."""
        require_text(text, "anonymizedMessage")

        # token text → original value, or None if unresolved; filled in document order
        resolved: dict[str, str | None] = {}
        for m in TOKEN_PATTERN.finditer(text):
            token = m.group()
            if token not in resolved:
                entry = self._lookup(token)
                resolved[token] = entry.original_value if entry else None

        if not resolved:
            return RestoredMessage(text=text)

        def _sub(m) -> str:
            original = resolved[m.group()]
            return m.group() if original is None else original

        restored = {t: v for t, v in resolved.items() if v is not None}
        unresolved = [t for t, v in resolved.items() if v is None]
        logger.info("message_deanonymized", restored=len(restored), unresolved=len(unresolved))
        return RestoredMessage(
            text=TOKEN_PATTERN.sub(_sub, text),
            restored=restored,
            unresolved=unresolved,
        )

    def deanonymize(self, text: str) -> str:
        return self.restore(text).text

    def _lookup(self, token: str) -> VaultEntry | None:
        wrapped = wrap_token(token)
        candidates = [wrapped] if token.startswith(OPEN) else [wrapped, token]
        for candidate in candidates:
            try:
                return self.store.get(candidate)
            except TokenNotFoundError:
                continue
            except Exception as exc:
                logger.warning("token_lookup_failed", token=token, error=str(exc))
                return None
        logger.warning("token_not_found", token=token)
        return None
