"""Anonymizer — the main API.  Detect, mint, store, substitute.

Usage:
    from privacy_vault import Anonymizer, MemoryVaultStore

    store = MemoryVaultStore()
    store.connect()
    anonymizer = Anonymizer(store)

    result = anonymizer.anonymize("Email me at juan@example.com")
    print(result.text)           # "Email me at {{EMAIL_k3v9x0qa}}"
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field

import structlog

from .errors import DuplicateTokenError, require_text
from .patterns import DEFAULT_NAME_STOPWORDS, scan
from .tokens import TokenMinter
from .types import AnonymizedMessage, PiiOccurrence
from .vault import VaultStore

logger = structlog.get_logger()

LITERAL = "literal"
DEDUPE = "dedupe"


@dataclass
class AnonymizerConfig:
    """Configuration for the Anonymizer."""
    # "literal": one token per occurrence; "dedupe": one token per distinct value
    duplicate_mode: str = LITERAL
    # Extra attempts after a token collision; 0 makes a collision fatal
    mint_retries: int = 3
    # Categories to never tokenize (e.g. {"NAME"})
    skip_types: set[str] = field(default_factory=set)
    # Allow-list: values that should NEVER be tokenized
    allow_list: set[str] = field(default_factory=set)
    name_stopwords: frozenset[str] = DEFAULT_NAME_STOPWORDS

    def __post_init__(self) -> None:
        if self.duplicate_mode not in (LITERAL, DEDUPE):
            raise ValueError(f"duplicate_mode must be {LITERAL!r} or {DEDUPE!r}")
        if self.mint_retries < 0:
            raise ValueError("mint_retries must be >= 0")


class Anonymizer:
    """Replaces detected PII with vault tokens.

    Strict: if any store write fails, the whole call fails and no
    partially tokenized text is returned.  Entries written before the
    failure stay in the store.
    """

    def __init__(
        self,
        store: VaultStore,
        config: AnonymizerConfig | None = None,
        *,
        minter: TokenMinter | None = None,
    ) -> None:
        self.store = store
        self.config = config or AnonymizerConfig()
        self.minter = minter or TokenMinter()

    def anonymize(self, message: str) -> AnonymizedMessage:
        """Tokenize PII in *message*, storing one entry per minted token."""
        require_text(message, "message")
        occurrences = self._detect(message)

        result = message
        token_map: dict[str, str] = {}
        seen: dict[tuple[str, str], str] = {}

        for occ in occurrences:
            key = (occ.category, occ.text)
            if self.config.duplicate_mode == DEDUPE and key in seen:
                continue

            token = self._mint_and_store(occ)
            token_map[token] = occ.text

            if self.config.duplicate_mode == DEDUPE:
                seen[key] = token
            else:
                result = _replace_literal(result, occ.text, token, count=1)

        if seen:
            result = _replace_all(result, {value: token for (_, value), token in seen.items()})

        if token_map:
            logger.info(
                "message_anonymized",
                occurrences=len(occurrences),
                tokens=len(token_map),
                mode=self.config.duplicate_mode,
            )
        return AnonymizedMessage(text=result, occurrences=occurrences, token_map=token_map)

    def _detect(self, message: str) -> list[PiiOccurrence]:
        filtered: list[PiiOccurrence] = []
        for occ in scan(message, name_stopwords=self.config.name_stopwords):
            if occ.category in self.config.skip_types:
                continue
            if occ.text in self.config.allow_list:
                continue
            filtered.append(occ)
        return filtered

    def _mint_and_store(self, occ: PiiOccurrence) -> str:
        attempts = self.config.mint_retries + 1
        for attempt in range(1, attempts + 1):
            token = self.minter.mint(occ.category)
            try:
                self.store.put(token, occ.text, occ.category)
                return token
            except DuplicateTokenError:
                logger.warning("token_collision", token=token, attempt=attempt, max_attempts=attempts)
                if attempt == attempts:
                    raise


def _replace_literal(text: str, value: str, token: str, *, count: int) -> str:
    """Replace standalone occurrences of *value* (count=0 means all)."""
    return re.compile(_standalone(value)).sub(lambda _: token, text, count=count)


def _replace_all(text: str, replacements: dict[str, str]) -> str:
    """Replace every standalone occurrence of each value in one pass.

    Longer values are tried first, so "Ana" never eats the head of
    "Ana María" and "a@b.com" never eats the tail of "x.a@b.com".
    """
    values = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(_standalone(v) for v in values))
    return pattern.sub(lambda m: replacements[m.group(0)], text)


def _standalone(value: str) -> str:
    lead = r"(?<!\w)" if _is_word_char(value[0]) else ""
    tail = r"(?!\w)" if _is_word_char(value[-1]) else ""
    return lead + re.escape(value) + tail


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"
