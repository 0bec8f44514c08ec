"""Shared fixtures: in-memory stores and stub completion clients."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
import structlog

from privacy_vault import (
    Anonymizer, Deanonymizer, MemoryVaultStore, SqliteVaultStore, UpstreamError,
)
from privacy_vault.llm import CompletionClient
from privacy_vault.tokens import TokenMinter


class EchoClient(CompletionClient):
    """Replies with the text it was sent, prefixed."""

    model = "echo"

    def __init__(self, prefix: str = "Reply: ") -> None:
        self.prefix = prefix
        self.calls: list[tuple[str, str | None]] = []

    def complete(self, text, system_instruction=None):
        self.calls.append((text, system_instruction))
        return self.prefix + text


class FailingClient(CompletionClient):
    model = "failing"

    def __init__(self) -> None:
        self.calls = 0

    def complete(self, text, system_instruction=None):
        self.calls += 1
        raise UpstreamError("Upstream model timed out after 30.0s")


class SequenceMinter(TokenMinter):
    """Returns pre-set tokens in order."""

    def __init__(self, tokens: list[str]) -> None:
        super().__init__()
        self._tokens = iter(tokens)

    def mint(self, category: str) -> str:
        return next(self._tokens)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()


@pytest.fixture
def store():
    s = MemoryVaultStore()
    s.connect()
    yield s
    s.close()


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    if request.param == "memory":
        s = MemoryVaultStore()
    else:
        s = SqliteVaultStore(db_path=tmp_path / "vault.db")
    s.connect()
    yield s
    s.close()


@pytest.fixture
def anonymizer(store):
    return Anonymizer(store)


@pytest.fixture
def deanonymizer(store):
    return Deanonymizer(store)
