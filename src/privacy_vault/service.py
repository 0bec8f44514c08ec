"""VaultService — the boundary operations handed to request handlers.

    with VaultService(SqliteVaultStore(db_path="vault.db"), client=client) as svc:
        svc.anonymize("Contact juan@example.com now")
        svc.deanonymize("Contact {{EMAIL_ab12cd34}} now")
        svc.secure_complete("Say hi to Juan Pérez")
"""

from __future__ import annotations
from types import TracebackType

from .anonymizer import Anonymizer, AnonymizerConfig
from .deanonymizer import Deanonymizer
from .errors import CompletionUnavailableError, require_text
from .llm import CompletionClient
from .proxy import SecureCompletion
from .vault import VaultStore


class VaultService:
    """Wires one store into an anonymizer, a deanonymizer and (optionally) a proxy."""

    def __init__(
        self,
        store: VaultStore,
        *,
        config: AnonymizerConfig | None = None,
        client: CompletionClient | None = None,
    ) -> None:
        self.store = store
        self.anonymizer = Anonymizer(store, config)
        self.deanonymizer = Deanonymizer(store)
        self.client = client
        self.proxy = (
            SecureCompletion(self.anonymizer, self.deanonymizer, client)
            if client is not None else None
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        self.store.connect()

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "VaultService":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    def anonymize(self, message: str) -> str:
        require_text(message, "message")
        return self.anonymizer.anonymize(message).text

    def deanonymize(self, anonymized_message: str) -> str:
        require_text(anonymized_message, "anonymizedMessage")
        return self.deanonymizer.deanonymize(anonymized_message)

    def secure_complete(self, prompt: str) -> str:
        require_text(prompt, "prompt")
        if self.proxy is None:
            raise CompletionUnavailableError("No completion client configured")
        return self.proxy.complete(prompt)
