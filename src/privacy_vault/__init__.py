"""Privacy Vault — reversible PII tokenization for LLM round trips."""

__version__ = "1.0.0"

from .types import PiiOccurrence, VaultEntry, AnonymizedMessage, RestoredMessage
from .errors import (
    VaultError, ValidationError, StoreError, DuplicateTokenError,
    TokenNotFoundError, UpstreamError, CompletionUnavailableError,
)
from .patterns import detect_pii, scan
from .tokens import TokenMinter, wrap_token, is_token
from .vault import VaultStore, MemoryVaultStore
from .vault_sqlite import SqliteVaultStore
from .anonymizer import Anonymizer, AnonymizerConfig
from .deanonymizer import Deanonymizer
from .llm import CompletionClient, OpenAICompletionClient
from .proxy import SecureCompletion, SYSTEM_INSTRUCTION
from .service import VaultService
from .config import create_service, load_config, load_from_yaml

__all__ = [
    "PiiOccurrence", "VaultEntry", "AnonymizedMessage", "RestoredMessage",
    "VaultError", "ValidationError", "StoreError", "DuplicateTokenError",
    "TokenNotFoundError", "UpstreamError", "CompletionUnavailableError",
    "detect_pii", "scan",
    "TokenMinter", "wrap_token", "is_token",
    "VaultStore", "MemoryVaultStore", "SqliteVaultStore",
    "Anonymizer", "AnonymizerConfig",
    "Deanonymizer",
    "CompletionClient", "OpenAICompletionClient",
    "SecureCompletion", "SYSTEM_INSTRUCTION",
    "VaultService",
    "create_service", "load_config", "load_from_yaml",
]
