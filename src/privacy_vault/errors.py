"""Exception hierarchy.

Anonymize propagates every store failure; deanonymize swallows
lookup failures per token and keeps going.
"""


class VaultError(Exception):
    """Base class for privacy-vault errors."""


class ValidationError(VaultError, ValueError):
    """Bad, missing or empty input."""


class StoreError(VaultError):
    """The vault store failed to read or write."""


class DuplicateTokenError(StoreError):
    """A token with the same key already exists in the store."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Token already exists: {token}")
        self.token = token


class TokenNotFoundError(StoreError):
    """No entry exists for the requested token."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Token not found: {token}")
        self.token = token


class UpstreamError(VaultError):
    """The external text-generation service failed or timed out."""


class CompletionUnavailableError(VaultError):
    """No text-generation client is configured."""


def require_text(value: object, field: str = "message") -> str:
    """Return *value* if it is a non-empty string, else raise ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    if not value:
        raise ValidationError(f"{field} cannot be empty")
    return value
