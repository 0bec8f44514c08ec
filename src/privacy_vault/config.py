"""YAML/dict config loader for privacy-vault.

Supports loading from a YAML file or a plain dict (for embedding in a
larger service config).  Secrets never live in the file: the OpenAI key
comes from the environment.

Example YAML:

    privacy_vault:
      duplicate_mode: literal   # "literal" or "dedupe"
      mint_retries: 3
      skip_types:
        - NAME
      allow_list:
        - support@example.com
      vault:
        backend: sqlite         # "memory" or "sqlite"
        path: ~/.privacy-vault/vault.db
      completion:
        enabled: true
        model: gpt-4o
        timeout: 30
      log_level: WARNING        # CLI --log-level overrides
"""

from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from .anonymizer import AnonymizerConfig
from .llm import DEFAULT_MODEL, DEFAULT_TIMEOUT, OpenAICompletionClient
from .patterns import DEFAULT_NAME_STOPWORDS
from .service import VaultService
from .vault import MemoryVaultStore, VaultStore
from .vault_sqlite import SqliteVaultStore

DEFAULT_DB = str(Path.home() / ".privacy-vault" / "vault.db")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline), applying env overrides."""
    # Support nested under "privacy_vault" key or flat
    if "privacy_vault" in data:
        data = data["privacy_vault"] or {}

    vault = data.get("vault") or {}
    completion = data.get("completion") or {}
    stopwords = data.get("name_stopwords")

    return {
        "duplicate_mode": data.get("duplicate_mode", "literal"),
        "mint_retries": int(data.get("mint_retries", 3)),
        "skip_types": {t.upper() for t in data.get("skip_types", [])},
        "allow_list": set(data.get("allow_list", [])),
        "name_stopwords": (
            frozenset(stopwords) if stopwords is not None else DEFAULT_NAME_STOPWORDS
        ),
        "vault_backend": vault.get("backend", "sqlite"),
        "vault_path": os.environ.get("PRIVACY_VAULT_DB", vault.get("path", DEFAULT_DB)),
        "completion_enabled": completion.get("enabled", True),
        "model": os.environ.get("OPENAI_MODEL", completion.get("model", DEFAULT_MODEL)),
        "timeout": float(completion.get("timeout", DEFAULT_TIMEOUT)),
        "base_url": completion.get("base_url"),
        "log_level": str(data.get("log_level", "WARNING")).upper(),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path) as f:
        return load_config(yaml.safe_load(f) or {})


def create_store(cfg: dict[str, Any]) -> VaultStore:
    backend = cfg["vault_backend"]
    if backend == "sqlite":
        return SqliteVaultStore(db_path=cfg["vault_path"])
    if backend == "memory":
        return MemoryVaultStore()
    raise ValueError(f"Unknown vault backend: {backend!r}")


def create_service(config: dict[str, Any]) -> VaultService:
    """Create a fully configured (not yet connected) service from a config dict."""
    cfg = load_config(config) if "vault_backend" not in config else config

    anonymizer_config = AnonymizerConfig(
        duplicate_mode=cfg["duplicate_mode"],
        mint_retries=cfg["mint_retries"],
        skip_types=cfg["skip_types"],
        allow_list=cfg["allow_list"],
        name_stopwords=cfg["name_stopwords"],
    )

    client = None
    if cfg["completion_enabled"] and os.environ.get("OPENAI_API_KEY"):
        client = OpenAICompletionClient(
            model=cfg["model"],
            timeout=cfg["timeout"],
            base_url=cfg["base_url"],
        )

    return VaultService(create_store(cfg), config=anonymizer_config, client=client)


def configure_logging(level: str = "WARNING") -> None:
    """Key/value console logging to stderr, filtered at *level*."""
    name = level.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level!r} (expected one of {', '.join(LOG_LEVELS)})")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, name)),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger so a replaced sys.stderr is honored
    return structlog.PrintLogger(sys.stderr)
