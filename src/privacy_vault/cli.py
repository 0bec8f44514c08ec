"""CLI interface for privacy-vault.

Usage:
    # Anonymize text (argument or stdin), print tokenized text
    privacy-vault anonymize "Contact juan@example.com now"

    # Restore tokens
    echo 'Contact {{EMAIL_ab12cd34}} now' | privacy-vault deanonymize

    # PII-safe completion round trip (needs OPENAI_API_KEY)
    privacy-vault complete "Write a short note to Juan Pérez"

    # Dump vault mappings / run the HTTP sidecar
    privacy-vault dump
    privacy-vault serve --port 3001

All state is persisted in SQLite so the vault survives across calls.
"""

from __future__ import annotations
import argparse
import json
import sys

from dotenv import load_dotenv

from .config import (
    LOG_LEVELS, configure_logging, create_service, load_config, load_from_yaml,
)
from .errors import VaultError
from .server import DEFAULT_HOST, DEFAULT_PORT, serve
from .service import VaultService


def _load_settings(args: argparse.Namespace) -> dict:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    if args.db:
        cfg["vault_path"] = args.db
    if args.backend:
        cfg["vault_backend"] = args.backend
    if args.mode:
        cfg["duplicate_mode"] = args.mode
    if args.log_level:
        cfg["log_level"] = args.log_level
    return cfg


def _build_service(args: argparse.Namespace) -> VaultService:
    return create_service(args.settings)


def _read_text(args: argparse.Namespace) -> str:
    return args.text if args.text is not None else sys.stdin.read().rstrip("\n")


def cmd_anonymize(args: argparse.Namespace) -> None:
    """Anonymize text from the argument or stdin."""
    with _build_service(args) as service:
        sys.stdout.write(service.anonymize(_read_text(args)))
    sys.stdout.write("\n")


def cmd_deanonymize(args: argparse.Namespace) -> None:
    """Restore tokens in text from the argument or stdin."""
    with _build_service(args) as service:
        sys.stdout.write(service.deanonymize(_read_text(args)))
    sys.stdout.write("\n")


def cmd_complete(args: argparse.Namespace) -> None:
    """Run a PII-safe completion round trip."""
    with _build_service(args) as service:
        sys.stdout.write(service.secure_complete(_read_text(args)))
    sys.stdout.write("\n")


def cmd_dump(args: argparse.Namespace) -> None:
    """Dump vault mappings as JSON."""
    with _build_service(args) as service:
        json.dump(service.store.dump(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP sidecar."""
    serve(_build_service(args), host=args.host, port=args.port)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="privacy-vault",
        description="Reversible PII tokenization vault",
    )
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--db", default=None, help="SQLite vault path")
    parser.add_argument("--backend", choices=["sqlite", "memory"], default=None)
    parser.add_argument("--mode", choices=["literal", "dedupe"], default=None,
                        help="Repeated-value tokenization mode")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None,
                        type=str.upper, help="Log level (default: from config, else WARNING)")

    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("anonymize", "Anonymize text (argument or stdin)"),
        ("deanonymize", "Restore tokens (argument or stdin)"),
        ("complete", "PII-safe completion (argument or stdin)"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("text", nargs="?", default=None)
    sub.add_parser("dump", help="Dump vault mappings")
    p_serve = sub.add_parser("serve", help="Run the HTTP sidecar")
    p_serve.add_argument("--host", default=DEFAULT_HOST)
    p_serve.add_argument("--port", type=int, default=DEFAULT_PORT)

    args = parser.parse_args(argv)
    try:
        args.settings = _load_settings(args)
        configure_logging(args.settings["log_level"])
    except ValueError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1

    cmds = {
        "anonymize": cmd_anonymize,
        "deanonymize": cmd_deanonymize,
        "complete": cmd_complete,
        "dump": cmd_dump,
        "serve": cmd_serve,
    }
    try:
        cmds[args.command](args)
    except (VaultError, ValueError) as e:
        sys.stderr.write(f"error: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
