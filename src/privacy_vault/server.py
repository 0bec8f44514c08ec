"""HTTP sidecar server for privacy-vault.

Runs as a lightweight stdlib HTTP server.  Request/response field names
match the JSON API clients already use.

Endpoints:
    POST /anonymize       — {"message"} → {"anonymizedMessage"}
    POST /deanonymize     — {"anonymizedMessage"} → {"message"}
    POST /secureChatGPT   — {"prompt"} → {"response"}
    GET  /health          — Health check
    GET  /                — Service description

Errors return {"error": ..., "message": ...} with status 400, 404, 500,
502 (upstream failure) or 503 (no completion client configured).
"""

from __future__ import annotations
import json
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

import structlog

from . import __version__
from .errors import CompletionUnavailableError, UpstreamError, ValidationError
from .service import VaultService

logger = structlog.get_logger()

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001
SERVICE_NAME = "Data Privacy Vault"

_ENDPOINTS = {
    "POST /anonymize": "Anonymize PII in messages",
    "POST /deanonymize": "Deanonymize messages back to original PII",
    "POST /secureChatGPT": "PII-safe completion proxy with anonymize/deanonymize",
    "GET /health": "Health check endpoint",
}


class VaultHTTPServer(ThreadingHTTPServer):
    """Threaded server holding the shared VaultService."""

    daemon_threads = True

    def __init__(self, address: tuple[str, int], service: VaultService) -> None:
        super().__init__(address, VaultHandler)
        self.service = service


class VaultHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the privacy vault sidecar."""

    server: VaultHTTPServer

    def _read_json(self) -> dict[str, Any]:
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError as exc:
            raise ValidationError("Invalid Content-Length header") from exc
        if length < 0:
            raise ValidationError("Invalid Content-Length header")
        try:
            body = self.rfile.read(length).decode("utf-8")
            data = json.loads(body) if body else {}
        except UnicodeDecodeError as exc:
            raise ValidationError("Request body must be UTF-8 encoded") from exc
        except json.JSONDecodeError as exc:
            raise ValidationError("Request body must be valid JSON") from exc
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _error(self, status: int, error: str, message: str) -> None:
        self._respond(status, {"error": error, "message": message})

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("http_request", client=self.client_address[0], line=format % args)

    def do_GET(self) -> None:
        if self.path == "/health":
            self._respond(200, {
                "status": "OK",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "service": SERVICE_NAME,
            })
        elif self.path == "/":
            self._respond(200, {
                "service": SERVICE_NAME,
                "version": __version__,
                "description": "API for anonymizing PII data",
                "endpoints": _ENDPOINTS,
            })
        else:
            self._error(404, "Not Found", "The requested endpoint does not exist")

    def do_POST(self) -> None:
        service = self.server.service
        try:
            if self.path == "/anonymize":
                body = self._read_json()
                self._respond(200, {
                    "anonymizedMessage": service.anonymize(body.get("message")),
                })

            elif self.path == "/deanonymize":
                body = self._read_json()
                self._respond(200, {
                    "message": service.deanonymize(body.get("anonymizedMessage")),
                })

            elif self.path == "/secureChatGPT":
                body = self._read_json()
                self._respond(200, {"response": service.secure_complete(body.get("prompt"))})

            else:
                self._error(404, "Not Found", "The requested endpoint does not exist")

        except ValidationError as e:
            self._error(400, "Bad Request", str(e))
        except UpstreamError as e:
            logger.error("upstream_error", path=self.path, error=str(e))
            self._error(502, "Bad Gateway", "The text-generation service failed")
        except CompletionUnavailableError as e:
            self._error(503, "Service Unavailable", str(e))
        except Exception:
            logger.exception("request_failed", path=self.path)
            self._error(500, "Internal Server Error", "An error occurred while processing the request")


def serve(
    service: VaultService,
    *,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Start the privacy vault HTTP sidecar.  Connects and closes the service."""
    service.connect()
    server = VaultHTTPServer((host, port), service)
    logger.info(
        "server_started",
        url=f"http://{host}:{port}",
        completion="enabled" if service.proxy else "disabled",
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("server_stopping")
    finally:
        server.server_close()
        service.close()
