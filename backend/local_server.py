#!/usr/bin/env python3
"""Local HTTP server that serves the catalog routes on PORT (default 3000)."""

from __future__ import annotations

import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict
from urllib.parse import parse_qsl, unquote, urlparse

from backend.catalog_data import load_catalog_tables
from backend.runtime import handle_request
from catalog.tables import CatalogTables

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"


def _int_env(name: str, default_value: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default_value
    try:
        parsed = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %d", name, raw, default_value)
        return default_value
    return parsed if 0 <= parsed <= 65535 else default_value


def build_event(method: str, raw_path: str, headers: Dict[str, str]) -> Dict[str, Any]:
    """Translate a raw HTTP request line into an API Gateway proxy event."""
    parsed = urlparse(raw_path)
    query: dict[str, str] = {}
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        # First occurrence wins for repeated keys.
        query.setdefault(key, value)
    return {
        "httpMethod": method.upper(),
        "path": unquote(parsed.path) or "/",
        "queryStringParameters": query or None,
        "headers": {key.lower(): value for key, value in headers.items()},
    }


class CatalogRequestHandler(BaseHTTPRequestHandler):
    """Adapts HTTP requests to the shared catalog dispatcher."""

    server: "CatalogHTTPServer"

    def _dispatch(self) -> None:
        event = build_event(self.command, self.path, dict(self.headers.items()))
        response = handle_request(event, self.server.tables)

        body = response.get("body", "").encode("utf-8")
        self.send_response(response["statusCode"])
        for name, value in response.get("headers", {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD" and body:
            self.wfile.write(body)

    do_GET = _dispatch  # noqa: N815
    do_HEAD = _dispatch  # noqa: N815
    do_POST = _dispatch  # noqa: N815
    do_PUT = _dispatch  # noqa: N815
    do_PATCH = _dispatch  # noqa: N815
    do_DELETE = _dispatch  # noqa: N815
    do_OPTIONS = _dispatch  # noqa: N815

    def log_message(self, fmt: str, *args: object) -> None:
        """Route access logs through the module logger."""
        logger.debug("%s - %s", self.address_string(), fmt % args)


class CatalogHTTPServer(ThreadingHTTPServer):
    """Threading server bound to one fully loaded set of catalog tables."""

    daemon_threads = True

    def __init__(self, address: tuple[str, int], tables: CatalogTables) -> None:
        self.tables = tables
        super().__init__(address, CatalogRequestHandler)


def create_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    tables: CatalogTables | None = None,
) -> CatalogHTTPServer:
    """Load tables (unless given) before binding so no request sees a partial load."""
    if tables is None:
        tables = load_catalog_tables()
    return CatalogHTTPServer((host, port), tables)


def main() -> None:
    """Resolve settings from the environment and serve until interrupted."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("HOST", DEFAULT_HOST).strip() or DEFAULT_HOST
    port = _int_env("PORT", DEFAULT_PORT)

    server = create_server(host, port)
    base_url = f"http://localhost:{server.server_port}"
    logger.info("Mock API server running on port %d", server.server_port)
    logger.info("Health check: %s/api/health", base_url)
    logger.info("Courses: %s/api/courses", base_url)
    logger.info("Featured: %s/api/courses/featured", base_url)
    logger.info("Instructors: %s/api/instructors", base_url)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
