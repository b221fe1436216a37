"""One-shot local HTTP listener that captures an OAuth redirect."""

from __future__ import annotations

import logging
import time
import urllib.parse
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer

from nowplaying_status.utils.errors import AuthError

logger = logging.getLogger(__name__)

CONFIRMATION_BODY = b"ok, continue in the application"

# Longest a single connection may stall before sending its request line
REQUEST_READ_TIMEOUT = 2.0


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackServer

    def setup(self) -> None:
        self.timeout = self.server.read_timeout
        super().setup()

    def do_GET(self) -> None:
        query = urllib.parse.parse_qs(urllib.parse.urlparse(self.path).query)
        code = query.get("code", [""])[0]

        if not code:
            if "error" in query:
                logger.warning("Authorization redirect carried error: %s", query["error"][0])
            self._respond(HTTPStatus.BAD_REQUEST, b"missing code")
            return

        self._respond(HTTPStatus.OK, CONFIRMATION_BODY)
        self.server.code = code

    def _respond(self, status: HTTPStatus, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args) -> None:
        logger.debug("callback: " + format, *args)


class _CallbackServer(HTTPServer):
    code: str | None = None
    read_timeout: float = REQUEST_READ_TIMEOUT


class CallbackReceiver:
    """Listens on a loopback address until a request carrying ``code`` arrives."""

    def __init__(self, host: str = "127.0.0.1", port: int = 3000) -> None:
        self._server = _CallbackServer((host, port), _CallbackHandler)

    @classmethod
    def from_redirect_uri(cls, redirect_uri: str) -> CallbackReceiver:
        parsed = urllib.parse.urlparse(redirect_uri)
        return cls(parsed.hostname or "127.0.0.1", parsed.port if parsed.port is not None else 80)

    @property
    def address(self) -> tuple[str, int]:
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def wait_for_code(self, timeout: float | None = None) -> str:
        """Block until an authorization code is received.

        Requests without a code are answered with 400 and otherwise ignored.
        A connection that sends nothing is dropped after ``REQUEST_READ_TIMEOUT``
        seconds (or the remaining time, if shorter).

        Raises:
            AuthError: ``timeout`` seconds passed without a code.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            while self._server.code is None:
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise AuthError("Timed out waiting for the authorization redirect")
                    self._server.timeout = remaining
                    self._server.read_timeout = min(remaining, REQUEST_READ_TIMEOUT)
                self._server.handle_request()
            return self._server.code
        finally:
            self.close()

    def close(self) -> None:
        self._server.server_close()
