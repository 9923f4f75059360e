"""Local HTTP callback server for browser-based login."""

from __future__ import annotations

import logging
import queue
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from ..exceptions import CallbackServerError, ForbiddenCallbackError, MissingAPIKeyError
from .constants import CALLBACK_HOST, CALLBACK_PATH, REQUEST_TIMEOUT_SECONDS, SUCCESS_HTML
from .credentials import mask_api_key
from .types import CallbackResult
from .urls import is_localhost, normalize_ip

_module_logger = logging.getLogger(__name__)


class CallbackHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the login callback.

    Use :func:`make_callback_handler` to get a subclass bound to one flow's
    result queue.
    """

    results: queue.Queue[CallbackResult]
    logger: logging.Logger = _module_logger
    timeout = REQUEST_TIMEOUT_SECONDS

    def log_message(self, format: str, *args: Any) -> None:
        self.logger.debug("Callback server: " + format, *args)

    def parse_request(self) -> bool:
        self.server.mark_busy(self.request)
        return super().parse_request()

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path == "/favicon.ico":
            self.send_response(204)
            self.end_headers()
            return
        if parsed.path != CALLBACK_PATH:
            self._send_text(404, "Not Found")
            return

        remote_ip = normalize_ip(self.client_address[0])
        self.logger.debug("Callback received from %s", remote_ip)

        if not is_localhost(remote_ip):
            self.logger.debug("Rejected non-localhost request from %s", remote_ip)
            self._emit(CallbackResult(error=ForbiddenCallbackError(remote_ip)))
            self._send_text(403, "Forbidden: requests must come from localhost")
            return

        params = parse_qs(parsed.query)
        api_key = params.get("api_key", [""])[0]
        self.logger.debug("Received api_key: %s (length: %d)", mask_api_key(api_key), len(api_key))

        if not api_key:
            self._emit(CallbackResult(error=MissingAPIKeyError()))
            self._send_text(400, "Missing api_key parameter")
            return

        org_id = params.get("org_id", [""])[0]
        org_name = params.get("org_name", [""])[0]
        self.logger.debug("Received org_id=%r org_name=%r", org_id, org_name)

        # First request to arrive wins
        self._emit(CallbackResult(api_key=api_key, org_id=org_id, org_name=org_name))
        self._send_html(SUCCESS_HTML)

    def _send_text(self, code: int, message: str) -> None:
        body = message.encode()
        self.send_response(code)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_html(self, html: str) -> None:
        body = html.encode()
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _emit(self, result: CallbackResult) -> None:
        try:
            self.results.put_nowait(result)
        except queue.Full:
            # Only the first callback counts
            self.logger.debug("Dropping callback result, one is already pending")


def make_callback_handler(
    results: queue.Queue[CallbackResult],
    logger: logging.Logger | None = None,
) -> type[CallbackHandler]:
    """Return a CallbackHandler subclass that reports to ``results``."""
    attrs: dict[str, Any] = {"results": results}
    if logger is not None:
        attrs["logger"] = logger
    return type("BoundCallbackHandler", (CallbackHandler,), attrs)


class CallbackServer(ThreadingHTTPServer):
    """Threaded HTTP server bound to an ephemeral loopback port.

    Connections are tracked so teardown can be bounded: see
    :meth:`close_connections`.
    """

    daemon_threads = True
    block_on_close = False

    def __init__(self, server_address: tuple[str, int], handler_class: type[CallbackHandler]) -> None:
        self.logger = getattr(handler_class, "logger", _module_logger)
        self._connections: dict[socket.socket, threading.Thread] = {}
        self._busy: set[socket.socket] = set()
        self._connections_lock = threading.Lock()
        super().__init__(server_address, handler_class)

    @property
    def port(self) -> int:
        return self.server_address[1]

    @property
    def callback_url(self) -> str:
        return f"http://{self.server_address[0]}:{self.port}{CALLBACK_PATH}"

    def process_request(self, request: socket.socket, client_address: Any) -> None:
        thread = threading.Thread(
            target=self.process_request_thread,
            args=(request, client_address),
            name="stackeye-login-request",
            daemon=True,
        )
        with self._connections_lock:
            self._connections[request] = thread
        thread.start()

    def shutdown_request(self, request: socket.socket) -> None:
        with self._connections_lock:
            self._connections.pop(request, None)
            self._busy.discard(request)
        super().shutdown_request(request)

    def handle_error(self, request: socket.socket, client_address: Any) -> None:
        self.logger.debug("Callback connection from %s failed", client_address[0], exc_info=True)

    def mark_busy(self, request: socket.socket) -> None:
        """Record that ``request`` has started sending an HTTP request."""
        with self._connections_lock:
            if request in self._connections:
                self._busy.add(request)

    def close_connections(self, grace: float) -> None:
        """Close every open connection and join its handler thread.

        Connections that never started a request are closed at once. Requests
        in progress share one ``grace`` deadline, after which their sockets
        are shut down and closed.
        """
        deadline = time.monotonic() + grace
        with self._connections_lock:
            connections = dict(self._connections)
            idle = [sock for sock in connections if sock not in self._busy]

        for sock in idle:
            _force_close(sock)
        for sock, thread in connections.items():
            if sock not in idle:
                thread.join(max(0.0, deadline - time.monotonic()))

        with self._connections_lock:
            stalled = list(self._connections)
        if stalled:
            self.logger.debug("Force-closing %d stalled callback connection(s)", len(stalled))
        for sock in stalled:
            _force_close(sock)
        for thread in connections.values():
            thread.join(grace)


def _force_close(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Peer already gone; same handling as socketserver.shutdown_request
        pass
    sock.close()


def bind_callback_server(
    handler_class: type[CallbackHandler],
    host: str = CALLBACK_HOST,
) -> CallbackServer:
    """Bind a CallbackServer to ``host`` on an OS-assigned port.

    The socket stays open until ``server_close()`` is called.

    Raises:
        CallbackServerError: If the socket cannot be bound.
    """
    try:
        return CallbackServer((host, 0), handler_class)
    except OSError as e:
        raise CallbackServerError(f"Failed to start local callback server: {e}") from e
