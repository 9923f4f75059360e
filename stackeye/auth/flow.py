"""Browser-based login flow for StackEye.

Starts a loopback callback server on a random port, opens the StackEye web
UI ``/cli-auth`` page with the callback URL, and waits for the web UI to
redirect back with an API key:

    result = browser_login(LoginOptions(api_url="https://api.stackeye.io"))
    print(result.org_name)

The flow only obtains the key. Storing it is the caller's job.
"""

from __future__ import annotations

import logging
import queue
import threading
import time

from .. import browser
from ..config import DEFAULT_API_URL
from ..exceptions import (
    BrowserOpenError,
    InvalidAPIKeyError,
    InvalidURLError,
    LoginCanceledError,
    LoginTimeoutError,
)
from .callback_server import CallbackServer, bind_callback_server, make_callback_handler
from .constants import (
    DEFAULT_LOGIN_TIMEOUT_SECONDS,
    MESSAGE_BROWSER_FAILED,
    MESSAGE_OPENING_BROWSER,
    MESSAGE_WAITING,
    POLL_INTERVAL_SECONDS,
    SHUTDOWN_GRACE_SECONDS,
)
from .credentials import mask_api_key, validate_api_key
from .types import CallbackResult, LoginOptions, LoginResult
from .urls import build_web_ui_url

logger = logging.getLogger(__name__)


def _default_on_browser_open(url: str) -> None:
    print(MESSAGE_OPENING_BROWSER.format(url=url))


def _default_on_waiting() -> None:
    print(MESSAGE_WAITING)


def _shutdown_server(server: CallbackServer, thread: threading.Thread, log: logging.Logger) -> None:
    """Stop serving, close open connections and the listening socket.

    ``shutdown()`` returns once ``serve_forever`` has exited, so joining the
    serving thread does not block. Requests still in progress get
    ``SHUTDOWN_GRACE_SECONDS`` in total before their sockets are force-closed.
    """
    server.shutdown()
    thread.join()
    server.close_connections(SHUTDOWN_GRACE_SECONDS)
    server.server_close()
    log.debug("Callback server on port %d closed", server.port)


def _wait_for_callback(
    results: queue.Queue[CallbackResult],
    timeout: float,
    cancel_event: threading.Event | None,
) -> CallbackResult:
    """Block until a callback arrives, the deadline passes, or the flow is canceled."""
    deadline = time.monotonic() + timeout
    try:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise LoginCanceledError()
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise LoginTimeoutError(timeout)
            try:
                return results.get(timeout=min(remaining, POLL_INTERVAL_SECONDS))
            except queue.Empty:
                continue
    except KeyboardInterrupt as e:
        raise LoginCanceledError("Login canceled by user") from e


def browser_login(
    options: LoginOptions | None = None,
    *,
    cancel_event: threading.Event | None = None,
) -> LoginResult:
    """Run the browser login flow and return the delivered credentials.

    Args:
        options: Flow settings. An empty ``api_url`` or a non-positive
            ``timeout`` falls back to the defaults.
        cancel_event: Setting this event aborts the wait with
            LoginCanceledError. Ctrl-C does the same.

    Returns:
        LoginResult with the API key and the organization reported by the web UI.

    Raises:
        CallbackServerError: The loopback port could not be bound.
        InvalidURLError: ``api_url`` could not be parsed.
        LoginTimeoutError: No callback arrived within ``timeout`` seconds.
        LoginCanceledError: ``cancel_event`` was set or the user pressed Ctrl-C.
        ForbiddenCallbackError: The callback came from a non-loopback address.
        MissingAPIKeyError: The callback had no ``api_key`` parameter.
        InvalidAPIKeyError: The delivered key is not a StackEye API key.
    """
    options = options or LoginOptions()
    log = options.logger or logger
    api_url = options.api_url or DEFAULT_API_URL
    timeout = options.timeout if options.timeout and options.timeout > 0 else DEFAULT_LOGIN_TIMEOUT_SECONDS
    on_browser_open = options.on_browser_open or _default_on_browser_open
    on_waiting = options.on_waiting or _default_on_waiting
    open_url = options.open_url or browser.open_url

    log.debug("Browser login started: api_url=%s timeout=%ss", api_url, timeout)

    results: queue.Queue[CallbackResult] = queue.Queue(maxsize=1)
    server = bind_callback_server(make_callback_handler(results, log))
    log.debug("Callback server listening on %s", server.callback_url)

    thread = threading.Thread(
        target=server.serve_forever,
        kwargs={"poll_interval": POLL_INTERVAL_SECONDS},
        name="stackeye-login-callback",
        daemon=True,
    )
    thread.start()

    try:
        try:
            web_ui_url = build_web_ui_url(api_url, server.callback_url)
        except InvalidURLError as e:
            raise InvalidURLError(f"Failed to build web UI URL: {e}") from e
        log.debug("Web UI URL: %s", web_ui_url)

        on_browser_open(web_ui_url)
        try:
            open_url(web_ui_url)
        except (BrowserOpenError, OSError) as e:
            log.debug("Browser launch failed: %s", e)
            print(MESSAGE_BROWSER_FAILED.format(error=e, url=web_ui_url))

        on_waiting()
        result = _wait_for_callback(results, timeout, cancel_event)
    finally:
        _shutdown_server(server, thread, log)

    if result.error is not None:
        log.debug("Callback reported error: %s", result.error)
        raise result.error

    if not validate_api_key(result.api_key):
        log.debug("Rejected API key with unexpected format: %s", mask_api_key(result.api_key))
        raise InvalidAPIKeyError()

    log.debug("Browser login completed for org_id=%r", result.org_id)
    return LoginResult(api_key=result.api_key, org_id=result.org_id, org_name=result.org_name)
