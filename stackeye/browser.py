"""Cross-platform helpers for opening URLs in the user's browser.

Launching is best effort: the command is started detached and never waited
on. Callers decide what to do when it fails, typically printing the URL so
the user can open it by hand.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import webbrowser
from urllib.parse import urlsplit

from .exceptions import BrowserOpenError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def validate_url(url: str) -> None:
    """Check that ``url`` is a non-empty http(s) URL with a host.

    Raises:
        BrowserOpenError: If the URL is empty, unparseable, or uses another scheme.
    """
    if not url:
        raise BrowserOpenError("URL must not be empty")
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise BrowserOpenError(f"Invalid URL {url!r}: {e}") from e
    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise BrowserOpenError(
            f"Unsupported URL scheme {parts.scheme!r} (only http and https are allowed)"
        )
    if not parts.netloc:
        raise BrowserOpenError(f"Invalid URL {url!r}: missing host")


def _launch_command(url: str, platform: str) -> list[str] | None:
    if platform == "darwin":
        return ["open", url]
    if platform == "win32":
        return ["rundll32", "url.dll,FileProtocolHandler", url]
    if platform.startswith(("linux", "freebsd", "openbsd", "netbsd")):
        return ["xdg-open", url]
    return None


def open_url(url: str) -> None:
    """Open ``url`` in the default browser without waiting for it.

    Raises:
        BrowserOpenError: If the URL is invalid or the launcher cannot be started.
    """
    validate_url(url)

    command = _launch_command(url, sys.platform)
    if command is None:
        if not webbrowser.open(url):
            raise BrowserOpenError(f"No browser available on platform {sys.platform!r}")
        return

    logger.debug("Launching browser: %s", command[0])
    try:
        subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise BrowserOpenError(f"Failed to launch {command[0]}: {e}") from e
