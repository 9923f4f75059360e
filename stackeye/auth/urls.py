"""URL helpers for the browser login flow.

Everything here is pure: no network access, no global state.
"""

from __future__ import annotations

import ipaddress
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..exceptions import InvalidURLError
from .constants import CLI_AUTH_PATH


def _parse_origin(url: str, label: str):
    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError as e:
        raise InvalidURLError(f"Failed to parse {label} {url!r}: {e}") from e
    if not parts.scheme or not parts.hostname:
        raise InvalidURLError(f"Failed to parse {label} {url!r}: missing scheme or host")
    return parts


def _map_host(host: str) -> str | None:
    """Return the web UI host for an API host, or None if not recognized."""
    label, sep, rest = host.partition(".")
    if not sep or not rest:
        return None
    if label == "api":
        return f"app.{rest}"
    if label.startswith("api-") and len(label) > len("api-"):
        env = label[len("api-"):]
        return f"app-{env}.{rest}"
    return None


def api_url_to_web_url(api_url: str) -> str:
    """Convert an API URL to the matching web UI origin.

    Transformations:
        - api.stackeye.io -> app.stackeye.io
        - api-dev.stackeye.io -> app-dev.stackeye.io
        - api-staging.example.io -> app-staging.example.io

    Non-standard URLs (localhost, IP literals, custom domains) are returned
    unchanged.

    Raises:
        InvalidURLError: If the URL has no scheme or host, or is malformed.
    """
    parts = _parse_origin(api_url, "API URL")

    web_host = _map_host(parts.hostname)
    if web_host is None:
        return api_url

    netloc = web_host if parts.port is None else f"{web_host}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, "", "", ""))


def build_web_ui_url(api_url: str, callback_url: str) -> str:
    """Build the browser-facing ``/cli-auth`` URL for a local callback URL.

    Example:
        >>> build_web_ui_url("https://api.example.io", "http://127.0.0.1:9999/callback")
        'https://app.example.io/cli-auth?callback=http%3A%2F%2F127.0.0.1%3A9999%2Fcallback'
    """
    web_url = api_url_to_web_url(api_url)
    parts = _parse_origin(web_url, "web URL")

    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    params["callback"] = callback_url
    query = urlencode(sorted(params.items()))

    return urlunsplit((parts.scheme, parts.netloc, CLI_AUTH_PATH, query, parts.fragment))


def normalize_ip(host: str) -> str:
    """Strip IPv6 brackets and zone identifiers from a host string."""
    host = host.strip()
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host.split("%", 1)[0]


def is_localhost(ip: str) -> bool:
    """Return True if ``ip`` is a loopback address (127.0.0.0/8 or ::1)."""
    try:
        address = ipaddress.ip_address(normalize_ip(ip))
    except ValueError:
        return False
    mapped = getattr(address, "ipv4_mapped", None)
    if mapped is not None:
        return mapped.is_loopback
    return address.is_loopback
