"""Configuration helpers for the StackEye CLI."""

from __future__ import annotations

import os

DEFAULT_API_URL = os.environ.get("STACKEYE_API_URL", "https://api.stackeye.io")
DEFAULT_TIMEOUT_SECONDS = 30.0


def sanitize_base_url(url: str) -> str:
    """Ensure the base URL never ends with a trailing slash."""

    return url.rstrip("/")
