"""Authentication utilities for the StackEye CLI.

Lightweight imports (credentials, types) are eager. The login flow pulls in
http.server, threading and subprocess, so it is imported lazily.
"""

from .credentials import (
    clear_config,
    get_current_context,
    load_config,
    mask_api_key,
    resolve_api_key,
    save_context,
    validate_api_key,
)
from .types import CallbackResult, LoginOptions, LoginResult


def __getattr__(name: str):
    if name == "browser_login":
        from .flow import browser_login

        return browser_login
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "browser_login",
    "clear_config",
    "get_current_context",
    "load_config",
    "mask_api_key",
    "resolve_api_key",
    "save_context",
    "validate_api_key",
    "CallbackResult",
    "LoginOptions",
    "LoginResult",
]
