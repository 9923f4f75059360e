"""Typed values for the browser login flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ..config import DEFAULT_API_URL
from ..exceptions import LoginError
from .constants import DEFAULT_LOGIN_TIMEOUT_SECONDS


@dataclass(frozen=True)
class LoginOptions:
    """Caller-supplied settings for one browser login.

    ``on_browser_open`` receives the authorization URL before the browser is
    launched and ``on_waiting`` runs once the flow starts waiting. When left
    as None, both print a short message to stdout. ``open_url`` replaces the
    system browser launcher (tests pass a no-op). ``logger`` receives debug
    output for this flow only.
    """

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_LOGIN_TIMEOUT_SECONDS
    on_browser_open: Callable[[str], None] | None = None
    on_waiting: Callable[[], None] | None = None
    open_url: Callable[[str], None] | None = None
    logger: logging.Logger | None = None


@dataclass(frozen=True)
class CallbackResult:
    """What a single ``/callback`` request delivered."""

    api_key: str = ""
    org_id: str = ""
    org_name: str = ""
    error: LoginError | None = None


@dataclass(frozen=True)
class LoginResult:
    """Result of a successful browser login."""

    api_key: str
    org_id: str = ""
    org_name: str = ""
