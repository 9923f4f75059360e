"""Custom exceptions raised by the StackEye CLI."""

from __future__ import annotations

from typing import Any, Optional


class StackEyeError(Exception):
    """Base exception for all StackEye specific failures."""


class AuthenticationError(StackEyeError):
    """Raised when an API key is missing or rejected by the server."""


class APIError(StackEyeError):
    """Raised when the StackEye API returns a non-successful response."""

    def __init__(self, message: str, status_code: int, response: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:  # pragma: no cover - repr helper
        return f"{self.status_code}: {self.message}"


class BrowserOpenError(StackEyeError):
    """Raised when a URL cannot be handed to the system browser."""


class ConfigError(StackEyeError):
    """Raised when the local credential file cannot be read or written."""


class LoginError(StackEyeError):
    """Base exception for browser login failures."""


class LoginTimeoutError(LoginError):
    """Raised when no browser callback arrives before the deadline."""

    def __init__(self, timeout: float):
        super().__init__(f"Login timed out waiting for browser callback (waited {timeout:g}s)")
        self.timeout = timeout


class LoginCanceledError(LoginError):
    """Raised when the login is canceled before a callback arrives."""

    def __init__(self, message: str = "Login canceled"):
        super().__init__(message)


class InvalidAPIKeyError(LoginError):
    """Raised when the callback delivers a key with an unexpected format."""

    def __init__(self, message: str = "Received invalid API key format"):
        super().__init__(message)


class MissingAPIKeyError(LoginError):
    """Raised when the callback arrives without an ``api_key`` parameter."""

    def __init__(self, message: str = "Callback missing api_key parameter"):
        super().__init__(message)


class ForbiddenCallbackError(LoginError):
    """Raised when a callback arrives from a non-loopback address."""

    def __init__(self, remote_ip: str):
        super().__init__(f"Request from non-localhost IP rejected: {remote_ip}")
        self.remote_ip = remote_ip


class CallbackServerError(LoginError):
    """Raised when the local callback server cannot be started."""


class InvalidURLError(LoginError, ValueError):
    """Raised when an API or web URL cannot be parsed."""
