"""StackEye CLI - browser-based login and API access for StackEye."""

from importlib.metadata import PackageNotFoundError, version

from .client import StackEyeClient
from .exceptions import (
    APIError,
    AuthenticationError,
    BrowserOpenError,
    CallbackServerError,
    ConfigError,
    ForbiddenCallbackError,
    InvalidAPIKeyError,
    InvalidURLError,
    LoginCanceledError,
    LoginError,
    LoginTimeoutError,
    MissingAPIKeyError,
    StackEyeError,
)

__all__ = [
    "StackEyeClient",
    "StackEyeError",
    "AuthenticationError",
    "APIError",
    "BrowserOpenError",
    "ConfigError",
    "LoginError",
    "LoginTimeoutError",
    "LoginCanceledError",
    "InvalidAPIKeyError",
    "MissingAPIKeyError",
    "ForbiddenCallbackError",
    "CallbackServerError",
    "InvalidURLError",
]

try:
    __version__ = version("stackeye")
except PackageNotFoundError:
    __version__ = "0.1.0"
