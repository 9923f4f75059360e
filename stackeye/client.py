"""Synchronous HTTP client for the StackEye API."""

from __future__ import annotations

from typing import Any

import httpx

from ._http import build_headers, handle_response
from .config import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS, sanitize_base_url
from .exceptions import AuthenticationError


class StackEyeClient:
    """Minimal client used by the CLI to check credentials.

    Example:
        >>> with StackEyeClient(api_key="se_...") as client:
        ...     print(client.get_current_user()["user"]["email"])
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: A StackEye API key (starts with "se_").
            base_url: API base URL (default: https://api.stackeye.io).
            timeout: Request timeout in seconds (default: 30).
            transport: Optional httpx transport, mainly for tests.

        Raises:
            AuthenticationError: If no API key is provided.
        """
        if not api_key:
            raise AuthenticationError("No API key provided.")

        self._api_key = api_key
        self._base_url = sanitize_base_url(base_url)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def get_current_user(self) -> dict[str, Any]:
        """Return the user and organization that own the API key."""
        response = self._client.get(
            f"{self._base_url}/v1/user/me",
            headers=build_headers(self._api_key),
        )
        return handle_response(response)

    def close(self) -> None:
        """Release the underlying HTTP client resources."""
        self._client.close()

    def __enter__(self) -> StackEyeClient:
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()
