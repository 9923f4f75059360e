"""Test configuration for StackEye CLI tests."""

from pathlib import Path

import httpx
import pytest


@pytest.fixture
def valid_api_key() -> str:
    return "se_" + "0123456789abcdef" * 4


@pytest.fixture
def config_path(tmp_path, monkeypatch) -> Path:
    """Redirect the credential file to a temp directory."""
    path = tmp_path / ".config" / "stackeye" / "config.json"
    monkeypatch.setattr("stackeye.auth.credentials.get_config_path", lambda: path)
    monkeypatch.delenv("STACKEYE_API_KEY", raising=False)
    return path


@pytest.fixture
def http_client():
    """HTTP client that ignores proxy settings so loopback requests stay local."""
    with httpx.Client(trust_env=False, timeout=5.0) as client:
        yield client
