"""Tests for CLI entrypoint and auth commands."""

from __future__ import annotations

import httpx
import pytest
from typer.testing import CliRunner

from stackeye import __version__
from stackeye.auth.credentials import get_current_context, save_context
from stackeye.auth.types import LoginResult
from stackeye.cli.main import app
from stackeye.client import StackEyeClient
from stackeye.exceptions import ForbiddenCallbackError, LoginTimeoutError

runner = CliRunner()


def test_version_subcommand():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"stackeye {__version__}"


@pytest.fixture
def mock_api(monkeypatch):
    """Route StackEyeClient requests made by the CLI to a mock transport."""
    state = {"status": 200, "json": {"user": {"email": "bob@acme.io"}}}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(state["status"], json=state["json"])

    def make_client(api_key, **kwargs):
        return StackEyeClient(api_key, transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr("stackeye.cli.commands.auth.StackEyeClient", make_client)
    return state


class TestLogin:
    def test_login_saves_context(self, config_path, monkeypatch, mock_api, valid_api_key):
        captured = {}

        def fake_login(options):
            captured["options"] = options
            return LoginResult(api_key=valid_api_key, org_id="o1", org_name="Acme")

        monkeypatch.setattr("stackeye.cli.commands.auth.browser_login", fake_login)

        result = runner.invoke(app, ["auth", "login", "--timeout", "60"])

        assert result.exit_code == 0, result.stdout
        assert "Successfully authenticated" in result.stdout
        assert captured["options"].timeout == 60.0
        assert captured["options"].api_url == "https://api.stackeye.io"
        name, context = get_current_context()
        assert name == "acme"
        assert context["api_key"] == valid_api_key
        assert context["organization_id"] == "o1"

    def test_login_uses_email_domain_when_org_missing(self, config_path, monkeypatch, mock_api, valid_api_key):
        monkeypatch.setattr(
            "stackeye.cli.commands.auth.browser_login",
            lambda options: LoginResult(api_key=valid_api_key),
        )

        result = runner.invoke(app, ["auth", "login"])

        assert result.exit_code == 0, result.stdout
        assert get_current_context()[1]["organization_name"] == "acme"

    def test_login_verification_failure(self, config_path, monkeypatch, mock_api, valid_api_key):
        mock_api["status"] = 401
        monkeypatch.setattr(
            "stackeye.cli.commands.auth.browser_login",
            lambda options: LoginResult(api_key=valid_api_key),
        )

        result = runner.invoke(app, ["auth", "login"])

        assert result.exit_code == 1
        assert "Failed to verify API key" in result.stdout
        assert get_current_context() is None

    def test_login_no_verify_skips_api(self, config_path, monkeypatch, valid_api_key):
        def fail_client(*args, **kwargs):
            raise AssertionError("API should not be called")

        monkeypatch.setattr("stackeye.cli.commands.auth.StackEyeClient", fail_client)
        monkeypatch.setattr(
            "stackeye.cli.commands.auth.browser_login",
            lambda options: LoginResult(api_key=valid_api_key, org_name="Acme"),
        )

        result = runner.invoke(app, ["auth", "login", "--no-verify", "--api-url", "https://api-dev.stackeye.io"])

        assert result.exit_code == 0, result.stdout
        assert get_current_context()[0] == "acme-dev"

    def test_login_timeout(self, config_path, monkeypatch):
        def timed_out(options):
            raise LoginTimeoutError(options.timeout)

        monkeypatch.setattr("stackeye.cli.commands.auth.browser_login", timed_out)

        result = runner.invoke(app, ["auth", "login", "--timeout", "5"])

        assert result.exit_code == 1
        assert "timed out" in result.stdout
        assert "5s" in result.stdout

    def test_login_forbidden(self, config_path, monkeypatch):
        def forbidden(options):
            raise ForbiddenCallbackError("10.0.0.8")

        monkeypatch.setattr("stackeye.cli.commands.auth.browser_login", forbidden)

        result = runner.invoke(app, ["auth", "login"])

        assert result.exit_code == 1
        assert "Login failed" in result.stdout
        assert "10.0.0.8" in result.stdout

    def test_already_authenticated(self, config_path, monkeypatch, valid_api_key):
        save_context(valid_api_key, "https://api.stackeye.io", org_name="Acme")
        monkeypatch.setattr(
            "stackeye.cli.commands.auth.browser_login",
            lambda options: pytest.fail("login flow should not run"),
        )

        result = runner.invoke(app, ["auth", "login"])

        assert result.exit_code == 1
        assert "Already authenticated" in result.stdout


class TestLogout:
    def test_logout_removes_current_context(self, config_path, valid_api_key):
        save_context(valid_api_key, "https://api.stackeye.io", org_name="Acme")

        result = runner.invoke(app, ["auth", "logout"])

        assert result.exit_code == 0
        assert "Successfully logged out" in result.stdout
        assert get_current_context() is None

    def test_logout_all(self, config_path, valid_api_key):
        save_context(valid_api_key, "https://api.stackeye.io", org_name="Acme")

        result = runner.invoke(app, ["auth", "logout", "--all"])

        assert result.exit_code == 0
        assert not config_path.exists()

    def test_logout_without_credentials(self, config_path):
        result = runner.invoke(app, ["auth", "logout"])

        assert result.exit_code == 0
        assert "No credentials found" in result.stdout


class TestStatus:
    def test_not_authenticated(self, config_path):
        result = runner.invoke(app, ["auth", "status"])

        assert result.exit_code == 1
        assert "Not authenticated" in result.stdout

    def test_authenticated(self, config_path, mock_api, valid_api_key):
        save_context(valid_api_key, "https://api.stackeye.io", org_name="Acme")

        result = runner.invoke(app, ["auth", "status"])

        assert result.exit_code == 0, result.stdout
        assert "se_0...cdef" in result.stdout
        assert valid_api_key not in result.stdout
        assert "bob@acme.io" in result.stdout
        assert "API key is valid" in result.stdout

    def test_verification_warning_does_not_fail(self, config_path, mock_api, valid_api_key):
        mock_api["status"] = 500
        save_context(valid_api_key, "https://api.stackeye.io", org_name="Acme")

        result = runner.invoke(app, ["auth", "status"])

        assert result.exit_code == 0
        assert "Could not verify API key" in result.stdout
