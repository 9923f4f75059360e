"""Tests for stackeye.browser."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from stackeye.browser import _launch_command, open_url, validate_url
from stackeye.exceptions import BrowserOpenError


class TestValidateUrl:
    @pytest.mark.parametrize("url", ["https://app.stackeye.io/cli-auth?callback=x", "http://localhost:8080", "HTTPS://APP.EXAMPLE.IO"])
    def test_valid_urls(self, url):
        validate_url(url)

    @pytest.mark.parametrize(
        "url,message",
        [
            ("", "must not be empty"),
            ("ftp://example.com/file", "Unsupported URL scheme"),
            ("javascript:alert(1)", "Unsupported URL scheme"),
            ("file:///etc/passwd", "Unsupported URL scheme"),
            ("https://", "missing host"),
            ("http://[::1", "Invalid URL"),
        ],
    )
    def test_invalid_urls(self, url, message):
        with pytest.raises(BrowserOpenError, match=message):
            validate_url(url)


class TestLaunchCommand:
    @pytest.mark.parametrize(
        "platform,expected",
        [
            ("darwin", ["open", "https://x.io"]),
            ("linux", ["xdg-open", "https://x.io"]),
            ("freebsd13", ["xdg-open", "https://x.io"]),
            ("win32", ["rundll32", "url.dll,FileProtocolHandler", "https://x.io"]),
        ],
    )
    def test_platform_commands(self, platform, expected):
        assert _launch_command("https://x.io", platform) == expected

    def test_unknown_platform(self):
        assert _launch_command("https://x.io", "plan9") is None


class TestOpenUrl:
    def test_launches_detached_without_waiting(self):
        with patch("stackeye.browser._launch_command", return_value=["xdg-open", "https://x.io"]), patch(
            "stackeye.browser.subprocess.Popen"
        ) as mock_popen:
            open_url("https://x.io")

        mock_popen.assert_called_once()
        args, kwargs = mock_popen.call_args
        assert args[0] == ["xdg-open", "https://x.io"]
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] is subprocess.DEVNULL
        mock_popen.return_value.wait.assert_not_called()

    def test_launch_failure_raises_browser_open_error(self):
        with patch("stackeye.browser._launch_command", return_value=["xdg-open", "https://x.io"]), patch(
            "stackeye.browser.subprocess.Popen", side_effect=FileNotFoundError("xdg-open")
        ):
            with pytest.raises(BrowserOpenError, match="Failed to launch xdg-open") as exc_info:
                open_url("https://x.io")

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_invalid_url_never_launches(self):
        with patch("stackeye.browser.subprocess.Popen") as mock_popen:
            with pytest.raises(BrowserOpenError):
                open_url("ftp://x.io")

        mock_popen.assert_not_called()

    def test_unknown_platform_falls_back_to_webbrowser(self):
        with patch("stackeye.browser._launch_command", return_value=None), patch(
            "stackeye.browser.webbrowser.open", return_value=True
        ) as mock_open:
            open_url("https://x.io")

        mock_open.assert_called_once_with("https://x.io")

    def test_unknown_platform_without_browser_raises(self):
        with patch("stackeye.browser._launch_command", return_value=None), patch(
            "stackeye.browser.webbrowser.open", return_value=False
        ):
            with pytest.raises(BrowserOpenError, match="No browser available"):
                open_url("https://x.io")
