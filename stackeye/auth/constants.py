"""Constants for StackEye browser login and credential storage."""

from __future__ import annotations

import re

# Callback server: bind to the IPv4 loopback on an OS-assigned port.
CALLBACK_HOST = "127.0.0.1"
CALLBACK_PATH = "/callback"
CLI_AUTH_PATH = "/cli-auth"

DEFAULT_LOGIN_TIMEOUT_SECONDS = 300.0
SHUTDOWN_GRACE_SECONDS = 5.0
POLL_INTERVAL_SECONDS = 0.1
# Socket timeout for a single inbound callback connection.
REQUEST_TIMEOUT_SECONDS = 5.0

# se_ followed by 64 lowercase hex characters
API_KEY_PATTERN = re.compile(r"^se_[0-9a-f]{64}$")

# Credential storage
CONFIG_DIR = ".config/stackeye"
CONFIG_FILE = "config.json"
API_KEY_ENV_VAR = "STACKEYE_API_KEY"

# Browser-facing messages
MESSAGE_OPENING_BROWSER = "Opening browser to: {url}"
MESSAGE_WAITING = "Waiting for authentication...\n(If the browser doesn't open, visit the URL manually)\n"
MESSAGE_BROWSER_FAILED = "Warning: could not open browser: {error}\nPlease visit: {url}"

SUCCESS_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>StackEye CLI - Login Successful</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            display: flex;
            justify-content: center;
            align-items: center;
            height: 100vh;
            margin: 0;
            background-color: #f5f5f5;
        }
        .container {
            text-align: center;
            padding: 2rem;
            background: white;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1);
        }
        h1 { color: #10b981; margin-bottom: 0.5rem; }
        p { color: #6b7280; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Login Successful</h1>
        <p>You can close this window and return to your terminal.</p>
    </div>
</body>
</html>"""
