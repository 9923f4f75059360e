"""Credential storage for the StackEye CLI.

Stores named contexts (API URL, API key, organization) in
~/.config/stackeye/config.json with restrictive permissions. The browser
login flow never touches this module; the CLI saves what the flow returns.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from ..exceptions import ConfigError
from .constants import API_KEY_ENV_VAR, API_KEY_PATTERN, CONFIG_DIR, CONFIG_FILE


def get_config_path() -> Path:
    return Path.home() / CONFIG_DIR / CONFIG_FILE


def validate_api_key(key: str | None) -> bool:
    """Return True if ``key`` looks like a StackEye API key (``se_`` + 64 hex)."""
    return bool(key and API_KEY_PATTERN.match(key))


def mask_api_key(key: str) -> str:
    """Mask an API key for display, keeping only a short prefix and suffix."""
    if len(key) <= 8:
        return "***"
    return key[:4] + "..." + key[-4:]


def load_config() -> dict[str, Any]:
    """Load the config file.

    Returns an empty config if the file doesn't exist. A corrupt file is an
    error: silently replacing it would drop every stored context.

    Raises:
        ConfigError: If the file exists but is unreadable or not a JSON object.
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {"current_context": None, "contexts": {}}
    try:
        data = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Failed to read {config_path}: expected a JSON object")
    contexts = data.get("contexts")
    if not isinstance(contexts, dict):
        contexts = {}
    return {"current_context": data.get("current_context"), "contexts": contexts}


def _write_config(config: dict[str, Any]) -> None:
    """Write config with atomic replace and restrictive permissions.

    - Directory: 0700 (owner read/write/execute only)
    - File: 0600 (owner read/write only)
    """
    config_path = get_config_path()
    config_dir = config_path.parent
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(config_dir, 0o700)
    except OSError as e:
        raise ConfigError(f"Failed to create {config_dir}: {e}") from e

    content = json.dumps(config, indent=2)

    fd, tmp_path = tempfile.mkstemp(dir=config_dir, prefix=".config_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, config_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def get_current_context() -> tuple[str, dict[str, Any]] | None:
    """Return ``(name, context)`` for the active context, or None."""
    config = load_config()
    name = config["current_context"]
    context = config["contexts"].get(name) if name else None
    if not isinstance(context, dict):
        return None
    return name, context


def _find_context(contexts: dict[str, Any], api_url: str) -> str | None:
    for name, context in contexts.items():
        if isinstance(context, dict) and context.get("api_url") == api_url:
            return name
    return None


def find_context_by_api_url(api_url: str) -> str | None:
    """Return the name of a stored context for ``api_url``, if any."""
    return _find_context(load_config()["contexts"], api_url)


def sanitize_context_name(name: str) -> str:
    """Turn an organization name into a context name like ``acme-corp``."""
    name = name.lower().replace(" ", "-").replace("_", "-")
    name = re.sub(r"[^a-z0-9-]", "", name)
    name = re.sub(r"-+", "-", name).strip("-")
    return name or "default"


def extract_environment(api_url: str) -> str:
    """Return ``"dev"``, ``"stg"`` or ``""`` (production) for an API URL."""
    host = urlsplit(api_url).hostname or ""
    for env, markers in (("dev", ("dev",)), ("stg", ("stg", "staging"))):
        for marker in markers:
            if f".{marker}." in host or host.startswith(f"{marker}.") or f"-{marker}." in host:
                return env
    return ""


def generate_context_name(org_name: str, api_url: str) -> str:
    name = sanitize_context_name(org_name)
    env = extract_environment(api_url)
    if env:
        name = f"{name}-{env}"
    return name


def save_context(
    api_key: str,
    api_url: str,
    org_id: str = "",
    org_name: str = "",
) -> str:
    """Store credentials as a context and make it current.

    A context for the same API URL is replaced; otherwise a new name is
    derived from the organization and suffixed until unique.

    Returns:
        The name of the saved context.
    """
    config = load_config()
    contexts = config["contexts"]

    name = _find_context(contexts, api_url)
    if name is None:
        base = generate_context_name(org_name, api_url)
        name = base
        suffix = 1
        while name in contexts:
            suffix += 1
            name = f"{base}-{suffix}"

    contexts[name] = {
        "api_url": api_url,
        "api_key": api_key,
        "organization_id": org_id,
        "organization_name": org_name,
    }
    config["current_context"] = name
    _write_config(config)
    return name


def remove_context(name: str) -> bool:
    """Delete a context. Returns False if it did not exist."""
    config = load_config()
    if name not in config["contexts"]:
        return False
    del config["contexts"][name]
    if config["current_context"] == name:
        config["current_context"] = next(iter(config["contexts"]), None)
    _write_config(config)
    return True


def clear_config() -> bool:
    """Delete the config file. Returns False if there was nothing to delete."""
    config_path = get_config_path()
    if not config_path.exists():
        return False
    config_path.unlink()
    return True


def resolve_api_key(api_key: str | None = None) -> str | None:
    """Resolve an API key using the standard precedence chain.

    Order: explicit parameter > STACKEYE_API_KEY env var > current context.
    Returns None if no key is found (caller decides error behavior).
    """
    if api_key and api_key.strip():
        return api_key

    env_key = os.environ.get(API_KEY_ENV_VAR)
    if env_key and env_key.strip():
        return env_key

    current = get_current_context()
    if current:
        stored_key = current[1].get("api_key")
        if isinstance(stored_key, str) and stored_key.strip():
            return stored_key

    return None
