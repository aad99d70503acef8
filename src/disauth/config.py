"""Configuration loading from the environment with explicit overrides.

:func:`load_config` builds an :class:`~disauth.models.OAuthConfig` from
``DISAUTH_*`` environment variables, letting explicit keyword arguments
(for example CLI flags) win over the environment. Secrets may be given as
source descriptors and are resolved by :func:`resolve_credential`.

Recognised variables:

====================== =========================================
``DISAUTH_CLIENT_ID``      application id (required)
``DISAUTH_CLIENT_SECRET``  secret or descriptor (``env:``/``file:``)
``DISAUTH_REDIRECT_URI``   registered redirect URI (required)
``DISAUTH_SCOPES``         space- or comma-separated scopes
``DISAUTH_API_BASE_URL``   REST base URL override
``DISAUTH_OAUTH_BASE_URL`` authorize origin override
``DISAUTH_PROMPT``         ``consent`` or ``none``
``DISAUTH_USER_AGENT``     ``User-Agent`` override
``DISAUTH_TIMEOUT``        read timeout in seconds
====================== =========================================
"""

from __future__ import annotations

import getpass
import os
import re
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from disauth.exceptions import ConfigError
from disauth.models import OAuthConfig

ENV_VARS: dict[str, str] = {
    "client_id": "DISAUTH_CLIENT_ID",
    "client_secret": "DISAUTH_CLIENT_SECRET",
    "redirect_uri": "DISAUTH_REDIRECT_URI",
    "scopes": "DISAUTH_SCOPES",
    "api_base_url": "DISAUTH_API_BASE_URL",
    "oauth_base_url": "DISAUTH_OAUTH_BASE_URL",
    "default_prompt": "DISAUTH_PROMPT",
    "user_agent": "DISAUTH_USER_AGENT",
    "request_timeout": "DISAUTH_TIMEOUT",
}
"""Maps :class:`~disauth.models.OAuthConfig` fields to environment variables."""

_REQUIRED = ("client_id", "redirect_uri")


def split_scopes(value: str) -> list[str]:
    """Split a scope list written as ``"identify guilds"`` or ``"identify,guilds"``."""
    return [scope for scope in re.split(r"[\s,]+", value.strip()) if scope]


def load_config(**overrides: Any) -> OAuthConfig:
    """Build an :class:`OAuthConfig` from the environment and *overrides*.

    Precedence (highest first):

    1. Keyword arguments that are not ``None``.
    2. ``DISAUTH_*`` environment variables.
    3. The model defaults.

    Args:
        **overrides: :class:`OAuthConfig` field values.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If a required value is missing, a secret descriptor
            cannot be resolved, or a value fails validation.
        InvalidScopeError: If a scope is not in the allow-list.
    """
    values: dict[str, Any] = {}
    for field, var in ENV_VARS.items():
        raw = os.environ.get(var)
        if raw:
            values[field] = raw
    if "scopes" in values:
        values["scopes"] = split_scopes(values["scopes"])

    values.update({key: value for key, value in overrides.items() if value is not None})

    missing = [field for field in _REQUIRED if not values.get(field)]
    if missing:
        hints = ", ".join(f"{field} (${ENV_VARS[field]})" for field in missing)
        raise ConfigError(f"Missing required configuration: {hints}")

    if values.get("client_secret"):
        values["client_secret"] = resolve_credential(values["client_secret"])

    try:
        return OAuthConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts the user interactively (requires a TTY)
        - anything else is taken as the literal secret

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Client secret: ")

    return source
