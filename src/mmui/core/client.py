"""Connection settings for the migration daemon.

This module centralizes how the console finds and talks to the daemon:
base URL, TLS verification and request timeout, resolved from explicit
arguments first and environment variables second. It also normalizes the
base URL to avoid malformed API paths.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

import requests

URL_ENV = "MMUI_URL"
VERIFY_TLS_ENV = "MMUI_VERIFY_TLS"
TIMEOUT_ENV = "MMUI_TIMEOUT"

DEFAULT_URL = "https://localhost:6443"
DEFAULT_TIMEOUT_SECONDS = 10.0


class ClientConfigError(RuntimeError):
    """Raised when the daemon connection settings are invalid."""


@dataclass(frozen=True)
class ClientConfig:
    """Resolved connection settings."""

    url: str
    verify_tls: bool = True
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def _sanitize_url(url: str | None) -> str | None:
    """
    Normalize a daemon base URL.

    - Removes query strings and fragments
    - Removes trailing slashes
    """
    if not url:
        return url
    url = url.split("?", 1)[0].split("#", 1)[0]
    return url.strip().rstrip("/")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), 0.1)
    except ValueError:
        return default


def get_config(url: str | None = None, *, verify_tls: bool | None = None) -> ClientConfig:
    """
    Resolve the connection settings.

    Explicit arguments win over ``MMUI_URL`` / ``MMUI_VERIFY_TLS``; the
    timeout always comes from ``MMUI_TIMEOUT``.

    Raises:
        ClientConfigError: If the URL is not an http(s) URL with a host.
    """
    resolved = _sanitize_url(url or os.getenv(URL_ENV) or DEFAULT_URL) or ""
    parts = urlsplit(resolved)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ClientConfigError(
            f"Invalid daemon URL '{resolved}'. Expected http(s)://host[:port]."
        )
    return ClientConfig(
        url=resolved,
        verify_tls=_env_bool(VERIFY_TLS_ENV, True) if verify_tls is None else verify_tls,
        timeout=_env_float(TIMEOUT_ENV, DEFAULT_TIMEOUT_SECONDS),
    )


def get_session(config: ClientConfig) -> requests.Session:
    """Create an HTTP session configured for the daemon."""
    session = requests.Session()
    session.verify = config.verify_tls
    session.headers.update({"Accept": "application/json"})
    return session
