"""Authentication helpers for Databricks.

This module resolves the workspace host and bearer token used by the HTTP
transport. Credentials come from the environment first and fall back to the
Databricks unified authentication configuration (~/.databrickscfg or
DATABRICKS_* environment variables). Host values are normalized to avoid
malformed API URLs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from databricks.sdk.core import Config

from ucsync.core.errors import SyncError


class AuthError(SyncError):
    """Raised when Databricks authentication cannot be resolved."""


@dataclass(frozen=True)
class Credentials:
    """Workspace host (no scheme) and personal access token."""

    host: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(host={self.host!r}, token='***')"


def _format_auth_error(message: str, profile: str | None) -> str:
    """Return a user-friendly auth error message."""
    login_match = re.search(r"databricks auth login ([^\s]+)", message)
    host = login_match.group(1) if login_match else None
    if host:
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return (
            "Databricks authentication failed. Your refresh token is invalid.\n"
            f"Re-authenticate with:\n  $ {cmd}"
        )
    return f"Databricks authentication failed: {message}"


def _sanitize_host(host: str | None) -> str | None:
    """
    Normalize a Databricks host to a bare hostname.

    - Removes the scheme (https://)
    - Removes query strings (e.g. '?o=123456789')
    - Removes trailing slashes

    The transport builds `https://{host}/api/...` itself, so anything else
    would produce malformed URLs.
    """
    if not host:
        return host
    host = host.strip()
    host = re.sub(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", "", host)
    host = host.split("?", 1)[0]
    return host.rstrip("/")


def resolve_credentials(
    host: str | None = None,
    token: str | None = None,
    profile: str | None = None,
) -> Credentials:
    """
    Return workspace credentials.

    Explicit `host`/`token` win. Whatever is missing is taken from the
    Databricks SDK configuration for `profile` (or the default resolution
    chain when no profile is given). Only personal access tokens are
    supported, since the transport sends a static bearer header.
    """
    if not (host and token):
        try:
            cfg = Config(profile=profile) if profile else Config()
        except ValueError as exc:
            raise AuthError(_format_auth_error(str(exc), profile)) from exc
        host = host or cfg.host
        token = token or cfg.token

    host = _sanitize_host(host)
    if not host:
        raise AuthError(
            "Databricks host is not configured. Set WORKSPACE_NAME or use --profile."
        )
    if not token:
        raise AuthError(
            "Databricks token is not configured. Set DB_TOKEN or use a profile "
            "with a personal access token."
        )
    return Credentials(host=host, token=token)
