"""Process settings.

Settings are read once from the environment into an immutable value and
passed explicitly to every component that needs them.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from ucsync.core.auth import Credentials, resolve_credentials
from ucsync.core.errors import ConfigError
from ucsync.core.sync import DEFAULT_PACING_SECONDS

TOKEN_ENV = "DB_TOKEN"
HOST_ENV = "WORKSPACE_NAME"
DATABASE_ENV = "DATABASE_URL"
MIGRATIONS_ENV = "MIGRATIONS_PATH"
PACING_ENV = "UCSYNC_PACING_SECONDS"
TIMEOUT_ENV = "UCSYNC_REQUEST_TIMEOUT"
EXCLUDED_ENV = "UCSYNC_EXCLUDED_CATALOGS"

DEFAULT_DATABASE = "ucsync.db"
DEFAULT_MIGRATIONS = "migrations"
DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Everything a sync run needs to know about its environment."""

    credentials: Credentials
    database_path: Path
    migrations_path: Path
    pacing_seconds: float = DEFAULT_PACING_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    excluded_catalogs: tuple[str, ...] = field(default_factory=tuple)


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if not math.isfinite(value) or value < 0:
        raise ConfigError(f"{name} must be a finite number >= 0, got {raw!r}")
    return value


def database_path_from_url(url: str) -> Path:
    """Accept either a plain path or a `sqlite://` URL."""
    for prefix in ("sqlite://", "sqlite:"):
        if url.startswith(prefix):
            url = url[len(prefix) :]
            break
    if not url:
        raise ConfigError(f"{DATABASE_ENV} does not contain a database path.")
    return Path(url)


def resolve_storage_paths(
    *,
    env: Mapping[str, str] | None = None,
    database: str | None = None,
    migrations: str | None = None,
) -> tuple[Path, Path]:
    """Return (database_path, migrations_path); explicit values win over env."""
    env = os.environ if env is None else env
    database_path = database_path_from_url(
        database or env.get(DATABASE_ENV) or DEFAULT_DATABASE
    )
    migrations_path = Path(migrations or env.get(MIGRATIONS_ENV) or DEFAULT_MIGRATIONS)
    return database_path, migrations_path


def load_settings(
    profile: str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    database: str | None = None,
    migrations: str | None = None,
) -> Settings:
    """
    Build settings from environment variables.

    `database` / `migrations` override the corresponding variables (used by
    CLI options). Credentials fall back to the Databricks profile when
    DB_TOKEN / WORKSPACE_NAME are not set.
    """
    env = os.environ if env is None else env

    credentials = resolve_credentials(
        host=env.get(HOST_ENV) or None,
        token=env.get(TOKEN_ENV) or None,
        profile=profile,
    )

    excluded = tuple(
        name.strip()
        for name in env.get(EXCLUDED_ENV, "").split(",")
        if name.strip()
    )

    database_path, migrations_path = resolve_storage_paths(
        env=env, database=database, migrations=migrations
    )

    return Settings(
        credentials=credentials,
        database_path=database_path,
        migrations_path=migrations_path,
        pacing_seconds=_float_env(env, PACING_ENV, DEFAULT_PACING_SECONDS),
        request_timeout=_float_env(env, TIMEOUT_ENV, DEFAULT_REQUEST_TIMEOUT),
        excluded_catalogs=excluded,
    )
