"""Error taxonomy for the metastore mirror.

Every failure raised by the sync pipeline derives from `SyncError` so the CLI
can treat a phase as one unit of success or failure. Errors are never
recovered inside the core: they are logged where they happen and propagated.
"""

from __future__ import annotations

from typing import Any, Mapping


class SyncError(RuntimeError):
    """Base class for all sync pipeline failures."""

    def __init__(self, message: str, *, context: Mapping[str, Any] | None = None):
        super().__init__(message)
        self.context: dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.context:
            return base
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{base} ({details})"


class TransportError(SyncError):
    """Raised when an HTTP request fails (network error or non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        context: Mapping[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code


class DecodeError(SyncError):
    """Raised when a response body does not match the expected shape."""


class PersistenceError(SyncError):
    """Raised when the storage engine rejects a statement."""


class ConfigError(SyncError):
    """Raised when required settings are missing or invalid."""


class MigrationError(SyncError):
    """Raised when the local database cannot be bootstrapped."""
