from __future__ import annotations

import logging
from typing import Protocol

import requests

from ucsync.core.auth import Credentials
from ucsync.core.errors import TransportError

log = logging.getLogger(__name__)


class Transport(Protocol):
    """Issues an authenticated GET and returns the raw response body."""

    @property
    def host(self) -> str:
        """Workspace host the transport is bound to."""
        ...

    def fetch(self, url: str) -> str:
        """Return the body of `GET url`, raising TransportError on failure."""
        ...


class HttpTransport:
    """Bearer-token HTTP transport backed by a `requests.Session`."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._credentials = credentials
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {credentials.token}",
                "Accept": "application/json",
            }
        )

    @property
    def host(self) -> str:
        return self._credentials.host

    def fetch(self, url: str) -> str:
        log.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("Request failed: GET %s: %s", url, exc)
            raise TransportError(str(exc), context={"url": url}) from exc

        if not 200 <= response.status_code < 300:
            # Databricks error bodies are JSON with error_code/message; keep it short
            detail = (response.text or "").strip()[:500]
            log.error("GET %s returned HTTP %s: %s", url, response.status_code, detail)
            raise TransportError(
                f"HTTP {response.status_code}: {detail or response.reason}",
                status_code=response.status_code,
                context={"url": url},
            )
        return response.text

    def close(self) -> None:
        self.session.close()
