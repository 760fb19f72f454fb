"""Client for the cover-art lookup endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

_DEFAULT_BASE = "http://localhost:3000"
_PATH = "/api/igdb/cover-url"
_TIMEOUT = 10  # seconds


class CoverClient:
    """Resolves a cover image URL for a game title.

    Parameters
    ----------
    base_url:
        Root URL of the server hosting ``/api/igdb/cover-url``.
    timeout:
        Request timeout in seconds.
    """

    def __init__(self, base_url: str = _DEFAULT_BASE, timeout: float = _TIMEOUT) -> None:
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/json"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _lookup(self, title: str) -> Optional[str]:
        try:
            resp = self._session.get(
                self._base + _PATH, params={"title": title}, timeout=self._timeout
            )
            resp.raise_for_status()
            data: Any = resp.json()
        except requests.RequestException as exc:
            logger.warning("Cover lookup failed for %r: %s", title, exc)
            return None
        except ValueError as exc:
            logger.warning("Cover lookup returned invalid JSON for %r: %s", title, exc)
            return None
        if not isinstance(data, dict):
            return None
        url = data.get("url")
        if not url or not isinstance(url, str):
            logger.debug("No cover found for %r", title)
            return None
        return url

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    async def resolve_cover(self, title: str) -> Optional[str]:
        """Return the cover URL for *title*, or ``None`` if there is none.

        Never raises; the request runs in a worker thread so the event loop
        stays free while it is in flight.
        """
        return await asyncio.to_thread(self._lookup, title)

    def close(self) -> None:
        self._session.close()
