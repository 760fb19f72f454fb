"""IGDB API client used by the cover-lookup proxy.

Authentication uses the Twitch client-credentials flow::

    POST https://id.twitch.tv/oauth2/token
        ?client_id=<ID>&client_secret=<SECRET>&grant_type=client_credentials

One token is shared by all requests and refetched shortly before it expires.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

_TOKEN_URL = "https://id.twitch.tv/oauth2/token"
_GAMES_URL = "https://api.igdb.com/v4/games"
_IMAGE_URL = "https://images.igdb.com/igdb/image/upload/t_cover_big/{image_id}.jpg"
_TIMEOUT = 10  # seconds
# Tokens are treated as expired this many seconds early
_TOKEN_MARGIN = 60


class IGDBError(Exception):
    """Base class for IGDB client failures."""


class IGDBAuthError(IGDBError):
    """Raised when the Twitch OAuth token cannot be obtained."""


class IGDBAPIError(IGDBError):
    """Raised when the IGDB API returns an unexpected response."""

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail


@dataclass
class CoverLookup:
    """Result of a cover search for one title."""

    title: str
    image_id: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "imageId": self.image_id, "url": self.url}


def cover_url(image_id: str) -> str:
    """Return the public cover image URL for an IGDB image id."""
    return _IMAGE_URL.format(image_id=image_id)


def _search_query(title: str) -> str:
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f'fields name,cover.image_id; search "{escaped}"; limit 1;'


class IGDBClient:
    """Minimal IGDB client with a cached app-access token.

    Parameters
    ----------
    client_id, client_secret:
        Twitch application credentials.
    timeout:
        HTTP request timeout in seconds.
    clock:
        Returns the current Unix time; overridable for tests.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = _TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not client_id or not client_secret:
            raise ValueError("client_id and client_secret must not be empty")
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._clock = clock
        self._session = requests.Session()
        self._lock = threading.Lock()
        self._access_token: Optional[str] = None
        self._token_expiry = 0.0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_token(self) -> str:
        """Return a valid bearer token, fetching a new one if needed."""
        with self._lock:
            now = self._clock()
            if self._access_token and now < self._token_expiry:
                return self._access_token

            try:
                resp = self._session.post(
                    _TOKEN_URL,
                    params={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "grant_type": "client_credentials",
                    },
                    timeout=self._timeout,
                )
                resp.raise_for_status()
                body = resp.json()
            except requests.RequestException as exc:
                raise IGDBAuthError(f"Twitch token error: {exc}") from exc
            except ValueError as exc:
                raise IGDBAuthError(f"Twitch token response is not JSON: {exc}") from exc

            token = body.get("access_token") if isinstance(body, dict) else None
            if not token:
                raise IGDBAuthError("Twitch token response missing 'access_token'")
            try:
                expires_in = float(body.get("expires_in", 3600))
            except (TypeError, ValueError) as exc:
                raise IGDBAuthError(
                    f"Twitch token response has invalid expires_in: {exc}"
                ) from exc

            self._access_token = token
            self._token_expiry = now + expires_in - _TOKEN_MARGIN
            logger.debug("Obtained new Twitch access token (expires in %ds)", expires_in)
            return token

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    def find_cover(self, title: str) -> CoverLookup:
        """Search IGDB for *title* and return the first match's cover.

        Raises ``IGDBAuthError`` or ``IGDBAPIError`` on upstream failure.
        """
        token = self._get_token()
        try:
            resp = self._session.post(
                _GAMES_URL,
                data=_search_query(title).encode("utf-8"),
                headers={
                    "Client-ID": self._client_id,
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise IGDBAPIError(f"Network error calling IGDB: {exc}") from exc
        if not resp.ok:
            raise IGDBAPIError(f"IGDB error {resp.status_code}", detail=resp.text)

        try:
            games = resp.json()
        except ValueError as exc:
            raise IGDBAPIError("IGDB returned invalid JSON", detail=resp.text) from exc

        game = games[0] if isinstance(games, list) and games else {}
        cover = game.get("cover") if isinstance(game, dict) else None
        image_id = cover.get("image_id") if isinstance(cover, dict) else None
        if not image_id:
            return CoverLookup(title=title)
        return CoverLookup(title=title, image_id=image_id, url=cover_url(image_id))
