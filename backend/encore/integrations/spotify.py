"""Spotify Web API client for catalog lookups.

Uses the client-credentials flow; no user account is involved. Only track
search and track lookup are needed to feed the catalog.
"""
import logging
import time
from typing import Optional, List

import httpx

from encore.config import get_settings
from encore.schemas.track import TrackRecord

logger = logging.getLogger(__name__)


class SpotifyAPIError(Exception):
    """Spotify request failed or timed out."""
    pass


class SpotifyNotConfiguredError(SpotifyAPIError):
    """Client id/secret are not set."""
    pass


class SpotifyTrackNotFoundError(SpotifyAPIError):
    """Spotify has no track with this id."""

    def __init__(self, track_id: str):
        self.track_id = track_id
        super().__init__(f"Spotify track not found: {track_id}")


def parse_track(data: dict) -> TrackRecord:
    """Convert a Spotify track object into a TrackRecord."""
    album = data.get("album") or {}
    images = album.get("images") or []
    artists = data.get("artists") or []

    return TrackRecord(
        source="spotify",
        source_id=str(data.get("id", "")),
        title=data.get("name", ""),
        artists=[a.get("name", "") for a in artists],
        artist_ids=[a.get("id") for a in artists],
        duration_ms=data.get("duration_ms"),
        album_name=album.get("name"),
        album_id=album.get("id"),
        release_date=album.get("release_date"),
        image_url=images[0].get("url") if images else None,
        popularity=data.get("popularity"),
        external_url=(data.get("external_urls") or {}).get("spotify"),
    )


class SpotifyClient:
    """Async Spotify client.

    Access tokens are fetched lazily and reused until shortly before they
    expire.
    """

    API_URL = "https://api.spotify.com/v1"
    TOKEN_URL = "https://accounts.spotify.com/api/token"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._client_id = client_id if client_id is not None else settings.spotify_client_id
        self._client_secret = (
            client_secret if client_secret is not None else settings.spotify_client_secret
        )
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.spotify_timeout,
            transport=transport,
        )
        self._token: Optional[str] = None
        self._token_expiry: float = 0

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _ensure_token(self) -> str:
        """Get a valid client-credentials access token."""
        if self._token and time.time() < self._token_expiry:
            return self._token

        if not self.configured:
            raise SpotifyNotConfiguredError(
                "Spotify integration not configured. Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET."
            )

        try:
            response = await self._client.post(
                self.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
            )
        except httpx.HTTPError as e:
            logger.error(f"Spotify token request failed: {e}")
            raise SpotifyAPIError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            raise SpotifyAPIError(f"Token request failed ({response.status_code}): {response.text}")

        data = response.json()
        self._token = data.get("access_token")
        if not self._token:
            raise SpotifyAPIError("No access token in response")

        # Refresh a minute early
        self._token_expiry = time.time() + int(data.get("expires_in", 3600)) - 60
        return self._token

    async def _request(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        """Authenticated GET. Transport failures become SpotifyAPIError.

        A 401 drops the cached token and retries once with a fresh one.
        """
        response = await self._get(path, params)
        if response.status_code == 401:
            logger.info(f"Spotify token rejected, refreshing: {path}")
            self._token = None
            response = await self._get(path, params)
            if response.status_code == 401:
                self._token = None
        return response

    async def _get(self, path: str, params: Optional[dict]) -> httpx.Response:
        token = await self._ensure_token()

        try:
            response = await self._client.get(
                f"{self.API_URL}/{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as e:
            logger.error(f"Spotify request timed out: {path}")
            raise SpotifyAPIError(f"Spotify request timed out: {path}") from e
        except httpx.HTTPError as e:
            logger.error(f"Spotify request failed: {path}: {e}")
            raise SpotifyAPIError(f"Spotify request failed: {e}") from e

        return response

    async def get_track(self, track_id: str) -> TrackRecord:
        """Fetch a single track.

        Raises:
            SpotifyTrackNotFoundError: If Spotify has no such track
            SpotifyAPIError: On any other failure
        """
        response = await self._request(f"tracks/{track_id}")

        if response.status_code in (400, 404):
            raise SpotifyTrackNotFoundError(track_id)
        if response.status_code != 200:
            logger.error(f"Spotify track lookup failed ({response.status_code}): {track_id}")
            raise SpotifyAPIError(f"Track lookup failed ({response.status_code})")

        return parse_track(response.json())

    async def search_tracks(self, query: str, limit: int = 20) -> List[TrackRecord]:
        """Search tracks by free text."""
        response = await self._request(
            "search", {"q": query, "type": "track", "limit": limit}
        )

        if response.status_code != 200:
            logger.error(f"Spotify search failed ({response.status_code}): {query}")
            raise SpotifyAPIError(f"Search failed ({response.status_code})")

        items = response.json().get("tracks", {}).get("items", [])
        return [parse_track(item) for item in items if item]


_spotify_client: Optional[SpotifyClient] = None


def get_spotify_client() -> SpotifyClient:
    """Get or create the shared SpotifyClient."""
    global _spotify_client
    if _spotify_client is None:
        _spotify_client = SpotifyClient()
    return _spotify_client


def reset_spotify_client() -> None:
    """Reset the shared client (e.g. after credentials change)."""
    global _spotify_client
    _spotify_client = None
