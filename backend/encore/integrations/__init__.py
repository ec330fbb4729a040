"""External service integrations."""
from encore.integrations.spotify import (
    SpotifyClient,
    SpotifyAPIError,
    SpotifyNotConfiguredError,
    SpotifyTrackNotFoundError,
    get_spotify_client,
    parse_track,
)

__all__ = [
    "SpotifyClient",
    "SpotifyAPIError",
    "SpotifyNotConfiguredError",
    "SpotifyTrackNotFoundError",
    "get_spotify_client",
    "parse_track",
]
