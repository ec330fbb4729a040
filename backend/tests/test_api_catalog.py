"""Tests for catalog API endpoints."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from encore.dependencies import get_spotify
from encore.integrations.spotify import (
    SpotifyAPIError,
    SpotifyNotConfiguredError,
    SpotifyTrackNotFoundError,
)
from encore.main import app


@pytest.fixture
def spotify(track_record):
    """Spotify client stub returning the Queen track."""
    client = MagicMock()
    client.get_track = AsyncMock(return_value=track_record)
    client.search_tracks = AsyncMock(return_value=[track_record])
    app.dependency_overrides[get_spotify] = lambda: client
    yield client
    app.dependency_overrides.pop(get_spotify, None)


class TestAuth:
    """Bearer token handling."""

    def test_missing_token(self, client):
        response = client.get("/api/catalog/search?q=queen")
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(
            "/api/catalog/search?q=queen",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_member_cannot_add_songs(self, client, auth_headers):
        response = client.post(
            "/api/catalog/songs",
            json={"title": "Song", "artist": "Band"},
            headers=auth_headers,
        )
        assert response.status_code == 403


class TestSearch:
    """GET /api/catalog/search"""

    def test_search(self, client, auth_headers, sample_songs):
        response = client.get("/api/catalog/search?q=toto", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["cached"] is False
        assert data["songs"][0]["title"] == "Africa"
        assert data["songs"][0]["artist_name"] == "Toto"

    def test_search_is_cached(self, client, auth_headers, sample_songs):
        client.get("/api/catalog/search?q=toto", headers=auth_headers)
        response = client.get("/api/catalog/search?q=Toto", headers=auth_headers)

        assert response.json()["cached"] is True

    def test_limit_above_maximum_is_rejected(self, client, auth_headers):
        response = client.get("/api/catalog/search?q=a&limit=500", headers=auth_headers)
        assert response.status_code == 422


class TestSongs:
    """Song lookup and manual entry."""

    def test_get_song(self, client, auth_headers, sample_songs):
        song = sample_songs["Africa"]

        response = client.get(f"/api/catalog/songs/{song.id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["signature"] == song.signature
        assert data["sources"] == [{"source": "manual", "source_id": "seed"}]

    def test_get_missing_song(self, client, auth_headers):
        response = client.get("/api/catalog/songs/9999", headers=auth_headers)
        assert response.status_code == 404

    def test_manual_create_then_existing(self, client, admin_headers):
        body = {"title": "Africa", "artist": "Toto", "duration_sec": 295}

        created = client.post("/api/catalog/songs", json=body, headers=admin_headers)
        again = client.post("/api/catalog/songs", json=body, headers=admin_headers)

        assert created.status_code == 201
        assert created.json()["inserted"] is True
        assert again.status_code == 200
        assert again.json()["inserted"] is False
        assert again.json()["existing_id"] == created.json()["song"]["id"]
        assert again.json()["message"] == "Song already exists with this source"

    def test_manual_create_blank_artist(self, client, admin_headers):
        response = client.post(
            "/api/catalog/songs",
            json={"title": "Africa", "artist": "   "},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "Artist" in response.json()["detail"]

    def test_manual_create_validation(self, client, admin_headers):
        response = client.post(
            "/api/catalog/songs",
            json={"title": "Africa"},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestSpotify:
    """Spotify proxy and ingestion."""

    def test_search(self, client, admin_headers, spotify):
        response = client.post(
            "/api/catalog/spotify/search",
            json={"q": "bohemian", "limit": 5},
            headers=admin_headers,
        )

        assert response.status_code == 200
        track = response.json()["tracks"][0]
        assert track["source_id"] == "123"
        assert track["artist"] == "Queen"
        assert track["duration"] == 354
        spotify.search_tracks.assert_awaited_once_with("bohemian", 5)

    def test_save_track(self, client, admin_headers, spotify):
        first = client.post("/api/catalog/spotify/tracks/123", headers=admin_headers)
        second = client.post("/api/catalog/spotify/tracks/123", headers=admin_headers)

        assert first.status_code == 201
        assert first.json()["song"]["sources"] == [{"source": "spotify", "source_id": "123"}]
        assert second.status_code == 200
        assert second.json()["inserted"] is False

    def test_invalid_track_id(self, client, admin_headers, spotify):
        response = client.post("/api/catalog/spotify/tracks/bad-id!", headers=admin_headers)

        assert response.status_code == 422
        spotify.get_track.assert_not_awaited()

    @pytest.mark.parametrize("error,status", [
        (SpotifyNotConfiguredError("not configured"), 503),
        (SpotifyTrackNotFoundError("123"), 404),
        (SpotifyAPIError("timed out"), 502),
    ])
    def test_upstream_errors(self, client, admin_headers, spotify, error, status):
        spotify.get_track.side_effect = error

        response = client.post("/api/catalog/spotify/tracks/123", headers=admin_headers)

        assert response.status_code == status


class TestDuplicates:
    """GET /api/catalog/duplicates"""

    def test_split_song_report(self, client, admin_headers, catalog):
        from encore.schemas.catalog import ManualSongCreate

        catalog.save_manual(ManualSongCreate(title="Africa", artist="Toto", duration_sec=355), "a")
        catalog.save_manual(ManualSongCreate(title="africa", artist="Toto", duration_sec=356), "b")

        response = client.get("/api/catalog/duplicates", headers=admin_headers)

        assert response.status_code == 200
        groups = response.json()
        assert len(groups) == 1
        assert groups[0]["count"] == 2
        assert len(groups[0]["songs"]) == 2

    def test_requires_admin(self, client, auth_headers):
        response = client.get("/api/catalog/duplicates", headers=auth_headers)
        assert response.status_code == 403
