"""Tests for the artist and album registries."""
import pytest
from unittest.mock import patch

from encore.models.album import Album
from encore.models.artist import Artist
from encore.services.albums import AlbumRegistry
from encore.services.artists import ArtistRegistry
from encore.services.exceptions import InvalidTrackError
from encore.utils.normalize import release_year


class TestArtistRegistry:
    """Artist find-or-create."""

    def test_creates_artist_with_normalized_key(self, db):
        artist = ArtistRegistry(db).find_or_create("  Queen ", source="spotify", source_id="abc")

        assert artist.id is not None
        assert artist.name == "Queen"
        assert artist.name_norm == "queen"
        assert artist.source == "spotify"
        assert artist.source_id == "abc"

    def test_same_name_any_casing_returns_same_row(self, db):
        registry = ArtistRegistry(db)

        first = registry.find_or_create("Queen")
        second = registry.find_or_create("QUEEN  ")
        third = registry.find_or_create("queen")

        assert first.id == second.id == third.id
        assert db.query(Artist).count() == 1

    def test_existing_provenance_is_not_overwritten(self, db):
        registry = ArtistRegistry(db)
        registry.find_or_create("Queen", source="spotify", source_id="abc")

        again = registry.find_or_create("queen", source="csv", source_id="user-1")

        assert again.source == "spotify"
        assert again.source_id == "abc"
        assert again.name == "Queen"

    def test_missing_image_and_genres_are_filled_in(self, db):
        registry = ArtistRegistry(db)
        registry.find_or_create("Queen", source="csv")

        artist = registry.find_or_create("Queen", image_url="https://img/queen.jpg", genres=["rock"])

        assert artist.image_url == "https://img/queen.jpg"
        assert artist.genres == ["rock"]

        artist = registry.find_or_create("Queen", image_url="https://img/other.jpg", genres=["pop"])
        assert artist.image_url == "https://img/queen.jpg"
        assert artist.genres == ["rock"]

    def test_blank_name_is_rejected(self, db):
        with pytest.raises(InvalidTrackError) as exc:
            ArtistRegistry(db).find_or_create("   ")
        assert exc.value.field == "artist"

    def test_concurrent_create_reuses_existing_row(self, db):
        """Losing the insert race resolves to the winner's row."""
        registry = ArtistRegistry(db)
        winner = registry.find_or_create("Queen")

        real_lookup = registry.get_by_name
        calls = []

        def stale_then_real(name):
            calls.append(name)
            # The first lookup happens before the other writer committed
            return None if len(calls) == 1 else real_lookup(name)

        with patch.object(registry, "get_by_name", side_effect=stale_then_real):
            artist = registry.find_or_create("queen")

        assert artist.id == winner.id
        assert len(calls) == 2
        assert db.query(Artist).count() == 1


class TestAlbumRegistry:
    """Album find-or-create."""

    @pytest.fixture
    def artist(self, db):
        return ArtistRegistry(db).find_or_create("Queen")

    def test_same_title_and_year_returns_same_row(self, db, artist):
        registry = AlbumRegistry(db)

        first = registry.find_or_create("A Night at the Opera", artist.id, 1975)
        second = registry.find_or_create("a night at the opera ", artist.id, 1975)

        assert first.id == second.id
        assert first.title_norm == "a night at the opera"

    def test_missing_year_is_its_own_bucket(self, db, artist):
        registry = AlbumRegistry(db)

        no_year = registry.find_or_create("Greatest Hits", artist.id)
        no_year_again = registry.find_or_create("greatest hits", artist.id)
        with_year = registry.find_or_create("Greatest Hits", artist.id, 1981)
        other_year = registry.find_or_create("Greatest Hits", artist.id, 1991)

        assert no_year.id == no_year_again.id
        assert len({no_year.id, with_year.id, other_year.id}) == 3
        assert db.query(Album).count() == 3

    def test_year_zero_and_missing_year_share_one_row(self, db, artist):
        db.add(Album(title="Demos", artist_id=artist.id, release_year=0))
        db.commit()

        album = AlbumRegistry(db).find_or_create("demos", artist.id)

        assert album.release_year == 0
        assert db.query(Album).count() == 1

    def test_year_zero_is_stored_as_missing_year(self, db, artist):
        registry = AlbumRegistry(db)

        zero = registry.find_or_create("Demos", artist.id, 0)
        missing = registry.find_or_create("Demos", artist.id)

        assert zero.id == missing.id
        assert zero.release_year is None

    @pytest.mark.parametrize("release_date", [
        "1975-11-21", "1975-11", "1975", "0000", "0000-00-00", "19", "abcd-01-01", "", None,
    ])
    def test_every_release_date_form_is_found_again(self, db, artist, release_date):
        registry = AlbumRegistry(db)
        year = release_year(release_date)

        first = registry.find_or_create("Demos", artist.id, year)
        second = registry.find_or_create("DEMOS", artist.id, year)
        no_year = registry.find_or_create("Demos", artist.id)

        assert first.id == second.id
        assert (no_year.id == first.id) == (year is None)

    def test_same_title_for_different_artist_is_distinct(self, db, artist):
        other = ArtistRegistry(db).find_or_create("ABBA")
        registry = AlbumRegistry(db)

        first = registry.find_or_create("Greatest Hits", artist.id)
        second = registry.find_or_create("Greatest Hits", other.id)

        assert first.id != second.id

    def test_concurrent_create_reuses_existing_row(self, db, artist):
        registry = AlbumRegistry(db)
        winner = registry.find_or_create("Jazz", artist.id)

        real_find = registry.find
        calls = []

        def stale_then_real(title, artist_id, release_year=None):
            calls.append(title)
            return None if len(calls) == 1 else real_find(title, artist_id, release_year)

        with patch.object(registry, "find", side_effect=stale_then_real):
            album = registry.find_or_create("jazz", artist.id)

        assert album.id == winner.id
        assert db.query(Album).count() == 1

    def test_unique_index_rejects_duplicate_null_year(self, db, artist):
        """The database enforces one "no year" album per artist/title."""
        from sqlalchemy.exc import IntegrityError
        from encore.database import is_unique_violation

        db.add(Album(title="Jazz", artist_id=artist.id))
        db.commit()

        db.add(Album(title="JAZZ", artist_id=artist.id))
        with pytest.raises(IntegrityError) as exc:
            db.commit()
        db.rollback()

        assert is_unique_violation(exc.value)
