"""Song catalog: signature-based deduplication and multi-source upserts."""
import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from encore.config import settings
from encore.database import is_unique_violation
from encore.models.album import Album
from encore.models.artist import Artist
from encore.models.song import Song, SongSource, SongSourceType
from encore.schemas.catalog import ManualSongCreate
from encore.schemas.imports import ParsedSong
from encore.schemas.track import TrackRecord
from encore.services.albums import AlbumRegistry
from encore.services.artists import ArtistRegistry
from encore.services.exceptions import InvalidTrackError
from encore.utils.normalize import normalize_name, round_half_up, release_year
from encore.utils.signature import song_signature

logger = logging.getLogger(__name__)

SourceLike = Union[SongSourceType, str]

MSG_CREATED = "Song created successfully"
MSG_SOURCE_PRESENT = "Song already exists with this source"
MSG_SOURCE_ADDED = "Source added to existing song"


@dataclass
class SaveResult:
    """Outcome of a song upsert.

    "Already exists" is a normal result, never an error.
    """
    inserted: bool
    song: Optional[Song] = None
    existing_id: Optional[int] = None
    message: Optional[str] = None


def _source_value(source: SourceLike) -> str:
    return source.value if isinstance(source, SongSourceType) else str(source)


def has_source(song: Song, source: SourceLike, source_id: str) -> bool:
    """Check if this exact (source, source_id) pair is attached to the song."""
    source = _source_value(source)
    return any(s.source == source and s.source_id == source_id for s in song.sources)


class CatalogService:
    """Canonical song catalog.

    Artist, album and song rows are each committed on their own. A failure
    part way through leaves only idempotent rows behind, so retrying the
    same record never creates duplicates.
    """

    def __init__(self, db: Session, bucket_seconds: Optional[int] = None):
        self.db = db
        self.artists = ArtistRegistry(db)
        self.albums = AlbumRegistry(db)
        self.bucket_seconds = bucket_seconds or settings.signature_bucket_seconds

    def signature_for(self, title_norm: str, artist_id: int, duration_sec: Optional[float]) -> str:
        """Signature with this catalog's bucket width."""
        return song_signature(title_norm, artist_id, duration_sec, self.bucket_seconds)

    def get_song(self, song_id: int) -> Optional[Song]:
        """Get a single song by ID."""
        return self.db.query(Song).filter(Song.id == song_id).first()

    def get_by_signature(self, signature: str) -> Optional[Song]:
        """Get a song by its signature."""
        return self.db.query(Song).filter(Song.signature == signature).first()

    def save_track(self, record: TrackRecord) -> SaveResult:
        """Save a track from an upstream catalog API.

        Raises:
            InvalidTrackError: If the record has no artist or no title
        """
        artist_name = record.primary_artist
        if not artist_name:
            raise InvalidTrackError("artist", "No artist data provided")
        if not normalize_name(record.title):
            raise InvalidTrackError("title", "Track title is required")

        artist = self.artists.find_or_create(
            artist_name,
            source=record.source,
            source_id=record.primary_artist_id,
            image_url=record.image_url,
        )

        album = None
        if normalize_name(record.album_name):
            album = self.albums.find_or_create(
                record.album_name,
                artist.id,
                release_year=release_year(record.release_date),
                source=record.source,
                source_id=record.album_id,
                image_url=record.image_url,
            )

        duration_sec = None
        if record.duration_ms is not None:
            duration_sec = round_half_up(record.duration_ms / 1000)

        return self._upsert_song(
            title=record.title,
            artist=artist,
            album=album,
            duration_sec=duration_sec,
            source=record.source,
            source_id=record.source_id,
            popularity=record.popularity,
            album_art=record.image_url,
        )

    def save_csv_row(self, row: ParsedSong, actor_id: str) -> SaveResult:
        """Save a parsed CSV row. The importing actor is the source id."""
        if not normalize_name(row.artist):
            raise InvalidTrackError("artist", "Artist is required")
        if not normalize_name(row.title):
            raise InvalidTrackError("title", "Title is required")

        source = SongSourceType.CSV.value
        artist = self.artists.find_or_create(row.artist, source=source)

        album = None
        if normalize_name(row.album):
            album = self.albums.find_or_create(row.album, artist.id, source=source)

        return self._upsert_song(
            title=row.title,
            artist=artist,
            album=album,
            duration_sec=row.duration,
            source=source,
            source_id=actor_id,
            genres=[row.genre] if row.genre else None,
        )

    def save_manual(self, data: ManualSongCreate, actor_id: str) -> SaveResult:
        """Save a manually entered song."""
        if not normalize_name(data.artist):
            raise InvalidTrackError("artist", "Artist is required")
        if not normalize_name(data.title):
            raise InvalidTrackError("title", "Title is required")

        source = SongSourceType.MANUAL.value
        artist = self.artists.find_or_create(data.artist, source=source)

        album = None
        if normalize_name(data.album):
            album = self.albums.find_or_create(
                data.album, artist.id, release_year=data.release_year, source=source
            )

        return self._upsert_song(
            title=data.title,
            artist=artist,
            album=album,
            duration_sec=data.duration_sec,
            source=source,
            source_id=actor_id,
            genres=data.genres,
        )

    def add_source(self, song_id: int, source: SourceLike, source_id: str) -> Optional[Song]:
        """Attach a source to an existing song. Returns None if the song is missing."""
        song = self.get_song(song_id)
        if song is None:
            return None
        return self._merge_source(song, _source_value(source), source_id).song

    def _upsert_song(
        self,
        title: str,
        artist: Artist,
        album: Optional[Album],
        duration_sec: Optional[int],
        source: SourceLike,
        source_id: str,
        genres: Optional[List[str]] = None,
        popularity: Optional[int] = None,
        album_art: Optional[str] = None,
    ) -> SaveResult:
        """Insert a song by signature, or merge the source into the existing one.

        Descriptive fields come from the first writer; later sightings only
        add provenance.
        """
        source = _source_value(source)
        title = title.strip()
        signature = self.signature_for(normalize_name(title), artist.id, duration_sec)

        song = self.get_by_signature(signature)
        if song is None:
            song = Song(
                title=title,
                artist_id=artist.id,
                artist_name=artist.name,
                album_id=album.id if album else None,
                album_title=album.title if album else None,
                duration_sec=duration_sec,
                genres=genres,
                popularity=popularity,
                album_art=album_art,
                signature=signature,
            )
            song.sources.append(SongSource(source=source, source_id=source_id))
            self.db.add(song)

            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if not is_unique_violation(e):
                    raise
                # Lost the insert race; the winner's row is there now
                logger.info(f"Signature {signature} inserted concurrently, merging {source}:{source_id}")
                song = self.get_by_signature(signature)
                if song is None:
                    raise
            else:
                self.db.refresh(song)
                logger.info(f"Created song {song.title} - {song.artist_name} (id={song.id}, source={source})")
                return SaveResult(inserted=True, song=song, message=MSG_CREATED)

        return self._merge_source(song, source, source_id)

    def _merge_source(self, song: Song, source: str, source_id: str) -> SaveResult:
        """Append (source, source_id) to an existing song unless already present."""
        if has_source(song, source, source_id):
            return SaveResult(
                inserted=False, song=song, existing_id=song.id, message=MSG_SOURCE_PRESENT
            )

        song.sources.append(SongSource(source=source, source_id=source_id))
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not is_unique_violation(e):
                raise
            self.db.refresh(song)
            return SaveResult(
                inserted=False, song=song, existing_id=song.id, message=MSG_SOURCE_PRESENT
            )

        self.db.refresh(song)
        logger.info(f"Added source {source}:{source_id} to song {song.id}")
        return SaveResult(
            inserted=False, song=song, existing_id=song.id, message=MSG_SOURCE_ADDED
        )

    def find_split_songs(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Find songs by one artist sharing a normalized title under different signatures.

        These are usually one recording whose durations fell on either side
        of a bucket boundary. Largest groups first.
        """
        count = func.count(Song.id)
        groups = (
            self.db.query(Song.artist_id, Song.title_norm, count.label("count"))
            .group_by(Song.artist_id, Song.title_norm)
            .having(count > 1)
            .order_by(count.desc(), Song.title_norm)
            .limit(limit)
            .all()
        )

        results = []
        for artist_id, title_norm, total in groups:
            songs = (
                self.db.query(Song)
                .filter(Song.artist_id == artist_id, Song.title_norm == title_norm)
                .order_by(Song.duration_sec, Song.id)
                .all()
            )
            results.append({
                "artist_id": artist_id,
                "artist_name": songs[0].artist_name if songs else "",
                "title_norm": title_norm,
                "count": total,
                "songs": songs,
            })

        return results
