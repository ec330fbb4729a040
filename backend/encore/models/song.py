"""Song and song source models."""
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from encore.database import Base
from encore.utils.normalize import normalize_name


class SongSourceType(str, enum.Enum):
    """Systems that can contribute a song to the catalog."""
    SPOTIFY = "spotify"
    CSV = "csv"
    YOUTUBE = "youtube"
    MANUAL = "manual"


class Song(Base):
    """One logical song, however many sources reference it.

    artist_name and album_title are copies taken when the song is created
    and are not refreshed afterwards.
    """

    __tablename__ = "songs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    title_norm = Column(String(500), nullable=False, index=True)
    artist_id = Column(Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    artist_name = Column(String(255), nullable=False, index=True)
    album_id = Column(Integer, ForeignKey("albums.id", ondelete="SET NULL"), index=True)
    album_title = Column(String(255))
    duration_sec = Column(Integer)
    genres = Column(JSON)
    popularity = Column(Integer)
    album_art = Column(String(1000))

    # sha1(title_norm|artist_id|bucketed duration)
    signature = Column(String(40), nullable=False, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_songs_artist_title", "artist_id", "title_norm"),
    )

    artist = relationship("Artist")
    album = relationship("Album")
    sources = relationship(
        "SongSource",
        back_populates="song",
        cascade="all, delete-orphan",
        order_by="SongSource.id",
        lazy="selectin",
    )

    @validates("title")
    def _sync_title_norm(self, key, value):
        self.title_norm = normalize_name(value)
        return value

    def __repr__(self):
        return f"<Song {self.title} - {self.artist_name}>"


class SongSource(Base):
    """Provenance entry: an external system that contributed a song."""

    __tablename__ = "song_sources"
    __table_args__ = (
        UniqueConstraint("song_id", "source", "source_id", name="uq_song_source"),
        Index("ix_song_sources_lookup", "source", "source_id"),
    )

    id = Column(Integer, primary_key=True)
    song_id = Column(Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False)
    source = Column(String(20), nullable=False)
    source_id = Column(String(255), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    song = relationship("Song", back_populates="sources")

    def __repr__(self):
        return f"<SongSource {self.source}:{self.source_id}>"
