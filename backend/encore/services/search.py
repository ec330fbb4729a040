"""Catalog search.

Cache-first lookup over the denormalized song fields (title, artist name,
album title). PostgreSQL serves queries from its full-text engine; other
databases, or a failing text index, fall back to a case-insensitive
substring scan ranked by popularity.
"""
import logging
import re
from typing import Optional, List

from sqlalchemy import String, cast, func, literal_column, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from encore.config import settings
from encore.models.song import Song
from encore.schemas.catalog import SearchHit, SearchResponse
from encore.services.cache import CacheBackend, get_cache

logger = logging.getLogger(__name__)

_TERM = re.compile(r"\w+", re.UNICODE)

# Must stay identical to the ix_songs_fulltext index expression, built only
# from IMMUTABLE operators (concat_ws is STABLE and cannot be indexed).
FULLTEXT_DOCUMENT_SQL = (
    "coalesce(title, '') || ' ' || coalesce(artist_name, '') || ' ' || coalesce(album_title, '')"
)


class FullTextUnavailable(Exception):
    """The database has no full-text index for this query."""
    pass


def _apply_filters(query, artist_id: Optional[int], album_id: Optional[int], genre: Optional[str]):
    if artist_id is not None:
        query = query.filter(Song.artist_id == artist_id)
    if album_id is not None:
        query = query.filter(Song.album_id == album_id)
    if genre:
        # genres is a JSON list; match the quoted element in its text form
        query = query.filter(
            cast(Song.genres, String).icontains(f'"{genre.strip()}"', autoescape=True)
        )
    return query


def _hit(song: Song, score: Optional[float] = None) -> SearchHit:
    return SearchHit(
        id=song.id,
        title=song.title,
        artist_name=song.artist_name,
        album_title=song.album_title,
        duration_sec=song.duration_sec,
        genres=song.genres,
        album_art=song.album_art,
        popularity=song.popularity,
        score=score,
    )


class PostgresFullTextIndex:
    """Prefix-matching full-text search using PostgreSQL tsvector/tsquery."""

    def __init__(self, db: Session):
        self.db = db

    def available(self) -> bool:
        bind = self.db.get_bind()
        return bind.dialect.name == "postgresql"

    def search(
        self,
        query: str,
        limit: int,
        artist_id: Optional[int] = None,
        album_id: Optional[int] = None,
        genre: Optional[str] = None,
    ) -> List[SearchHit]:
        """Ranked search.

        Raises:
            FullTextUnavailable: Not PostgreSQL, or nothing searchable in the query
        """
        if not self.available():
            raise FullTextUnavailable("full-text search requires PostgreSQL")

        terms = _TERM.findall(query.lower())
        if not terms:
            raise FullTextUnavailable(f"no searchable terms in {query!r}")

        document = func.to_tsvector(
            literal_column("'simple'"), literal_column(FULLTEXT_DOCUMENT_SQL)
        )
        tsquery = func.to_tsquery("simple", " & ".join(f"{term}:*" for term in terms))
        rank = func.ts_rank(document, tsquery).label("score")

        rows = _apply_filters(
            self.db.query(Song, rank).filter(document.op("@@")(tsquery)),
            artist_id, album_id, genre,
        )
        rows = rows.order_by(rank.desc(), Song.popularity.desc().nulls_last()).limit(limit).all()

        return [_hit(song, float(score)) for song, score in rows]


class CatalogSearchService:
    """Cached catalog search."""

    def __init__(self, db: Session, cache: Optional[CacheBackend] = None):
        self.db = db
        self.cache = cache or get_cache()
        self.index = PostgresFullTextIndex(db)

    @staticmethod
    def cache_key(
        query: str,
        artist_id: Optional[int] = None,
        album_id: Optional[int] = None,
        genre: Optional[str] = None,
        limit: int = 20,
    ) -> str:
        genre = genre.strip().lower() if genre else ""
        return (
            f"search:{query.strip().lower()}|{artist_id or ''}|{album_id or ''}|{genre}|{limit}"
        )

    def search(
        self,
        query: str,
        artist_id: Optional[int] = None,
        album_id: Optional[int] = None,
        genre: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> SearchResponse:
        """Search songs by title, artist name or album title.

        Empty results are not cached so newly imported songs show up on the
        next request.
        """
        limit = min(limit or settings.search_default_limit, settings.search_max_limit)
        key = self.cache_key(query, artist_id, album_id, genre, limit)

        cached = self.cache.get_json(key)
        if cached is not None:
            logger.debug(f"Search cache hit: {key}")
            return SearchResponse(songs=[SearchHit(**hit) for hit in cached], cached=True)

        try:
            hits = self.index.search(query, limit, artist_id, album_id, genre)
        except FullTextUnavailable as e:
            logger.debug(f"Full-text search unavailable ({e}), using substring match")
            hits = self.substring_search(query, limit, artist_id, album_id, genre)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Full-text search failed, using substring match: {e}")
            hits = self.substring_search(query, limit, artist_id, album_id, genre)

        # Only hits are cached; a miss must not hide songs imported within the TTL
        if hits:
            self.cache.set_json(
                key,
                [hit.model_dump() for hit in hits],
                ttl=settings.search_cache_ttl,
            )

        return SearchResponse(songs=hits, cached=False)

    def substring_search(
        self,
        query: str,
        limit: int,
        artist_id: Optional[int] = None,
        album_id: Optional[int] = None,
        genre: Optional[str] = None,
    ) -> List[SearchHit]:
        """Case-insensitive substring match over the same three fields, most popular first."""
        rows = self.db.query(Song)

        text = query.strip()
        if text:
            rows = rows.filter(
                or_(
                    Song.title_norm.icontains(text.lower(), autoescape=True),
                    Song.artist_name.icontains(text, autoescape=True),
                    Song.album_title.icontains(text, autoescape=True),
                )
            )

        rows = _apply_filters(rows, artist_id, album_id, genre)
        rows = rows.order_by(Song.popularity.desc().nulls_last(), Song.id).limit(limit).all()

        return [_hit(song) for song in rows]
