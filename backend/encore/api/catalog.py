"""Catalog endpoints: search, song lookup, manual entry and Spotify ingestion."""
import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.orm import Session

from encore.config import settings
from encore.database import get_db
from encore.dependencies import (
    get_cache_backend,
    get_current_actor,
    get_current_admin,
    get_spotify,
)
from encore.integrations.spotify import (
    SpotifyAPIError,
    SpotifyClient,
    SpotifyNotConfiguredError,
    SpotifyTrackNotFoundError,
)
from encore.schemas.catalog import (
    ManualSongCreate,
    SaveSongResponse,
    SearchResponse,
    SongResponse,
    SplitSongGroup,
    SpotifySearchRequest,
    SpotifySearchResponse,
    SpotifyTrackResult,
)
from encore.services.auth import Actor
from encore.services.cache import CacheBackend
from encore.services.catalog import CatalogService, SaveResult
from encore.services.exceptions import InvalidTrackError
from encore.services.search import CatalogSearchService
from encore.utils.normalize import round_half_up

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog")


def _save_response(result: SaveResult, response: Response) -> SaveSongResponse:
    """201 for a new song, 200 when it already existed."""
    response.status_code = status.HTTP_201_CREATED if result.inserted else status.HTTP_200_OK
    return SaveSongResponse(
        inserted=result.inserted,
        song=SongResponse.model_validate(result.song) if result.song else None,
        existing_id=result.existing_id,
        message=result.message,
    )


def _spotify_error(e: SpotifyAPIError) -> HTTPException:
    if isinstance(e, SpotifyNotConfiguredError):
        return HTTPException(status_code=503, detail="Spotify integration not configured")
    if isinstance(e, SpotifyTrackNotFoundError):
        return HTTPException(status_code=404, detail=f"Spotify track not found: {e.track_id}")
    return HTTPException(status_code=502, detail=f"Spotify request failed: {e}")


@router.get("/search", response_model=SearchResponse)
def search_catalog(
    q: str = Query("", max_length=200, description="Title, artist or album text"),
    artist_id: Optional[int] = Query(None),
    album_id: Optional[int] = Query(None),
    genre: Optional[str] = Query(None, max_length=100),
    limit: Optional[int] = Query(None, ge=1, le=settings.search_max_limit),
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_actor),
):
    """Search songs. Results are cached briefly."""
    service = CatalogSearchService(db, cache)
    return service.search(q, artist_id=artist_id, album_id=album_id, genre=genre, limit=limit)


@router.get("/songs/{song_id}", response_model=SongResponse)
def get_song(
    song_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Get a single song with its sources."""
    song = CatalogService(db).get_song(song_id)
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")
    return SongResponse.model_validate(song)


@router.post("/songs", response_model=SaveSongResponse, status_code=201)
def create_song(
    data: ManualSongCreate,
    response: Response,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_admin),
):
    """Add a song by hand. Returns 200 if the song already exists."""
    try:
        result = CatalogService(db).save_manual(data, actor.id)
    except InvalidTrackError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _save_response(result, response)


@router.post("/spotify/search", response_model=SpotifySearchResponse)
async def spotify_search(
    request: SpotifySearchRequest,
    spotify: SpotifyClient = Depends(get_spotify),
    actor: Actor = Depends(get_current_admin),
):
    """Search Spotify for tracks to add to the catalog."""
    logger.info(f"Spotify search proxy: {request.q}")
    try:
        records = await spotify.search_tracks(request.q, request.limit)
    except SpotifyAPIError as e:
        raise _spotify_error(e)

    return SpotifySearchResponse(tracks=[
        SpotifyTrackResult(
            source_id=r.source_id,
            title=r.title,
            artist=r.primary_artist or "",
            album_name=r.album_name,
            duration=round_half_up(r.duration_ms / 1000) if r.duration_ms is not None else None,
            album_art=r.image_url,
            spotify_url=r.external_url,
            popularity=r.popularity,
        )
        for r in records
    ])


@router.post("/spotify/tracks/{track_id}", response_model=SaveSongResponse, status_code=201)
async def save_spotify_track(
    response: Response,
    track_id: str = Path(..., pattern=r"^[A-Za-z0-9]{1,64}$"),
    db: Session = Depends(get_db),
    spotify: SpotifyClient = Depends(get_spotify),
    actor: Actor = Depends(get_current_admin),
):
    """Fetch a Spotify track and save it to the catalog."""
    logger.info(f"Saving Spotify track {track_id} for {actor.id}")
    try:
        record = await spotify.get_track(track_id)
    except SpotifyAPIError as e:
        raise _spotify_error(e)

    try:
        result = CatalogService(db).save_track(record)
    except InvalidTrackError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _save_response(result, response)


@router.get("/duplicates", response_model=List[SplitSongGroup])
def list_split_songs(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_admin),
):
    """Songs by one artist with the same title but different signatures."""
    groups = CatalogService(db).find_split_songs(limit)
    return [
        SplitSongGroup(
            artist_id=g["artist_id"],
            artist_name=g["artist_name"],
            title_norm=g["title_norm"],
            count=g["count"],
            songs=[SongResponse.model_validate(s) for s in g["songs"]],
        )
        for g in groups
    ]
