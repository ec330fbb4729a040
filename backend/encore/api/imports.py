"""CSV import and import playlist endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from encore.database import get_db
from encore.dependencies import get_cache_backend, get_current_actor, get_current_admin
from encore.models.song import Song
from encore.schemas.common import MessageResponse
from encore.schemas.imports import (
    CSVCommitRequest,
    CSVCommitResponse,
    CSVPreviewRequest,
    CSVPreviewResponse,
    PlaylistAddRequest,
    PlaylistAddResponse,
    PlaylistEntry,
    PlaylistRemoveResponse,
    PlaylistResponse,
)
from encore.services.auth import Actor
from encore.services.cache import CacheBackend
from encore.services.import_service import CSVImportService
from encore.services.import_store import DraftNotFoundError, ImportPlaylist
from encore.tasks.imports import commit_import_draft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports")


# ============================================================================
# CSV import
# ============================================================================

@router.post("/csv/preview", response_model=CSVPreviewResponse)
def preview_csv(
    request: CSVPreviewRequest,
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_admin),
):
    """Parse a CSV document and stage it for commit.

    The returned draft_id is valid for 24 hours.
    """
    service = CSVImportService(db, cache)
    result, draft = service.preview(request.csv_data, actor.id)

    if draft is None:
        detail = "; ".join(error.message for error in result.errors) or "Failed to parse CSV"
        raise HTTPException(status_code=400, detail=detail)

    return CSVPreviewResponse(
        draft_id=draft.draft_id,
        preview=service.preview_rows(result),
        total_rows=result.total_rows,
        valid_rows=result.valid_rows,
        invalid_rows=result.invalid_rows,
        errors=result.errors,
    )


@router.post("/csv/commit", response_model=CSVCommitResponse)
def commit_csv(
    request: CSVCommitRequest,
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_admin),
):
    """Commit a previewed draft. Rows fail individually, never the whole batch."""
    service = CSVImportService(db, cache)

    if request.background:
        try:
            service.drafts.get(actor.id, request.draft_id)
        except DraftNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

        task = commit_import_draft.delay(actor.id, request.draft_id)
        logger.info(f"Queued commit of draft {request.draft_id} as task {task.id}")
        return CSVCommitResponse(task_id=task.id)

    try:
        return service.commit(request.draft_id, actor.id)
    except DraftNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================================================
# Import playlist
# ============================================================================

@router.get("/playlist", response_model=PlaylistResponse)
def get_playlist(
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_actor),
):
    """Songs in the caller's import playlist, in the order they were added."""
    entries = ImportPlaylist(cache).entries(actor.id)

    song_ids = [song_id for _, song_id, _ in entries]
    songs = {
        song.id: song
        for song in db.query(Song).filter(Song.id.in_(song_ids)).all()
    } if song_ids else {}

    items = []
    for position, song_id, added_at in entries:
        song = songs.get(song_id)
        if song is None:
            continue
        items.append(PlaylistEntry(
            position=position,
            song_id=song.id,
            title=song.title,
            artist_name=song.artist_name,
            album_title=song.album_title,
            duration_sec=song.duration_sec,
            album_art=song.album_art,
            genres=song.genres,
            added_at=added_at,
        ))

    return PlaylistResponse(songs=items, total=len(items))


@router.post("/playlist", response_model=PlaylistAddResponse)
def add_to_playlist(
    request: PlaylistAddRequest,
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_actor),
):
    """Add a song to the import playlist. Adding twice is a no-op."""
    if db.query(Song.id).filter(Song.id == request.song_id).first() is None:
        raise HTTPException(status_code=404, detail="Song not found")

    added, total = ImportPlaylist(cache).add(actor.id, request.song_id)
    return PlaylistAddResponse(added=added, total=total, song_id=request.song_id)


@router.delete("/playlist", response_model=MessageResponse)
def clear_playlist(
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_actor),
):
    """Remove every song from the import playlist."""
    ImportPlaylist(cache).clear(actor.id)
    return MessageResponse(message="Import playlist cleared")


@router.delete("/playlist/{song_id}", response_model=PlaylistRemoveResponse)
def remove_from_playlist(
    song_id: int,
    cache: CacheBackend = Depends(get_cache_backend),
    actor: Actor = Depends(get_current_actor),
):
    """Remove one song from the import playlist."""
    removed, total = ImportPlaylist(cache).remove(actor.id, song_id)
    return PlaylistRemoveResponse(removed=removed, total=total)
