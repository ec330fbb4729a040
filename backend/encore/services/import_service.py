"""CSV import pipeline: parse, stage as a draft, commit through the catalog."""
import logging
from typing import Optional, List, Tuple

from sqlalchemy.orm import Session

from encore.config import settings
from encore.schemas.imports import (
    CSVCommitResponse,
    CSVParseResult,
    ImportDraft,
    ParsedSong,
    RowError,
)
from encore.services.cache import CacheBackend, get_cache
from encore.services.catalog import CatalogService
from encore.services.csv_parser import parse_csv, validate_songs
from encore.services.import_store import ImportDraftStore, ImportPlaylist

logger = logging.getLogger(__name__)


class CSVImportService:
    """Two-phase CSV import.

    preview() parses and stages rows under a draft id, commit() runs the
    staged rows through the catalog upsert. There is no batch transaction:
    each row succeeds or fails on its own.
    """

    def __init__(self, db: Session, cache: Optional[CacheBackend] = None):
        self.db = db
        self.cache = cache or get_cache()
        self.catalog = CatalogService(db)
        self.drafts = ImportDraftStore(self.cache)
        self.playlist = ImportPlaylist(self.cache)

    def preview(self, csv_data: str, actor_id: str) -> Tuple[CSVParseResult, Optional[ImportDraft]]:
        """Parse CSV text and stage it.

        Returns the parse result and the staged draft. No draft is created
        when parsing fails.
        """
        result = parse_csv(csv_data)
        if not result.success:
            logger.info(f"CSV preview rejected for {actor_id}: {result.errors[0].message}")
            return result, None

        draft = self.drafts.save(actor_id, result.songs)
        return result, draft

    def commit(self, draft_id: str, actor_id: str) -> CSVCommitResponse:
        """Commit a staged draft.

        Saved songs are added to the actor's import playlist and the draft
        is discarded.

        Raises:
            DraftNotFoundError: If the draft is missing or expired
        """
        draft = self.drafts.get(actor_id, draft_id)

        response = self.commit_rows(draft.songs, actor_id)
        for song_id in response.song_ids:
            self.playlist.add(actor_id, song_id)

        self.drafts.delete(actor_id, draft_id)
        logger.info(
            f"Committed draft {draft_id} for {actor_id}: "
            f"{response.inserted} inserted, {response.updated} updated, {len(response.errors)} errors"
        )
        return response

    def commit_rows(self, songs: List[ParsedSong], actor_id: str) -> CSVCommitResponse:
        """Upsert parsed rows one at a time and aggregate the outcomes."""
        valid, invalid = validate_songs(songs)

        errors = [
            RowError(row=song.row_number, message="; ".join(song.errors))
            for song in invalid
        ]
        inserted = 0
        updated = 0
        song_ids: List[int] = []

        for song in valid:
            try:
                result = self.catalog.save_csv_row(song, actor_id)
            except Exception as e:
                self.db.rollback()
                logger.warning(f"CSV row {song.row_number} failed: {e}")
                errors.append(RowError(row=song.row_number, message=str(e)))
                continue

            if result.inserted:
                inserted += 1
            else:
                updated += 1
            if result.song is not None and result.song.id not in song_ids:
                song_ids.append(result.song.id)

        errors.sort(key=lambda error: error.row)

        return CSVCommitResponse(
            success=True,
            inserted=inserted,
            updated=updated,
            errors=errors,
            song_ids=song_ids,
            total_saved=inserted + updated,
            invalid_rows=len(invalid),
        )

    def preview_rows(self, result: CSVParseResult) -> List[ParsedSong]:
        """First rows shown back to the user before committing."""
        return result.songs[: settings.import_preview_rows]
