"""Import drafts and per-actor import playlists."""
import logging
import secrets
import time
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from encore.config import settings
from encore.schemas.imports import ImportDraft, ParsedSong
from encore.services.cache import CacheBackend
from encore.utils.ordering import assign_positions

logger = logging.getLogger(__name__)


class DraftNotFoundError(Exception):
    """Draft does not exist, has expired, or belongs to another actor."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Draft not found or expired: {draft_id}")


class ImportDraftStore:
    """Parsed CSV rows held between preview and commit.

    Drafts expire on their own; there is nothing to cancel.
    """

    def __init__(self, cache: CacheBackend, ttl: Optional[int] = None):
        self.cache = cache
        self.ttl = ttl or settings.import_draft_ttl

    @staticmethod
    def key(actor_id: str, draft_id: str) -> str:
        return f"import:draft:{actor_id}:{draft_id}"

    def save(self, actor_id: str, songs: List[ParsedSong]) -> ImportDraft:
        """Stage rows under a new draft id."""
        draft = ImportDraft(
            draft_id=secrets.token_hex(16),
            actor_id=actor_id,
            songs=songs,
            created_at=datetime.now(timezone.utc),
        )
        self.cache.set_json(
            self.key(actor_id, draft.draft_id),
            draft.model_dump(mode="json"),
            ttl=self.ttl,
        )
        logger.info(f"Saved import draft {draft.draft_id} for {actor_id} ({len(songs)} rows)")
        return draft

    def get(self, actor_id: str, draft_id: str) -> ImportDraft:
        """Load a draft.

        Raises:
            DraftNotFoundError: If the draft is missing or expired
        """
        data = self.cache.get_json(self.key(actor_id, draft_id))
        if data is None:
            raise DraftNotFoundError(draft_id)
        return ImportDraft.model_validate(data)

    def delete(self, actor_id: str, draft_id: str) -> bool:
        return self.cache.delete(self.key(actor_id, draft_id))


class ImportPlaylist:
    """Ordered set of song ids an actor has imported."""

    def __init__(self, cache: CacheBackend):
        self.cache = cache

    @staticmethod
    def key(actor_id: str) -> str:
        return f"import:playlist:{actor_id}"

    def add(self, actor_id: str, song_id: int) -> Tuple[bool, int]:
        """Add a song. Re-adding keeps the original position."""
        key = self.key(actor_id)
        added = self.cache.zadd(key, str(song_id), time.time())
        return added, self.cache.zcard(key)

    def remove(self, actor_id: str, song_id: int) -> Tuple[bool, int]:
        key = self.key(actor_id)
        removed = self.cache.zrem(key, str(song_id))
        return removed, self.cache.zcard(key)

    def clear(self, actor_id: str) -> bool:
        self.cache.delete(self.key(actor_id))
        return True

    def entries(self, actor_id: str) -> List[Tuple[int, int, float]]:
        """(position, song_id, added_at) ordered by add time, positions from 1."""
        members = self.cache.zrange(self.key(actor_id))
        ranked = assign_positions(members, key=lambda member: member[1])
        return [(position, int(song_id), added_at) for position, (song_id, added_at) in ranked]
