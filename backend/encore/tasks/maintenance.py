"""Maintenance tasks for Celery."""
import logging
from celery import shared_task

from encore.database import SessionLocal
from encore.services.catalog import CatalogService

logger = logging.getLogger(__name__)


@shared_task(name="encore.tasks.maintenance.report_split_songs")
def report_split_songs(limit: int = 50):
    """Log songs whose durations landed in neighbouring signature buckets.

    Nothing is merged automatically; the report is for manual review.
    """
    db = SessionLocal()

    try:
        groups = CatalogService(db).find_split_songs(limit)

        for group in groups:
            durations = ", ".join(str(song.duration_sec) for song in group["songs"])
            logger.info(
                f"Split song: {group['artist_name']} - {group['title_norm']} "
                f"({group['count']} entries, durations {durations})"
            )

        logger.info(f"Split song report found {len(groups)} groups")
        return {
            "groups": len(groups),
            "songs": sum(group["count"] for group in groups),
        }

    finally:
        db.close()
