"""CSV import tasks for Celery."""
import logging
from celery import shared_task

from encore.database import SessionLocal
from encore.services.import_service import CSVImportService
from encore.services.import_store import DraftNotFoundError

logger = logging.getLogger(__name__)


@shared_task(name="encore.tasks.imports.commit_import_draft")
def commit_import_draft(actor_id: str, draft_id: str):
    """Commit a staged CSV draft outside the request cycle.

    Needs the Redis cache backend so the worker can see drafts staged by
    the API process.
    """
    db = SessionLocal()

    try:
        service = CSVImportService(db)
        response = service.commit(draft_id, actor_id)
        return {"status": "complete", **response.model_dump()}

    except DraftNotFoundError:
        logger.warning(f"Import draft {draft_id} for {actor_id} not found or expired")
        return {"status": "not_found", "draft_id": draft_id}

    finally:
        db.close()
