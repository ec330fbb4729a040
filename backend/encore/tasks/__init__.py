"""Celery background tasks."""
from encore.tasks.imports import commit_import_draft
from encore.tasks.maintenance import report_split_songs

__all__ = [
    "commit_import_draft",
    "report_split_songs",
]
