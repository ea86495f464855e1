"""FastAPI dependencies shared across features."""

from notification_service.core.dependencies.database import get_db_session, require_job_store

__all__ = ["get_db_session", "require_job_store"]
