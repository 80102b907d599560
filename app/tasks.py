import logging

from app.core.celery_config import celery_app
from app.database.db import SessionLocal
from app.models import events, registrations  # noqa: F401
from app.services.occupancy import reconcile_all, reconcile_event

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def reconcile_occupancy_task(self, event_id: str | None = None):
    """Rewrite occupancy counters from the registration ledger."""
    db = SessionLocal()
    try:
        if event_id is not None:
            return {event_id: reconcile_event(db, event_id)}
        corrected = reconcile_all(db)
        logger.info("Reconciled occupancy for %s events", len(corrected))
        return corrected
    finally:
        db.close()
