import logging

from eventhub.core.celery_config import celery_app
from eventhub.database.db import SessionLocal
from eventhub.services.registrations import confirm_registration

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def send_registration_confirmation_task(self, registration_id: int):
    """Confirm a registration after it was created (hook for the confirmation email)."""
    logger.info("Sending confirmation for registration %s", registration_id)

    db = SessionLocal()
    try:
        confirm_registration(db, registration_id)
    finally:
        db.close()
