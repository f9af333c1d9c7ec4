# ===== app/tasks/email_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.services.email.email_service import EmailService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_visit_invite_email(
        self,
        email: str,
        consumer_name: str,
        when: str,
        address: str
):
    """
    Email a consumer the date, time and address of a booked visit

    Args:
        email: Consumer's email address
        consumer_name: First name used in the greeting
        when: Pre-formatted local date and time of the visit
        address: Visit address
    """
    try:
        logger.info(f"Sending visit invite email to {email}")

        EmailService.send_visit_invite_email(
            email=email,
            consumer_name=consumer_name,
            when=when,
            address=address
        )

        logger.info(f"Visit invite email sent successfully to {email}")
        return {"status": "success", "email": email}

    except Exception as exc:
        logger.error(f"Failed to send visit invite email to {email}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
