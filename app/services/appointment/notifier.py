# ============================================================================
# app/services/appointment/notifier.py
# Outbound notifications triggered by bookings
# ============================================================================
from typing import Protocol
import logging

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_visit_invite(self, consumer_email: str, consumer_name: str, when: str, address: str) -> None:
        ...


class CeleryVisitInviteNotifier:
    """Queues the visit invite email; delivery and retries happen in the worker."""

    def send_visit_invite(self, consumer_email: str, consumer_name: str, when: str, address: str) -> None:
        from app.tasks.email_tasks import send_visit_invite_email

        send_visit_invite_email.delay(
            email=consumer_email,
            consumer_name=consumer_name,
            when=when,
            address=address
        )
        logger.info(f"Queued visit invite email to {consumer_email}")
