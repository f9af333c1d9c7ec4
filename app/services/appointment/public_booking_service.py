# ============================================================================
# app/services/appointment/public_booking_service.py
# Adapter used by the customer-facing portal: slots across all agents and
# visit requests booked on an agent's behalf
# ============================================================================
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ForbiddenError
from app.models.appointment import AppointmentType
from app.schemas.appointments import AppointmentCreate, PublicAppointmentSummary
from app.schemas.availability import PublicAvailableSlotsResponse, PublicDaySlots, PublicTimeSlot
from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)
settings = get_settings()


class PublicBookingService:
    """Handles public portal availability and visit requests"""

    def __init__(self, appointment_service: AppointmentService):
        self.appointment_service = appointment_service

    @staticmethod
    def has_availability(db: Session, organization_id: UUID) -> bool:
        return len(AvailabilityService.list_rule_user_ids(db, organization_id)) > 0

    @staticmethod
    def get_available_slots(
            db: Session,
            organization_id: UUID,
            start_date: str,
            end_date: str,
            slot_duration: Optional[int] = None
    ) -> PublicAvailableSlotsResponse:
        """
        Union of every agent's open slots.

        Identical (date, start, end) slots from several agents are reported
        once, tagged with the first agent found.
        """
        by_date: Dict[str, Dict[Tuple[datetime, datetime], PublicTimeSlot]] = {}

        for user_id in AvailabilityService.list_rule_user_ids(db, organization_id):
            result = AvailabilityService.get_available_slots(
                db,
                caller_id=user_id,
                is_admin=True,
                organization_id=organization_id,
                start_date=start_date,
                end_date=end_date,
                slot_duration=slot_duration,
                target_user_id=user_id,
            )
            for day in result.days:
                day_slots = by_date.setdefault(day.date, {})
                for slot in day.slots:
                    key = (slot.start_time, slot.end_time)
                    if key not in day_slots:
                        day_slots[key] = PublicTimeSlot(
                            user_id=user_id,
                            start_time=slot.start_time,
                            end_time=slot.end_time,
                        )

        days: List[PublicDaySlots] = []
        for day in sorted(by_date):
            slots = sorted(by_date[day].values(), key=lambda s: s.start_time)
            days.append(PublicDaySlots(date=day, slots=slots))

        return PublicAvailableSlotsResponse(days=days)

    def request_visit(
            self,
            db: Session,
            user_id: UUID,
            organization_id: UUID,
            lead_id: UUID,
            lead_service_id: UUID,
            start_time: datetime,
            end_time: datetime
    ) -> PublicAppointmentSummary:
        if not AvailabilityService.list_rules(db, user_id, True, organization_id, user_id):
            raise ForbiddenError("user has no availability configured")

        appointment = self.appointment_service.create(
            db,
            caller_id=user_id,
            is_admin=True,
            organization_id=organization_id,
            request=AppointmentCreate(
                lead_id=lead_id,
                lead_service_id=lead_service_id,
                type=AppointmentType.LEAD_VISIT,
                title=settings.PUBLIC_VISIT_TITLE,
                start_time=start_time,
                end_time=end_time,
                send_confirmation_email=False,
            )
        )
        logger.info(f"Public visit request booked as appointment {appointment.id} for user {user_id}")

        return PublicAppointmentSummary(
            id=appointment.id,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            title=appointment.title,
            status=appointment.status,
        )
