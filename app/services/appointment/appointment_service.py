# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""Service for booking and managing appointments"""
from datetime import datetime, time, timezone
from typing import Optional
from uuid import UUID, uuid4
import logging

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models.appointment import Appointment, AppointmentStatus, AppointmentType
from app.models.lead import Lead
from app.repositories.appointment_repository import AppointmentQuery, AppointmentStore
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentListFilters,
    AppointmentLeadInfo,
    AppointmentResponse,
    AppointmentListResponse,
)
from app.services.appointment.lead_assigner import LeadAssigner
from app.services.appointment.notifier import Notifier
from app.services.authorization import AuthorizationGuard
from app.utils.text_processing import sanitize_optional, sanitize_text
from app.utils.time_utils import ensure_utc, parse_optional_date, resolve_timezone

logger = logging.getLogger(__name__)
settings = get_settings()

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50

SORT_COLUMNS = {
    "title": "title",
    "type": "type",
    "status": "status",
    "startTime": "start_time",
    "start_time": "start_time",
    "endTime": "end_time",
    "end_time": "end_time",
    "createdAt": "created_at",
    "created_at": "created_at",
}


class AppointmentService:
    """Handles appointment operations"""

    def __init__(self, lead_assigner: Optional[LeadAssigner] = None, notifier: Optional[Notifier] = None):
        self.lead_assigner = lead_assigner
        self.notifier = notifier

    def create(
            self,
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            request: AppointmentCreate
    ) -> AppointmentResponse:
        """
        Book an appointment for the caller.

        Lead visits need a lead and a lead service. A non-admin may only book
        a visit for a lead that is unassigned (which claims it) or already
        assigned to them.
        """
        start_time = ensure_utc(request.start_time)
        end_time = ensure_utc(request.end_time)
        _validate_times(start_time, end_time)
        title = _clean_title(request.title)

        if request.type == AppointmentType.LEAD_VISIT:
            if request.lead_id is None or request.lead_service_id is None:
                raise BadRequestError("leadId and leadServiceId are required for lead visits")
            if self.lead_assigner is None:
                raise BadRequestError("lead assignment is not configured")

        _ensure_no_conflict(db, organization_id, caller_id, start_time, end_time)

        if request.type == AppointmentType.LEAD_VISIT:
            self._claim_lead(request.lead_id, caller_id, is_admin, organization_id)

        appointment = AppointmentStore.create(db, Appointment(
            id=uuid4(),
            organization_id=organization_id,
            user_id=caller_id,
            lead_id=request.lead_id,
            lead_service_id=request.lead_service_id,
            type=request.type.value,
            title=title,
            description=sanitize_optional(request.description),
            location=sanitize_optional(request.location),
            meeting_link=sanitize_optional(request.meeting_link),
            start_time=start_time,
            end_time=end_time,
            all_day=request.all_day,
            status=AppointmentStatus.SCHEDULED.value,
        ))
        logger.info(f"Created {appointment.type} appointment {appointment.id} for user {caller_id}")

        lead = AppointmentStore.get_lead(db, appointment.lead_id, organization_id) if appointment.lead_id else None
        if request.send_confirmation_email:
            self._send_visit_invite(appointment, lead)

        return _to_response(appointment, lead)

    def get_by_id(
            self,
            db: Session,
            appointment_id: UUID,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID
    ) -> AppointmentResponse:
        appointment = _get_accessible(db, appointment_id, caller_id, is_admin, organization_id)
        return _to_response(appointment, _lead_for(db, appointment))

    def get_by_lead_service_id(
            self,
            db: Session,
            lead_service_id: UUID,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID
    ) -> AppointmentResponse:
        """Latest non-cancelled appointment booked for a lead service."""
        appointment = AppointmentStore.get_latest_for_lead_service(db, lead_service_id, organization_id)
        if appointment is None:
            raise NotFoundError("appointment not found")

        AuthorizationGuard.ensure_can_manage(
            is_admin, appointment.user_id, caller_id, "not authorized to access this appointment"
        )
        return _to_response(appointment, _lead_for(db, appointment))

    def get_next_scheduled_visit(
            self,
            db: Session,
            lead_id: UUID,
            organization_id: UUID,
            now: Optional[datetime] = None
    ) -> Optional[AppointmentResponse]:
        """Earliest upcoming scheduled visit for a lead."""
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        appointment = AppointmentStore.get_next_scheduled_visit(db, lead_id, organization_id, now)
        if appointment is None:
            return None
        return _to_response(appointment, _lead_for(db, appointment))

    def list(
            self,
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            filters: AppointmentListFilters
    ) -> AppointmentListResponse:
        page = filters.page if filters.page >= 1 else 1
        page_size = filters.page_size
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE

        start_from = parse_optional_date(filters.start_from, "startFrom")
        start_to = parse_optional_date(filters.start_to, "startTo")

        sort_column = SORT_COLUMNS.get(filters.sort_by or "startTime")
        if sort_column is None:
            raise BadRequestError(f"invalid sortBy: {filters.sort_by}")

        sort_order = (filters.sort_order or "asc").lower()
        if sort_order not in ("asc", "desc"):
            raise BadRequestError(f"invalid sortOrder: {filters.sort_order}")

        params = AppointmentQuery(
            organization_id=organization_id,
            # Non-admins only ever see their own calendar
            user_id=filters.user_id if is_admin else caller_id,
            lead_id=filters.lead_id,
            type=filters.type.value if filters.type else None,
            status=filters.status.value if filters.status else None,
            start_from=datetime.combine(start_from, time.min, tzinfo=timezone.utc) if start_from else None,
            start_to=datetime.combine(start_to, time.max, tzinfo=timezone.utc) if start_to else None,
            sort_column=sort_column,
            descending=sort_order == "desc",
            page=page,
            page_size=page_size,
        )
        result = AppointmentStore.list(db, params)

        leads = AppointmentStore.get_leads_batch(
            db,
            [a.lead_id for a in result.items if a.lead_id],
            organization_id
        )

        return AppointmentListResponse(
            items=[_to_response(a, leads.get(a.lead_id)) for a in result.items],
            total=result.total,
            page=result.page,
            page_size=result.page_size,
            total_pages=result.total_pages,
        )

    def update(
            self,
            db: Session,
            appointment_id: UUID,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            request: AppointmentUpdate
    ) -> AppointmentResponse:
        appointment = _get_accessible(db, appointment_id, caller_id, is_admin, organization_id)

        if request.title is not None:
            appointment.title = _clean_title(request.title)
        if request.description is not None:
            appointment.description = sanitize_optional(request.description)
        if request.location is not None:
            appointment.location = sanitize_optional(request.location)
        if request.meeting_link is not None:
            appointment.meeting_link = sanitize_optional(request.meeting_link)
        if request.all_day is not None:
            appointment.all_day = request.all_day

        if request.start_time is not None or request.end_time is not None:
            start_time = ensure_utc(request.start_time or appointment.start_time)
            end_time = ensure_utc(request.end_time or appointment.end_time)
            _validate_times(start_time, end_time)
            _ensure_no_conflict(
                db, organization_id, appointment.user_id, start_time, end_time, exclude_id=appointment.id
            )
            appointment.start_time = start_time
            appointment.end_time = end_time

        appointment = AppointmentStore.save(db, appointment)
        return _to_response(appointment, _lead_for(db, appointment))

    def update_status(
            self,
            db: Session,
            appointment_id: UUID,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            status: AppointmentStatus
    ) -> AppointmentResponse:
        appointment = _get_accessible(db, appointment_id, caller_id, is_admin, organization_id)

        if appointment.status != status.value:
            previous = appointment.status
            appointment.status = status.value
            appointment = AppointmentStore.save(db, appointment)
            logger.info(f"Appointment {appointment.id} status {previous} -> {status.value}")

        return _to_response(appointment, _lead_for(db, appointment))

    def delete(
            self,
            db: Session,
            appointment_id: UUID,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID
    ) -> None:
        appointment = _get_accessible(db, appointment_id, caller_id, is_admin, organization_id)
        AppointmentStore.delete(db, appointment)
        logger.info(f"Deleted appointment {appointment_id}")

    # ------------------------------------------------------------------

    def _claim_lead(self, lead_id: UUID, caller_id: UUID, is_admin: bool, organization_id: UUID) -> None:
        assigned_agent_id = self.lead_assigner.get_assigned_agent_id(lead_id, organization_id)

        if assigned_agent_id is not None:
            if assigned_agent_id != caller_id and not is_admin:
                raise ForbiddenError("lead is assigned to another agent")
            return

        if not is_admin:
            self.lead_assigner.assign_lead(lead_id, caller_id, organization_id)

    def _send_visit_invite(self, appointment: Appointment, lead: Optional[Lead]) -> None:
        if self.notifier is None or lead is None or not lead.consumer_email:
            return

        when = ensure_utc(appointment.start_time).astimezone(
            resolve_timezone(settings.DEFAULT_TIMEZONE)
        ).strftime(settings.VISIT_INVITE_DATE_FORMAT)

        try:
            self.notifier.send_visit_invite(lead.consumer_email, lead.consumer_first_name, when, lead.address)
        except Exception as e:
            logger.error(f"Failed to send visit invite for appointment {appointment.id}: {e}")


# ============================================================================
# Helpers
# ============================================================================

def _validate_times(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise BadRequestError("endTime must be after startTime")


def _clean_title(title: str) -> str:
    cleaned = sanitize_text(title)
    if not cleaned:
        raise BadRequestError("title is required")
    return cleaned


def _ensure_no_conflict(
        db: Session,
        organization_id: UUID,
        user_id: UUID,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[UUID] = None
) -> None:
    existing = AppointmentStore.list_scheduled_in_range(db, organization_id, user_id, start_time, end_time)
    if any(a.id != exclude_id for a in existing):
        raise ConflictError("appointment overlaps with an existing appointment")


def _get_accessible(
        db: Session,
        appointment_id: UUID,
        caller_id: UUID,
        is_admin: bool,
        organization_id: UUID
) -> Appointment:
    appointment = AppointmentStore.get_by_id(db, appointment_id, organization_id)
    AuthorizationGuard.ensure_can_manage(
        is_admin, appointment.user_id, caller_id, "not authorized to access this appointment"
    )
    return appointment


def _lead_for(db: Session, appointment: Appointment) -> Optional[Lead]:
    if appointment.lead_id is None:
        return None
    return AppointmentStore.get_lead(db, appointment.lead_id, appointment.organization_id)


def _lead_info(lead: Lead) -> AppointmentLeadInfo:
    return AppointmentLeadInfo(
        id=lead.id,
        first_name=lead.consumer_first_name,
        last_name=lead.consumer_last_name,
        phone=lead.consumer_phone,
        address=lead.address,
    )


def _to_response(appointment: Appointment, lead: Optional[Lead] = None) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        user_id=appointment.user_id,
        lead_id=appointment.lead_id,
        lead_service_id=appointment.lead_service_id,
        type=AppointmentType(appointment.type),
        title=appointment.title,
        description=appointment.description,
        location=appointment.location,
        meeting_link=appointment.meeting_link,
        start_time=ensure_utc(appointment.start_time),
        end_time=ensure_utc(appointment.end_time),
        status=AppointmentStatus(appointment.status),
        all_day=appointment.all_day,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
        lead=_lead_info(lead) if lead else None,
    )
