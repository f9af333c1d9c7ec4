# ============================================================================
# app/repositories/appointment_repository.py
# Persistence for appointments plus the lead lookups used to denormalize them
# ============================================================================
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.appointment import Appointment, AppointmentStatus, AppointmentType
from app.models.lead import Lead


@dataclass
class AppointmentQuery:
    """Filters for AppointmentStore.list; None means "do not filter"."""
    organization_id: UUID
    user_id: Optional[UUID] = None
    lead_id: Optional[UUID] = None
    type: Optional[str] = None
    status: Optional[str] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None
    sort_column: str = "start_time"
    descending: bool = False
    page: int = 1
    page_size: int = 50


@dataclass
class AppointmentPage:
    items: List[Appointment]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size if self.total > 0 else 0


class AppointmentStore:
    """Reads and writes Appointment rows, always scoped to one organization."""

    @staticmethod
    def create(db: Session, appointment: Appointment) -> Appointment:
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def get_by_id(db: Session, appointment_id: UUID, organization_id: UUID) -> Appointment:
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.organization_id == organization_id
        ).first()

        if not appointment:
            raise NotFoundError("appointment not found")
        return appointment

    @staticmethod
    def get_latest_for_lead_service(
            db: Session,
            lead_service_id: UUID,
            organization_id: UUID
    ) -> Optional[Appointment]:
        """Latest non-cancelled appointment booked for a lead service."""
        return db.query(Appointment).filter(
            Appointment.lead_service_id == lead_service_id,
            Appointment.organization_id == organization_id,
            Appointment.status != AppointmentStatus.CANCELLED.value
        ).order_by(desc(Appointment.created_at)).first()

    @staticmethod
    def get_next_scheduled_visit(
            db: Session,
            lead_id: UUID,
            organization_id: UUID,
            now: datetime
    ) -> Optional[Appointment]:
        return db.query(Appointment).filter(
            Appointment.lead_id == lead_id,
            Appointment.organization_id == organization_id,
            Appointment.type == AppointmentType.LEAD_VISIT.value,
            Appointment.status == AppointmentStatus.SCHEDULED.value,
            Appointment.start_time >= now
        ).order_by(asc(Appointment.start_time)).first()

    @staticmethod
    def list_scheduled_in_range(
            db: Session,
            organization_id: UUID,
            user_id: UUID,
            range_start: datetime,
            range_end: datetime
    ) -> List[Appointment]:
        """
        Scheduled appointments of one user overlapping [range_start, range_end).

        An appointment overlaps when it starts before the range ends and ends
        after the range starts.
        """
        return db.query(Appointment).filter(
            Appointment.organization_id == organization_id,
            Appointment.user_id == user_id,
            Appointment.start_time < range_end,
            Appointment.end_time > range_start,
            Appointment.status == AppointmentStatus.SCHEDULED.value
        ).order_by(asc(Appointment.start_time)).all()

    @staticmethod
    def list(db: Session, params: AppointmentQuery) -> AppointmentPage:
        query = db.query(Appointment).filter(Appointment.organization_id == params.organization_id)

        if params.user_id:
            query = query.filter(Appointment.user_id == params.user_id)
        if params.lead_id:
            query = query.filter(Appointment.lead_id == params.lead_id)
        if params.type:
            query = query.filter(Appointment.type == params.type)
        if params.status:
            query = query.filter(Appointment.status == params.status)
        if params.start_from:
            query = query.filter(Appointment.start_time >= params.start_from)
        if params.start_to:
            query = query.filter(Appointment.start_time <= params.start_to)

        total = query.count()

        column = getattr(Appointment, params.sort_column)
        order = desc(column) if params.descending else asc(column)
        items = query.order_by(order, asc(Appointment.id)).offset(
            (params.page - 1) * params.page_size
        ).limit(params.page_size).all()

        return AppointmentPage(items=items, total=total, page=params.page, page_size=params.page_size)

    @staticmethod
    def save(db: Session, appointment: Appointment) -> Appointment:
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    # ------------------------------------------------------------------
    # Lead lookups (read-only)
    # ------------------------------------------------------------------

    @staticmethod
    def get_lead(db: Session, lead_id: UUID, organization_id: UUID) -> Optional[Lead]:
        return db.query(Lead).filter(
            Lead.id == lead_id,
            Lead.organization_id == organization_id
        ).first()

    @staticmethod
    def get_leads_batch(db: Session, lead_ids: Iterable[UUID], organization_id: UUID) -> Dict[UUID, Lead]:
        ids = list(set(lead_ids))
        if not ids:
            return {}

        leads = db.query(Lead).filter(
            Lead.id.in_(ids),
            Lead.organization_id == organization_id
        ).all()
        return {lead.id: lead for lead in leads}
