# ===== app/models/appointment.py =====
from sqlalchemy import Column, String, Boolean, Text, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.models.base import Base
import enum
import uuid


class AppointmentType(str, enum.Enum):
    LEAD_VISIT = "lead_visit"
    STANDALONE = "standalone"
    BLOCKED = "blocked"


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="chk_appointment_time_range"),
        CheckConstraint(
            "type <> 'lead_visit' OR (lead_id IS NOT NULL AND lead_service_id IS NOT NULL)",
            name="chk_appointment_lead_visit_refs",
        ),
        Index("idx_appointments_org_user_start", "organization_id", "user_id", "start_time"),
        Index("idx_appointments_lead", "lead_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    lead_id = Column(UUID(as_uuid=True), nullable=True)
    lead_service_id = Column(UUID(as_uuid=True), nullable=True)

    # Appointment details
    type = Column(String(20), nullable=False)  # lead_visit, standalone, blocked
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(500), nullable=True)
    meeting_link = Column(String(500), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    all_day = Column(Boolean, nullable=False, default=False)

    # Status tracking
    status = Column(String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value)  # scheduled, completed, cancelled, no_show

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
