# ===== app/models/availability.py =====
from sqlalchemy import Column, String, Integer, Boolean, Time, Date, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class AvailabilityRule(Base):
    """Recurring weekly window during which an agent can be booked"""
    __tablename__ = "appointment_availability_rules"
    __table_args__ = (
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="chk_availability_rule_weekday"),
        CheckConstraint("end_time > start_time", name="chk_availability_rule_time_range"),
        Index("idx_availability_rules_org_user", "organization_id", "user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=False)

    weekday = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String(100), nullable=False, default="Europe/Amsterdam")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class AvailabilityOverride(Base):
    """Date-specific exception: a blocked day or a replacement window"""
    __tablename__ = "appointment_availability_overrides"
    __table_args__ = (
        CheckConstraint(
            "end_time IS NULL OR start_time IS NULL OR end_time > start_time",
            name="chk_availability_override_time_range",
        ),
        Index("idx_availability_overrides_org_user_date", "organization_id", "user_id", "date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=False)

    date = Column(Date, nullable=False)
    is_available = Column(Boolean, nullable=False, default=False)  # False = day off
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    timezone = Column(String(100), nullable=False, default="Europe/Amsterdam")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def has_window(self) -> bool:
        return self.start_time is not None and self.end_time is not None
