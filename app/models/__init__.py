# app/models/__init__.py
from .base import Base
from .availability import AvailabilityRule, AvailabilityOverride
from .appointment import Appointment, AppointmentType, AppointmentStatus
from .lead import Lead

__all__ = [
    "Base",
    "AvailabilityRule",
    "AvailabilityOverride",
    "Appointment",
    "AppointmentType",
    "AppointmentStatus",
    "Lead",
]
