# app/schemas/__init__.py
from .availability import (
    AvailabilityRuleCreate,
    AvailabilityRuleUpdate,
    AvailabilityRuleResponse,
    AvailabilityOverrideCreate,
    AvailabilityOverrideUpdate,
    AvailabilityOverrideResponse,
    TimeSlot,
    DaySlots,
    AvailableSlotsResponse,
    PublicTimeSlot,
    PublicDaySlots,
    PublicAvailableSlotsResponse,
)

from .appointments import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentStatusUpdate,
    AppointmentListFilters,
    AppointmentLeadInfo,
    AppointmentResponse,
    AppointmentListResponse,
    PublicAppointmentSummary,
)

__all__ = [
    "AvailabilityRuleCreate",
    "AvailabilityRuleUpdate",
    "AvailabilityRuleResponse",
    "AvailabilityOverrideCreate",
    "AvailabilityOverrideUpdate",
    "AvailabilityOverrideResponse",
    "TimeSlot",
    "DaySlots",
    "AvailableSlotsResponse",
    "PublicTimeSlot",
    "PublicDaySlots",
    "PublicAvailableSlotsResponse",
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentStatusUpdate",
    "AppointmentListFilters",
    "AppointmentLeadInfo",
    "AppointmentResponse",
    "AppointmentListResponse",
    "PublicAppointmentSummary",
]
