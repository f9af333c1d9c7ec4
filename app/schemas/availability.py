# app/schemas/availability.py
"""Request/response models for availability rules, overrides and slots"""
from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts field names"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Availability rules
# ============================================================================

class AvailabilityRuleCreate(CamelModel):
    user_id: Optional[UUID] = Field(None, description="Target agent, defaults to the caller")
    weekday: int = Field(..., description="0=Sunday ... 6=Saturday")
    start_time: str = Field(..., description="Wall-clock start, HH:MM")
    end_time: str = Field(..., description="Wall-clock end, HH:MM")
    timezone: Optional[str] = Field(None, max_length=100)


class AvailabilityRuleUpdate(CamelModel):
    weekday: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    timezone: Optional[str] = Field(None, max_length=100)


class AvailabilityRuleResponse(CamelModel):
    id: UUID
    user_id: UUID
    weekday: int
    start_time: str
    end_time: str
    timezone: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# Availability overrides
# ============================================================================

class AvailabilityOverrideCreate(CamelModel):
    user_id: Optional[UUID] = None
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    is_available: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    timezone: Optional[str] = Field(None, max_length=100)


class AvailabilityOverrideUpdate(CamelModel):
    date: Optional[str] = None
    is_available: Optional[bool] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    timezone: Optional[str] = Field(None, max_length=100)


class AvailabilityOverrideResponse(CamelModel):
    id: UUID
    user_id: UUID
    date: str
    is_available: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    timezone: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# Slots
# ============================================================================

class TimeSlot(CamelModel):
    start_time: datetime
    end_time: datetime


class DaySlots(CamelModel):
    date: str
    slots: List[TimeSlot] = Field(default_factory=list)


class AvailableSlotsResponse(CamelModel):
    days: List[DaySlots] = Field(default_factory=list)


class PublicTimeSlot(CamelModel):
    user_id: UUID
    start_time: datetime
    end_time: datetime


class PublicDaySlots(CamelModel):
    date: str
    slots: List[PublicTimeSlot] = Field(default_factory=list)


class PublicAvailableSlotsResponse(CamelModel):
    days: List[PublicDaySlots] = Field(default_factory=list)
