# app/schemas/appointments.py
"""Request/response models for appointments"""
from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.models.appointment import AppointmentStatus, AppointmentType
from app.schemas.availability import CamelModel


class AppointmentCreate(CamelModel):
    lead_id: Optional[UUID] = None
    lead_service_id: Optional[UUID] = None
    type: AppointmentType
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=500)
    meeting_link: Optional[str] = Field(None, max_length=500)
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    send_confirmation_email: Optional[bool] = Field(None, description="Email a visit invite to the lead")


class AppointmentUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=500)
    meeting_link: Optional[str] = Field(None, max_length=500)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    all_day: Optional[bool] = None


class AppointmentStatusUpdate(CamelModel):
    status: AppointmentStatus


class AppointmentListFilters(CamelModel):
    user_id: Optional[UUID] = None
    lead_id: Optional[UUID] = None
    type: Optional[AppointmentType] = None
    status: Optional[AppointmentStatus] = None
    start_from: Optional[str] = Field(None, description="YYYY-MM-DD, inclusive")
    start_to: Optional[str] = Field(None, description="YYYY-MM-DD, inclusive (whole day)")
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: int = 1
    page_size: int = 50


class AppointmentLeadInfo(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    phone: str
    address: str


class AppointmentResponse(CamelModel):
    id: UUID
    user_id: UUID
    lead_id: Optional[UUID] = None
    lead_service_id: Optional[UUID] = None
    type: AppointmentType
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    all_day: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lead: Optional[AppointmentLeadInfo] = None


class AppointmentListResponse(CamelModel):
    items: List[AppointmentResponse] = Field(default_factory=list)
    total: int
    page: int
    page_size: int
    total_pages: int


class PublicAppointmentSummary(CamelModel):
    id: UUID
    start_time: datetime
    end_time: datetime
    title: str
    status: AppointmentStatus
