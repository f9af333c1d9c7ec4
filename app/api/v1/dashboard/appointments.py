# ============================================================================
# app/api/v1/dashboard/appointments.py
# Appointment booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.api.dependencies import CurrentUser, get_appointment_service, get_current_user
from app.config.database import get_db
from app.models.appointment import AppointmentStatus, AppointmentType
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentStatusUpdate,
    AppointmentListFilters,
    AppointmentResponse,
    AppointmentListResponse,
)
from app.services.appointment.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
        user_id: Optional[UUID] = Query(None, alias="userId", description="Admins only"),
        lead_id: Optional[UUID] = Query(None, alias="leadId"),
        type: Optional[AppointmentType] = Query(None),
        appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
        start_from: Optional[str] = Query(None, alias="startFrom", description="YYYY-MM-DD"),
        start_to: Optional[str] = Query(None, alias="startTo", description="YYYY-MM-DD, whole day included"),
        sort_by: Optional[str] = Query(None, alias="sortBy"),
        sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
        page: int = Query(1),
        page_size: int = Query(50, alias="pageSize", description="1-100"),
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    """
    Paginated appointments in your organization.
    Non-admins only see their own.
    """
    filters = AppointmentListFilters(
        user_id=user_id,
        lead_id=lead_id,
        type=type,
        status=appointment_status,
        start_from=start_from,
        start_to=start_to,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )
    return service.list(db, current_user.user_id, current_user.is_admin, current_user.organization_id, filters)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
        request: AppointmentCreate,
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    """Book an appointment on your own calendar."""
    return service.create(db, current_user.user_id, current_user.is_admin, current_user.organization_id, request)


@router.get("/lead-services/{lead_service_id}", response_model=AppointmentResponse)
async def get_appointment_for_lead_service(
        lead_service_id: UUID = Path(..., description="The lead service ID"),
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    """Latest non-cancelled appointment for a lead service."""
    return service.get_by_lead_service_id(
        db, lead_service_id, current_user.user_id, current_user.is_admin, current_user.organization_id
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    return service.get_by_id(
        db, appointment_id, current_user.user_id, current_user.is_admin, current_user.organization_id
    )


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
        request: AppointmentUpdate,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    return service.update(
        db, appointment_id, current_user.user_id, current_user.is_admin, current_user.organization_id, request
    )


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
        request: AppointmentStatusUpdate,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    return service.update_status(
        db, appointment_id, current_user.user_id, current_user.is_admin, current_user.organization_id,
        request.status
    )


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        service: AppointmentService = Depends(get_appointment_service),
        db: Session = Depends(get_db)
):
    service.delete(db, appointment_id, current_user.user_id, current_user.is_admin, current_user.organization_id)
